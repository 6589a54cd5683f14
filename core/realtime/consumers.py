import json

from channels.generic.websocket import AsyncWebsocketConsumer

from core.topic import CHANNEL_NAMES


class TopicConsumer(AsyncWebsocketConsumer):
    """Relays topic events of one channel to a logged-in browser."""

    async def connect(self):
        self.topic = self.scope["url_route"]["kwargs"].get("channel")
        user = self.scope.get("user")
        if not (user and user.is_authenticated):
            await self.close(code=4003)
            return
        if self.topic not in CHANNEL_NAMES:
            await self.close(code=4004)
            return
        await self.channel_layer.group_add(self.topic, self.channel_name)
        await self.accept()

    async def disconnect(self, close_code):
        if self.topic in CHANNEL_NAMES:
            await self.channel_layer.group_discard(self.topic, self.channel_name)

    # group_send handler for {"type": "topic.message", ...}
    async def topic_message(self, event):
        payload = {k: v for k, v in event.items() if k != "type"}
        await self.send(json.dumps(payload))
