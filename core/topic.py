"""
Internal publish/subscribe topics.

Subsystems announce domain events (a payment was created, an invoice
was deleted...) on named channels. Delivery goes through the Channels
layer configured in settings, so browsers subscribed through
:class:`core.realtime.consumers.TopicConsumer` and any other consumer
joined to the group receive them.
"""
from __future__ import annotations

import logging
from types import SimpleNamespace
from typing import Any, Dict

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.utils import timezone

logger = logging.getLogger(__name__)

MESSAGE_TYPE = "topic.message"

channels = SimpleNamespace(
    FINANCE="finance",
    INVENTORY="inventory",
    MEDICAL="medical",
    ADMIN="admin",
)

events = SimpleNamespace(
    CREATE="create",
    UPDATE="update",
    DELETE="delete",
    REVERSE="reverse",
    LOGIN="login",
    LOGOUT="logout",
)

entities = SimpleNamespace(
    PAYMENT="payment",
    INVOICE="invoice",
    VOUCHER="voucher",
    PATIENT="patient",
    DEBTOR="debtor",
    CASHBOX="cashbox",
    PURCHASE="purchase",
    USER="user",
)

CHANNEL_NAMES = frozenset(vars(channels).values())


def publish(channel: str, data: Dict[str, Any]) -> None:
    """Send ``data`` to every subscriber of ``channel``."""
    if channel not in CHANNEL_NAMES:
        raise ValueError(f"unknown topic channel: {channel}")
    channel_layer = get_channel_layer()
    if channel_layer is None:
        logger.debug("no channel layer configured; dropping %s event", channel)
        return
    message = {"type": MESSAGE_TYPE, "channel": channel, "ts": timezone.now().isoformat(), **data}
    async_to_sync(channel_layer.group_send)(channel, message)
