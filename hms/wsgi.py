"""
WSGI config for the hms project.

Exposes the WSGI callable as a module-level variable named ``application``.
Topic subscriptions over websockets need the ASGI entrypoint instead
(see ``hms.asgi``).
"""
import os

from django.core.wsgi import get_wsgi_application  # type: ignore

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'hms.settings')

application = get_wsgi_application()
