"""
WSGI config for the chat service.

The service is served over ASGI (see config.asgi) because WebSockets need it.
This WSGI callable only serves the HTTP API, for deployments that split
HTTP and WebSocket traffic across different workers.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_wsgi_application()
