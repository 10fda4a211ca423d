# config/asgi.py

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.development')

# Django must be set up before anything imports models
django_asgi_app = get_asgi_application()

from channels.routing import ProtocolTypeRouter, URLRouter  # noqa: E402

from apps.board.middleware import TokenAuthMiddleware  # noqa: E402
from apps.board.routing import websocket_urlpatterns  # noqa: E402

application = ProtocolTypeRouter({
    # Plain HTTP API
    "http": django_asgi_app,

    # Change notifications, bearer token in the query string
    "websocket": TokenAuthMiddleware(
        URLRouter(websocket_urlpatterns)
    ),
})
