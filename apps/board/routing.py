# apps/board/routing.py

from django.urls import re_path

from . import consumers

# WebSocket routes
websocket_urlpatterns = [
    # Single endpoint; the client picks scopes with "join" messages
    re_path(r'ws/board/$', consumers.ScopeConsumer.as_asgi()),
]
