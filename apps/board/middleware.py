# apps/board/middleware.py

import logging
from urllib.parse import parse_qs

from channels.db import database_sync_to_async
from channels.middleware import BaseMiddleware

from apps.core.auth_service import auth_service
from apps.core.exceptions import AuthFailure

logger = logging.getLogger(__name__)


@database_sync_to_async
def get_token_user(token):
    try:
        return auth_service.verify_token(token)
    except AuthFailure:
        return None


class TokenAuthMiddleware(BaseMiddleware):
    """
    Authenticates WebSocket connections from a `?token=` query parameter

    Browsers cannot set an Authorization header on a WebSocket, so the
    same bearer token travels in the URL. scope['user'] is None when the
    token is missing or invalid; the consumer refuses the connection.
    """

    async def __call__(self, scope, receive, send):
        query = parse_qs(scope.get('query_string', b'').decode())
        token = (query.get('token') or [None])[0]

        scope = dict(scope)
        scope['user'] = await get_token_user(token)
        return await super().__call__(scope, receive, send)
