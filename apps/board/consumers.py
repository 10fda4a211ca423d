# apps/board/consumers.py

import json
import logging
import uuid

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer
from django.utils import timezone

from apps.core.models import Board, Project
from apps.core.permissions import BoardPermissions

from .notifications import GLOBAL_SCOPE, fanout, is_valid_scope

logger = logging.getLogger(__name__)


class ScopeConsumer(AsyncWebsocketConsumer):
    """
    WebSocket endpoint for real-time board updates

    Protocol (JSON text frames):
    - {"type": "join", "scope": "<project id|board id|global>"}
    - {"type": "leave", "scope": "..."}
    - {"type": "ping"}

    Events published to a joined scope arrive as
    {"type": <kind>, "scope", "data", "timestamp"}. Nothing is replayed:
    after a reconnect the client re-fetches state over HTTP.
    """

    async def connect(self):
        """
        Accept authenticated connections only
        The user comes from TokenAuthMiddleware
        """
        self.user = self.scope.get('user')

        if self.user is None:
            logger.warning("❌ WebSocket connection refused - not authenticated")
            await self.close()
            return

        await self.accept()
        logger.info(f"✅ WebSocket connected - user {self.user.id}")

    async def disconnect(self, close_code):
        await fanout.leave_all(self.channel_name)

        if getattr(self, 'user', None) is not None:
            logger.info(f"🔌 WebSocket disconnected - user {self.user.id} ({close_code})")

    async def receive(self, text_data=None, bytes_data=None):
        """
        Handle client messages
        """
        try:
            data = json.loads(text_data or '')
        except json.JSONDecodeError:
            logger.error(f"❌ Invalid JSON received over WebSocket from {self.user.id}")
            await self.send_error('Invalid message')
            return

        if not isinstance(data, dict):
            await self.send_error('Invalid message')
            return

        message_type = data.get('type')

        # Heartbeat/Ping
        if message_type == 'ping':
            await self.send_json({'type': 'pong', 'timestamp': self.get_timestamp()})

        elif message_type == 'join':
            await self.join_scope(data.get('scope'))

        elif message_type == 'leave':
            scope = data.get('scope')
            await fanout.leave(scope, self.channel_name)
            await self.send_json({'type': 'left', 'scope': scope})

        else:
            await self.send_error('Unknown message type')

    async def join_scope(self, scope):
        # Same answer for unknown and foreign scopes
        requested = scope
        scope = await self.resolve_scope(scope) if is_valid_scope(scope) else None
        if scope is None:
            logger.warning(f"❌ Join refused - user {self.user.id} on scope {requested!r}")
            await self.send_error('Unable to join scope')
            return

        await fanout.join(scope, self.channel_name)
        await self.send_json({'type': 'joined', 'scope': scope})
        logger.info(f"📡 User {self.user.id} joined scope {scope}")

    # === Channel layer handlers ===

    async def scope_event(self, event):
        """
        Forward a published event to the client

        Events addressed to another user are dropped.
        """
        audience = event.get('audience')
        if audience is not None and audience != str(self.user.id):
            return

        await self.send_json({
            'type': event['kind'],
            'scope': event['scope'],
            'data': event['data'],
            'timestamp': event['timestamp'],
        })

    # === Helpers ===

    async def send_json(self, payload):
        await self.send(text_data=json.dumps(payload))

    async def send_error(self, message):
        await self.send_json({'type': 'error', 'message': message})

    @database_sync_to_async
    def resolve_scope(self, scope):
        """
        Canonical scope id if this user may join it, else None

        The global scope is open to every user; a project or board
        scope only to the owner of the project.
        """
        if scope == GLOBAL_SCOPE:
            return GLOBAL_SCOPE

        try:
            scope_id = uuid.UUID(scope)
        except ValueError:
            return None

        project = Project.objects.filter(pk=scope_id).first()
        if project is not None:
            return str(scope_id) if BoardPermissions.owns_project(self.user, project) else None

        board = Board.objects.select_related('project').filter(pk=scope_id).first()
        if board is not None:
            return str(scope_id) if BoardPermissions.owns_board(self.user, board) else None

        return None

    def get_timestamp(self):
        return timezone.now().isoformat()

