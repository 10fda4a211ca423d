# apps/board/notifications.py

"""
Change notification fan-out

Mutations are announced to the scope of the affected parent: board
events to the project id, task events to the board id, project creation
to the global scope. Delivery goes through the channel layer groups and
is best-effort: nothing is stored or replayed, and a failure never
reaches the request that triggered it.
"""

import logging
import re
from collections import defaultdict
from functools import partial
from typing import Dict, FrozenSet, Set

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import transaction
from django.utils import timezone

logger = logging.getLogger(__name__)

GLOBAL_SCOPE = 'global'

# Channel layer group names: ASCII letters, digits, hyphen, underscore, period
_SCOPE_RE = re.compile(r'^[A-Za-z0-9_-]{1,80}$')


def is_valid_scope(scope) -> bool:
    return isinstance(scope, str) and bool(_SCOPE_RE.match(scope))


def group_name(scope: str) -> str:
    return f'scope.{scope}'


class ScopeRegistry:
    """
    Scope id -> channel names of the subscribers connected to this process

    join() and leave() are the only mutators.
    """

    def __init__(self):
        self._subscribers: Dict[str, Set[str]] = defaultdict(set)

    def join(self, scope: str, channel_name: str):
        self._subscribers[scope].add(channel_name)

    def leave(self, scope: str, channel_name: str):
        members = self._subscribers.get(scope)
        if members is None:
            return
        members.discard(channel_name)
        if not members:
            del self._subscribers[scope]

    def subscribers(self, scope: str) -> FrozenSet[str]:
        return frozenset(self._subscribers.get(scope, ()))

    def scopes_of(self, channel_name: str) -> FrozenSet[str]:
        return frozenset(
            scope for scope, members in self._subscribers.items()
            if channel_name in members
        )


class ChangeFanout:
    """Owns the scope registry and publishes events to scopes"""

    message_type = 'scope.event'

    def __init__(self):
        self.registry = ScopeRegistry()

    @property
    def channel_layer(self):
        return get_channel_layer()

    # === SUBSCRIPTIONS ===

    async def join(self, scope: str, channel_name: str):
        if not is_valid_scope(scope):
            raise ValueError(f'Invalid scope: {scope!r}')

        await self.channel_layer.group_add(group_name(scope), channel_name)
        self.registry.join(scope, channel_name)

    async def leave(self, scope: str, channel_name: str):
        if not is_valid_scope(scope):
            return

        await self.channel_layer.group_discard(group_name(scope), channel_name)
        self.registry.leave(scope, channel_name)

    async def leave_all(self, channel_name: str):
        """Drop a disconnected subscriber from every scope it joined"""
        for scope in self.registry.scopes_of(channel_name):
            await self.leave(scope, channel_name)

    # === PUBLISHING ===

    def publish(self, scope, kind: str, data: Dict, audience=None):
        """
        Announce a mutation once the current transaction commits

        Outside a transaction the event goes out immediately. Rolled
        back work is never announced. With `audience` (a user id) only
        that user's connections forward the event; shared scopes such
        as `global` rely on it.
        """
        audience = str(audience) if audience is not None else None
        transaction.on_commit(partial(self._deliver, str(scope), kind, data, audience))

    async def send(self, scope: str, kind: str, data: Dict, audience=None):
        """Push one event to every subscriber of `scope`"""
        layer = self.channel_layer
        if layer is None:
            logger.debug(f"No channel layer configured, dropping {kind} for {scope}")
            return

        await layer.group_send(group_name(scope), {
            'type': self.message_type,
            'kind': kind,
            'scope': scope,
            'data': data,
            'audience': audience,
            'timestamp': timezone.now().isoformat(),
        })

    def _deliver(self, scope, kind, data, audience=None):
        try:
            async_to_sync(self.send)(scope, kind, data, audience)
        except Exception:
            logger.exception(f"❌ Failed to publish {kind} to scope {scope}")


fanout = ChangeFanout()
