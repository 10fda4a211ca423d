# apps/board/reorder.py

"""
Reorder transaction coordinator

A reorder request lists siblings in their desired final order. The
element at position i gets `order = i` and, when it names a new parent,
moves there in the same update. The batch is all-or-nothing: one
transaction, and any failing element rolls every other element back.
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence

from django.db import DatabaseError, transaction

from apps.core.exceptions import BoardError, InvalidInput, PermissionDenied, ReorderFailed

from . import ordering
from .notifications import fanout

logger = logging.getLogger(__name__)


class ReorderCoordinator:
    """
    Applies reorder batches through an OrderedEntityStore

    `reparent_key` names the optional per-element key carrying a new
    parent id (`boardId` for tasks); boards cannot change project.
    """

    def __init__(self, store, reparent_key: Optional[str] = None):
        self.store = store
        self.reparent_key = reparent_key
        self.event_kind = f'{store.label.lower()}s_reordered'

    def validate(self, parent_id, ordered_items) -> List[Dict]:
        """
        Check the request shape before anything is touched

        Returns the normalized elements: {'id': str, 'parent': str|None}.
        """
        if not parent_id or not str(parent_id).strip():
            raise InvalidInput(f'{self.store.parent_model.__name__} id is required')

        if not isinstance(ordered_items, (list, tuple)):
            raise InvalidInput('Ordered list is required')

        normalized = []
        seen = set()
        for item in ordered_items:
            if not isinstance(item, dict):
                raise InvalidInput('Every element must be an object with an id')

            entity_id = item.get('id')
            if entity_id is None or not str(entity_id).strip():
                raise InvalidInput('Every element must have an id')
            entity_id = str(entity_id).strip()

            if entity_id in seen:
                raise InvalidInput(f'Duplicate id in ordered list: {entity_id}')
            seen.add(entity_id)

            new_parent = item.get(self.reparent_key) if self.reparent_key else None
            normalized.append({
                'id': entity_id,
                'parent': str(new_parent).strip() if new_parent else None,
            })

        return normalized

    def reorder(self, parent_id, ordered_items: Sequence, authorize: Optional[Callable] = None) -> List:
        """
        Validate and apply one reorder batch atomically

        `authorize(entity)` may raise PermissionDenied; it is called on
        every locked row before and (when re-parented) after its move.
        An element without a new parent must already belong to
        `parent_id`. An empty list is a successful no-op.
        """
        items = self.validate(parent_id, ordered_items)
        if not items:
            return []

        parent_id = str(self.store.find_parent(str(parent_id).strip()).pk)
        assignment = ordering.compute_reorder_assignment([item['id'] for item in items])

        try:
            with transaction.atomic():
                results = [
                    self._apply(parent_id, item, assignment[item['id']], authorize)
                    for item in items
                ]
        except (PermissionDenied, InvalidInput):
            raise
        except (BoardError, DatabaseError) as e:
            logger.warning(
                f"⚠️ Reorder of {len(items)} {self.store.label.lower()}(s) under {parent_id} "
                f"rolled back: {e}"
            )
            raise ReorderFailed(f'Failed to reorder {self.store.label.lower()}s', cause=e) from e

        moved = [entity for entity, _ in results]
        logger.info(f"🔀 Reordered {len(moved)} {self.store.label.lower()}(s) under {parent_id}")
        self._notify(parent_id, results)
        return moved

    # === PRIVATE ===

    def _apply(self, parent_id, item, order, authorize):
        parent_field = self.store.parent_field

        def check(entity):
            if authorize is not None:
                authorize(entity)
            if not item['parent'] and str(getattr(entity, f'{parent_field}_id')) != parent_id:
                raise InvalidInput(f'{self.store.label} {item["id"]} does not belong to {parent_id}')

        entity, previous_parent_id = self.store.move(item['id'], order, parent_id=item['parent'], check=check)

        if authorize is not None and item['parent']:
            authorize(entity)
        return entity, previous_parent_id

    def _notify(self, parent_id, results):
        parent_field = self.store.parent_field
        data = {
            'parentId': parent_id,
            'orderedIds': [str(entity.id) for entity, _ in results],
            'items': [entity.to_dict() for entity, _ in results],
        }
        fanout.publish(parent_id, self.event_kind, data)

        # Parents that lost or received an entity hear about it too
        touched = set()
        for entity, previous_parent_id in results:
            touched.add(str(previous_parent_id))
            touched.add(str(getattr(entity, f'{parent_field}_id')))
        for scope in sorted(touched - {parent_id}):
            fanout.publish(scope, self.event_kind, data)
