# apps/board/ordering.py

"""
Ordering engine for sibling entities

Boards are ordered within their project and tasks within their board.
Positions are plain integers; a committed reorder leaves the siblings
at 0..N-1, plain inserts only append (max + 1).
"""

import logging
from typing import Dict, Hashable, Iterable, Sequence

from django.db import transaction

logger = logging.getLogger(__name__)


def parent_field(model) -> str:
    """Name of the FK that scopes `order` for this model"""
    return model.ORDER_SCOPE


def siblings(model, parent_id):
    return model.objects.filter(**{f'{parent_field(model)}_id': parent_id})


def next_order(model, parent_id) -> int:
    """
    Position for a new child of `parent_id`: max sibling order + 1, or 0

    Read-then-write without a lock: two concurrent inserts under the
    same parent can both get the same value.
    """
    last = (
        siblings(model, parent_id)
        .order_by('-order')
        .values_list('order', flat=True)
        .first()
    )
    return 0 if last is None else last + 1


def compute_reorder_assignment(ordered_ids: Sequence[Hashable]) -> Dict[Hashable, int]:
    """
    Map every id to its 0-based index in `ordered_ids`

    No validation: existence and duplicates are the coordinator's job.
    """
    return {entity_id: position for position, entity_id in enumerate(ordered_ids)}


def is_dense(orders: Iterable[int]) -> bool:
    """True when the values are exactly 0..N-1 with no gaps or duplicates"""
    orders = list(orders)
    return sorted(orders) == list(range(len(orders)))


def compact(model, parent_id) -> int:
    """
    Renumber the children of `parent_id` to 0..N-1

    Keeps the current relative order (order, then creation time).
    Returns how many rows changed.
    """
    changed = 0
    with transaction.atomic():
        children = list(
            siblings(model, parent_id)
            .select_for_update()
            .order_by('order', 'created_at')
        )
        for position, child in enumerate(children):
            if child.order != position:
                child.order = position
                child.save(update_fields=['order', 'updated_at'])
                changed += 1

    if changed:
        logger.info(f"🔧 Compacted {changed} {model.__name__} row(s) under {parent_id}")
    return changed
