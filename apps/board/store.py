# apps/board/store.py

"""
Entity store adapter for projects, boards and tasks

Every public method runs in its own atomic block, which turns into a
savepoint when called inside an outer transaction (the reorder
coordinator). Database errors are translated into the taxonomy in
apps.core.exceptions before they leave this module.
"""

import logging
from contextlib import contextmanager
from typing import Callable, Dict, List, Optional

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import DatabaseError, IntegrityError, transaction

from apps.core.exceptions import BoardError, Conflict, InvalidInput, NotFound, StoreFailure
from apps.core.models import Board, Project, Task

from . import ordering

logger = logging.getLogger(__name__)


@contextmanager
def store_errors():
    """Translate raw database errors into taxonomy errors"""
    try:
        yield
    except BoardError:
        raise
    except IntegrityError as e:
        raise Conflict('Duplicate value') from e
    except DatabaseError as e:
        raise StoreFailure() from e


class EntityStore:
    """
    CRUD over one entity kind

    Subclasses set `model`, the fields a create requires and the fields
    an update may change.
    """

    model = None
    label = 'Entity'
    required_fields = ()
    content_fields = ()

    def find_by_id(self, entity_id):
        with store_errors():
            return self._get(self.model, entity_id)

    def update(self, entity_id, **fields):
        """
        Apply a partial update

        Fields outside `content_fields` are ignored. A required field
        cannot be blanked.
        """
        changes = self._clean_changes(fields)

        with store_errors(), transaction.atomic():
            entity = self._get(self.model, entity_id, for_update=True)
            if not changes:
                return entity

            for field, value in changes.items():
                setattr(entity, field, value)
            entity.save(update_fields=list(changes) + ['updated_at'])

        return entity

    def delete(self, entity_id) -> Dict:
        """
        Delete the entity and everything under it

        Returns the serialized entity as it was before deletion.
        """
        with store_errors(), transaction.atomic():
            entity = self._get(self.model, entity_id, for_update=True)
            snapshot = entity.to_dict()
            self._delete_descendants(entity)
            entity.delete()

        logger.info(f"🗑️ {self.label} deleted: {snapshot['id']}")
        return snapshot

    # === HELPERS ===

    def _clean_changes(self, fields) -> Dict:
        changes = {k: v for k, v in fields.items() if k in self.content_fields}

        for field in self.required_fields:
            if field in changes:
                changes[field] = self._clean_required(field, changes[field])

        for field, value in changes.items():
            self._check_length(field, value)

        return changes

    def _require(self, fields):
        for field in self.required_fields:
            self._clean_required(field, fields.get(field))

    def _clean_required(self, field, value) -> str:
        if value is None or not str(value).strip():
            raise InvalidInput(f'{self.label} {field} is required')
        value = str(value).strip()
        self._check_length(field, value)
        return value

    def _check_length(self, field, value):
        max_length = self.model._meta.get_field(field).max_length
        if max_length and value is not None and len(str(value)) > max_length:
            raise InvalidInput(f'{self.label} {field} must be at most {max_length} characters')

    def _delete_descendants(self, entity):
        """Hook for explicit cascade; the FK cascade covers the rest"""

    @staticmethod
    def _get(model, entity_id, for_update=False):
        queryset = model.objects.all()
        if for_update:
            queryset = queryset.select_for_update()
        try:
            return queryset.get(pk=entity_id)
        except (model.DoesNotExist, ValidationError, ValueError):
            # A malformed id cannot exist either
            raise NotFound(f'{model.__name__} not found')


class ProjectStore(EntityStore):
    model = Project
    label = 'Project'
    required_fields = ('name',)
    content_fields = ('name',)

    def create(self, owner, **fields) -> Project:
        self._require(fields)
        with store_errors(), transaction.atomic():
            project = Project.objects.create(owner=owner, name=str(fields['name']).strip())

        logger.info(f"📁 Project created: {project.id}")
        return project

    def find_by_owner(self, owner) -> List[Project]:
        with store_errors():
            return list(Project.objects.filter(owner=owner).order_by('-created_at'))

    def _delete_descendants(self, project):
        Task.objects.filter(board__project=project).delete()
        Board.objects.filter(project=project).delete()


class OrderedEntityStore(EntityStore):
    """Store for entities positioned by `order` under a parent"""

    parent_model = None

    @property
    def parent_field(self) -> str:
        return ordering.parent_field(self.model)

    def create(self, parent_id, **fields):
        """Create a child of `parent_id` at the end of its siblings"""
        self._require(fields)
        values = self._clean_changes(fields)

        with store_errors(), transaction.atomic():
            parent = self._get(self.parent_model, parent_id)
            entity = self.model.objects.create(
                **{self.parent_field: parent},
                order=ordering.next_order(self.model, parent.pk),
                **values
            )

        logger.info(f"➕ {self.label} created: {entity.id} (order {entity.order}) under {parent_id}")
        return entity

    def find_children(self, parent_id) -> List:
        """Children of `parent_id`, `order` ascending"""
        with store_errors():
            self._get(self.parent_model, parent_id)
            return list(ordering.siblings(self.model, parent_id).order_by('order', 'created_at'))

    def find_parent(self, parent_id):
        with store_errors():
            return self._get(self.parent_model, parent_id)

    def move(self, entity_id, order: int, parent_id: Optional[str] = None, check: Optional[Callable] = None):
        """
        Set the position of one entity, optionally under a new parent

        `check(entity)` runs on the locked row before it changes.
        Returns the saved entity and the id of the parent it had before.
        Used by the reorder coordinator inside its transaction.
        """
        new_parent = None
        if parent_id:
            with store_errors():
                new_parent = self._get(self.parent_model, parent_id)

        with store_errors(), transaction.atomic():
            entity = self._get(self.model, entity_id, for_update=True)
            if check is not None:
                check(entity)

            previous_parent_id = getattr(entity, f'{self.parent_field}_id')
            entity.order = order
            fields = ['order', 'updated_at']
            if new_parent is not None:
                setattr(entity, self.parent_field, new_parent)
                fields.append(self.parent_field)
            entity.save(update_fields=fields)

        return entity, previous_parent_id

    def delete(self, entity_id) -> Dict:
        snapshot = super().delete(entity_id)
        if settings.BOARD_COMPACT_ON_DELETE:
            parent_id = snapshot[f'{self.parent_field}Id']
            with store_errors():
                ordering.compact(self.model, parent_id)
        return snapshot


class BoardStore(OrderedEntityStore):
    model = Board
    parent_model = Project
    label = 'Board'
    required_fields = ('name',)
    content_fields = ('name',)

    def _delete_descendants(self, board):
        Task.objects.filter(board=board).delete()


class TaskStore(OrderedEntityStore):
    model = Task
    parent_model = Board
    label = 'Task'
    required_fields = ('title',)
    content_fields = ('title', 'description')


project_store = ProjectStore()
board_store = BoardStore()
task_store = TaskStore()
