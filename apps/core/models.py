# apps/core/models.py

import uuid

from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """
    Account that owns projects

    Logs in with email; username mirrors the email so the stock
    admin and auth backends keep working.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True)
    name = models.CharField(max_length=200, blank=True)

    class Meta:
        db_table = 'account'

    def to_dict(self):
        """Public representation, never includes the password hash"""
        return {
            'id': str(self.id),
            'email': self.email,
            'name': self.name,
            'createdAt': self.date_joined.isoformat(),
        }

    def __str__(self):
        return self.name or self.email


class Project(models.Model):
    """Top-level container, owns the boards"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    owner = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='projects'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'project'
        ordering = ['-created_at']

    def to_dict(self):
        return {
            'id': str(self.id),
            'name': self.name,
            'ownerId': str(self.owner_id),
            'createdAt': self.created_at.isoformat(),
            'updatedAt': self.updated_at.isoformat(),
        }

    def __str__(self):
        return self.name


class Board(models.Model):
    """
    Column of a project

    `order` is the position among the project's boards. There is no
    unique constraint on (project, order): concurrent inserts may
    collide and a reorder rewrites the whole sequence.
    """

    # FK that scopes `order`
    ORDER_SCOPE = 'project'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    order = models.IntegerField(default=0)
    project = models.ForeignKey(
        Project,
        on_delete=models.CASCADE,
        related_name='boards'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'board'
        ordering = ['order', 'created_at']
        indexes = [
            models.Index(fields=['project', 'order'], name='board_project_order_idx'),
        ]

    def to_dict(self):
        return {
            'id': str(self.id),
            'name': self.name,
            'order': self.order,
            'projectId': str(self.project_id),
            'createdAt': self.created_at.isoformat(),
            'updatedAt': self.updated_at.isoformat(),
        }

    def __str__(self):
        return f"{self.name} ({self.order})"


class Task(models.Model):
    """Card inside a board, positioned by `order`"""

    ORDER_SCOPE = 'board'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True, null=True)
    order = models.IntegerField(default=0)
    board = models.ForeignKey(
        Board,
        on_delete=models.CASCADE,
        related_name='tasks'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'task'
        ordering = ['order', 'created_at']
        indexes = [
            models.Index(fields=['board', 'order'], name='task_board_order_idx'),
        ]

    def to_dict(self):
        return {
            'id': str(self.id),
            'title': self.title,
            'description': self.description,
            'order': self.order,
            'boardId': str(self.board_id),
            'createdAt': self.created_at.isoformat(),
            'updatedAt': self.updated_at.isoformat(),
        }

    def __str__(self):
        return self.title
