# apps/core/admin.py

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.db.models import Count

from .models import Board, Project, Task, User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin for accounts; email is the login"""

    list_display = ['email', 'name', 'is_active', 'is_staff', 'date_joined']
    list_filter = ['is_staff', 'is_active', 'date_joined']
    search_fields = ['email', 'name']
    ordering = ['-date_joined']

    fieldsets = BaseUserAdmin.fieldsets + (
        ('Profile', {
            'fields': ('name',)
        }),
    )

    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ('Profile', {
            'fields': ('email', 'name')
        }),
    )


class BoardInline(admin.TabularInline):
    model = Board
    extra = 0
    fields = ['name', 'order']
    ordering = ['order', 'created_at']


class TaskInline(admin.TabularInline):
    model = Task
    extra = 0
    fields = ['title', 'order']
    ordering = ['order', 'created_at']


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ['name', 'owner', 'boards_count', 'created_at']
    list_filter = ['created_at']
    search_fields = ['name', 'owner__email']
    readonly_fields = ['id', 'created_at', 'updated_at']
    inlines = [BoardInline]

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(_boards_count=Count('boards'))

    def boards_count(self, obj):
        return obj._boards_count

    boards_count.short_description = 'Boards'
    boards_count.admin_order_field = '_boards_count'


@admin.register(Board)
class BoardAdmin(admin.ModelAdmin):
    list_display = ['name', 'project', 'order', 'tasks_count', 'created_at']
    list_filter = ['project']
    search_fields = ['name', 'project__name']
    ordering = ['project', 'order']
    readonly_fields = ['id', 'created_at', 'updated_at']
    inlines = [TaskInline]

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(_tasks_count=Count('tasks'))

    def tasks_count(self, obj):
        return obj._tasks_count

    tasks_count.short_description = 'Tasks'
    tasks_count.admin_order_field = '_tasks_count'


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    list_display = ['title', 'board', 'order', 'updated_at']
    list_filter = ['board__project']
    search_fields = ['title', 'description']
    ordering = ['board', 'order']
    readonly_fields = ['id', 'created_at', 'updated_at']
