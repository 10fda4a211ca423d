# apps/board/urls.py

from django.urls import path

from . import views

app_name = 'board'

urlpatterns = [
    # Boards
    path('projects/<uuid:project_id>/boards', views.project_boards, name='project_boards'),
    path('boards/reorder', views.reorder_boards, name='reorder_boards'),
    path('boards/<uuid:board_id>', views.board_detail, name='board_detail'),

    # Tasks
    path('boards/<uuid:board_id>/tasks', views.board_tasks, name='board_tasks'),
    path('tasks/reorder', views.reorder_tasks, name='reorder_tasks'),
    path('tasks/<uuid:task_id>', views.task_detail, name='task_detail'),
]
