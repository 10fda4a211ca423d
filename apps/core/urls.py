# apps/core/urls.py

from django.urls import path

from . import views

app_name = 'core'

urlpatterns = [
    # === AUTHENTICATION ===
    path('register', views.register_view, name='register'),
    path('login', views.login_view, name='login'),

    # === PROJECTS ===
    path('projects', views.projects, name='projects'),
    path('projects/<uuid:project_id>', views.project_detail, name='project_detail'),

    # === MONITORING ===
    path('health', views.health_check, name='health'),
]
