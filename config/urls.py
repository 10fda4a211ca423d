# config/urls.py

from django.contrib import admin
from django.urls import include, path

from apps.core import views as core_views

urlpatterns = [
    # Admin
    path('admin/', admin.site.urls),

    # API
    path('', core_views.index, name='index'),
    path('api/', include('apps.core.urls')),
    path('api/', include('apps.board.urls')),
]

# Admin titles
admin.site.site_header = 'TaskFlow Board Admin'
admin.site.site_title = 'TaskFlow Board'
admin.site.index_title = 'System Administration'
