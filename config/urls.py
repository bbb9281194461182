"""
URL configuration for task_compliance project.
"""

from django.contrib import admin
from django.urls import path, include
from django.conf import settings

urlpatterns = [
    path('admin/', admin.site.urls),

    # App URLs
    path('tasks/', include('apps.tasks.urls', namespace='tasks')),
    path('reports/', include('apps.reports.urls', namespace='reports')),
]

if settings.DEBUG and 'debug_toolbar' in settings.INSTALLED_APPS:
    import debug_toolbar
    urlpatterns = [
        path('__debug__/', include(debug_toolbar.urls)),
    ] + urlpatterns

# Admin site customization
admin.site.site_header = 'Task Compliance Administration'
admin.site.site_title = 'Task Compliance Admin'
admin.site.index_title = 'Welcome to Task Compliance Admin'
