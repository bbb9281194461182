"""
URL configuration for tasks app.

Includes:
- Task list (repository) and detail
- Lifecycle transitions
"""

from django.urls import path
from . import views

app_name = 'tasks'

urlpatterns = [
    # Repository
    path('', views.task_list, name='task_list'),
    path('<int:pk>/', views.task_detail, name='task_detail'),

    # Lifecycle
    path('create/', views.task_create, name='task_create'),
    path('<int:pk>/deliver/', views.task_deliver, name='task_deliver'),
    path('<int:pk>/review/', views.task_review, name='task_review'),
    path('<int:pk>/deadline/', views.task_amend_deadline, name='task_amend_deadline'),
    path('<int:pk>/cancel/', views.task_cancel, name='task_cancel'),
]
