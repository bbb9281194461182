"""
URL configuration for reports app.
"""

from django.urls import path
from . import views

app_name = 'reports'

urlpatterns = [
    path('kpis/', views.kpi_view, name='kpis'),
    path('metrics/', views.metrics_view, name='metrics'),
]
