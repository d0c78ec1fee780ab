"""
URL configuration for department endpoints.

Mounted at /api/departments/.
"""

from django.urls import path

from . import views

app_name = 'departments'

urlpatterns = [
    path('', views.DepartmentListCreateView.as_view(), name='list'),
    path('stats/all/', views.DepartmentStatsView.as_view(), name='stats'),
    path('<uuid:pk>/', views.DepartmentDetailView.as_view(), name='detail'),
]
