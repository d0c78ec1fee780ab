"""
URL configuration for category endpoints.

Mounted at /api/categories/.
"""

from django.urls import path

from . import views

app_name = 'categories'

urlpatterns = [
    path('', views.CategoryListCreateView.as_view(), name='list'),
    path('<uuid:pk>/', views.CategoryDetailView.as_view(), name='detail'),
]
