"""
URL configuration for region endpoints.

Mounted at /api/regions/.
"""

from django.urls import path

from . import views

app_name = 'regions'

urlpatterns = [
    path('', views.RegionListCreateView.as_view(), name='list'),
    path('stats/all/', views.RegionStatsView.as_view(), name='stats'),
    path('<uuid:pk>/', views.RegionDetailView.as_view(), name='detail'),
]
