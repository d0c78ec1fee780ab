"""User administration endpoints, mounted at /api/users/."""

from django.urls import path
from .views import OfficerListView, UserDetailView, UserListCreateView

app_name = 'users'

urlpatterns = [
    path('', UserListCreateView.as_view(), name='user-list'),
    path('officers/', OfficerListView.as_view(), name='officer-list'),
    path('<uuid:pk>/', UserDetailView.as_view(), name='user-detail'),
]
