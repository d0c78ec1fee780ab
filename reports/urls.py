"""
URL configuration for CivicPulse Reports API.

All report endpoints are under /api/reports/
"""

from django.urls import path
from .views import (
    ReportListCreateView,
    ReportDetailView,
    UserReportListView,
    AssignedReportListView,
    ReportAnalyticsView,
    DashboardStatsView,
    ReportTimelineView,
    ReportAddUpdateView,
    ReportFeedbackView,
    ReportPhotoView,
    ReportCancelView,
    ReportAcknowledgeView,
    ReportCloseView,
)

app_name = 'reports'

urlpatterns = [
    path('', ReportListCreateView.as_view(), name='report-list'),

    # Fixed paths first so they never match as a report id
    path('user/', UserReportListView.as_view(), name='user-reports'),
    path('assigned/', AssignedReportListView.as_view(), name='assigned-reports'),
    path('analytics/', ReportAnalyticsView.as_view(), name='analytics'),
    path('dashboard-stats/', DashboardStatsView.as_view(), name='dashboard-stats'),

    path('<uuid:pk>/', ReportDetailView.as_view(), name='report-detail'),
    path('<uuid:pk>/timeline/', ReportTimelineView.as_view(), name='report-timeline'),
    path('<uuid:pk>/updates/', ReportAddUpdateView.as_view(), name='report-add-update'),
    path('<uuid:pk>/feedback/', ReportFeedbackView.as_view(), name='report-feedback'),
    path('<uuid:pk>/photo/', ReportPhotoView.as_view(), name='report-photo'),

    # Citizen lifecycle actions
    path('<uuid:pk>/cancel/', ReportCancelView.as_view(), name='report-cancel'),
    path('<uuid:pk>/acknowledge/', ReportAcknowledgeView.as_view(), name='report-acknowledge'),
    path('<uuid:pk>/close/', ReportCloseView.as_view(), name='report-close'),
]
