"""
Report views for CivicPulse Backend.

Provides REST API endpoints for:
- Public report listing (filters, radius search, sort, pagination) and detail
- Citizen report creation with photos
- Generic update / delete
- Lifecycle actions: cancel, acknowledge, close, feedback, staff updates
- Timeline, photo upload, per-user and per-officer lists
- Admin analytics and dashboard statistics

Role and ownership checks are evaluated from reports.policies.POLICY.
"""

import logging

from django.db import transaction
from rest_framework import status, views
from rest_framework.permissions import AllowAny

from audit.models import AuditLog, AuditEventType
from core.exceptions import BadRequestError
from core.filters import SortFilter
from core.views import EnvelopeDetailView, EnvelopeListCreateView, envelope, get_or_404
from .analytics import dashboard_stats, report_analytics
from .lifecycle import ReportLifecycle
from .models import Report, ReportStatus
from .policies import ReportPolicy, authorize
from .queries import GEO_PARAMS, ReportFilter, ReportQueryBackend
from .serializers import AddUpdateSerializer, FeedbackSerializer, ReportSerializer
from .services import LocationResolverService, PhotoStorageService
from .timeline import build_timeline

logger = logging.getLogger(__name__)

LOCATION_FORM_FIELDS = ('location[address]', 'location[lat]', 'location[lng]')


def report_queryset():
    return Report.objects.select_related(
        'category', 'citizen', 'assigned_officer', 'department', 'region'
    ).prefetch_related('updates')


def form_data(request):
    """
    Plain dict of the non-file request fields.

    Multipart clients may send ``location`` as JSON text or as
    ``location[address]`` / ``location[lat]`` / ``location[lng]`` fields.
    """
    files = getattr(request, 'FILES', {})
    data = {key: request.data.get(key) for key in request.data.keys() if key not in files}

    if 'location' not in data and any(field in data for field in LOCATION_FORM_FIELDS):
        data['location'] = {
            'address': data.pop('location[address]', ''),
            'lat': data.pop('location[lat]', None),
            'lng': data.pop('location[lng]', None),
        }
    return data


def uploaded_photos(request):
    files = getattr(request, 'FILES', None)
    if not files:
        return []
    return files.getlist('images') or files.getlist('file')


def report_response(report, status_code=status.HTTP_200_OK):
    return envelope(ReportSerializer(report_queryset().get(pk=report.pk)).data, status_code=status_code)


# =============================================================================
# LIST / CREATE / DETAIL
# =============================================================================

class ReportListCreateView(EnvelopeListCreateView):
    """
    GET  /api/reports/   (public)

    Filters: status, severity, category, citizen, assignedOfficer,
    department, region, createdAt[gte]=..., status[in]=Pending,Assigned
    Radius:  ?lat=37.77&lng=-122.42&radius=5   (miles)
    Also:    ?select=title,status  ?sort=-createdAt  ?page=2&limit=10

    POST /api/reports/   (citizen; JSON or multipart with images/file)

    {
        "title": "Pothole on Main St",
        "description": "Deep pothole near the crossing",
        "category": "<category id>",
        "severity": "High",
        "location": {"address": "12 Main St", "coordinates": {"lat": 37.77, "lng": -122.42}}
    }
    """

    serializer_class = ReportSerializer
    filter_backends = [ReportQueryBackend, SortFilter]
    filterset_class = ReportFilter
    filter_reserved_params = GEO_PARAMS
    ordering_fields = [
        'created_at', 'title', 'status', 'severity', 'resolved_at', 'closed_at',
    ]
    ordering = ['-created_at']
    read_permission_classes = [AllowAny]
    write_permission_classes = [ReportPolicy]
    policy_actions = {'POST': 'create'}

    def get_queryset(self):
        return report_queryset()

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=form_data(request))
        serializer.is_valid(raise_exception=True)
        report = self.perform_create(serializer)

        # Stored after the report is committed; a failed write leaves the report in place
        photos = PhotoStorageService.store_images(report, uploaded_photos(request))
        if photos:
            ReportLifecycle(report, request.user, request).attach_photos(photos)

        return report_response(report, status_code=status.HTTP_201_CREATED)

    def perform_create(self, serializer):
        data = serializer.validated_data
        data.pop('updateMessage', None)
        data.pop('status', None)
        if not data.get('location_address'):
            data['location_address'] = LocationResolverService.resolve_address(
                data['latitude'], data['longitude']
            )

        with transaction.atomic():
            report = serializer.save(citizen=self.request.user, status=ReportStatus.PENDING)
            ReportLifecycle(report, self.request.user, self.request).submit()
        return report


class ReportDetailView(EnvelopeDetailView):
    """
    GET    /api/reports/<id>/   (public)
    PUT    /api/reports/<id>/   (owner, officer or admin)
    DELETE /api/reports/<id>/   (owner or admin; soft delete)

    Only officers and admins may change ``status`` here; the change is
    recorded on the timeline with ``updateMessage`` when given:

    {"status": "In Progress", "updateMessage": "Crew dispatched"}
    """

    serializer_class = ReportSerializer
    read_permission_classes = [AllowAny]
    write_permission_classes = [ReportPolicy]
    policy_actions = {'PUT': 'update', 'PATCH': 'update', 'DELETE': 'delete'}
    resource_label = 'Report'

    def get_queryset(self):
        return report_queryset()

    def update(self, request, *args, **kwargs):
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=form_data(request), partial=True)
        serializer.is_valid(raise_exception=True)
        report = self.perform_update(serializer)
        return report_response(report)

    def perform_update(self, serializer):
        user = self.request.user
        report = serializer.instance
        data = serializer.validated_data
        message = data.pop('updateMessage', None)
        new_status = data.pop('status', None)

        status_changed = new_status is not None and new_status != report.status
        if status_changed:
            authorize('change_status', user)

        with transaction.atomic():
            report = serializer.save()
            if status_changed:
                report = ReportLifecycle(report, user, self.request).change_status(new_status, message)

        AuditLog.log(
            event_type=AuditEventType.REPORT_UPDATED,
            actor=user,
            target=report,
            request=self.request,
            description="Report updated",
            metadata={'fields': sorted(data.keys())},
        )
        return report

    def perform_destroy(self, instance):
        instance.delete()
        AuditLog.log(
            event_type=AuditEventType.REPORT_DELETED,
            actor=self.request.user,
            target=instance,
            request=self.request,
            description="Report deleted",
        )


# =============================================================================
# PER-USER LISTS
# =============================================================================

class UserReportListView(views.APIView):
    """
    GET /api/reports/user/

    Every report filed by the current user, newest first.
    """

    permission_classes = [ReportPolicy]
    policy_action = 'user_reports'

    def get(self, request):
        reports = report_queryset().filter(citizen=request.user).order_by('-created_at')
        data = ReportSerializer(reports, many=True).data
        return envelope(data, count=len(data))


class AssignedReportListView(views.APIView):
    """
    GET /api/reports/assigned/   (officer)

    Every report assigned to the current officer, newest first.
    """

    permission_classes = [ReportPolicy]
    policy_action = 'assigned_reports'

    def get(self, request):
        reports = report_queryset().filter(assigned_officer=request.user).order_by('-created_at')
        data = ReportSerializer(reports, many=True).data
        return envelope(data, count=len(data))


# =============================================================================
# ANALYTICS
# =============================================================================

class ReportAnalyticsView(views.APIView):
    """
    GET /api/reports/analytics/   (admin)

    Totals, breakdowns by category/region/severity, monthly trend for the
    current year and department performance.
    """

    permission_classes = [ReportPolicy]
    policy_action = 'analytics'

    def get(self, request):
        return envelope(report_analytics())


class DashboardStatsView(views.APIView):
    """GET /api/reports/dashboard-stats/   (admin)"""

    permission_classes = [ReportPolicy]
    policy_action = 'dashboard_stats'

    def get(self, request):
        return envelope(dashboard_stats())


# =============================================================================
# REPORT ACTIONS
# =============================================================================

class ReportActionView(views.APIView):
    """Base for /api/reports/<id>/<action>/ endpoints."""

    permission_classes = [ReportPolicy]
    policy_action = None

    def get_report(self, pk):
        report = get_or_404(Report.objects.all(), pk, 'Report')
        self.check_object_permissions(self.request, report)
        return report


class ReportTimelineView(ReportActionView):
    """
    GET /api/reports/<id>/timeline/

    [
        {"status": "Pending", "message": "Report submitted by citizen",
         "updatedBy": {"id": "...", "name": "...", "role": "citizen"},
         "createdAt": "..."}
    ]
    """

    policy_action = 'view_timeline'

    def get(self, request, pk):
        report = self.get_report(pk)
        return envelope(build_timeline(report))


class ReportAddUpdateView(ReportActionView):
    """
    POST /api/reports/<id>/updates/   (admin, assigned officer or owner)

    {"message": "Crew dispatched", "status": "In Progress"}
    """

    policy_action = 'add_update'

    def post(self, request, pk):
        report = self.get_report(pk)
        serializer = AddUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        status_value = serializer.validated_data.get('status')
        if status_value and status_value != report.status:
            authorize('change_status', request.user)
        report = ReportLifecycle(report, request.user, request).add_update(
            serializer.validated_data['message'],
            status_value,
        )
        return report_response(report)


class ReportFeedbackView(ReportActionView):
    """
    POST /api/reports/<id>/feedback/   (owning citizen, Resolved reports)

    {"rating": 4, "comment": "Fixed quickly"}
    """

    policy_action = 'feedback'

    def post(self, request, pk):
        serializer = FeedbackSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        report = self.get_report(pk)
        report = ReportLifecycle(report, request.user, request).leave_feedback(
            serializer.validated_data['rating'],
            serializer.validated_data.get('comment', ''),
        )
        return report_response(report)


class ReportPhotoView(ReportActionView):
    """
    PUT /api/reports/<id>/photo/   (owner, officer or admin)

    Multipart with a single image in ``file``.
    """

    policy_action = 'upload_photo'

    def put(self, request, pk):
        report = self.get_report(pk)
        upload = request.FILES.get('file')
        if upload is None:
            raise BadRequestError('Please upload a file')

        PhotoStorageService.validate(upload)
        url = PhotoStorageService.store(report, upload)
        report = ReportLifecycle(report, request.user, request).attach_photos([url])
        return report_response(report)


class ReportCancelView(ReportActionView):
    """PATCH /api/reports/<id>/cancel/   (owning citizen, Pending only)"""

    policy_action = 'cancel'

    def patch(self, request, pk):
        report = ReportLifecycle(self.get_report(pk), request.user, request).cancel()
        return report_response(report)


class ReportAcknowledgeView(ReportActionView):
    """PATCH /api/reports/<id>/acknowledge/   (owning citizen, Resolved only)"""

    policy_action = 'acknowledge'

    def patch(self, request, pk):
        report = ReportLifecycle(self.get_report(pk), request.user, request).acknowledge()
        return report_response(report)


class ReportCloseView(ReportActionView):
    """PATCH /api/reports/<id>/close/   (owning citizen, not Closed/Cancelled)"""

    policy_action = 'close'

    def patch(self, request, pk):
        report = ReportLifecycle(self.get_report(pk), request.user, request).close()
        return report_response(report)
