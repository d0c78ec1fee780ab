"""
Organization catalogue views for CivicPulse Backend.

Provides REST API endpoints for:
- Departments: public list/detail, admin create/update/delete, stats
- Regions: public list/detail, admin create/update/delete, stats
- Categories: public list of active categories, admin management

Catalogue changes are audited.
"""

from rest_framework import views
from rest_framework.permissions import AllowAny

from audit.models import AuditLog, AuditEventType
from authentication.permissions import IsAdmin, IsAdminOrOfficer
from core.views import EnvelopeDetailView, EnvelopeListCreateView, envelope
from .filters import DepartmentFilter, RegionFilter
from .models import CatalogueStatus, Category, Department, Region
from .serializers import CategorySerializer, DepartmentSerializer, RegionSerializer
from .stats import department_stats, region_stats


class CatalogueAuditMixin:
    """Writes an audit row for every create/update/delete."""

    resource_label = 'Resource'

    def perform_create(self, serializer):
        instance = serializer.save()
        self._audit(AuditEventType.CATALOGUE_CREATED, instance, 'created')

    def perform_update(self, serializer):
        instance = serializer.save()
        self._audit(AuditEventType.CATALOGUE_UPDATED, instance, 'updated',
                    {'fields': sorted(serializer.validated_data.keys())})

    def perform_destroy(self, instance):
        instance.delete()
        self._audit(AuditEventType.CATALOGUE_DELETED, instance, 'deleted')

    def _audit(self, event_type, instance, verb, metadata=None):
        AuditLog.log(
            event_type=event_type,
            actor=self.request.user,
            target=instance,
            request=self.request,
            description=f"{self.resource_label} '{instance.name}' {verb}",
            metadata=metadata,
        )


# =============================================================================
# DEPARTMENTS
# =============================================================================

class DepartmentListCreateView(CatalogueAuditMixin, EnvelopeListCreateView):
    """
    GET  /api/departments/   (public, sorted by name, limit 100)
    POST /api/departments/   (admin)

    {
        "name": "Roads",
        "description": "Road maintenance",
        "headOfficer": "A. Officer",
        "headquarters": "City Hall",
        "location": {"address": "...", "coordinates": {"lat": 37.77, "lng": -122.42}}
    }
    """

    queryset = Department.objects.all()
    serializer_class = DepartmentSerializer
    filterset_class = DepartmentFilter
    ordering_fields = ['name', 'created_at', 'officers_count', 'status']
    ordering = ['name']
    page_limit = 100
    read_permission_classes = [AllowAny]
    write_permission_classes = [IsAdmin]
    resource_label = 'Department'


class DepartmentDetailView(CatalogueAuditMixin, EnvelopeDetailView):
    """GET (public), PUT/DELETE (admin) /api/departments/<id>/"""

    queryset = Department.objects.all()
    serializer_class = DepartmentSerializer
    read_permission_classes = [AllowAny]
    write_permission_classes = [IsAdmin]
    resource_label = 'Department'


class DepartmentStatsView(views.APIView):
    """
    GET /api/departments/stats/all/

    Officer, report and resolved-report counts per department.
    """

    permission_classes = [IsAdminOrOfficer]

    def get(self, request):
        return envelope(department_stats())


# =============================================================================
# REGIONS
# =============================================================================

class RegionListCreateView(CatalogueAuditMixin, EnvelopeListCreateView):
    """
    GET  /api/regions/   (public, sorted by name, limit 100)
    POST /api/regions/   (admin)

    {
        "name": "Zone A",
        "type": "Urban",
        "population": 250000,
        "area": 42.5,
        "coordinates": {"lat": 37.77, "lng": -122.42},
        "boundaries": {"type": "Polygon", "coordinates": [[[-122.5, 37.7], ...]]}
    }
    """

    queryset = Region.objects.all()
    serializer_class = RegionSerializer
    filterset_class = RegionFilter
    ordering_fields = ['name', 'created_at', 'population', 'area', 'type', 'status']
    ordering = ['name']
    page_limit = 100
    read_permission_classes = [AllowAny]
    write_permission_classes = [IsAdmin]
    resource_label = 'Region'


class RegionDetailView(CatalogueAuditMixin, EnvelopeDetailView):
    """GET (public), PUT/DELETE (admin) /api/regions/<id>/"""

    queryset = Region.objects.all()
    serializer_class = RegionSerializer
    read_permission_classes = [AllowAny]
    write_permission_classes = [IsAdmin]
    resource_label = 'Region'


class RegionStatsView(views.APIView):
    """
    GET /api/regions/stats/all/

    Officer and report counts per region plus population/area totals
    over active regions.
    """

    permission_classes = [IsAdminOrOfficer]

    def get(self, request):
        return envelope(region_stats())


# =============================================================================
# CATEGORIES
# =============================================================================

class CategoryListCreateView(CatalogueAuditMixin, EnvelopeListCreateView):
    """
    GET  /api/categories/   (public, active categories only, unpaginated)
    POST /api/categories/   (admin)
    """

    queryset = Category.objects.all()
    serializer_class = CategorySerializer
    read_permission_classes = [AllowAny]
    write_permission_classes = [IsAdmin]
    resource_label = 'Category'

    def list(self, request, *args, **kwargs):
        categories = Category.objects.filter(status=CatalogueStatus.ACTIVE).order_by('name')
        serializer = self.get_serializer(categories, many=True)
        return envelope(serializer.data, count=len(serializer.data))


class CategoryDetailView(CatalogueAuditMixin, EnvelopeDetailView):
    """
    GET (public), PUT (admin) /api/categories/<id>/

    DELETE (admin) marks the category inactive; reports keep pointing at it.
    """

    queryset = Category.objects.all()
    serializer_class = CategorySerializer
    read_permission_classes = [AllowAny]
    write_permission_classes = [IsAdmin]
    resource_label = 'Category'

    def perform_destroy(self, instance):
        instance.deactivate()
        self._audit(AuditEventType.CATALOGUE_DELETED, instance, 'deactivated')
