"""
Per-department and per-region statistics for the /stats/all endpoints.
"""

from django.contrib.auth import get_user_model
from django.db.models import Count, Sum

from authentication.models import UserRole
from reports.models import Report, ReportStatus
from .models import CatalogueStatus, Region


def _grouped_counts(queryset, relation, label, count_key):
    """Count rows per related department/region, dropping rows without one."""
    rows = (
        queryset
        .filter(**{f'{relation}__isnull': False, f'{relation}__is_deleted': False})
        .values(f'{relation}__id', f'{relation}__name')
        .annotate(total=Count('id'))
        .order_by(f'{relation}__name')
    )
    return [
        {
            'id': str(row[f'{relation}__id']),
            label: row[f'{relation}__name'],
            count_key: row['total'],
        }
        for row in rows
    ]


def department_stats():
    officers = get_user_model().objects.filter(role=UserRole.OFFICER)
    return {
        'officerStats': _grouped_counts(officers, 'department', 'department', 'count'),
        'reportStats': _grouped_counts(Report.objects.all(), 'department', 'department', 'activeReports'),
        'resolvedReportStats': _grouped_counts(
            Report.objects.filter(status=ReportStatus.RESOLVED),
            'department', 'department', 'resolvedReports',
        ),
    }


def region_stats():
    officers = get_user_model().objects.filter(role=UserRole.OFFICER)
    totals = Region.objects.filter(status=CatalogueStatus.ACTIVE).aggregate(
        totalRegions=Count('id'),
        totalPopulation=Sum('population'),
        totalArea=Sum('area'),
    )
    return {
        'officerStats': _grouped_counts(officers, 'region', 'region', 'count'),
        'reportStats': _grouped_counts(Report.objects.all(), 'region', 'region', 'activeReports'),
        'totalStats': {
            'totalRegions': totals['totalRegions'] or 0,
            'totalPopulation': totals['totalPopulation'] or 0,
            'totalArea': totals['totalArea'] or 0,
        },
    }
