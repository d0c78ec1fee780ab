"""
Aggregates for the admin analytics and dashboard endpoints.

Durations are worked out in Python from (created_at, resolved_at) pairs so
the numbers are the same on SQLite and PostgreSQL.
"""

from collections import defaultdict
from datetime import timedelta

from django.db.models import Count, Q
from django.utils import timezone

from authentication.models import User, UserRole, UserStatus
from organization.models import Department, Region
from .models import Report, ReportStatus

MONTHS = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun',
          'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec']

SECONDS_PER_DAY = 60 * 60 * 24


def _days(start, end):
    return (end - start).total_seconds() / SECONDS_PER_DAY


def _average(values):
    return sum(values) / len(values) if values else 0


def _percent(part, whole):
    return round(part / whole * 100) if whole else 0


def _grouped(queryset, name_field):
    """[{'name': .., 'count': ..}] most frequent first, rows without a name dropped."""
    rows = (
        queryset.filter(**{f'{name_field}__isnull': False})
        .values(name_field)
        .annotate(count=Count('id'))
        .order_by('-count', name_field)
    )
    return [{'name': row[name_field], 'count': row['count']} for row in rows]


# =============================================================================
# /reports/analytics
# =============================================================================

def _monthly_trends(reports, year):
    counts = defaultdict(lambda: {'reports': 0, 'resolved': 0})
    for created_at, status in reports.filter(created_at__year=year).values_list('created_at', 'status'):
        month = timezone.localtime(created_at).month
        counts[month]['reports'] += 1
        if status == ReportStatus.RESOLVED:
            counts[month]['resolved'] += 1

    return [
        {'month': label, 'reports': counts[index]['reports'], 'resolved': counts[index]['resolved']}
        for index, label in enumerate(MONTHS, start=1)
    ]


def _department_performance(reports):
    durations = defaultdict(list)
    resolved = reports.filter(
        status=ReportStatus.RESOLVED,
        resolved_at__isnull=False,
        department__isnull=False,
    ).values_list('department__name', 'created_at', 'resolved_at')
    for department, created_at, resolved_at in resolved:
        durations[department].append(_days(created_at, resolved_at))

    ratings = defaultdict(list)
    rated = reports.filter(
        feedback_rating__isnull=False,
        department__isnull=False,
    ).values_list('department__name', 'feedback_rating')
    for department, rating in rated:
        ratings[department].append(rating)

    performance = []
    for department, times in sorted(durations.items()):
        scores = ratings.get(department, [])
        performance.append({
            'department': department,
            'reportsResolved': len(times),
            'avgTime': round(_average(times), 1),
            'satisfaction': _percent(sum(scores), len(scores) * 5),
        })
    return performance


def report_analytics(now=None):
    """
    Report totals, breakdowns, this year's monthly trend and department
    performance (resolution time and satisfaction from feedback ratings).
    """
    now = now or timezone.now()
    reports = Report.objects.all()

    resolution_days = [
        _days(created_at, resolved_at)
        for created_at, resolved_at in reports.filter(
            status=ReportStatus.RESOLVED, resolved_at__isnull=False
        ).values_list('created_at', 'resolved_at')
    ]

    severity_rows = reports.values('severity').annotate(count=Count('id')).order_by('severity')

    return {
        'totalReports': reports.count(),
        'resolvedReports': reports.filter(status=ReportStatus.RESOLVED).count(),
        'pendingReports': reports.filter(status=ReportStatus.PENDING).count(),
        'avgResolutionTime': round(_average(resolution_days), 1),
        'reportsByCategoryData': _grouped(reports, 'category__name'),
        'reportsByRegionData': _grouped(reports, 'region__name'),
        'reportsBySeverityData': [
            {'name': row['severity'], 'count': row['count']} for row in severity_rows
        ],
        'monthlyTrendsData': _monthly_trends(reports, timezone.localtime(now).year),
        'performanceData': _department_performance(reports),
    }


# =============================================================================
# /reports/dashboard-stats
# =============================================================================

def _headline_stats(reports, active_users, recent_joined):
    total = reports.count()
    resolved = reports.filter(status=ReportStatus.RESOLVED).count()
    in_progress = reports.filter(status=ReportStatus.IN_PROGRESS).count()

    return [
        {'title': 'Total Reports', 'value': total, 'change': '', 'changeType': 'neutral'},
        {
            'title': 'Active Users',
            'value': active_users,
            'change': f"+{recent_joined} this month",
            'changeType': 'increase',
        },
        {
            'title': 'Completed Issues',
            'value': resolved,
            'change': f"{_percent(resolved, total)}%",
            'changeType': 'neutral',
        },
        {
            'title': 'Response Rate',
            'value': f"{_percent(resolved + in_progress, total)}%",
            'change': '',
            'changeType': 'neutral',
        },
    ]


def _department_workload():
    live_reports = Q(reports__is_deleted=False)
    departments = Department.objects.annotate(
        assigned=Count('reports', filter=live_reports, distinct=True),
        in_progress=Count(
            'reports',
            filter=live_reports & Q(reports__status=ReportStatus.IN_PROGRESS),
            distinct=True,
        ),
        completed=Count(
            'reports',
            filter=live_reports & Q(reports__status=ReportStatus.RESOLVED),
            distinct=True,
        ),
        officer_count=Count(
            'users',
            filter=Q(users__role=UserRole.OFFICER, users__status=UserStatus.ACTIVE,
                     users__is_deleted=False),
            distinct=True,
        ),
    ).order_by('name')

    return [
        {
            'id': str(department.pk),
            'name': department.name,
            'assigned': department.assigned,
            'inProgress': department.in_progress,
            'completed': department.completed,
            'completionRate': _percent(department.completed, department.assigned),
            'officerCount': department.officer_count,
        }
        for department in departments
    ]


def _region_counts():
    regions = Region.objects.annotate(
        report_count=Count('reports', filter=Q(reports__is_deleted=False), distinct=True),
        citizen_count=Count(
            'users',
            filter=Q(users__role=UserRole.CITIZEN, users__status=UserStatus.ACTIVE,
                     users__is_deleted=False),
            distinct=True,
        ),
    ).order_by('name')

    return [
        {
            'id': str(region.pk),
            'name': region.name,
            'count': region.report_count,
            'citizenCount': region.citizen_count,
        }
        for region in regions
    ]


def dashboard_stats(now=None):
    """
    Headline numbers, user statistics, per-department workload, per-region
    report counts and the five most recently joined users.
    """
    now = now or timezone.now()
    users = User.objects.all()
    month_ago = now - timedelta(days=30)

    total_users = users.count()
    active_users = users.filter(status=UserStatus.ACTIVE).count()
    recent_joined = users.filter(created_at__gte=month_ago).count()
    role_counts = dict(users.order_by().values_list('role').annotate(total=Count('id')))

    user_stats = {
        'total': total_users,
        'active': active_users,
        'inactive': total_users - active_users,
        'admins': role_counts.get(UserRole.ADMIN, 0),
        'officers': role_counts.get(UserRole.OFFICER, 0),
        'citizens': role_counts.get(UserRole.CITIZEN, 0),
        'recentJoined': recent_joined,
    }

    recent_users = [
        {
            'id': str(user.pk),
            'name': user.name,
            'email': user.email,
            'role': user.role,
            'department': user.department.name if user.department else None,
            'region': user.region.name if user.region else None,
            'dateJoined': timezone.localtime(user.created_at).date().isoformat(),
            'status': user.status,
        }
        for user in users.select_related('department', 'region').order_by('-created_at')[:5]
    ]

    return {
        'stats': _headline_stats(Report.objects.all(), active_users, recent_joined),
        'userStats': user_stats,
        'departments': _department_workload(),
        'regions': _region_counts(),
        'recentUsers': recent_users,
    }
