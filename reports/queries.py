"""
Report list querying: filters, geo-radius lookup and the filter backend
tying them to the list view.

    GET /api/reports/?status=Pending&severity[in]=High,Critical&sort=-createdAt
    GET /api/reports/?lat=37.77&lng=-122.42&radius=5

When ``lat``, ``lng`` and ``radius`` (miles) are all present the other
filters are ignored and only reports inside the circle are returned;
sorting, field selection and pagination still apply.
"""

import math

import django_filters
from django.db.models import Q
from rest_framework.exceptions import ValidationError

from core.filters import BracketFilterBackend
from .models import Report, ReportSeverity, ReportStatus

EARTH_RADIUS_MILES = 3963.2

GEO_PARAMS = ('lat', 'lng', 'radius')


class CharInFilter(django_filters.BaseInFilter, django_filters.CharFilter):
    pass


class ReportFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=ReportStatus.CHOICES)
    status__in = CharInFilter(field_name='status')
    severity = django_filters.ChoiceFilter(choices=ReportSeverity.CHOICES)
    severity__in = CharInFilter(field_name='severity')

    class Meta:
        model = Report
        fields = {
            'category': ['exact'],
            'citizen': ['exact'],
            'assigned_officer': ['exact', 'isnull'],
            'department': ['exact'],
            'region': ['exact'],
            'title': ['exact', 'icontains'],
            'created_at': ['gt', 'gte', 'lt', 'lte'],
            'resolved_at': ['gt', 'gte', 'lt', 'lte'],
        }


def central_angle(lat1, lng1, lat2, lng2):
    """Great-circle angle in radians between two points (haversine)."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = phi2 - phi1
    d_lambda = math.radians(lng2 - lng1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * math.asin(min(1.0, math.sqrt(a)))


def _bounding_box(lat, lng, angle):
    """
    Q covering every point within ``angle`` radians of (lat, lng).

    The box only narrows the candidates; the exact test is done in Python.
    """
    delta_lat = math.degrees(angle)
    lat_min, lat_max = lat - delta_lat, lat + delta_lat
    query = Q(latitude__gte=max(lat_min, -90), latitude__lte=min(lat_max, 90))

    # Circles reaching a pole cover every longitude
    if lat_min <= -90 or lat_max >= 90:
        return query

    delta_lng = math.degrees(math.asin(min(1.0, math.sin(angle) / math.cos(math.radians(lat)))))
    lng_min, lng_max = lng - delta_lng, lng + delta_lng
    if lng_min < -180:
        longitudes = Q(longitude__gte=lng_min + 360) | Q(longitude__lte=lng_max)
    elif lng_max > 180:
        longitudes = Q(longitude__gte=lng_min) | Q(longitude__lte=lng_max - 360)
    else:
        longitudes = Q(longitude__gte=lng_min, longitude__lte=lng_max)
    return query & longitudes


def within_radius(queryset, lat, lng, radius_miles):
    """
    Reports whose location lies within ``radius_miles`` of (lat, lng).

    Returns a queryset so ordering and pagination can still be applied.
    """
    angle = radius_miles / EARTH_RADIUS_MILES
    if angle >= math.pi:
        return queryset

    candidates = queryset.filter(_bounding_box(lat, lng, angle)).values_list(
        'pk', 'latitude', 'longitude'
    )
    inside = [
        pk for pk, report_lat, report_lng in candidates
        if central_angle(lat, lng, report_lat, report_lng) <= angle
    ]
    return queryset.filter(pk__in=inside)


def parse_geo_params(query_params):
    """
    (lat, lng, radius) when all three are supplied, else None.

    Malformed or out-of-range values raise a 400.
    """
    if not all(query_params.get(name) for name in GEO_PARAMS):
        return None
    try:
        lat = float(query_params['lat'])
        lng = float(query_params['lng'])
        radius = float(query_params['radius'])
    except ValueError:
        raise ValidationError('lat, lng and radius must be numbers')

    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        raise ValidationError('lat/lng out of range')
    if radius < 0 or math.isnan(radius) or math.isinf(radius):
        raise ValidationError('radius must be a positive number of miles')
    return lat, lng, radius


class ReportQueryBackend(BracketFilterBackend):
    """Bracket filters, replaced by the radius lookup when lat/lng/radius are given."""

    def filter_queryset(self, request, queryset, view):
        geo = parse_geo_params(request.query_params)
        if geo is not None:
            return within_radius(queryset, *geo)
        return super().filter_queryset(request, queryset, view)
