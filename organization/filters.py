"""
django-filter FilterSets for the organization catalogue list endpoints.
"""

import django_filters

from .models import Department, Region


class DepartmentFilter(django_filters.FilterSet):
    class Meta:
        model = Department
        fields = {
            'name': ['exact'],
            'status': ['exact', 'in'],
            'officers_count': ['exact', 'gt', 'gte', 'lt', 'lte'],
            'created_at': ['gt', 'gte', 'lt', 'lte'],
        }


class RegionFilter(django_filters.FilterSet):
    class Meta:
        model = Region
        fields = {
            'name': ['exact'],
            'type': ['exact', 'in'],
            'status': ['exact', 'in'],
            'population': ['exact', 'gt', 'gte', 'lt', 'lte'],
            'area': ['exact', 'gt', 'gte', 'lt', 'lte'],
            'created_at': ['gt', 'gte', 'lt', 'lte'],
        }
