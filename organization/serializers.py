"""
Serializers for the organization catalogue.

Field names follow the API's camelCase; geo columns are exposed as the
nested ``location`` / ``coordinates`` objects clients expect.
"""

from rest_framework import serializers

from core.serializers import CoordinatesField, LocationField, SelectableFieldsMixin
from .models import Category, Department, Region


class DepartmentSerializer(SelectableFieldsMixin, serializers.ModelSerializer):
    headOfficer = serializers.CharField(source='head_officer', max_length=100)
    location = LocationField(coordinates_required=False, required=False)
    officersCount = serializers.IntegerField(source='officers_count', min_value=0, required=False)
    contactEmail = serializers.EmailField(source='contact_email', required=False, allow_blank=True)
    contactPhone = serializers.CharField(source='contact_phone', max_length=30, required=False, allow_blank=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Department
        fields = [
            'id', 'name', 'description', 'headOfficer', 'headquarters',
            'location', 'officersCount', 'contactEmail', 'contactPhone',
            'status', 'createdAt',
        ]
        read_only_fields = ['id']


class BoundariesField(serializers.JSONField):
    """GeoJSON Polygon: {"type": "Polygon", "coordinates": [[[lng, lat], ...], ...]}"""

    def to_internal_value(self, data):
        data = super().to_internal_value(data)
        if isinstance(data, list):
            data = {'type': 'Polygon', 'coordinates': data}
        if not isinstance(data, dict) or data.get('type', 'Polygon') != 'Polygon':
            raise serializers.ValidationError('Boundaries must be a GeoJSON Polygon')

        rings = data.get('coordinates', [])
        if not isinstance(rings, list):
            raise serializers.ValidationError('Boundaries must be a GeoJSON Polygon')
        for ring in rings:
            if not isinstance(ring, list) or not all(
                isinstance(point, (list, tuple)) and len(point) >= 2
                and all(isinstance(c, (int, float)) for c in point[:2])
                for point in ring
            ):
                raise serializers.ValidationError('Each boundary ring must be a list of [lng, lat] points')
        return {'type': 'Polygon', 'coordinates': rings}


class RegionSerializer(SelectableFieldsMixin, serializers.ModelSerializer):
    coordinates = CoordinatesField()
    boundaries = BoundariesField(required=False)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Region
        fields = [
            'id', 'name', 'type', 'population', 'area', 'coordinates',
            'boundaries', 'status', 'createdAt',
        ]
        read_only_fields = ['id']


class CategorySerializer(SelectableFieldsMixin, serializers.ModelSerializer):
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Category
        fields = ['id', 'name', 'description', 'status', 'createdAt']
        read_only_fields = ['id']
