"""
Shared serializer building blocks.

- SelectableFieldsMixin: honours ``?select=a,b``
- NamedPrimaryKeyRelatedField: {id, name} view of a related row
- CoordinatesField / LocationField: nested geo shapes over flat columns
"""

import json

from rest_framework import serializers


class SelectableFieldsMixin:
    """
    Drop every field not named in the ``select`` context entry.

    ``id`` is always kept. The list views put the parsed ``select``
    query parameter into the serializer context.
    """

    always_included = ('id',)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        select = self.context.get('select')
        if select:
            allowed = set(select) | set(self.always_included)
            for name in set(self.fields) - allowed:
                self.fields.pop(name)


class NamedPrimaryKeyRelatedField(serializers.PrimaryKeyRelatedField):
    """
    Written as a primary key, read back as ``{"id": .., "name": ..}``.
    """

    def use_pk_only_optimization(self):
        return False

    def to_representation(self, value):
        return {'id': str(value.pk), 'name': getattr(value, 'name', str(value))}

    def get_choices(self, cutoff=None):
        # Browsable API forms key choices by value; dicts are unhashable
        queryset = self.get_queryset()
        if queryset is None:
            return {}
        if cutoff is not None:
            queryset = queryset[:cutoff]
        return {str(item.pk): self.display_value(item) for item in queryset}


def _parse_mapping(data, label):
    """Accept a dict or its JSON text (multipart forms send JSON strings)."""
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except ValueError:
            raise serializers.ValidationError(f'Invalid {label} format')
    if not isinstance(data, dict):
        raise serializers.ValidationError(f'Invalid {label} format')
    return data


def _coordinate(value, name, low, high):
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise serializers.ValidationError(f'Please provide {name}')
    if not low <= number <= high:
        raise serializers.ValidationError(f'{name.capitalize()} must be between {low} and {high}')
    return number


class CoordinatesField(serializers.Field):
    """
    ``{"lat": .., "lng": ..}`` read from and written to two float columns.

    Used with ``source='*'`` so the validated value merges into the
    instance attributes.
    """

    def __init__(self, lat_attr='latitude', lng_attr='longitude', **kwargs):
        self.lat_attr = lat_attr
        self.lng_attr = lng_attr
        kwargs['source'] = '*'
        super().__init__(**kwargs)

    def to_representation(self, instance):
        return {
            'lat': getattr(instance, self.lat_attr),
            'lng': getattr(instance, self.lng_attr),
        }

    def to_internal_value(self, data):
        data = _parse_mapping(data, 'coordinates')
        return self._coordinates(data, required=True)

    def _coordinates(self, data, required):
        lat, lng = data.get('lat'), data.get('lng')
        if not required and lat in (None, '') and lng in (None, ''):
            return {self.lat_attr: None, self.lng_attr: None}
        return {
            self.lat_attr: _coordinate(lat, 'latitude', -90, 90),
            self.lng_attr: _coordinate(lng, 'longitude', -180, 180),
        }


class LocationField(CoordinatesField):
    """
    ``{"address": .., "coordinates": {"lat": .., "lng": ..}}`` over an
    address column plus two float columns.

    ``{"address": .., "lat": .., "lng": ..}`` is accepted too.
    """

    def __init__(self, address_attr='location_address', coordinates_required=True, **kwargs):
        self.address_attr = address_attr
        self.coordinates_required = coordinates_required
        super().__init__(**kwargs)

    def to_representation(self, instance):
        return {
            'address': getattr(instance, self.address_attr) or '',
            'coordinates': super().to_representation(instance),
        }

    def to_internal_value(self, data):
        data = _parse_mapping(data, 'location')
        coordinates = data.get('coordinates')
        if coordinates is None:
            coordinates = {'lat': data.get('lat'), 'lng': data.get('lng')}
        elif not isinstance(coordinates, dict):
            raise serializers.ValidationError('Invalid location format')

        value = self._coordinates(coordinates, required=self.coordinates_required)
        value[self.address_attr] = (data.get('address') or '').strip()
        return value
