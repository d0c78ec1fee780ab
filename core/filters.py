"""
Query-string filtering and sorting shared by every list endpoint.

Clients filter with ``field=value`` and ``field[op]=value`` where op is one
of gt, gte, lt, lte or in, and sort with ``sort=-createdAt,title``. Field
names arrive in the API's camelCase and are translated to model lookups
before they reach the view's django-filter ``FilterSet``.
"""

import re

from django.http import QueryDict
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework.filters import OrderingFilter

COMPARISON_OPERATORS = ('gt', 'gte', 'lt', 'lte', 'in')

# Parameters consumed by selection, sorting and pagination
RESERVED_PARAMS = ('select', 'sort', 'page', 'limit')

_BRACKET_RE = re.compile(r'^(?P<field>[A-Za-z_][\w.]*)\[(?P<op>[a-z]+)\]$')
_CAMEL_RE = re.compile(r'(?<!^)(?=[A-Z])')


def camel_to_snake(name):
    """createdAt -> created_at, assignedOfficer -> assigned_officer"""
    return _CAMEL_RE.sub('_', name).replace('.', '__').lower()


def translate_query_params(query_params, aliases=None, reserved=RESERVED_PARAMS):
    """
    Rewrite API query parameters into django-filter lookups.

    ``createdAt[gte]=2024-01-01`` becomes ``created_at__gte``; repeated
    ``severity[in]`` values are joined into one comma list. Unsupported
    operators are dropped along with reserved parameters.
    """
    aliases = aliases or {}
    translated = QueryDict(mutable=True)

    for key in query_params.keys():
        if key in reserved:
            continue

        values = query_params.getlist(key)
        match = _BRACKET_RE.match(key)
        if match:
            field, op = match.group('field'), match.group('op')
            if op not in COMPARISON_OPERATORS:
                continue
        else:
            field, op = key, None

        name = aliases.get(field, camel_to_snake(field))
        if op is None:
            translated.setlist(name, values)
        elif op == 'in':
            joined = ','.join(v for value in values for v in value.split(',') if v)
            translated[f'{name}__in'] = joined
        else:
            translated.setlist(f'{name}__{op}', values)

    return translated


class BracketFilterBackend(DjangoFilterBackend):
    """
    DjangoFilterBackend that understands ``field[op]=value`` parameters.

    Views may declare ``filter_aliases`` to map API names onto filter
    names and ``filter_reserved_params`` for extra parameters the view
    consumes itself.
    """

    def get_filterset_kwargs(self, request, queryset, view):
        kwargs = super().get_filterset_kwargs(request, queryset, view)
        reserved = RESERVED_PARAMS + tuple(getattr(view, 'filter_reserved_params', ()))
        kwargs['data'] = translate_query_params(
            request.query_params,
            aliases=getattr(view, 'filter_aliases', None),
            reserved=reserved,
        )
        return kwargs


class SortFilter(OrderingFilter):
    """
    OrderingFilter reading ``sort=-createdAt,name``.

    Keys are translated from camelCase; keys not listed in the view's
    ``ordering_fields`` are ignored, falling back to ``ordering``.
    """

    ordering_param = 'sort'

    def get_ordering(self, request, queryset, view):
        params = request.query_params.get(self.ordering_param)
        if params:
            aliases = getattr(view, 'filter_aliases', None) or {}
            fields = []
            for param in re.split(r'[,\s]+', params.strip()):
                if not param:
                    continue
                descending = param.startswith('-')
                name = param.lstrip('-')
                name = aliases.get(name, camel_to_snake(name))
                fields.append(f"-{name}" if descending else name)
            ordering = self.remove_invalid_fields(queryset, fields, view, request)
            if ordering:
                return ordering

        return self.get_default_ordering(view)
