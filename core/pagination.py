"""
Page/limit pagination producing the list envelope:

    {
        "success": true,
        "count": 10,
        "pagination": {"next": {"page": 3, "limit": 10},
                       "prev": {"page": 1, "limit": 10}},
        "data": [...]
    }

``next``/``prev`` are only present when such a page exists. Asking for a
page past the end returns an empty page rather than a 404.
"""

from rest_framework.pagination import BasePagination
from rest_framework.response import Response


def _positive_int(value, default, maximum=None):
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    if number < 1:
        return default
    if maximum is not None:
        number = min(number, maximum)
    return number


class EnvelopePagination(BasePagination):
    page_query_param = 'page'
    limit_query_param = 'limit'
    default_limit = 10
    max_limit = 1000

    def paginate_queryset(self, queryset, request, view=None):
        default_limit = getattr(view, 'page_limit', self.default_limit)
        self.page = _positive_int(request.query_params.get(self.page_query_param), 1)
        self.limit = _positive_int(
            request.query_params.get(self.limit_query_param),
            default_limit,
            self.max_limit,
        )

        start = (self.page - 1) * self.limit
        end = self.page * self.limit
        self.total = queryset.count()
        self.has_next = end < self.total
        self.has_prev = start > 0
        return list(queryset[start:end])

    def get_pagination(self):
        pagination = {}
        if self.has_next:
            pagination['next'] = {'page': self.page + 1, 'limit': self.limit}
        if self.has_prev:
            pagination['prev'] = {'page': self.page - 1, 'limit': self.limit}
        return pagination

    def get_paginated_response(self, data):
        return Response({
            'success': True,
            'count': len(data),
            'total': self.total,
            'pagination': self.get_pagination(),
            'data': data,
        })

    def get_paginated_response_schema(self, schema):
        return {
            'type': 'object',
            'properties': {
                'success': {'type': 'boolean'},
                'count': {'type': 'integer'},
                'total': {'type': 'integer'},
                'pagination': {'type': 'object'},
                'data': schema,
            },
        }
