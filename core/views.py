"""
Generic view plumbing shared by the catalogue, account and report apps.

Responses use the envelope ``{"success": true, "data": ...}``; list
endpoints add ``count`` and ``pagination`` (see core.pagination).
"""

from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import JsonResponse
from rest_framework import generics, status
from rest_framework.response import Response

from .exceptions import NotFoundError


def envelope(data=None, status_code=status.HTTP_200_OK, **extra):
    """Build a success envelope response."""
    payload = {'success': True}
    payload.update(extra)
    if data is not None:
        payload['data'] = data
    return Response(payload, status=status_code)


def not_found(request, exception=None):
    """JSON 404 for URLs that match no route."""
    return JsonResponse(
        {'success': False, 'code': 'NOT_FOUND', 'message': 'Resource not found'},
        status=404,
    )


def get_or_404(queryset, pk, label):
    """Fetch one row or raise NotFoundError with the API's wording."""
    try:
        return queryset.get(pk=pk)
    except (queryset.model.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFoundError(f"{label} not found with id of {pk}")


class SelectableFieldsViewMixin:
    """Pass ``?select=a,b`` through to the serializer context."""

    def get_serializer_context(self):
        context = super().get_serializer_context()
        select = self.request.query_params.get('select') if self.request else None
        if select:
            context['select'] = [name.strip() for name in select.split(',') if name.strip()]
        return context


class MethodPermissionsMixin:
    """
    Separate permission classes for safe and unsafe methods.

    ``read_permission_classes`` guard GET/HEAD/OPTIONS,
    ``write_permission_classes`` everything else.
    """

    read_permission_classes = None
    write_permission_classes = None

    def get_permissions(self):
        if self.request.method in ('GET', 'HEAD', 'OPTIONS'):
            classes = self.read_permission_classes
        else:
            classes = self.write_permission_classes
        if classes is None:
            return super().get_permissions()
        return [permission() for permission in classes]


class EnvelopeListCreateView(SelectableFieldsViewMixin, MethodPermissionsMixin,
                             generics.ListCreateAPIView):
    """Paginated, filterable list plus create, both wrapped in the envelope."""

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        serializer = self.get_serializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.perform_create(serializer)
        output = self.get_serializer(serializer.instance)
        return envelope(output.data, status_code=status.HTTP_201_CREATED)


class EnvelopeDetailView(SelectableFieldsViewMixin, MethodPermissionsMixin,
                         generics.RetrieveUpdateDestroyAPIView):
    """
    Retrieve / update / soft-delete one row.

    PUT behaves like PATCH: only the supplied fields change.
    """

    resource_label = 'Resource'

    def get_object(self):
        obj = get_or_404(self.get_queryset(), self.kwargs['pk'], self.resource_label)
        self.check_object_permissions(self.request, obj)
        return obj

    def retrieve(self, request, *args, **kwargs):
        return envelope(self.get_serializer(self.get_object()).data)

    def update(self, request, *args, **kwargs):
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        self.perform_update(serializer)
        return envelope(self.get_serializer(serializer.instance).data)

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        self.perform_destroy(instance)
        return envelope({})
