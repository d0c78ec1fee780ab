"""
Custom exception handling for CivicPulse Backend.

Every error leaves the API in one envelope:

    {"success": false, "code": "NOT_FOUND", "message": "..."}

Domain errors are DRF ``APIException`` subclasses so views and services can
simply raise them. Django model validation and integrity errors are mapped
to 400, anything unexpected to a 500 with a safe message.
"""

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response

security_logger = logging.getLogger('civicpulse.security')
logger = logging.getLogger(__name__)


def custom_exception_handler(exc, context):
    """
    Render any exception raised inside a DRF view as the error envelope.

    Response format:
    {
        "success": false,
        "code": "ERROR_CODE",
        "message": "User-friendly message",
        "errors": {...}   (field errors, validation failures only)
    }
    """
    # rest_framework.views resolves DEFAULT_PERMISSION_CLASSES on import, and
    # authentication.permissions imports the error classes below.
    from rest_framework.views import exception_handler, set_rollback

    exc = _translate_django_exception(exc)

    response = exception_handler(exc, context)
    request = context.get('request')
    view = context.get('view')

    if response is None:
        # Unhandled: log with traceback, never leak it to the client
        logger.error(
            f"Unhandled exception in {view.__class__.__name__ if view else 'unknown'}: {exc}",
            exc_info=exc,
        )
        set_rollback()
        response = Response(status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    payload = {
        'success': False,
        'code': _get_error_code(exc, response.status_code),
        'message': _get_safe_message(exc, response.status_code),
    }
    if isinstance(exc, ValidationError) and isinstance(exc.detail, dict):
        payload['errors'] = exc.detail

    if response.status_code in [401, 403, 429]:
        _log_security_event(exc, request, view, response.status_code)
    elif response.status_code >= 500 and isinstance(exc, APIException):
        logger.error(f"Server error: {exc.__class__.__name__}: {exc}")

    response.data = payload
    return response


def _translate_django_exception(exc):
    """Map ORM-level failures onto DRF validation errors."""
    if isinstance(exc, DjangoValidationError):
        if hasattr(exc, 'error_dict'):
            return ValidationError(detail=exc.message_dict)
        return ValidationError(detail=exc.messages)
    if isinstance(exc, IntegrityError):
        return ValidationError(detail='Duplicate field value entered')
    return exc


def _get_error_code(exc, status_code):
    """Domain exceptions carry their own code; everything else maps by status."""
    error_code = getattr(exc, 'error_code', None)
    if error_code:
        return error_code

    error_codes = {
        400: 'BAD_REQUEST',
        401: 'UNAUTHORIZED',
        403: 'FORBIDDEN',
        404: 'NOT_FOUND',
        405: 'METHOD_NOT_ALLOWED',
        409: 'CONFLICT',
        413: 'PAYLOAD_TOO_LARGE',
        415: 'UNSUPPORTED_MEDIA_TYPE',
        429: 'RATE_LIMIT_EXCEEDED',
        500: 'INTERNAL_ERROR',
        502: 'BAD_GATEWAY',
        503: 'SERVICE_UNAVAILABLE',
    }
    return error_codes.get(status_code, 'UNKNOWN_ERROR')


def _get_safe_message(exc, status_code):
    """
    Get a safe, user-friendly error message.
    Never expose internal details or stack traces.
    """
    safe_messages = {
        400: 'Invalid request. Please check your input.',
        401: 'Not authorized to access this route',
        403: 'You do not have permission to perform this action.',
        404: 'Resource not found',
        405: 'This method is not allowed.',
        429: 'Too many requests. Please try again later.',
        500: 'Server Error',
        502: 'Service temporarily unavailable.',
        503: 'Service temporarily unavailable.',
    }

    if status_code >= 500 and not isinstance(exc, CivicPulseAPIException):
        return safe_messages.get(status_code, 'Server Error')

    detail = getattr(exc, 'detail', None)
    if status_code == 404 and not isinstance(exc, CivicPulseAPIException):
        return safe_messages[404]

    if isinstance(detail, dict):
        # Return first validation error
        for field, errors in detail.items():
            if isinstance(errors, list) and errors:
                if field == 'non_field_errors':
                    return str(errors[0])
                return f"Validation error: {field} - {errors[0]}"
            if isinstance(errors, str):
                return errors
    elif isinstance(detail, list) and detail:
        return str(detail[0])
    elif isinstance(detail, str) and detail:
        return detail

    return safe_messages.get(status_code, 'An error occurred.')


def _log_security_event(exc, request, view, status_code):
    """Log security-relevant events for monitoring and alerting."""
    user_info = 'anonymous'
    if request and hasattr(request, 'user') and request.user.is_authenticated:
        user_info = str(request.user.id)

    ip_address = get_client_ip(request) if request else 'unknown'
    view_name = view.__class__.__name__ if view else 'unknown'

    security_logger.warning(
        f"Security event: status={status_code}, "
        f"user={user_info}, ip={ip_address}, "
        f"view={view_name}, exception={exc.__class__.__name__}"
    )


def get_client_ip(request):
    """
    Extract client IP address from request.
    Handles proxy headers (X-Forwarded-For).
    """
    if not request:
        return None

    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        return x_forwarded_for.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


class CivicPulseAPIException(APIException):
    """Base class for CivicPulse domain errors."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'An error occurred.'
    default_code = 'error'
    error_code = 'ERROR'


class BadRequestError(CivicPulseAPIException):
    """Malformed or incomplete input the serializers do not cover."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid request. Please check your input.'
    error_code = 'BAD_REQUEST'


class InvalidStateError(CivicPulseAPIException):
    """Raised when a report is not in a status that allows the action."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'This action is not allowed in the current status.'
    error_code = 'INVALID_STATE'


class UnauthorizedError(CivicPulseAPIException):
    """Authenticated, but not the owner/assignee the action requires."""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Not authorized to access this route'
    error_code = 'UNAUTHORIZED'


class ForbiddenError(CivicPulseAPIException):
    """The actor's role may not invoke the action at all."""
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'You do not have permission to perform this action.'
    error_code = 'FORBIDDEN'


class NotFoundError(CivicPulseAPIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Resource not found'
    error_code = 'NOT_FOUND'


class ServerError(CivicPulseAPIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Server Error'
    error_code = 'INTERNAL_ERROR'


class PhotoUploadError(ServerError):
    """Raised when a photo cannot be written to the upload directory."""
    default_detail = 'Problem with file upload'
    error_code = 'UPLOAD_FAILED'
