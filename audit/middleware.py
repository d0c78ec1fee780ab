"""
Request audit logging for CivicPulse Backend.

One log line per API call on the ``civicpulse.audit`` logger. Action-level
records are written separately through AuditLog.log().
"""

import logging
import time

from core.exceptions import get_client_ip

audit_logger = logging.getLogger('civicpulse.audit')


class AuditLoggingMiddleware:
    """
    Logs method, path, user, status code, duration and client IP.

    Static files, uploaded photos and health probes are skipped.
    """

    skip_prefixes = (
        '/static/',
        '/uploads/',
        '/health/',
        '/api/health/',
        '/favicon.ico',
    )

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        start_time = time.monotonic()
        response = self.get_response(request)
        duration = time.monotonic() - start_time

        if not request.path.startswith(self.skip_prefixes):
            self._log_request(request, response, duration)

        return response

    def _log_request(self, request, response, duration):
        user_id = 'anonymous'
        user_role = 'none'

        # DRF copies the token-authenticated user back onto the request
        user = getattr(request, 'user', None)
        if user is not None and user.is_authenticated:
            user_id = str(user.pk)
            user_role = getattr(user, 'role', 'none')

        message = (
            f"API Request: method={request.method} path={request.path} "
            f"user={user_id} role={user_role} status={response.status_code} "
            f"duration_ms={round(duration * 1000, 2)} ip={get_client_ip(request)}"
        )

        if response.status_code >= 500:
            audit_logger.error(message)
        elif response.status_code >= 400:
            audit_logger.warning(message)
        else:
            audit_logger.info(message)
