"""
JWT authentication backend for CivicPulse.

Browser clients carry the access token in the httpOnly ``token`` cookie,
other clients send ``Authorization: Bearer <token>``. The header wins
when both are present. Tokens of inactive or deleted accounts are
rejected with 401.
"""

import logging

from django.conf import settings
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken
from rest_framework_simplejwt.tokens import AccessToken

from .models import UserStatus

security_logger = logging.getLogger('civicpulse.security')


class CookieJWTAuthentication(JWTAuthentication):
    """JWTAuthentication that also reads the token from the auth cookie."""

    def authenticate(self, request):
        header = self.get_header(request)
        if header is not None:
            raw_token = self.get_raw_token(header)
            if raw_token is None:
                return None
            validated_token = self.get_validated_token(raw_token)
        else:
            raw_token = request.COOKIES.get(settings.AUTH_COOKIE_NAME)
            # Logout overwrites the cookie with a placeholder
            if raw_token in (None, '', 'none'):
                return None
            try:
                validated_token = self.get_validated_token(raw_token)
            except InvalidToken:
                # A stale cookie must not lock the browser out of public routes
                security_logger.info("Ignoring expired or invalid token cookie")
                return None

        user = self.get_user(validated_token)
        self._check_user_status(user, request)
        return user, validated_token

    def _check_user_status(self, user, request):
        if user.status != UserStatus.ACTIVE or user.is_deleted:
            security_logger.warning(
                f"Inactive user attempted access: {user.id} from {request.META.get('REMOTE_ADDR')}"
            )
            raise InvalidToken({
                'detail': 'Your account is inactive. Please contact an administrator.',
                'code': 'account_inactive'
            })


def issue_token(user):
    """Create a signed access token carrying the user's role."""
    token = AccessToken.for_user(user)
    token['role'] = user.role
    return str(token)


def set_auth_cookie(response, token):
    """Attach the token cookie, expiring with the token itself."""
    lifetime = settings.SIMPLE_JWT['ACCESS_TOKEN_LIFETIME']
    response.set_cookie(
        settings.AUTH_COOKIE_NAME,
        token,
        max_age=int(lifetime.total_seconds()),
        httponly=True,
        secure=settings.AUTH_COOKIE_SECURE,
        samesite=settings.AUTH_COOKIE_SAMESITE,
    )
    return response


def clear_auth_cookie(response):
    """Overwrite the token cookie with a short-lived placeholder."""
    response.set_cookie(
        settings.AUTH_COOKIE_NAME,
        'none',
        max_age=10,
        httponly=True,
        secure=settings.AUTH_COOKIE_SECURE,
        samesite=settings.AUTH_COOKIE_SAMESITE,
    )
    return response
