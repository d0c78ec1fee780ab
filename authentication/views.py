"""
Authentication and user administration views for CivicPulse Backend.

Provides REST API endpoints for:
- Citizen registration and login (token in body and httpOnly cookie)
- Current user, logout, password change
- User administration (admin), officer listing
"""

from rest_framework import status, views
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle

from audit.models import AuditLog, AuditEventType
from core.exceptions import UnauthorizedError
from core.views import EnvelopeDetailView, EnvelopeListCreateView, envelope
from .backends import clear_auth_cookie, issue_token, set_auth_cookie
from .models import User, UserRole
from .permissions import IsAdmin, IsAuthenticated, IsSelfOrAdmin
from .serializers import (
    ChangePasswordSerializer,
    LoginSerializer,
    RegisterSerializer,
    UserSerializer,
)


class LoginThrottle(ScopedRateThrottle):
    """Rate limiting for login and registration."""
    scope = 'login'


def token_response(user, status_code=status.HTTP_200_OK):
    """``{success, token, data: user}`` plus the token cookie."""
    token = issue_token(user)
    response = Response(
        {'success': True, 'token': token, 'data': UserSerializer(user).data},
        status=status_code,
    )
    return set_auth_cookie(response, token)


class RegisterView(views.APIView):
    """
    Register a citizen account.

    POST /api/auth/register/

    Request:
    {
        "name": "Jane Citizen",
        "email": "jane@example.com",
        "password": "a-strong-password",
        "phone": "555-0100"   (optional)
    }
    """

    permission_classes = [AllowAny]
    throttle_classes = [LoginThrottle]

    def post(self, request):
        serializer = RegisterSerializer(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        return token_response(user, status_code=status.HTTP_201_CREATED)


class LoginView(views.APIView):
    """
    Log in with email and password.

    POST /api/auth/login/

    Request:
    {
        "email": "jane@example.com",
        "password": "a-strong-password"
    }

    Response:
    {
        "success": true,
        "token": "jwt_access_token",
        "data": { ...user... }
    }
    """

    permission_classes = [AllowAny]
    throttle_classes = [LoginThrottle]

    def post(self, request):
        serializer = LoginSerializer(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)
        result = serializer.save()
        response = Response(
            {'success': True, 'token': result['token'], 'data': UserSerializer(result['user']).data},
            status=status.HTTP_200_OK,
        )
        return set_auth_cookie(response, result['token'])


class CurrentUserView(views.APIView):
    """
    GET /api/auth/me/

    Current user with department and region names.
    """

    permission_classes = [IsAuthenticated]

    def get(self, request):
        return envelope(UserSerializer(request.user).data)


class LogoutView(views.APIView):
    """
    GET /api/auth/logout/

    Clears the token cookie. Bearer tokens simply expire.
    """

    permission_classes = [AllowAny]

    def get(self, request):
        if request.user.is_authenticated:
            AuditLog.log(
                event_type=AuditEventType.AUTH_LOGOUT,
                actor=request.user,
                request=request,
                description="Logout",
            )
        return clear_auth_cookie(envelope({}))


class ChangePasswordView(views.APIView):
    """
    POST /api/auth/change-password/

    Request:
    {
        "currentPassword": "old",
        "newPassword": "new"
    }
    """

    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = ChangePasswordSerializer(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        return token_response(user)


# =============================================================================
# USER ADMINISTRATION
# =============================================================================

class UserListCreateView(EnvelopeListCreateView):
    """
    GET  /api/users/   (admin; filter/sort/page, default -createdAt, limit 10)
    POST /api/users/   (admin; creates any role)
    """

    queryset = User.objects.select_related('department', 'region')
    serializer_class = UserSerializer
    permission_classes = [IsAdmin]
    filterset_fields = {
        'role': ['exact', 'in'],
        'status': ['exact', 'in'],
        'department': ['exact'],
        'region': ['exact'],
        'created_at': ['gt', 'gte', 'lt', 'lte'],
    }
    ordering_fields = ['name', 'email', 'role', 'status', 'created_at']
    ordering = ['-created_at']

    def perform_create(self, serializer):
        user = serializer.save()
        AuditLog.log(
            event_type=AuditEventType.USER_CREATED,
            actor=self.request.user,
            target=user,
            request=self.request,
            description=f"User created with role {user.role}",
        )


class OfficerListView(views.APIView):
    """
    GET /api/users/officers/   (admin)

    All officers sorted by name.
    """

    permission_classes = [IsAdmin]

    def get(self, request):
        officers = (
            User.objects.filter(role=UserRole.OFFICER)
            .select_related('department', 'region')
            .order_by('name')
        )
        data = UserSerializer(officers, many=True).data
        return envelope(data, count=len(data))


class UserDetailView(EnvelopeDetailView):
    """
    GET/PUT /api/users/<id>/   (the user themself or an admin)
    DELETE  /api/users/<id>/   (admin)

    Only admins may change a role or account status.
    """

    queryset = User.objects.select_related('department', 'region')
    serializer_class = UserSerializer
    read_permission_classes = [IsAuthenticated, IsSelfOrAdmin]
    write_permission_classes = [IsAuthenticated, IsSelfOrAdmin]
    resource_label = 'User'

    def get_permissions(self):
        if self.request.method == 'DELETE':
            return [IsAdmin()]
        return super().get_permissions()

    def perform_update(self, serializer):
        user = self.request.user
        instance = serializer.instance
        changes = serializer.validated_data

        if user.role != UserRole.ADMIN:
            if 'role' in changes and changes['role'] != instance.role:
                raise UnauthorizedError('Not authorized to change role')
            if 'status' in changes and changes['status'] != instance.status:
                raise UnauthorizedError('Not authorized to change account status')

        previous_role = instance.role
        updated = serializer.save()

        event_type = AuditEventType.USER_UPDATED
        if updated.role != previous_role:
            event_type = AuditEventType.USER_ROLE_CHANGED
        AuditLog.log(
            event_type=event_type,
            actor=user,
            target=updated,
            request=self.request,
            description="User updated",
            metadata={'fields': sorted(k for k in changes.keys() if k != 'password')},
        )

    def perform_destroy(self, instance):
        instance.delete()
        AuditLog.log(
            event_type=AuditEventType.USER_DELETED,
            actor=self.request.user,
            target=instance,
            request=self.request,
            description="User deleted",
        )
