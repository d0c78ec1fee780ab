"""
Role-based permissions for CivicPulse Backend.

- citizen: files and follows their own reports
- officer: works reports, reads organization stats
- admin:   everything, including users and analytics

Route-level role failures are 403 with the wording
"User role <role> is not authorized to access this route".
Report-level (ownership) rules live in reports.policies.
"""

from rest_framework import permissions

from core.exceptions import ForbiddenError, UnauthorizedError
from .models import UserRole, UserStatus


def role_denied_message(user):
    return f"User role {user.role} is not authorized to access this route"


class IsAuthenticated(permissions.IsAuthenticated):
    """
    Extended IsAuthenticated that also checks account status.
    """

    def has_permission(self, request, view):
        if not super().has_permission(request, view):
            return False

        return request.user.status == UserStatus.ACTIVE


class HasRole(permissions.BasePermission):
    """
    Base class for role gates. Subclasses set ``allowed_roles``.

    Unauthenticated requests return False so DRF answers 401;
    authenticated users of another role get a 403.
    """

    allowed_roles = ()

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        if user.status != UserStatus.ACTIVE:
            return False
        if user.role not in self.allowed_roles:
            raise ForbiddenError(role_denied_message(user))
        return True


class IsAdmin(HasRole):
    allowed_roles = (UserRole.ADMIN,)


class IsAdminOrOfficer(HasRole):
    allowed_roles = (UserRole.ADMIN, UserRole.OFFICER)


class IsSelfOrAdmin(permissions.BasePermission):
    """
    Object-level permission for /users/<id>.

    A user may read and edit their own account; admins may touch any.
    """

    def has_object_permission(self, request, view, obj):
        user = request.user
        if user.role == UserRole.ADMIN or obj.pk == user.pk:
            return True
        raise UnauthorizedError("Not authorized to access this user")
