"""
Who may do what to a report.

Each action has one row in POLICY:

- ``roles``: roles allowed to invoke the action at all. A mismatch is a
  403 before the report is even loaded.
- ``clauses``: relations to the report of which at least one must hold
  (owner, assigned officer, admin, staff). A mismatch is a 401
  "Not authorized to <verb> this report".

Views name their action(s) and use the ReportPolicy permission; services
and tests can call authorize() directly.
"""

from authentication.models import UserRole
from authentication.permissions import IsAuthenticated, role_denied_message
from core.exceptions import ForbiddenError, UnauthorizedError

# Relations between actor and report
OWNER = 'owner'
ASSIGNED_OFFICER = 'assigned_officer'
ADMIN = 'admin'
STAFF = 'staff'

CLAUSES = {
    OWNER: lambda actor, report: report.citizen_id == actor.pk,
    ASSIGNED_OFFICER: lambda actor, report: (
        actor.role == UserRole.OFFICER and report.assigned_officer_id == actor.pk
    ),
    ADMIN: lambda actor, report: actor.role == UserRole.ADMIN,
    STAFF: lambda actor, report: actor.role in UserRole.STAFF_ROLES,
}


class Rule:
    def __init__(self, roles=None, clauses=None, verb=None, role_message=None):
        self.roles = tuple(roles) if roles else None
        self.clauses = tuple(clauses) if clauses else None
        self.verb = verb
        self.role_message = role_message

    def role_error(self, actor):
        if self.role_message:
            return ForbiddenError(self.role_message.format(role=actor.role))
        return ForbiddenError(role_denied_message(actor))

    def object_error(self):
        return UnauthorizedError(f"Not authorized to {self.verb} this report")


CITIZEN_ONLY = [UserRole.CITIZEN]

POLICY = {
    'create': Rule(
        roles=CITIZEN_ONLY,
        role_message="Only citizens can create reports (current role: {role})",
    ),
    'update': Rule(clauses=[OWNER, STAFF], verb='update'),
    'change_status': Rule(
        roles=UserRole.STAFF_ROLES,
        role_message="Only officers and admins can change the status of a report",
    ),
    'delete': Rule(clauses=[OWNER, ADMIN], verb='delete'),
    'add_update': Rule(clauses=[ADMIN, ASSIGNED_OFFICER, OWNER], verb='update'),
    'upload_photo': Rule(clauses=[OWNER, STAFF], verb='upload photos to'),
    'cancel': Rule(roles=CITIZEN_ONLY, clauses=[OWNER], verb='cancel'),
    'acknowledge': Rule(roles=CITIZEN_ONLY, clauses=[OWNER], verb='acknowledge'),
    'close': Rule(roles=CITIZEN_ONLY, clauses=[OWNER], verb='close'),
    'feedback': Rule(roles=CITIZEN_ONLY, clauses=[OWNER], verb='add feedback to'),
    'view_timeline': Rule(),
    'user_reports': Rule(),
    'assigned_reports': Rule(roles=[UserRole.OFFICER]),
    'analytics': Rule(roles=[UserRole.ADMIN]),
    'dashboard_stats': Rule(roles=[UserRole.ADMIN]),
}


def check_role(action, actor):
    rule = POLICY[action]
    if rule.roles is not None and actor.role not in rule.roles:
        raise rule.role_error(actor)


def check_object(action, actor, report):
    rule = POLICY[action]
    if rule.clauses is None:
        return
    if not any(CLAUSES[clause](actor, report) for clause in rule.clauses):
        raise rule.object_error()


def authorize(action, actor, report=None):
    """Raise ForbiddenError/UnauthorizedError unless ``actor`` may do ``action``."""
    check_role(action, actor)
    if report is not None:
        check_object(action, actor, report)


class ReportPolicy(IsAuthenticated):
    """
    DRF permission evaluating POLICY for the view's action.

    Views set ``policy_action`` or a per-method ``policy_actions`` dict.
    """

    def has_permission(self, request, view):
        if not super().has_permission(request, view):
            return False
        action = self._action(request, view)
        if action:
            check_role(action, request.user)
        return True

    def has_object_permission(self, request, view, obj):
        action = self._action(request, view)
        if action:
            check_object(action, request.user, obj)
        return True

    @staticmethod
    def _action(request, view):
        actions = getattr(view, 'policy_actions', None)
        if actions:
            return actions.get(request.method)
        return getattr(view, 'policy_action', None)
