"""
Audit models for CivicPulse Backend.

Append-only record of sensitive actions:
- Authentication (login, registration, password changes)
- Account administration
- Report lifecycle (creation, status changes, deletion, feedback)
- Catalogue changes (departments, regions, categories)

Rows are never updated or deleted.
"""

import uuid
from django.db import models
from django.utils import timezone

from core.exceptions import get_client_ip


class AuditEventType:
    """
    Audit event type constants.
    Categorized by module for easier filtering.
    """

    # Authentication events
    AUTH_REGISTERED = 'auth.registered'
    AUTH_LOGIN_SUCCESS = 'auth.login.success'
    AUTH_LOGIN_FAILED = 'auth.login.failed'
    AUTH_LOGOUT = 'auth.logout'
    AUTH_PASSWORD_CHANGED = 'auth.password.changed'

    # User management events
    USER_CREATED = 'user.created'
    USER_UPDATED = 'user.updated'
    USER_ROLE_CHANGED = 'user.role.changed'
    USER_DELETED = 'user.deleted'

    # Report events
    REPORT_CREATED = 'report.created'
    REPORT_UPDATED = 'report.updated'
    REPORT_STATUS_CHANGED = 'report.status.changed'
    REPORT_CANCELLED = 'report.cancelled'
    REPORT_CLOSED = 'report.closed'
    REPORT_FEEDBACK = 'report.feedback'
    REPORT_PHOTO_UPLOADED = 'report.photo.uploaded'
    REPORT_DELETED = 'report.deleted'

    # Organization catalogue events
    CATALOGUE_CREATED = 'catalogue.created'
    CATALOGUE_UPDATED = 'catalogue.updated'
    CATALOGUE_DELETED = 'catalogue.deleted'

    CHOICES = [
        (AUTH_REGISTERED, 'Registered'),
        (AUTH_LOGIN_SUCCESS, 'Login Success'),
        (AUTH_LOGIN_FAILED, 'Login Failed'),
        (AUTH_LOGOUT, 'Logout'),
        (AUTH_PASSWORD_CHANGED, 'Password Changed'),

        (USER_CREATED, 'User Created'),
        (USER_UPDATED, 'User Updated'),
        (USER_ROLE_CHANGED, 'User Role Changed'),
        (USER_DELETED, 'User Deleted'),

        (REPORT_CREATED, 'Report Created'),
        (REPORT_UPDATED, 'Report Updated'),
        (REPORT_STATUS_CHANGED, 'Report Status Changed'),
        (REPORT_CANCELLED, 'Report Cancelled'),
        (REPORT_CLOSED, 'Report Closed'),
        (REPORT_FEEDBACK, 'Report Feedback'),
        (REPORT_PHOTO_UPLOADED, 'Report Photo Uploaded'),
        (REPORT_DELETED, 'Report Deleted'),

        (CATALOGUE_CREATED, 'Catalogue Entry Created'),
        (CATALOGUE_UPDATED, 'Catalogue Entry Updated'),
        (CATALOGUE_DELETED, 'Catalogue Entry Deleted'),
    ]


class AuditSeverity:
    """Severity levels for audit events."""
    INFO = 'info'
    WARNING = 'warning'
    ERROR = 'error'

    CHOICES = [
        (INFO, 'Info'),
        (WARNING, 'Warning'),
        (ERROR, 'Error'),
    ]


class AuditLogManager(models.Manager):
    """Refuses bulk modification of audit rows."""

    def update(self, *args, **kwargs):
        raise PermissionError("Audit logs are immutable and cannot be updated.")

    def delete(self, *args, **kwargs):
        raise PermissionError("Audit logs are immutable and cannot be deleted.")


class AuditLog(models.Model):
    """
    Immutable audit log entry.

    Actors and targets are stored as plain strings rather than foreign keys
    so an entry outlives whatever it describes.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )

    event_type = models.CharField(
        max_length=50,
        choices=AuditEventType.CHOICES,
        db_index=True
    )

    severity = models.CharField(
        max_length=10,
        choices=AuditSeverity.CHOICES,
        default=AuditSeverity.INFO,
        db_index=True
    )

    timestamp = models.DateTimeField(
        default=timezone.now,
        db_index=True
    )

    # Who
    actor_id = models.CharField(max_length=36, blank=True, db_index=True)
    actor_role = models.CharField(max_length=20, blank=True)
    actor_email = models.CharField(max_length=255, blank=True)

    # What
    target_type = models.CharField(max_length=50, blank=True)
    target_id = models.CharField(max_length=36, blank=True, db_index=True)

    # Request context
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.CharField(max_length=500, blank=True)
    request_method = models.CharField(max_length=10, blank=True)
    request_path = models.CharField(max_length=500, blank=True)

    description = models.TextField(blank=True)
    metadata = models.JSONField(default=dict, blank=True)
    success = models.BooleanField(default=True)

    objects = AuditLogManager()

    class Meta:
        db_table = 'audit_logs'
        verbose_name = 'Audit Log'
        verbose_name_plural = 'Audit Logs'
        ordering = ['-timestamp']
        indexes = [
            models.Index(fields=['event_type', 'timestamp'], name='audit_logs_event_t_6a1c2e_idx'),
            models.Index(fields=['actor_id', 'timestamp'], name='audit_logs_actor_i_3f8b4d_idx'),
            models.Index(fields=['target_id', 'timestamp'], name='audit_logs_target__9d2e7a_idx'),
        ]

    def __str__(self):
        return f"{self.timestamp} | {self.event_type} | {self.actor_email or 'system'}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise PermissionError("Audit logs are immutable and cannot be updated.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise PermissionError("Audit logs are immutable and cannot be deleted.")

    @classmethod
    def log(cls, event_type, actor=None, target=None, request=None,
            success=True, description='', metadata=None, severity=None):
        """
        Create an audit log entry.

        Args:
            event_type: One of AuditEventType constants
            actor: User performing the action (or None for system/anonymous)
            target: Model instance acted upon (optional)
            request: Request the action came from, for IP/method/path
            success: Whether the action succeeded
            description: Human-readable description
            metadata: Additional structured data
            severity: Severity level (derived from success if omitted)
        """
        if severity is None:
            if not success:
                severity = AuditSeverity.WARNING
            else:
                severity = AuditSeverity.INFO

        entry = cls(
            event_type=event_type,
            severity=severity,
            description=description,
            metadata=metadata or {},
            success=success,
        )

        if actor is not None and getattr(actor, 'is_authenticated', False):
            entry.actor_id = str(actor.pk)
            entry.actor_role = getattr(actor, 'role', '')
            entry.actor_email = getattr(actor, 'email', '')

        if target is not None:
            entry.target_type = target.__class__.__name__
            entry.target_id = str(target.pk)

        if request is not None:
            entry.ip_address = get_client_ip(request)
            entry.user_agent = request.META.get('HTTP_USER_AGENT', '')[:500]
            entry.request_method = request.method or ''
            entry.request_path = request.path[:500]

        entry.save()
        return entry
