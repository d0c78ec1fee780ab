"""
Report status machine.

All status changes go through ReportLifecycle. Each transition runs in a
transaction with the report row locked, and writes the new status and
its timeline entry together:

    Pending            --cancel-->       Cancelled   (owner)
    any but Closed/Cancelled --close-->  Closed      (owner)
    Resolved           --acknowledge-->  Closed      (owner)
    any                --update-->       any         (officer/admin)

Entering Resolved stamps ``resolved_at`` once; entering Closed stamps
``closed_at``. Who may call what is decided in reports.policies.
"""

import logging

from django.db import transaction
from django.utils import timezone

from audit.models import AuditLog, AuditEventType
from core.exceptions import BadRequestError, InvalidStateError
from .models import Report, ReportStatus, ReportUpdate

logger = logging.getLogger(__name__)


class ReportLifecycle:
    """
    Applies one actor's actions to one report.

    Usage:
        report = ReportLifecycle(report, request.user, request).cancel()
    """

    def __init__(self, report, actor, request=None):
        self.report = report
        self.actor = actor
        self.request = request

    # =========================================================================
    # CITIZEN ACTIONS
    # =========================================================================

    def submit(self):
        """Record the initial timeline entry of a freshly created report."""
        with transaction.atomic():
            report = self._lock()
            self._append_update(report, "Report submitted by citizen", report.status)
        self._audit(AuditEventType.REPORT_CREATED, "Report submitted")
        return report

    def cancel(self):
        with transaction.atomic():
            report = self._lock()
            if report.status != ReportStatus.PENDING:
                raise InvalidStateError("Only reports with 'Pending' status can be cancelled")
            self._transition(report, ReportStatus.CANCELLED, "Report cancelled by citizen")
        self._audit(AuditEventType.REPORT_CANCELLED, "Report cancelled by citizen")
        return report

    def acknowledge(self):
        with transaction.atomic():
            report = self._lock()
            if report.status != ReportStatus.RESOLVED:
                raise InvalidStateError("Only reports with 'Resolved' status can be acknowledged")
            self._transition(
                report,
                ReportStatus.CLOSED,
                "Resolution acknowledged by citizen. Report closed.",
            )
        self._audit(AuditEventType.REPORT_CLOSED, "Resolution acknowledged")
        return report

    def close(self):
        with transaction.atomic():
            report = self._lock()
            if report.status in ReportStatus.NOT_CLOSABLE:
                raise InvalidStateError(
                    f"Cannot close a report that is already {report.status.lower()}"
                )
            self._transition(report, ReportStatus.CLOSED, "Report closed by citizen")
        self._audit(AuditEventType.REPORT_CLOSED, "Report closed by citizen")
        return report

    def leave_feedback(self, rating, comment=''):
        with transaction.atomic():
            report = self._lock()
            if report.status != ReportStatus.RESOLVED:
                raise InvalidStateError("Can only add feedback to resolved reports")
            report.feedback_rating = rating
            report.feedback_comment = comment or ''
            report.feedback_submitted_at = timezone.now()
            report.save(update_fields=[
                'feedback_rating', 'feedback_comment', 'feedback_submitted_at', 'updated_at',
            ])
        self._audit(AuditEventType.REPORT_FEEDBACK, "Feedback submitted", {'rating': rating})
        return report

    # =========================================================================
    # STAFF ACTIONS
    # =========================================================================

    def change_status(self, status, message=None):
        """
        Move the report to any status. A no-op when the status is unchanged.
        """
        self._check_status(status)
        with transaction.atomic():
            report = self._lock()
            previous = report.status
            if status == previous:
                return report
            self._transition(report, status, message or f"Status changed to {status}")
        self._audit(
            AuditEventType.REPORT_STATUS_CHANGED,
            f"Status changed from {previous} to {status}",
            {'from': previous, 'to': status},
        )
        return report

    def add_update(self, message, status=None):
        """
        Append a timeline entry, optionally moving the report to ``status``.
        """
        if not message or not str(message).strip():
            raise BadRequestError("Please provide an update message")
        if status:
            self._check_status(status)

        with transaction.atomic():
            report = self._lock()
            previous = report.status
            if status and status != previous:
                self._transition(report, status, message)
            else:
                self._append_update(report, message, report.status)
        self._audit(
            AuditEventType.REPORT_UPDATED,
            "Update added",
            {'from': previous, 'to': report.status},
        )
        return report

    # =========================================================================
    # PHOTOS
    # =========================================================================

    def attach_photos(self, urls):
        """Append stored photo URL paths to the report."""
        with transaction.atomic():
            report = self._lock()
            report.photos = list(report.photos or []) + list(urls)
            report.save(update_fields=['photos', 'updated_at'])
        self._audit(AuditEventType.REPORT_PHOTO_UPLOADED, "Photos attached", {'photos': list(urls)})
        return report

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _lock(self):
        self.report = Report.objects.select_for_update().get(pk=self.report.pk)
        return self.report

    @staticmethod
    def _check_status(status):
        if status not in ReportStatus.VALUES:
            raise BadRequestError(f"Invalid status: {status}")

    def _transition(self, report, status, message):
        now = timezone.now()
        report.status = status
        if status == ReportStatus.RESOLVED and report.resolved_at is None:
            report.resolved_at = now
        if status == ReportStatus.CLOSED:
            report.closed_at = now
        report.save(update_fields=['status', 'resolved_at', 'closed_at', 'updated_at'])
        self._append_update(report, message, status)

    def _append_update(self, report, message, status):
        last = report.updates.order_by('-sequence').first()
        timestamp = timezone.now()
        # Clock skew between workers must not reorder the timeline
        if last is not None and last.timestamp > timestamp:
            timestamp = last.timestamp
        return ReportUpdate.objects.create(
            report=report,
            sequence=last.sequence + 1 if last else 1,
            message=message,
            status=status,
            updated_by=self.actor,
            timestamp=timestamp,
        )

    def _audit(self, event_type, description, metadata=None):
        logger.info(f"Report {self.report.pk}: {description} by {self.actor.pk}")
        AuditLog.log(
            event_type=event_type,
            actor=self.actor,
            target=self.report,
            request=self.request,
            description=description,
            metadata=metadata,
        )
