"""
Report models for CivicPulse Backend.

Contains:
- ReportStatus / ReportSeverity constants
- Report: a citizen-submitted municipal issue
- ReportUpdate: append-only timeline entry (one per status transition)
"""

import uuid

from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

from core.models import BaseModel


class ReportStatus:
    """Report lifecycle status constants."""
    PENDING = 'Pending'
    ASSIGNED = 'Assigned'
    IN_PROGRESS = 'In Progress'
    RESOLVED = 'Resolved'
    CLOSED = 'Closed'
    REJECTED = 'Rejected'
    CANCELLED = 'Cancelled'

    CHOICES = [
        (PENDING, 'Pending'),
        (ASSIGNED, 'Assigned'),
        (IN_PROGRESS, 'In Progress'),
        (RESOLVED, 'Resolved'),
        (CLOSED, 'Closed'),
        (REJECTED, 'Rejected'),
        (CANCELLED, 'Cancelled'),
    ]

    VALUES = [value for value, _ in CHOICES]

    # A citizen cannot close a report from these
    NOT_CLOSABLE = [CLOSED, CANCELLED]


class ReportSeverity:
    LOW = 'Low'
    MEDIUM = 'Medium'
    HIGH = 'High'
    CRITICAL = 'Critical'

    CHOICES = [
        (LOW, 'Low'),
        (MEDIUM, 'Medium'),
        (HIGH, 'High'),
        (CRITICAL, 'Critical'),
    ]


def empty_photo_list():
    return []


class Report(BaseModel):
    """
    A municipal issue filed by a citizen.

    ``status`` only changes through reports.lifecycle.ReportLifecycle,
    which appends the matching ReportUpdate in the same transaction.
    """

    # =========================================================================
    # CONTENT
    # =========================================================================

    title = models.CharField(
        max_length=100,
        help_text="Short summary of the issue"
    )

    description = models.TextField(
        max_length=1000
    )

    category = models.ForeignKey(
        'organization.Category',
        on_delete=models.PROTECT,
        related_name='reports'
    )

    severity = models.CharField(
        max_length=10,
        choices=ReportSeverity.CHOICES,
        default=ReportSeverity.MEDIUM,
        db_index=True
    )

    status = models.CharField(
        max_length=20,
        choices=ReportStatus.CHOICES,
        default=ReportStatus.PENDING,
        db_index=True
    )

    # =========================================================================
    # LOCATION
    # =========================================================================

    location_address = models.CharField(
        max_length=255,
        help_text="Human-readable address"
    )

    latitude = models.FloatField(
        validators=[MinValueValidator(-90), MaxValueValidator(90)]
    )

    longitude = models.FloatField(
        validators=[MinValueValidator(-180), MaxValueValidator(180)]
    )

    photos = models.JSONField(
        default=empty_photo_list,
        blank=True,
        help_text="URL paths of uploaded photos (/uploads/<file>)"
    )

    # =========================================================================
    # PEOPLE & ORGANIZATION
    # =========================================================================

    citizen = models.ForeignKey(
        'authentication.User',
        on_delete=models.PROTECT,
        related_name='reports',
        help_text="Citizen who filed the report"
    )

    assigned_officer = models.ForeignKey(
        'authentication.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assigned_reports'
    )

    department = models.ForeignKey(
        'organization.Department',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reports'
    )

    region = models.ForeignKey(
        'organization.Region',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reports'
    )

    # =========================================================================
    # FEEDBACK
    # =========================================================================

    feedback_rating = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1), MaxValueValidator(5)]
    )

    feedback_comment = models.TextField(
        blank=True
    )

    feedback_submitted_at = models.DateTimeField(
        null=True,
        blank=True
    )

    # =========================================================================
    # LIFECYCLE TIMESTAMPS
    # =========================================================================

    resolved_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="First time the report entered Resolved"
    )

    closed_at = models.DateTimeField(
        null=True,
        blank=True
    )

    class Meta:
        db_table = 'reports'
        verbose_name = 'Report'
        verbose_name_plural = 'Reports'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'created_at'], name='reports_status_created_idx'),
            models.Index(fields=['latitude', 'longitude'], name='reports_lat_lng_idx'),
        ]

    def __str__(self):
        return f"{self.title} ({self.status})"

    @property
    def has_feedback(self):
        return self.feedback_rating is not None


class ReportUpdate(models.Model):
    """
    One entry of a report's timeline.

    Entries are immutable once written. ``status`` is the report's status
    right after the entry; entries are ordered by ``timestamp`` then
    ``sequence``.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )

    report = models.ForeignKey(
        Report,
        on_delete=models.CASCADE,
        related_name='updates'
    )

    sequence = models.PositiveIntegerField(
        help_text="Position within the report's timeline, starting at 1"
    )

    message = models.TextField()

    status = models.CharField(
        max_length=20,
        choices=ReportStatus.CHOICES
    )

    updated_by = models.ForeignKey(
        'authentication.User',
        on_delete=models.PROTECT,
        related_name='report_updates'
    )

    timestamp = models.DateTimeField(
        default=timezone.now,
        db_index=True
    )

    class Meta:
        db_table = 'report_updates'
        verbose_name = 'Report Update'
        verbose_name_plural = 'Report Updates'
        ordering = ['timestamp', 'sequence']
        constraints = [
            models.UniqueConstraint(fields=['report', 'sequence'], name='report_updates_unique_sequence'),
        ]

    def __str__(self):
        return f"{self.report_id} #{self.sequence}: {self.status}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("Report updates cannot be modified")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Report updates cannot be deleted")
