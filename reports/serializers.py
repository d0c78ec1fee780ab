"""
Report serializers for CivicPulse Backend.

Contains:
- ReportSerializer: the report document (location, photos, updates and
  feedback nested the way clients read them)
- ReportUpdateSerializer: one timeline entry inside a report
- AddUpdateSerializer / FeedbackSerializer: inputs of the action endpoints
"""

from rest_framework import serializers

from authentication.models import User, UserRole
from core.exceptions import BadRequestError
from core.serializers import LocationField, NamedPrimaryKeyRelatedField, SelectableFieldsMixin
from organization.models import CatalogueStatus, Category, Department, Region
from .models import Report, ReportStatus, ReportUpdate


class ReportUpdateSerializer(serializers.ModelSerializer):
    updatedBy = serializers.PrimaryKeyRelatedField(source='updated_by', read_only=True)

    class Meta:
        model = ReportUpdate
        fields = ['id', 'message', 'status', 'updatedBy', 'timestamp']
        read_only_fields = fields


class ReportSerializer(SelectableFieldsMixin, serializers.ModelSerializer):
    """
    Report representation, also used for create and generic update.

    References are written as ids and read back as ``{"id": .., "name": ..}``.
    ``status`` is applied by the view through the lifecycle, together with
    the optional ``updateMessage`` for the timeline entry.
    """

    category = NamedPrimaryKeyRelatedField(
        queryset=Category.objects.filter(status=CatalogueStatus.ACTIVE)
    )
    location = LocationField()
    citizen = NamedPrimaryKeyRelatedField(read_only=True)
    assignedOfficer = NamedPrimaryKeyRelatedField(
        source='assigned_officer',
        queryset=User.objects.filter(role=UserRole.OFFICER),
        required=False,
        allow_null=True,
    )
    department = NamedPrimaryKeyRelatedField(
        queryset=Department.objects.all(), required=False, allow_null=True
    )
    region = NamedPrimaryKeyRelatedField(
        queryset=Region.objects.all(), required=False, allow_null=True
    )
    updates = ReportUpdateSerializer(many=True, read_only=True)
    feedback = serializers.SerializerMethodField()
    updateMessage = serializers.CharField(write_only=True, required=False, allow_blank=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    resolvedAt = serializers.DateTimeField(source='resolved_at', read_only=True)
    closedAt = serializers.DateTimeField(source='closed_at', read_only=True)

    class Meta:
        model = Report
        fields = [
            'id', 'title', 'description', 'category', 'severity', 'status',
            'location', 'photos', 'citizen', 'assignedOfficer', 'department',
            'region', 'updates', 'feedback', 'updateMessage',
            'createdAt', 'resolvedAt', 'closedAt',
        ]
        read_only_fields = ['id', 'photos']
        extra_kwargs = {
            'status': {'required': False},
        }

    def get_feedback(self, obj):
        if not obj.has_feedback:
            return None
        return {
            'rating': obj.feedback_rating,
            'comment': obj.feedback_comment,
            'submittedAt': serializers.DateTimeField().to_representation(obj.feedback_submitted_at)
            if obj.feedback_submitted_at else None,
        }


class AddUpdateSerializer(serializers.Serializer):
    message = serializers.CharField(max_length=1000)
    status = serializers.ChoiceField(choices=ReportStatus.CHOICES, required=False)


class FeedbackSerializer(serializers.Serializer):
    rating = serializers.IntegerField(required=False, allow_null=True)
    comment = serializers.CharField(required=False, allow_blank=True, max_length=1000)

    def validate(self, attrs):
        rating = attrs.get('rating')
        if rating is None or not 1 <= rating <= 5:
            raise BadRequestError('Please provide a rating between 1 and 5')
        return attrs
