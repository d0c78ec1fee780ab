"""
Admin configuration for reports.

Reports are editable for support work; timeline entries are read-only
since they are immutable history.
"""

from django.contrib import admin

from .models import Report, ReportUpdate


class ReportUpdateInline(admin.TabularInline):
    model = ReportUpdate
    extra = 0
    fields = ['sequence', 'status', 'message', 'updated_by', 'timestamp']
    readonly_fields = fields
    ordering = ['timestamp', 'sequence']

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Report)
class ReportAdmin(admin.ModelAdmin):
    list_display = [
        'short_id', 'title', 'category', 'severity', 'status',
        'citizen', 'assigned_officer', 'created_at',
    ]
    list_filter = ['status', 'severity', 'category', 'department', 'region']
    search_fields = ['title', 'description', 'location_address', 'citizen__email']
    ordering = ['-created_at']
    readonly_fields = [
        'id', 'status', 'photos', 'resolved_at', 'closed_at',
        'feedback_rating', 'feedback_comment', 'feedback_submitted_at',
        'created_at', 'updated_at', 'deleted_at',
    ]
    inlines = [ReportUpdateInline]

    def short_id(self, obj):
        return str(obj.id)[:8]
    short_id.short_description = 'ID'
