"""
Admin configuration for CivicPulse accounts.
"""

from django.contrib import admin

from .models import User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ['email', 'name', 'role', 'status', 'department', 'region', 'created_at']
    list_filter = ['role', 'status', 'is_deleted']
    search_fields = ['email', 'name', 'phone']
    readonly_fields = ['id', 'password', 'last_login', 'created_at', 'updated_at', 'deleted_at']
    exclude = ['groups', 'user_permissions']

    def get_queryset(self, request):
        return User.objects.all_with_deleted()
