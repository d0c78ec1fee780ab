"""
Admin configuration for the organization catalogue.
"""

from django.contrib import admin

from .models import Category, Department, Region


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ['name', 'head_officer', 'headquarters', 'officers_count', 'status', 'created_at']
    list_filter = ['status']
    search_fields = ['name', 'head_officer', 'contact_email']
    readonly_fields = ['id', 'created_at', 'updated_at', 'deleted_at']


@admin.register(Region)
class RegionAdmin(admin.ModelAdmin):
    list_display = ['name', 'type', 'population', 'area', 'status']
    list_filter = ['type', 'status']
    search_fields = ['name']
    readonly_fields = ['id', 'created_at', 'updated_at', 'deleted_at']


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'status', 'created_at']
    list_filter = ['status']
    search_fields = ['name', 'description']
    readonly_fields = ['id', 'created_at', 'updated_at', 'deleted_at']
