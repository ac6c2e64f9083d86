from django.contrib import admin

from .models import School


@admin.register(School)
class SchoolAdmin(admin.ModelAdmin):
    """Admin configuration for School model"""
    list_display = ['code', 'name', 'type', 'district', 'is_deleted']
    list_filter = ['type', 'is_deleted']
    search_fields = ['name', 'code', 'district']
    readonly_fields = ['created_at', 'updated_at', 'created_by', 'deleted_at', 'deleted_by']
