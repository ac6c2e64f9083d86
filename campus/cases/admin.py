from django.contrib import admin

from .models import Case


@admin.register(Case)
class CaseAdmin(admin.ModelAdmin):
    """Admin configuration for Case model"""
    list_display = ['case_number', 'school', 'violence_type', 'status', 'priority', 'incident_date', 'is_deleted']
    list_filter = ['status', 'priority', 'violence_type', 'school', 'is_deleted']
    search_fields = ['case_number', 'victim_name', 'aggressor_name']
    readonly_fields = ['case_number', 'created_at', 'updated_at', 'created_by', 'deleted_at', 'deleted_by']
