from django.contrib import admin

from .models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    """Read-only view of the audit trail"""
    list_display = ['created_at', 'action', 'entity_type', 'entity_id', 'entity_label', 'user']
    list_filter = ['action', 'entity_type']
    search_fields = ['entity_label', 'description', 'entity_id']
    date_hierarchy = 'created_at'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
