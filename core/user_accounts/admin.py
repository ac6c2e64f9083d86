from django.contrib import admin
from .models import CustomUser


@admin.register(CustomUser)
class CustomUserAdmin(admin.ModelAdmin):
    """Admin configuration for CustomUser model"""
    list_display = ['email', 'name', 'role', 'school', 'is_deleted']
    list_filter = ['role', 'school', 'is_deleted']
    search_fields = ['email', 'name', 'phone_number']
    readonly_fields = ['last_login', 'created_at', 'updated_at', 'deleted_at', 'deleted_by']

    fieldsets = (
        ('User Information', {
            'fields': ('email', 'name', 'phone_number', 'department', 'biography', 'pfp_url')
        }),
        ('Role & School', {
            'fields': ('role', 'school')
        }),
        ('Authentication', {
            'fields': ('password', 'last_login', 'force_password_change')
        }),
        ('Status', {
            'fields': ('is_deleted', 'deleted_at', 'deleted_by', 'created_at', 'updated_at')
        }),
    )

    def get_readonly_fields(self, request, obj=None):
        """Role and school changes go through the API so they are evaluated and audited"""
        readonly = list(self.readonly_fields)
        if obj is not None:
            readonly.extend(['role', 'school', 'email'])
        return readonly
