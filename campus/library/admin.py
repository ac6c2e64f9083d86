from django.contrib import admin

from .models import LibraryItem


@admin.register(LibraryItem)
class LibraryItemAdmin(admin.ModelAdmin):
    """Admin configuration for LibraryItem model"""
    list_display = ['title', 'school', 'visibility', 'is_approved', 'created_by', 'is_deleted']
    list_filter = ['visibility', 'is_approved', 'school', 'is_deleted']
    search_fields = ['title', 'file_name']
    readonly_fields = [
        'is_approved', 'approved_at', 'approved_by',
        'created_at', 'updated_at', 'created_by', 'deleted_at', 'deleted_by',
    ]
