from django.conf import settings
from rest_framework import serializers

from core.access.constants import Visibility
from .models import LibraryItem
from .workflow import state_of


class LibraryItemSerializer(serializers.ModelSerializer):
    """Read serializer for library items"""
    approval_state = serializers.SerializerMethodField()
    school_name = serializers.CharField(source='school.name', read_only=True, default=None)
    created_by_name = serializers.CharField(source='created_by.name', read_only=True, default=None)
    approved_by_name = serializers.CharField(source='approved_by.name', read_only=True, default=None)

    class Meta:
        model = LibraryItem
        fields = [
            'id', 'title', 'description', 'file_name', 'file_url', 'file_size', 'mime_type',
            'visibility', 'is_approved', 'approval_state', 'approved_at',
            'approved_by', 'approved_by_name',
            'school', 'school_name', 'created_by', 'created_by_name',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_approval_state(self, obj):
        return state_of(obj)


class LibraryItemCreateSerializer(serializers.ModelSerializer):
    """Metadata of a file already uploaded to external storage"""
    visibility = serializers.ChoiceField(choices=Visibility.choices, default=Visibility.PRIVATE)

    class Meta:
        model = LibraryItem
        fields = ['title', 'description', 'file_name', 'file_url', 'file_size', 'mime_type', 'visibility']

    def validate_file_size(self, value):
        limit = settings.LIBRARY_MAX_FILE_SIZE
        if value > limit:
            raise serializers.ValidationError(
                f"File is too large. Maximum size is {limit // (1024 * 1024)}MB"
            )
        return value


class LibraryItemUpdateSerializer(serializers.ModelSerializer):
    """Editable fields of an existing item"""
    visibility = serializers.ChoiceField(choices=Visibility.choices, required=False)

    class Meta:
        model = LibraryItem
        fields = ['title', 'description', 'visibility']
