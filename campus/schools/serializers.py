from rest_framework import serializers

from .models import School, school_code_validator


class SchoolSerializer(serializers.ModelSerializer):
    """Read serializer for schools"""
    active_user_count = serializers.SerializerMethodField()

    class Meta:
        model = School
        fields = [
            'id', 'name', 'code', 'type', 'address', 'district', 'phone', 'email',
            'active_user_count', 'created_by', 'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_active_user_count(self, obj):
        return obj.users.filter(is_deleted=False).count()


class SchoolWriteSerializer(serializers.ModelSerializer):
    """Input validation for school create and update"""
    # Uniqueness among active schools is checked in validate_code.
    code = serializers.CharField(max_length=20)

    class Meta:
        model = School
        fields = ['name', 'code', 'type', 'address', 'district', 'phone', 'email']

    def validate_code(self, value):
        value = value.strip().upper()
        school_code_validator(value)

        duplicates = School.objects.active().filter(code=value)
        if self.instance is not None:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise serializers.ValidationError("A school with this code already exists")
        return value

    def validate_name(self, value):
        value = value.strip()
        if len(value) < 3:
            raise serializers.ValidationError("Name must be at least 3 characters long")
        return value
