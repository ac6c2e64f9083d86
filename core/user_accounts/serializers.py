import re

from django.contrib.auth.password_validation import validate_password
from django.core.validators import RegexValidator
from rest_framework import serializers

from campus.schools.models import School
from core.access.roles import Role
from .models import CustomUser


phone_validator = RegexValidator(
    regex=r'^(\+?\d{1,3})?[-.\s]?\(?\d{1,4}\)?[-.\s]?\d{1,4}[-.\s]?\d{1,9}$',
    message="Enter a valid phone number"
)


def check_password_strength(value):
    """Shared password policy for sign-up, account creation and changes."""
    if len(value) < 8:
        raise serializers.ValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Z]', value):
        raise serializers.ValidationError("Password must contain at least one uppercase letter")

    if not re.search(r'[a-z]', value):
        raise serializers.ValidationError("Password must contain at least one lowercase letter")

    if not re.search(r'\d', value):
        raise serializers.ValidationError("Password must contain at least one number")

    validate_password(value)
    return value


class UserRegistrationSerializer(serializers.ModelSerializer):
    """Serializer for public user registration - always creates a USER"""
    password = serializers.CharField(
        write_only=True,
        required=True,
        style={'input_type': 'password'}
    )
    confirm_password = serializers.CharField(
        write_only=True,
        required=True,
        style={'input_type': 'password'}
    )

    class Meta:
        model = CustomUser
        fields = ['email', 'name', 'phone_number', 'password', 'confirm_password']

    def validate_email(self, value):
        if CustomUser.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("Email already registered")
        return value

    def validate_phone_number(self, value):
        if value:
            phone_validator(value)
        return value

    def validate_password(self, value):
        return check_password_strength(value)

    def validate(self, attrs):
        """Validate that passwords match"""
        if attrs['password'] != attrs.pop('confirm_password'):
            raise serializers.ValidationError({"confirm_password": "Passwords do not match"})
        return attrs


class UserCreateSerializer(serializers.ModelSerializer):
    """
    Input for accounts created by administrators and directors.
    Whether the caller may create this role in this school is decided by the
    permission evaluator, not here.
    """
    password = serializers.CharField(
        write_only=True,
        required=True,
        style={'input_type': 'password'}
    )
    role = serializers.ChoiceField(choices=Role.choices, default=Role.USER)
    school = serializers.PrimaryKeyRelatedField(
        queryset=School.objects.active(),
        required=False,
        allow_null=True
    )

    class Meta:
        model = CustomUser
        fields = ['email', 'name', 'phone_number', 'department', 'password', 'role', 'school']

    def validate_email(self, value):
        if CustomUser.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("Email already registered")
        return value

    def validate_phone_number(self, value):
        if value:
            phone_validator(value)
        return value

    def validate_password(self, value):
        return check_password_strength(value)


class UserUpdateSerializer(serializers.ModelSerializer):
    """
    Patch for another account. Role and school are accepted here and then
    evaluated as their own actions by the service. The email is the login
    identity and is not editable.
    """
    role = serializers.ChoiceField(choices=Role.choices, required=False)
    school = serializers.PrimaryKeyRelatedField(
        queryset=School.objects.active(),
        required=False,
        allow_null=True
    )

    class Meta:
        model = CustomUser
        fields = ['name', 'phone_number', 'department', 'biography', 'pfp_url', 'role', 'school']

    def validate_phone_number(self, value):
        if value:
            phone_validator(value)
        return value


class UserFilterSerializer(serializers.Serializer):
    """Query parameters accepted by the user listing."""
    search = serializers.CharField(required=False)
    role = serializers.ChoiceField(choices=Role.choices, required=False)
    school_id = serializers.IntegerField(required=False)


class UserListSerializer(serializers.ModelSerializer):
    """Serializer for listing users"""
    school_name = serializers.CharField(source='school.name', read_only=True, default=None)

    class Meta:
        model = CustomUser
        fields = [
            'id', 'email', 'name', 'phone_number', 'department', 'role',
            'school', 'school_name', 'created_at',
        ]
        read_only_fields = fields


class UserProfileSerializer(serializers.ModelSerializer):
    """Serializer for users viewing/updating their own profile"""
    school_name = serializers.CharField(source='school.name', read_only=True, default=None)

    class Meta:
        model = CustomUser
        fields = [
            'id', 'email', 'name', 'phone_number', 'department', 'biography',
            'pfp_url', 'role', 'school', 'school_name', 'force_password_change',
        ]
        read_only_fields = ['id', 'email', 'role', 'school', 'school_name', 'force_password_change']

    def validate_phone_number(self, value):
        if value:
            phone_validator(value)
        return value


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField(required=True)
    password = serializers.CharField(required=True, write_only=True)


class LogoutSerializer(serializers.Serializer):
    refresh = serializers.CharField(required=True)


class ChangePasswordSerializer(serializers.Serializer):
    """Serializer for changing password"""
    old_password = serializers.CharField(required=True, write_only=True)
    new_password = serializers.CharField(required=True, write_only=True)
    confirm_password = serializers.CharField(required=True, write_only=True)

    def validate_new_password(self, value):
        return check_password_strength(value)

    def validate(self, attrs):
        """Validate that new passwords match"""
        if attrs['new_password'] != attrs['confirm_password']:
            raise serializers.ValidationError({"confirm_password": "Passwords do not match"})
        return attrs


class PasswordResetSerializer(serializers.Serializer):
    """Temporary password set by an administrator for another account."""
    temporary_password = serializers.CharField(required=True, min_length=8, write_only=True)
