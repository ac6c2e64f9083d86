"""
User Account Models
The account is both the authenticated actor and the "Profile" entity other
users manage. Role and school affiliation drive every access decision.
"""
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager
from django.core.exceptions import ValidationError
from django.db import models

from core.access.constants import EntityType
from core.access.roles import Role, is_admin, is_school_scoped, is_super_admin
from core.base.managers import SoftDeleteQuerySet
from core.base.models import AuditMixin, SoftDeleteMixin


class CustomUserQuerySet(SoftDeleteQuerySet):

    def assigned_to_school(self, school_id):
        """Active accounts assigned to a school."""
        return self.active().filter(school_id=school_id)


class CustomUserManager(BaseUserManager.from_queryset(CustomUserQuerySet)):
    """
    Custom user manager for CustomUser model.
    Handles user creation with a role and an optional school.
    """

    def create_user(self, email, name, password=None, role=Role.USER, school=None, **extra_fields):
        """
        Create and save a user.

        Args:
            email: User's email address (used for authentication)
            name: User's full name
            password: User's password (will be hashed)
            role: One of core.access.roles.Role
            school: School instance or None (required for DIRECTOR/PROFESOR)
            **extra_fields: Additional fields to set on the user

        Returns:
            CustomUser: The created user instance
        """
        if not email:
            raise ValueError('Email is required')
        if not name:
            raise ValueError('Name is required')

        user = self.model(
            email=self.normalize_email(email),
            name=name,
            role=role,
            school=school,
            **extra_fields
        )
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, name, password=None, **extra_fields):
        """
        Create and save a super admin user.
        Required by Django for the createsuperuser management command.
        """
        return self.create_user(
            email=email,
            name=name,
            password=password,
            role=Role.SUPER_ADMIN,
            **extra_fields
        )


class CustomUser(AuditMixin, SoftDeleteMixin, AbstractBaseUser):
    """Custom user model with email authentication, a role and a school"""
    email = models.EmailField(unique=True, db_index=True)
    name = models.CharField(max_length=255)
    phone_number = models.CharField(max_length=20, blank=True, default='')
    department = models.CharField(max_length=100, blank=True, default='')
    biography = models.TextField(blank=True, default='')
    pfp_url = models.URLField(max_length=500, blank=True, default='')

    role = models.CharField(max_length=20, choices=Role.choices, default=Role.USER, db_index=True)
    school = models.ForeignKey(
        'schools.School',
        on_delete=models.PROTECT,
        related_name='users',
        null=True,
        blank=True,
        help_text="Required for directors and teachers, empty for everyone else"
    )
    force_password_change = models.BooleanField(
        default=False,
        help_text="Set when an administrator resets the password"
    )

    objects = CustomUserManager()

    # Django authentication settings
    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['name']

    audit_entity_type = EntityType.USER
    search_fields = ('name', 'email', 'department')

    class Meta:
        db_table = 'custom_users'
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.email})"

    @property
    def audit_label(self):
        return self.email

    @property
    def is_active(self):
        """Soft deleted accounts cannot authenticate."""
        return not self.is_deleted

    @property
    def is_staff(self):
        return is_admin(self.role)

    def is_super_admin(self):
        return is_super_admin(self.role)

    def is_admin(self):
        """ADMIN or SUPER_ADMIN."""
        return is_admin(self.role)

    def has_perm(self, perm, obj=None):
        return self.is_active and is_super_admin(self.role)

    def has_module_perms(self, app_label):
        return self.is_active and is_super_admin(self.role)

    def clean(self):
        super().clean()
        if is_school_scoped(self.role) and self.school_id is None:
            raise ValidationError({'school': 'A school is required for directors and teachers'})
        if not is_school_scoped(self.role) and self.school_id is not None:
            raise ValidationError({'school': 'Administrators and regular users cannot be assigned to a school'})
