from django.core.validators import RegexValidator
from django.db import models
from django.db.models import Q

from core.access.constants import EntityType
from core.base.managers import SoftDeleteManager
from core.base.models import AuditMixin, SoftDeleteMixin


class SchoolType(models.TextChoices):
    PUBLIC = 'PUBLIC', 'Public'
    PRIVATE = 'PRIVATE', 'Private'
    SUBSIDIZED = 'SUBSIDIZED', 'Subsidized'


school_code_validator = RegexValidator(
    regex=r'^[A-Z0-9-]+$',
    message="Code may only contain uppercase letters, digits and hyphens"
)


class School(AuditMixin, SoftDeleteMixin, models.Model):
    """
    A school. The unit of scope for directors and teachers: cases, library
    items and accounts all hang off one.
    """
    name = models.CharField(max_length=200)
    code = models.CharField(max_length=20, validators=[school_code_validator])
    type = models.CharField(max_length=20, choices=SchoolType.choices)
    address = models.CharField(max_length=255, blank=True, default='')
    district = models.CharField(max_length=100, blank=True, default='')
    phone = models.CharField(max_length=20, blank=True, default='')
    email = models.EmailField(blank=True, default='')

    objects = SoftDeleteManager()

    audit_entity_type = EntityType.SCHOOL
    search_fields = ('name', 'code', 'district')

    class Meta:
        db_table = 'schools'
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(
                fields=['code'],
                condition=Q(is_deleted=False),
                name='unique_active_school_code',
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.code})"

    @property
    def audit_label(self):
        return self.name
