from django.core.serializers.json import DjangoJSONEncoder
from django.core.validators import MinLengthValidator, RegexValidator
from django.db import models

from core.access.constants import EntityType
from core.base.managers import SoftDeleteManager
from core.base.models import AuditMixin, SoftDeleteMixin


class ViolenceType(models.TextChoices):
    PHYSICAL = 'PHYSICAL', 'Physical'
    VERBAL = 'VERBAL', 'Verbal'
    PSYCHOLOGICAL = 'PSYCHOLOGICAL', 'Psychological'
    SEXUAL = 'SEXUAL', 'Sexual'
    CYBERBULLYING = 'CYBERBULLYING', 'Cyberbullying'
    DISCRIMINATION = 'DISCRIMINATION', 'Discrimination'
    PROPERTY_DAMAGE = 'PROPERTY_DAMAGE', 'Property damage'
    OTHER = 'OTHER', 'Other'


class CaseStatus(models.TextChoices):
    OPEN = 'OPEN', 'Open'
    IN_PROGRESS = 'IN_PROGRESS', 'In progress'
    UNDER_REVIEW = 'UNDER_REVIEW', 'Under review'
    RESOLVED = 'RESOLVED', 'Resolved'
    CLOSED = 'CLOSED', 'Closed'
    ARCHIVED = 'ARCHIVED', 'Archived'


class CasePriority(models.TextChoices):
    LOW = 'LOW', 'Low'
    MEDIUM = 'MEDIUM', 'Medium'
    HIGH = 'HIGH', 'High'
    URGENT = 'URGENT', 'Urgent'


class IncidentLocation(models.TextChoices):
    CLASSROOM = 'CLASSROOM', 'Classroom'
    HALLWAY = 'HALLWAY', 'Hallway'
    BATHROOM = 'BATHROOM', 'Bathroom'
    PLAYGROUND = 'PLAYGROUND', 'Playground'
    CAFETERIA = 'CAFETERIA', 'Cafeteria'
    GYM = 'GYM', 'Gym'
    PARKING = 'PARKING', 'Parking'
    BUS = 'BUS', 'Bus'
    ONLINE = 'ONLINE', 'Online'
    OTHER = 'OTHER', 'Other'


incident_time_validator = RegexValidator(
    regex=r'^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$',
    message="Invalid time format (HH:MM)"
)


class Case(AuditMixin, SoftDeleteMixin, models.Model):
    """
    An incident reported at a school. Always owned by exactly one school,
    which is what scopes access for directors and teachers.
    """
    case_number = models.CharField(max_length=32, unique=True, editable=False)
    incident_date = models.DateField()
    incident_time = models.CharField(max_length=5, validators=[incident_time_validator])
    violence_type = models.CharField(max_length=20, choices=ViolenceType.choices)
    description = models.TextField(validators=[MinLengthValidator(10)])
    location = models.CharField(max_length=20, choices=IncidentLocation.choices)
    custom_location = models.CharField(max_length=255, blank=True, default='')

    victim_is_anonymous = models.BooleanField(default=False)
    victim_name = models.CharField(max_length=255)
    victim_age = models.PositiveSmallIntegerField(null=True, blank=True)
    victim_grade = models.CharField(max_length=50, blank=True, default='')

    aggressor_name = models.CharField(max_length=255)
    aggressor_description = models.TextField(blank=True, default='')
    relationship_to_victim = models.CharField(max_length=100, blank=True, default='')
    witnesses = models.TextField(blank=True, default='')

    # [{"name", "url", "type", "size", "uploaded_at"}]; files live in external storage
    evidence_files = models.JSONField(default=list, blank=True, encoder=DjangoJSONEncoder)

    status = models.CharField(max_length=20, choices=CaseStatus.choices, default=CaseStatus.OPEN, db_index=True)
    priority = models.CharField(max_length=10, choices=CasePriority.choices, default=CasePriority.MEDIUM, db_index=True)

    school = models.ForeignKey(
        'schools.School',
        on_delete=models.PROTECT,
        related_name='cases'
    )

    objects = SoftDeleteManager()

    audit_entity_type = EntityType.CASE
    search_fields = ('case_number', 'victim_name', 'aggressor_name', 'description')

    class Meta:
        db_table = 'cases'
        ordering = ['-created_at']

    def __str__(self):
        return self.case_number

    @property
    def audit_label(self):
        return self.case_number
