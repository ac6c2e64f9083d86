from django.conf import settings
from django.db import models

from core.access.constants import EntityType, Visibility
from core.base.managers import SoftDeleteManager
from core.base.models import AuditMixin, SoftDeleteMixin


class LibraryItem(AuditMixin, SoftDeleteMixin, models.Model):
    """
    A shared resource (document, worksheet, video...) stored externally.

    PRIVATE items stay inside their school. PUBLIC items uploaded by a
    director wait for an administrator's approval before other schools can
    see them; see campus.library.workflow.
    """
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')
    file_name = models.CharField(max_length=255)
    file_url = models.URLField(max_length=1000)
    file_size = models.PositiveBigIntegerField(help_text="Size in bytes")
    mime_type = models.CharField(max_length=100)

    visibility = models.CharField(
        max_length=10,
        choices=Visibility.choices,
        default=Visibility.PRIVATE,
        db_index=True
    )
    is_approved = models.BooleanField(default=False, db_index=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='approved_library_items'
    )

    # Empty for administrator uploads
    school = models.ForeignKey(
        'schools.School',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='library_items'
    )

    objects = SoftDeleteManager()

    audit_entity_type = EntityType.LIBRARY_ITEM
    search_fields = ('title', 'description', 'file_name')

    class Meta:
        db_table = 'library_items'
        ordering = ['-created_at']

    def __str__(self):
        return self.title

    @property
    def audit_label(self):
        return self.title
