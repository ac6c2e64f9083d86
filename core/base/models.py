from django.db import models
from django.conf import settings
from django.utils import timezone


class AuditMixin(models.Model):
    """
    Adds creation and modification metadata.

    Fields:
        - created_at: Timestamp when record was created
        - updated_at: Timestamp when record was last modified
        - created_by: User who created the record (optional)

    Usage:
        class MyModel(AuditMixin):
            name = models.CharField(max_length=100)

    Note: created_by should be set by the service that creates the record.
    Field-level change history lives in core.audit, not on the row itself.
    """
    created_at = models.DateTimeField(
        auto_now_add=True,
        help_text="Timestamp when record was created"
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="Timestamp when record was last modified"
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='%(app_label)s_%(class)s_created',
        help_text="User who created this record"
    )

    class Meta:
        abstract = True


class SoftDeleteMixin(models.Model):
    """
    Mixin for models that support soft deletion.

    Instead of permanently deleting records, they are flagged as deleted
    together with the moment and the user that deleted them. A deleted row
    stays in the table so that audit entries keep pointing at something.

    Fields:
        - is_deleted: Soft delete flag
        - deleted_at: When the record was soft deleted
        - deleted_by: Who soft deleted it

    Methods:
        - soft_delete(user): Flags the record as deleted
        - update_fields(dict): Sets, validates and saves several fields
    """
    is_deleted = models.BooleanField(
        default=False,
        db_index=True,
        help_text="Soft delete flag. Set instead of deleting the row."
    )
    deleted_at = models.DateTimeField(null=True, blank=True)
    deleted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='%(app_label)s_%(class)s_deleted',
        help_text="User who soft deleted this record"
    )

    class Meta:
        abstract = True

    def soft_delete(self, user=None):
        """
        Soft delete: flag the record instead of removing it from the DB.

        Args:
            user: User (or user id) performing the deletion
        """
        self.is_deleted = True
        self.deleted_at = timezone.now()
        self.deleted_by_id = getattr(user, 'pk', user)
        self.save(update_fields=['is_deleted', 'deleted_at', 'deleted_by'])

    def update_fields(self, field_updates: dict):
        """
        Update multiple fields on a SoftDeleteMixin model in one call.

        Args:
            field_updates: Dict of field_name -> new_value for fields to update

        Returns:
            self (for chaining)

        Example:
            school.update_fields({
                'name': 'New Name',
                'district': 'Distrito Norte',
            })
        """
        for field_name, value in field_updates.items():
            setattr(self, field_name, value)
        self.full_clean()
        self.save()
        return self
