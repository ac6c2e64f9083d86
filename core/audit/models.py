from django.conf import settings
from django.db import models
from django.utils import timezone

from core.base.managers import BaseQuerySet


class AuditAction(models.TextChoices):
    """Action tags. Used as filter keys on the audit trail, keep them stable."""
    CREATED = 'CREATED', 'Created'
    UPDATED = 'UPDATED', 'Updated'
    DELETED = 'DELETED', 'Deleted'
    STATUS_CHANGE = 'STATUS_CHANGE', 'Status change'
    APPROVED = 'APPROVED', 'Approved'
    LOGIN = 'LOGIN', 'Login'
    LOGIN_FAILED = 'LOGIN_FAILED', 'Login failed'
    LOGOUT = 'LOGOUT', 'Logout'
    PASSWORD_CHANGED = 'PASSWORD_CHANGED', 'Password changed'
    PASSWORD_RESET = 'PASSWORD_RESET', 'Password reset'


class AuditLogImmutable(RuntimeError):
    """Raised on any attempt to change or remove a written audit entry."""


class AuditLogQuerySet(BaseQuerySet):
    def update(self, **kwargs):
        raise AuditLogImmutable("Audit log entries cannot be updated")

    def delete(self):
        raise AuditLogImmutable("Audit log entries cannot be deleted")

    def for_entity(self, entity_type, entity_id):
        return self.filter(entity_type=entity_type, entity_id=str(entity_id))


class AuditLog(models.Model):
    """
    Append-only record of a state-changing action.

    ``changes`` maps field name to ``{"from": old, "to": new}`` and only holds
    fields whose values actually differ. ``entity_id`` is stored as text so
    that failed logins (no user row) can still be keyed.
    """
    action = models.CharField(max_length=32, choices=AuditAction.choices, db_index=True)
    entity_type = models.CharField(max_length=50, db_index=True)
    entity_id = models.CharField(max_length=64, blank=True, db_index=True)
    entity_label = models.CharField(max_length=255, blank=True)
    description = models.TextField(blank=True)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_logs',
        help_text="User who performed the action"
    )
    changes = models.JSONField(null=True, blank=True)
    metadata = models.JSONField(null=True, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    search_fields = ('entity_label', 'description')

    objects = AuditLogQuerySet.as_manager()

    class Meta:
        db_table = 'audit_log'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['entity_type', 'entity_id'], name='audit_log_entity_idx'),
        ]

    def __str__(self):
        return f"{self.action} {self.entity_type}:{self.entity_id}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise AuditLogImmutable("Audit log entries cannot be updated")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise AuditLogImmutable("Audit log entries cannot be deleted")
