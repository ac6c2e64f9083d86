"""
Audit Recorder.

Every state-changing service hands its before/after state to this module
once the primary write has committed. Audit writes are best effort: each one
runs in its own savepoint and a failure is logged, never raised, so losing an
entry can neither roll back nor block the mutation it describes.
"""
import json
import logging

from django.core.exceptions import FieldDoesNotExist, ValidationError
from django.core.serializers.json import DjangoJSONEncoder
from django.core.validators import validate_ipv46_address
from django.db import models, transaction

from core.access.constants import EntityType, normalize_entity_type
from core.audit.models import AuditAction, AuditLog

logger = logging.getLogger(__name__)


# ============================================================================
# Diffing
# ============================================================================

def _plain(value):
    """JSON-safe copy of a value; model instances collapse to their pk."""
    if isinstance(value, models.Model):
        value = value.pk
    return json.loads(json.dumps(value, cls=DjangoJSONEncoder))


def _canonical(value) -> str:
    if isinstance(value, models.Model):
        value = value.pk
    return json.dumps(value, cls=DjangoJSONEncoder, sort_keys=True)


def _current_value(instance, field_name):
    try:
        field = instance._meta.get_field(field_name)
    except FieldDoesNotExist:
        return getattr(instance, field_name, None)
    if field.many_to_one or field.one_to_one:
        # Compare foreign keys by id without loading the related row.
        return getattr(instance, field.attname)
    return getattr(instance, field_name)


def compute_changes(instance, patch) -> dict:
    """
    Field-level diff between an instance and an incoming patch.

    Must be called before the patch is applied. Only fields present in
    ``patch`` are compared, and a field is reported only when the canonical
    JSON forms of the old and new value differ.

    Returns:
        dict: ``{field: {"from": old, "to": new}}``, empty when nothing changes
    """
    changes = {}
    for field_name, new_value in patch.items():
        old_value = _current_value(instance, field_name)
        if _canonical(old_value) != _canonical(new_value):
            changes[field_name] = {'from': _plain(old_value), 'to': _plain(new_value)}
    return changes


# ============================================================================
# Request metadata
# ============================================================================

def _client_ip(request):
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        candidate = forwarded.split(',')[0].strip()
    else:
        candidate = request.META.get('HTTP_X_REAL_IP') or request.META.get('REMOTE_ADDR')
    if not candidate:
        return None
    try:
        validate_ipv46_address(candidate)
    except ValidationError:
        return None
    return candidate


def _network_metadata(request):
    if request is None:
        return None, ''
    return _client_ip(request), request.META.get('HTTP_USER_AGENT', '')


# ============================================================================
# Recorder
# ============================================================================

def record(action, entity_type, entity_id, entity_label='', actor_id=None,
           changes=None, metadata=None, description=None, request=None):
    """
    Append one audit entry.

    Args:
        action: AuditAction value
        entity_type: EntityType value ("Profile" is stored as "User")
        entity_id: Primary key of the entity (stored as text)
        entity_label: Human readable label, kept so deleted rows stay legible
        actor_id: Id of the acting user, None for anonymous events
        changes: ``{field: {"from", "to"}}`` for updates
        metadata: Free-form JSON-safe dict
        description: Optional sentence shown in the audit trail
        request: Optional request the IP address and user agent are read from

    Returns:
        AuditLog or None if the write failed
    """
    ip_address, user_agent = _network_metadata(request)
    try:
        with transaction.atomic():
            return AuditLog.objects.create(
                action=action,
                entity_type=normalize_entity_type(entity_type),
                entity_id='' if entity_id is None else str(entity_id),
                entity_label=(entity_label or '')[:255],
                description=description or '',
                user_id=actor_id,
                changes=changes or None,
                metadata=_plain(metadata) if metadata else None,
                ip_address=ip_address,
                user_agent=user_agent,
            )
    except Exception:
        logger.exception(
            f"Failed to write audit entry {action} for {entity_type} {entity_id}"
        )
        return None


def _entity_type_of(instance):
    return getattr(instance, 'audit_entity_type', instance.__class__.__name__)


def _label_of(instance):
    return getattr(instance, 'audit_label', None) or str(instance)


def record_create(instance, actor_id, request=None, metadata=None):
    entity_type = _entity_type_of(instance)
    label = _label_of(instance)
    return record(
        AuditAction.CREATED, entity_type, instance.pk, label, actor_id,
        metadata=metadata,
        description=f"{entity_type} {label} created",
        request=request,
    )


def record_update(instance, changes, actor_id, request=None, metadata=None):
    """Write an UPDATED entry. An empty diff writes nothing and returns None."""
    if not changes:
        return None
    entity_type = _entity_type_of(instance)
    label = _label_of(instance)
    return record(
        AuditAction.UPDATED, entity_type, instance.pk, label, actor_id,
        changes=changes,
        metadata=metadata,
        description=f"{entity_type} {label} updated: {', '.join(sorted(changes))}",
        request=request,
    )


def record_delete(instance, actor_id, request=None, metadata=None):
    entity_type = _entity_type_of(instance)
    label = _label_of(instance)
    return record(
        AuditAction.DELETED, entity_type, instance.pk, label, actor_id,
        metadata=metadata,
        description=f"{entity_type} {label} deleted",
        request=request,
    )


def record_status_change(instance, old_status, new_status, actor_id, request=None):
    """STATUS_CHANGE entry, written next to the generic UPDATED one."""
    if old_status == new_status:
        return None
    label = _label_of(instance)
    return record(
        AuditAction.STATUS_CHANGE, _entity_type_of(instance), instance.pk, label, actor_id,
        changes={'status': {'from': old_status, 'to': new_status}},
        description=f"{label} moved from {old_status} to {new_status}",
        request=request,
    )


def record_approval(instance, actor_id, request=None):
    label = _label_of(instance)
    return record(
        AuditAction.APPROVED, _entity_type_of(instance), instance.pk, label, actor_id,
        changes={'is_approved': {'from': False, 'to': True}},
        description=f"{label} approved for all schools",
        request=request,
    )


# ============================================================================
# Session events
# ============================================================================

def record_login(user, request=None, email=None, success=True):
    """LOGIN for a successful sign-in, LOGIN_FAILED otherwise (user may be None)."""
    if success:
        return record(
            AuditAction.LOGIN, EntityType.USER, user.pk, user.email, user.pk,
            description=f"{user.email} signed in",
            request=request,
        )
    return record(
        AuditAction.LOGIN_FAILED, EntityType.USER,
        getattr(user, 'pk', None), email or getattr(user, 'email', ''), None,
        metadata={'email': email},
        description=f"Failed sign-in for {email}",
        request=request,
    )


def record_logout(user, request=None):
    return record(
        AuditAction.LOGOUT, EntityType.USER, user.pk, user.email, user.pk,
        description=f"{user.email} signed out",
        request=request,
    )


def record_password_change(user, request=None):
    return record(
        AuditAction.PASSWORD_CHANGED, EntityType.USER, user.pk, user.email, user.pk,
        description=f"{user.email} changed their password",
        request=request,
    )


def record_password_reset(target, actor_id, request=None):
    return record(
        AuditAction.PASSWORD_RESET, EntityType.USER, target.pk, target.email, actor_id,
        description=f"Password of {target.email} reset by an administrator",
        request=request,
    )
