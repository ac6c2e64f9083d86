"""
Stable vocabularies shared by the permission evaluator, the visibility
filter and the audit trail. The string values are used as audit-log filter
keys, so they must not change.
"""
from django.db import models


class EntityType(models.TextChoices):
    CASE = 'Case', 'Case'
    SCHOOL = 'School', 'School'
    USER = 'User', 'User'
    LIBRARY_ITEM = 'LibraryItem', 'Library item'
    AUDIT_LOG = 'AuditLog', 'Audit log'


# "Profile" is what the user entity is called on the account screens.
ENTITY_ALIASES = {
    'Profile': EntityType.USER,
}


class Action(models.TextChoices):
    VIEW = 'view', 'View'
    CREATE = 'create', 'Create'
    UPDATE = 'update', 'Update'
    DELETE = 'delete', 'Delete'
    CHANGE_STATUS = 'change_status', 'Change status'
    CHANGE_ROLE = 'change_role', 'Change role'
    ASSIGN_SCHOOL = 'assign_school', 'Assign school'
    APPROVE = 'approve', 'Approve'
    RESET_PASSWORD = 'reset_password', 'Reset password'


class Visibility(models.TextChoices):
    """Library item visibility. PUBLIC items leave their school once approved."""
    PUBLIC = 'PUBLIC', 'Public'
    PRIVATE = 'PRIVATE', 'Private'


def normalize_entity_type(entity_type):
    return ENTITY_ALIASES.get(entity_type, entity_type)
