"""
Core Base Module

Provides shared base classes, mixins, and utilities for all SafeSchool apps.

**Architecture:**
Each feature is a separate mixin that can be composed together.

Exports:
    Individual Feature Mixins:
        - AuditMixin: Adds created_at, updated_at, created_by
        - SoftDeleteMixin: Adds is_deleted, deleted_at, deleted_by + soft delete behavior

    Managers & QuerySets:
        - BaseQuerySet: Base queryset with search()
        - SoftDeleteQuerySet: QuerySet with an active() filter
        - SoftDeleteManager: Manager for SoftDeleteMixin models

Usage Examples:

    from core.base import AuditMixin, SoftDeleteMixin
    from core.base.managers import SoftDeleteManager

    class Case(AuditMixin, SoftDeleteMixin, models.Model):
        description = models.TextField()
        objects = SoftDeleteManager()
"""

# Import from local modules
from core.base.models import (
    AuditMixin,
    SoftDeleteMixin,
)

from core.base.managers import (
    BaseQuerySet,
    SoftDeleteQuerySet,
    SoftDeleteManager,
)

__all__ = [
    # Individual Feature Mixins
    'AuditMixin',
    'SoftDeleteMixin',

    # Managers & QuerySets
    'BaseQuerySet',
    'SoftDeleteQuerySet',
    'SoftDeleteManager',
]
