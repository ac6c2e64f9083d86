"""
Core Base Managers Module

Provides custom managers and querysets for base models.

**Architecture:**
- BaseQuerySet: Generic free-text search over a model's search fields
- SoftDeleteQuerySet: For models using SoftDeleteMixin

Exports:
    QuerySets:
        - BaseQuerySet: search()
        - SoftDeleteQuerySet: active()

    Managers:
        - SoftDeleteManager: For SoftDeleteMixin models

Usage:
    from core.base import SoftDeleteMixin
    from core.base.managers import SoftDeleteManager

    class School(SoftDeleteMixin, models.Model):
        search_fields = ('name', 'code', 'district')
        objects = SoftDeleteManager()

    School.objects.active().search('central')
"""

from django.db import models
from django.db.models import Q


class BaseQuerySet(models.QuerySet):
    """
    Base QuerySet with common filtering methods.

    Methods:
        - search: Case-insensitive contains match across the model's
          ``search_fields``
    """

    def search(self, term, fields=None):
        """
        Apply a free-text search across several fields.

        Args:
            term: Search text. Empty or None leaves the queryset untouched.
            fields: Field names to search. Defaults to ``model.search_fields``.

        Returns:
            Filtered QuerySet
        """
        if not term:
            return self

        fields = fields or getattr(self.model, 'search_fields', ())
        condition = Q()
        for field in fields:
            condition |= Q(**{f'{field}__icontains': term})

        return self.filter(condition) if fields else self


class SoftDeleteQuerySet(BaseQuerySet):
    """
    QuerySet for SoftDeleteMixin models.

    Methods:
        - active(): Records that are not soft deleted
    """

    def active(self):
        """Return only records that are not soft deleted."""
        return self.filter(is_deleted=False)


class SoftDeleteManager(models.Manager.from_queryset(SoftDeleteQuerySet)):
    """
    Manager for SoftDeleteMixin models.

    Usage:
        class Case(SoftDeleteMixin, models.Model):
            objects = SoftDeleteManager()

        Case.objects.active()
    """
    pass
