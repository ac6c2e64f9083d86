"""
Visibility Filter.

Declarative counterpart of the permission evaluator for list endpoints:
``scope_filter_for`` returns a ``Q`` object that the caller hands to the ORM,
so the database does the narrowing instead of a Python loop.

The soft-delete exclusion is applied in front of every role clause. An actor
that may see nothing gets ``Q(pk__in=[])``, which Django resolves to an empty
result without querying.
"""
from django.db.models import Q

from .constants import EntityType, Visibility, normalize_entity_type
from .roles import CaseScope, capabilities_for, is_admin, is_director, is_school_scoped


NOTHING = Q(pk__in=[])
EVERYTHING = Q()

NOT_DELETED = Q(is_deleted=False)

SOFT_DELETABLE = frozenset({
    EntityType.CASE,
    EntityType.SCHOOL,
    EntityType.USER,
    EntityType.LIBRARY_ITEM,
})


def _case_clause(actor, school_id=None):
    scope = capabilities_for(actor.role).can_manage_cases
    if scope == CaseScope.ALL:
        # Administrators may narrow to one school explicitly.
        return Q(school_id=school_id) if school_id is not None else EVERYTHING
    if scope == CaseScope.OWN_SCHOOL and actor.school_id is not None:
        return Q(school_id=actor.school_id)
    return NOTHING


def _library_clause(actor, school_id=None):
    if is_admin(actor.role):
        return EVERYTHING
    if not is_school_scoped(actor.role) or actor.school_id is None:
        return NOTHING

    public_approved = Q(visibility=Visibility.PUBLIC, is_approved=True)
    if is_director(actor.role):
        return Q(school_id=actor.school_id) | (public_approved & ~Q(school_id=actor.school_id))
    return Q(school_id=actor.school_id, visibility=Visibility.PRIVATE) | public_approved


def _school_clause(actor, school_id=None):
    if is_admin(actor.role):
        return EVERYTHING
    if is_school_scoped(actor.role) and actor.school_id is not None:
        return Q(pk=actor.school_id)
    return NOTHING


def _user_clause(actor, school_id=None):
    if is_admin(actor.role):
        return Q(school_id=school_id) if school_id is not None else EVERYTHING
    return Q(pk=actor.id)


def _audit_log_clause(actor, school_id=None):
    return EVERYTHING if is_admin(actor.role) else NOTHING


_CLAUSES = {
    EntityType.CASE: _case_clause,
    EntityType.LIBRARY_ITEM: _library_clause,
    EntityType.SCHOOL: _school_clause,
    EntityType.USER: _user_clause,
    EntityType.AUDIT_LOG: _audit_log_clause,
}


def scope_filter_for(actor, entity_type, school_id=None) -> Q:
    """
    Build the row predicate for everything ``actor`` may list.

    Args:
        actor: Actor snapshot
        entity_type: EntityType value ("Profile" is accepted for users)
        school_id: Optional explicit narrowing, honoured for administrators
            only. Scoped roles are always pinned to their own school.

    Returns:
        Q: predicate to pass to ``QuerySet.filter``
    """
    entity_type = normalize_entity_type(entity_type)
    build = _CLAUSES.get(entity_type)
    if build is None:
        return NOTHING

    clause = build(actor, school_id)
    if clause is NOTHING:
        return NOTHING
    if entity_type in SOFT_DELETABLE:
        return NOT_DELETED & clause
    return clause


def apply_scope(queryset, actor, entity_type, school_id=None):
    """Restrict ``queryset`` to the rows ``actor`` may see."""
    return queryset.filter(scope_filter_for(actor, entity_type, school_id))
