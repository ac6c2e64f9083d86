"""
Scope Resolver.

Only answers "does the actor belong to the entity's school". Callers must
consult the role model first: administrators carry no school, so they are
never in scope through this function and would be denied by accident.
"""


def school_of(entity):
    """School id an entity is owned by, or None for unscoped entities."""
    return getattr(entity, 'school_id', None)


def in_same_scope(actor, entity) -> bool:
    """True iff the actor has a school and it equals the entity's school."""
    actor_school = getattr(actor, 'school_id', None)
    if actor_school is None:
        return False
    return actor_school == school_of(entity)
