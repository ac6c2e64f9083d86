"""
Role Model.

Each role is a named capability set rather than a rung on a privilege
ladder: DIRECTOR and PROFESOR are confined to one school, so they are not
simply "less than" ADMIN. Every call site asks this module instead of
comparing role strings ad hoc.
"""
from dataclasses import dataclass
from typing import FrozenSet

from django.core.exceptions import ImproperlyConfigured
from django.db import models


class Role(models.TextChoices):
    """Persisted role vocabulary. Values must stay stable."""
    SUPER_ADMIN = 'SUPER_ADMIN', 'Super Admin'
    ADMIN = 'ADMIN', 'Admin'
    DIRECTOR = 'DIRECTOR', 'Director'
    PROFESOR = 'PROFESOR', 'Profesor'
    USER = 'USER', 'User'


class CaseScope(models.TextChoices):
    ALL = 'all', 'All schools'
    OWN_SCHOOL = 'own-school', 'Own school only'
    NONE = 'none', 'No access'


ADMIN_ROLES = frozenset({Role.SUPER_ADMIN, Role.ADMIN})
SCHOOL_SCOPED_ROLES = frozenset({Role.DIRECTOR, Role.PROFESOR})
NON_ADMIN_ROLES = frozenset({Role.DIRECTOR, Role.PROFESOR, Role.USER})


@dataclass(frozen=True)
class Capabilities:
    """Immutable capability descriptor for one role."""
    can_manage_users: FrozenSet[str]
    can_manage_schools: bool
    can_manage_cases: str
    can_upload_library: bool
    auto_approves: bool


_CAPABILITIES = {
    Role.SUPER_ADMIN: Capabilities(
        can_manage_users=frozenset(Role.values),
        can_manage_schools=True,
        can_manage_cases=CaseScope.ALL,
        can_upload_library=True,
        auto_approves=True,
    ),
    Role.ADMIN: Capabilities(
        can_manage_users=NON_ADMIN_ROLES,
        can_manage_schools=True,
        can_manage_cases=CaseScope.ALL,
        can_upload_library=True,
        auto_approves=True,
    ),
    Role.DIRECTOR: Capabilities(
        can_manage_users=frozenset({Role.PROFESOR}),
        can_manage_schools=False,
        can_manage_cases=CaseScope.OWN_SCHOOL,
        can_upload_library=True,
        auto_approves=False,
    ),
    Role.PROFESOR: Capabilities(
        can_manage_users=frozenset(),
        can_manage_schools=False,
        can_manage_cases=CaseScope.OWN_SCHOOL,
        can_upload_library=False,
        auto_approves=False,
    ),
    Role.USER: Capabilities(
        can_manage_users=frozenset(),
        can_manage_schools=False,
        can_manage_cases=CaseScope.NONE,
        can_upload_library=False,
        auto_approves=False,
    ),
}


def capabilities_for(role) -> Capabilities:
    """
    Return the capability descriptor for a role.

    Raises:
        ImproperlyConfigured: the role is not part of the vocabulary. A stored
            actor with an unknown role is a configuration error, not a deny.
    """
    try:
        return _CAPABILITIES[Role(role)]
    except ValueError:
        raise ImproperlyConfigured(f"Unknown role: {role!r}")


def is_super_admin(role) -> bool:
    return role == Role.SUPER_ADMIN


def is_admin(role) -> bool:
    """ADMIN or SUPER_ADMIN."""
    return role in ADMIN_ROLES


def is_director(role) -> bool:
    return role == Role.DIRECTOR


def is_profesor(role) -> bool:
    return role == Role.PROFESOR


def is_school_scoped(role) -> bool:
    """DIRECTOR and PROFESOR are confined to exactly one school."""
    return role in SCHOOL_SCOPED_ROLES


def can_manage_role(manager_role, target_role) -> bool:
    """Whether ``manager_role`` may create/modify/delete accounts of ``target_role``."""
    return target_role in capabilities_for(manager_role).can_manage_users
