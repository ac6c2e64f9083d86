"""
Permission Evaluator.

One rule function per (entity type, action) pair, registered in a dispatch
table and reached through ``can()``. Rules are pure: they read the actor
snapshot and the entity attributes they are handed and never touch the
database, so every caller has to fetch what the rule needs beforehand.

Every rule checks the role first and the school scope second. Reversing the
order would deny administrators, who carry no school.

Entity attributes read by the rules:
    Case, LibraryItem: school_id, created_by_id, is_deleted
    LibraryItem:       visibility, is_approved
    School:            pk, is_deleted
    User:              pk, role, school_id, is_deleted
"""
from .actors import ALLOW, deny, Decision
from .constants import Action, EntityType, Visibility, normalize_entity_type
from .roles import (
    CaseScope,
    Role,
    can_manage_role,
    capabilities_for,
    is_admin,
    is_director,
    is_school_scoped,
    is_super_admin,
)
from .scope import in_same_scope, school_of


NO_SCHOOL = "You do not have a school assigned"

_RULES = {}


def rule(entity_type, *actions):
    """Register a rule function for one or more actions on an entity type."""
    def register(func):
        for action in actions:
            _RULES[(entity_type, action)] = func
        return func
    return register


def can(actor, action, entity_type, entity=None) -> Decision:
    """
    Decide whether ``actor`` may perform ``action`` on ``entity``.

    Args:
        actor: Actor snapshot (id, role, school_id)
        action: One of core.access.constants.Action
        entity_type: One of core.access.constants.EntityType ("Profile" is
            accepted for users)
        entity: The target. For ``create`` it describes the proposed record
            (role/school_id); None means "may this actor do this at all".

    Returns:
        Decision: ALLOW, or a denial with a user-displayable reason
    """
    evaluate = _RULES.get((normalize_entity_type(entity_type), action))
    if evaluate is None:
        return deny(f"Action '{action}' is not available for {entity_type}")
    return evaluate(actor, entity)


def _is_deleted(entity) -> bool:
    return bool(getattr(entity, 'is_deleted', False))


def _pk(entity):
    return getattr(entity, 'pk', getattr(entity, 'id', None))


# ============================================================================
# Case
# ============================================================================

def _scoped_case_access(actor, case, denied_reason):
    scope = capabilities_for(actor.role).can_manage_cases
    if scope == CaseScope.ALL:
        return ALLOW
    if scope == CaseScope.NONE:
        return deny("You do not have permission to access cases")
    if actor.school_id is None:
        return deny(NO_SCHOOL)
    if case is None:
        return ALLOW
    if _is_deleted(case):
        return deny("Case not found", 'not_found')
    if in_same_scope(actor, case):
        return ALLOW
    return deny(denied_reason)


@rule(EntityType.CASE, Action.VIEW)
def view_case(actor, case):
    return _scoped_case_access(actor, case, "You do not have permission to view this case")


@rule(EntityType.CASE, Action.UPDATE, Action.CHANGE_STATUS)
def update_case(actor, case):
    # A status change is an update as far as access goes.
    return _scoped_case_access(actor, case, "You do not have permission to edit this case")


@rule(EntityType.CASE, Action.CREATE)
def create_case(actor, case):
    scope = capabilities_for(actor.role).can_manage_cases
    if scope == CaseScope.NONE:
        return deny("You do not have permission to create cases")

    if scope == CaseScope.ALL:
        if case is not None and school_of(case) is None:
            return deny("You must specify a school for the case", 'school_required')
        return ALLOW

    if actor.school_id is None:
        return deny(NO_SCHOOL)
    if case is not None and school_of(case) not in (None, actor.school_id):
        return deny("You can only create cases for your own school")
    return ALLOW


@rule(EntityType.CASE, Action.DELETE)
def delete_case(actor, case):
    if is_admin(actor.role):
        return ALLOW
    return deny("Only administrators can delete cases")


# ============================================================================
# School
# ============================================================================

@rule(EntityType.SCHOOL, Action.VIEW)
def view_school(actor, school):
    if is_admin(actor.role):
        return ALLOW
    if not is_school_scoped(actor.role):
        return deny("You do not have permission to view schools")
    if actor.school_id is None:
        return deny(NO_SCHOOL)
    if school is None:
        return ALLOW
    if not _is_deleted(school) and _pk(school) == actor.school_id:
        return ALLOW
    return deny("You do not have permission to view this school")


@rule(EntityType.SCHOOL, Action.CREATE, Action.UPDATE, Action.DELETE)
def manage_school(actor, school):
    if capabilities_for(actor.role).can_manage_schools:
        return ALLOW
    return deny("Only administrators can manage schools")


# ============================================================================
# User / Profile
# ============================================================================

def _manages(actor, target) -> bool:
    """Role-and-scope test shared by user update and delete."""
    if not can_manage_role(actor.role, getattr(target, 'role', None)):
        return False
    if is_school_scoped(actor.role):
        return actor.school_id is not None and in_same_scope(actor, target)
    return True


@rule(EntityType.USER, Action.VIEW)
def view_user(actor, target):
    if target is None or actor.is_self(target):
        return ALLOW
    if is_admin(actor.role):
        return ALLOW
    return deny("You do not have permission to view this profile")


@rule(EntityType.USER, Action.UPDATE)
def update_user(actor, target):
    # Self-updates are limited to non-privileged fields by the caller;
    # role and school changes are evaluated as their own actions.
    if actor.is_self(target):
        return ALLOW
    if target is not None and _manages(actor, target):
        return ALLOW
    return deny("You do not have permission to modify this user")


@rule(EntityType.USER, Action.CHANGE_ROLE)
def change_user_role(actor, target):
    if not is_super_admin(actor.role):
        return deny("Only super administrators can change user roles")
    if actor.is_self(target):
        return deny("You cannot change your own role")
    return ALLOW


@rule(EntityType.USER, Action.ASSIGN_SCHOOL)
def assign_user_school(actor, target):
    # Judged on the target's current role. A role change in the same patch
    # is gated separately by change_role, which only SUPER_ADMIN passes.
    if not is_admin(actor.role):
        return deny("Only administrators can change school assignments")
    if target is not None and not can_manage_role(actor.role, target.role):
        return deny("You do not have permission to modify this user")
    return ALLOW


@rule(EntityType.USER, Action.RESET_PASSWORD)
def reset_user_password(actor, target):
    if actor.is_self(target):
        return deny("Use change password to update your own password")
    if is_super_admin(actor.role):
        return ALLOW
    if is_admin(actor.role):
        if target is not None and target.role == Role.USER:
            return ALLOW
        return deny("Administrators can only reset passwords of regular users")
    return deny("Only administrators can reset passwords")


@rule(EntityType.USER, Action.DELETE)
def delete_user(actor, target):
    if actor.is_self(target):
        return deny("You cannot delete your own account")
    if is_super_admin(actor.role):
        return ALLOW
    if is_admin(actor.role):
        if target is not None and can_manage_role(actor.role, target.role):
            return ALLOW
        return deny("Only super administrators can delete administrator accounts")
    if is_director(actor.role):
        if target is not None and target.role == Role.PROFESOR and _manages(actor, target):
            return ALLOW
        return deny("You can only delete teachers from your own school")
    return deny("You do not have permission to delete users")


@rule(EntityType.USER, Action.CREATE)
def create_user(actor, proposed):
    manageable = capabilities_for(actor.role).can_manage_users
    if not manageable:
        return deny("You do not have permission to create users")
    if proposed is None:
        return ALLOW

    role = getattr(proposed, 'role', None)
    if role not in manageable:
        if is_admin(actor.role):
            return deny("Only super administrators can create administrator accounts")
        return deny(f"You do not have permission to create users with role {role}")

    if is_director(actor.role):
        if actor.school_id is None:
            return deny(NO_SCHOOL)
        if school_of(proposed) not in (None, actor.school_id):
            return deny("You can only create teachers for your own school")

    if is_school_scoped(role) and school_of(proposed) is None:
        return deny("A school is required for directors and teachers", 'school_required')
    return ALLOW


# ============================================================================
# LibraryItem
# ============================================================================

def _is_public_approved(item) -> bool:
    return item.visibility == Visibility.PUBLIC and bool(item.is_approved)


@rule(EntityType.LIBRARY_ITEM, Action.VIEW)
def view_library_item(actor, item):
    if is_admin(actor.role):
        return ALLOW
    if not is_school_scoped(actor.role) or actor.school_id is None:
        return deny("You do not have access to the library")
    if item is None:
        return ALLOW
    if _is_deleted(item):
        return deny("Item not found", 'not_found')

    if is_director(actor.role):
        visible = in_same_scope(actor, item) or _is_public_approved(item)
    else:
        visible = (
            (in_same_scope(actor, item) and item.visibility == Visibility.PRIVATE)
            or _is_public_approved(item)
        )
    if visible:
        return ALLOW
    return deny("You do not have permission to view this item")


@rule(EntityType.LIBRARY_ITEM, Action.CREATE)
def create_library_item(actor, item):
    if not capabilities_for(actor.role).can_upload_library:
        return deny("You do not have permission to upload files")
    if is_director(actor.role) and actor.school_id is None:
        return deny("You must have a school assigned to upload files")
    return ALLOW


@rule(EntityType.LIBRARY_ITEM, Action.UPDATE, Action.DELETE)
def manage_library_item(actor, item):
    if is_admin(actor.role):
        return ALLOW
    # Scope-based, not ownership-based: a director moved to another school
    # loses edit rights over what they uploaded for the old one.
    if (
        is_director(actor.role)
        and item is not None
        and getattr(item, 'created_by_id', None) == actor.id
        and in_same_scope(actor, item)
    ):
        return ALLOW
    return deny("You do not have permission to edit this item")


@rule(EntityType.LIBRARY_ITEM, Action.APPROVE)
def approve_library_item(actor, item):
    if is_admin(actor.role):
        return ALLOW
    return deny("Only administrators can approve library items")


# ============================================================================
# AuditLog
# ============================================================================

@rule(EntityType.AUDIT_LOG, Action.VIEW)
def view_audit_log(actor, entry):
    if is_admin(actor.role):
        return ALLOW
    return deny("You do not have permission to view audit logs")


__all__ = ['can', 'rule', 'Decision']
