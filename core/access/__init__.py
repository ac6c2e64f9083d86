"""
Authorization core: role model, scope resolver, permission evaluator and
visibility filter. Nothing in here touches the database.
"""
from .actors import Actor, Decision, ALLOW, deny
from .constants import Action, EntityType, Visibility
from .exceptions import AuthorizationDenied, EntityNotFound, PreconditionFailed
from .filters import apply_scope, scope_filter_for
from .permissions import can
from .roles import Role, capabilities_for

__all__ = [
    'Actor', 'Decision', 'ALLOW', 'deny',
    'Action', 'EntityType', 'Visibility',
    'AuthorizationDenied', 'EntityNotFound', 'PreconditionFailed',
    'apply_scope', 'scope_filter_for',
    'can',
    'Role', 'capabilities_for',
]
