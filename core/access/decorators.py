"""
Permission decorators for function-based views.

These only answer the coarse "may this actor do this kind of thing at all"
question (the evaluator called with no entity). Per-entity decisions happen
in the services, which have the entity in hand.
"""
from functools import wraps

from rest_framework import status

from core.access.actors import Actor
from core.access.permissions import can
from schoolcases_project.response_formatter import error_response


def require_action(entity_type, action_name=None):
    """
    Decorator to check an entity-type level permission.

    Args:
        entity_type: EntityType value (e.g. EntityType.AUDIT_LOG)
        action_name: The action to check. If None, auto-detects from HTTP method

    Usage:
        @api_view(['GET'])
        @require_action(EntityType.AUDIT_LOG, Action.VIEW)
        def audit_log_list(request):
            ...
    """
    def decorator(view_func):
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            if not request.user.is_authenticated:
                return error_response(
                    message='Authentication required',
                    status_code=status.HTTP_401_UNAUTHORIZED
                )

            determined_action = action_name or _get_action_from_method(request.method)
            decision = can(Actor.from_user(request.user), determined_action, entity_type)

            if not decision:
                return error_response(
                    message=decision.reason,
                    data={
                        'code': decision.code,
                        'required_permission': {
                            'entity_type': str(entity_type),
                            'action': str(determined_action),
                        }
                    },
                    status_code=status.HTTP_403_FORBIDDEN
                )

            return view_func(request, *args, **kwargs)

        wrapper.entity_type = entity_type
        wrapper.action_name = action_name
        return wrapper
    return decorator


def _get_action_from_method(http_method):
    """Map HTTP method to action name"""
    method_action_map = {
        'GET': 'view',
        'POST': 'create',
        'PUT': 'update',
        'PATCH': 'update',
        'DELETE': 'delete',
    }
    return method_action_map.get(http_method, 'view')
