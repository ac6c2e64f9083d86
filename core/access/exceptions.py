"""
Exceptions raised by the access core and the services built on it.

Both are expected control flow: the API layer turns them into 4xx
responses and nothing logs them as errors.
"""
from rest_framework import status
from rest_framework.exceptions import APIException


class AuthorizationDenied(APIException):
    """The permission evaluator said no. The detail is safe to show to users."""
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'You do not have permission to perform this action.'
    default_code = 'authorization_denied'


class PreconditionFailed(APIException):
    """
    A business rule blocked the mutation (e.g. a school that still has active
    users). Retrying with different data, not a different actor, can succeed.
    """
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'The operation cannot be performed in the current state.'
    default_code = 'precondition_failed'


class EntityNotFound(PreconditionFailed):
    """Target missing or already soft deleted."""
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found.'
    default_code = 'not_found'
