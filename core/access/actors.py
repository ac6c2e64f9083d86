"""
Actor snapshot and decision types consumed and produced by the evaluator.
"""
from dataclasses import dataclass
from typing import Optional

from .exceptions import AuthorizationDenied


@dataclass(frozen=True)
class Actor:
    """
    The authenticated caller as the access core sees it.

    Built from the request user once per request so that every rule
    evaluated during that request looks at the same role and school.
    """
    id: int
    role: str
    school_id: Optional[int] = None

    @classmethod
    def from_user(cls, user) -> 'Actor':
        return cls(id=user.pk, role=user.role, school_id=user.school_id)

    def is_self(self, target) -> bool:
        if target is None:
            return False
        return getattr(target, 'pk', getattr(target, 'id', None)) == self.id


@dataclass(frozen=True)
class Decision:
    """
    Outcome of a permission check.

    Truthy when allowed. A denied decision always carries a reason that can
    be shown to the end user as is.
    """
    allowed: bool
    reason: str = ''
    code: str = ''

    def __bool__(self):
        return self.allowed

    def raise_if_denied(self):
        if not self.allowed:
            raise AuthorizationDenied(self.reason, code=self.code or None)
        return self


ALLOW = Decision(True)


def deny(reason: str, code: str = 'authorization_denied') -> Decision:
    return Decision(False, reason, code)
