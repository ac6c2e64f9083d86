"""
Approval Workflow for library items.

    PRIVATE          no approval needed, visible inside the school only
    PUBLIC_PENDING   public request waiting for an administrator
    PUBLIC_APPROVED  visible to every school

The functions below never save anything. They return the field updates a
transition implies, so the caller can diff and audit them together with the
rest of the patch. There is no reject transition: a pending item stays
pending until approved or made private again.
"""
from django.db import models

from core.access.constants import Visibility
from core.access.exceptions import PreconditionFailed
from core.access.roles import capabilities_for


class ApprovalState(models.TextChoices):
    PRIVATE = 'PRIVATE', 'Private'
    PUBLIC_PENDING = 'PUBLIC_PENDING', 'Pending approval'
    PUBLIC_APPROVED = 'PUBLIC_APPROVED', 'Approved'


def state_of(item) -> ApprovalState:
    if item.visibility == Visibility.PRIVATE:
        return ApprovalState.PRIVATE
    if item.is_approved:
        return ApprovalState.PUBLIC_APPROVED
    return ApprovalState.PUBLIC_PENDING


def _stamp(actor, now):
    return {'is_approved': True, 'approved_by_id': actor.id, 'approved_at': now}


def _cleared():
    return {'is_approved': False, 'approved_by_id': None, 'approved_at': None}


def initial_approval(visibility, creator, now) -> dict:
    """
    Approval fields for a new item.

    PRIVATE items and uploads by auto-approving roles are stamped with the
    creator; a PUBLIC upload by anyone else starts pending.
    """
    if visibility == Visibility.PRIVATE or capabilities_for(creator.role).auto_approves:
        return _stamp(creator, now)
    return _cleared()


def apply_visibility_change(item, new_visibility, editor, now) -> dict:
    """
    Field updates implied by an edit of ``visibility``.

    Going PUBLIC re-enters PUBLIC_PENDING unless the editor auto-approves, in
    which case the item is approved on the spot. Going PRIVATE leaves the
    approval stamp untouched. Returns an empty dict when nothing changes.
    """
    if new_visibility == item.visibility:
        return {}

    updates = {'visibility': new_visibility}
    if new_visibility == Visibility.PUBLIC:
        if capabilities_for(editor.role).auto_approves:
            updates.update(_stamp(editor, now))
        else:
            updates.update(_cleared())
    return updates


def approve(item, approver, now) -> dict:
    """
    PUBLIC_PENDING -> PUBLIC_APPROVED.

    Raises:
        PreconditionFailed: the item is not waiting for approval
    """
    state = state_of(item)
    if state != ApprovalState.PUBLIC_PENDING:
        raise PreconditionFailed(
            f"Only public items pending approval can be approved (item is {state.label.lower()})"
        )
    return _stamp(approver, now)
