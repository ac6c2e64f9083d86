import logging

from django.db import transaction
from django.utils import timezone

from core.access.constants import Action, EntityType, Visibility
from core.access.exceptions import EntityNotFound
from core.access.filters import apply_scope
from core.access.permissions import can
from core.access.roles import is_admin
from core.audit import services as audit
from campus.library import workflow
from campus.library.models import LibraryItem

logger = logging.getLogger(__name__)


def _locked_item(pk) -> LibraryItem:
    item = LibraryItem.objects.select_for_update().filter(pk=pk, is_deleted=False).first()
    if item is None:
        raise EntityNotFound("Item not found")
    return item


class LibraryService:
    """Service layer for the shared library"""

    @staticmethod
    def list_items(actor, search=None, visibility=None, pending_only=False):
        items = apply_scope(
            LibraryItem.objects.select_related('school', 'created_by', 'approved_by'),
            actor,
            EntityType.LIBRARY_ITEM,
        )
        # Filtering by visibility or approval queue is an administrator tool.
        if is_admin(actor.role):
            if visibility:
                items = items.filter(visibility=visibility)
            if pending_only:
                items = items.filter(visibility=Visibility.PUBLIC, is_approved=False)
        return items.search(search)

    @staticmethod
    def get_item(actor, pk) -> LibraryItem:
        item = (
            LibraryItem.objects.active()
            .select_related('school', 'created_by', 'approved_by')
            .filter(pk=pk)
            .first()
        )
        if item is None:
            raise EntityNotFound("Item not found")
        can(actor, Action.VIEW, EntityType.LIBRARY_ITEM, item).raise_if_denied()
        return item

    @staticmethod
    def create_item(actor, data, request=None) -> LibraryItem:
        """
        Register an uploaded file. The item belongs to the uploader's school
        (none for administrators) and starts in the approval state its
        visibility and the uploader's role imply.
        """
        can(actor, Action.CREATE, EntityType.LIBRARY_ITEM).raise_if_denied()

        data = dict(data)
        approval = workflow.initial_approval(data['visibility'], actor, timezone.now())

        with transaction.atomic():
            item = LibraryItem(
                school_id=actor.school_id,
                created_by_id=actor.id,
                **data,
                **approval
            )
            item.full_clean()
            item.save()

        logger.info(
            f"Library item {item.pk} uploaded by user {actor.id} "
            f"({workflow.state_of(item)})"
        )
        audit.record_create(
            item, actor.id, request=request,
            metadata={'visibility': item.visibility, 'is_approved': item.is_approved},
        )
        return item

    @staticmethod
    def update_item(actor, pk, data, request=None) -> LibraryItem:
        """
        Edit title, description or visibility. A visibility change runs
        through the approval workflow; other edits leave approval alone.
        """
        patch = dict(data)
        new_visibility = patch.pop('visibility', None)

        with transaction.atomic():
            item = _locked_item(pk)
            can(actor, Action.UPDATE, EntityType.LIBRARY_ITEM, item).raise_if_denied()

            if new_visibility is not None:
                patch.update(
                    workflow.apply_visibility_change(item, new_visibility, actor, timezone.now())
                )

            changes = audit.compute_changes(item, patch)
            if changes:
                item.update_fields(patch)

        audit.record_update(item, changes, actor.id, request=request)
        return item

    @staticmethod
    def delete_item(actor, pk, request=None) -> LibraryItem:
        with transaction.atomic():
            item = _locked_item(pk)
            can(actor, Action.DELETE, EntityType.LIBRARY_ITEM, item).raise_if_denied()
            item.soft_delete(actor.id)

        logger.info(f"Library item {item.pk} deleted by user {actor.id}")
        audit.record_delete(item, actor.id, request=request)
        return item

    @staticmethod
    def approve_item(actor, pk, request=None) -> LibraryItem:
        with transaction.atomic():
            item = _locked_item(pk)
            can(actor, Action.APPROVE, EntityType.LIBRARY_ITEM, item).raise_if_denied()
            item.update_fields(workflow.approve(item, actor, timezone.now()))

        logger.info(f"Library item {item.pk} approved by user {actor.id}")
        audit.record_approval(item, actor.id, request=request)
        return item
