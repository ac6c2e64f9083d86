import logging

from django.db import transaction

from core.access.constants import Action, EntityType
from core.access.exceptions import EntityNotFound, PreconditionFailed
from core.access.filters import apply_scope
from core.access.permissions import can
from core.audit import services as audit
from core.user_accounts.models import CustomUser
from campus.schools.models import School

logger = logging.getLogger(__name__)


class SchoolService:
    """Service layer for School business logic"""

    @staticmethod
    def list_schools(actor, search=None, school_type=None):
        schools = apply_scope(School.objects.all(), actor, EntityType.SCHOOL)
        if school_type:
            schools = schools.filter(type=school_type)
        return schools.search(search)

    @staticmethod
    def get_school(actor, pk) -> School:
        school = School.objects.active().filter(pk=pk).first()
        if school is None:
            raise EntityNotFound("School not found")
        can(actor, Action.VIEW, EntityType.SCHOOL, school).raise_if_denied()
        return school

    @staticmethod
    def create_school(actor, data, request=None) -> School:
        can(actor, Action.CREATE, EntityType.SCHOOL).raise_if_denied()

        with transaction.atomic():
            school = School(created_by_id=actor.id, **data)
            school.full_clean()
            school.save()

        logger.info(f"School {school.code} created by user {actor.id}")
        audit.record_create(school, actor.id, request=request)
        return school

    @staticmethod
    def update_school(actor, pk, data, request=None) -> School:
        with transaction.atomic():
            school = School.objects.select_for_update().filter(pk=pk, is_deleted=False).first()
            if school is None:
                raise EntityNotFound("School not found")
            can(actor, Action.UPDATE, EntityType.SCHOOL, school).raise_if_denied()

            changes = audit.compute_changes(school, data)
            if changes:
                school.update_fields(data)

        audit.record_update(school, changes, actor.id, request=request)
        return school

    @staticmethod
    def delete_school(actor, pk, request=None) -> School:
        """
        Soft delete a school that no active account is assigned to.

        The row is locked and the active-user count taken inside the same
        transaction as the delete. Assigning a user to a school locks the same
        row, so the two cannot interleave.

        Raises:
            AuthorizationDenied: actor is not an administrator
            EntityNotFound: no such school, or already deleted
            PreconditionFailed: active users are still assigned
        """
        with transaction.atomic():
            school = School.objects.select_for_update().filter(pk=pk, is_deleted=False).first()
            if school is None:
                raise EntityNotFound("School not found")
            can(actor, Action.DELETE, EntityType.SCHOOL, school).raise_if_denied()

            active_users = CustomUser.objects.assigned_to_school(school.pk).count()
            if active_users:
                raise PreconditionFailed(
                    f"Cannot delete school {school.name}: it still has "
                    f"{active_users} active user(s) assigned. Reassign or remove them first."
                )
            school.soft_delete(actor.id)

        logger.info(f"School {school.code} deleted by user {actor.id}")
        audit.record_delete(school, actor.id, request=request)
        return school

    @staticmethod
    def lock_active_school(school_id) -> School:
        """
        Lock a school row for an assignment. Must run inside a transaction.

        Raises:
            PreconditionFailed: the school does not exist or is deleted
        """
        school = School.objects.select_for_update().filter(pk=school_id, is_deleted=False).first()
        if school is None:
            raise PreconditionFailed("The selected school does not exist")
        return school
