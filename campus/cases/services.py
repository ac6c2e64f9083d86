import logging

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from core.access.constants import Action, EntityType
from core.access.exceptions import EntityNotFound, PreconditionFailed
from core.access.filters import apply_scope
from core.access.permissions import can
from core.access.roles import is_school_scoped
from core.audit import services as audit
from campus.cases.models import Case

logger = logging.getLogger(__name__)

CASE_NUMBER_ATTEMPTS = 3


def next_case_number(year=None) -> str:
    """
    Next number in the yearly sequence, e.g. ``CASE-2024-0007``.

    Soft deleted cases keep their number, so numbers are never reused.
    """
    year = year or timezone.now().year
    prefix = f"{settings.CASE_NUMBER_PREFIX}-{year}-"
    last = (
        Case.objects.filter(case_number__startswith=prefix)
        .order_by('-case_number')
        .values_list('case_number', flat=True)
        .first()
    )
    sequence = int(last.rsplit('-', 1)[1]) + 1 if last else 1
    return f"{prefix}{sequence:04d}"


class CaseService:
    """Service layer for Case business logic"""

    @staticmethod
    def list_cases(actor, school_id=None, search=None, violence_type=None, status=None, priority=None):
        """
        Cases visible to ``actor``. ``school_id`` narrows the list for
        administrators and is ignored for everyone else.
        """
        cases = apply_scope(
            Case.objects.select_related('school', 'created_by'),
            actor,
            EntityType.CASE,
            school_id=school_id,
        )
        if violence_type:
            cases = cases.filter(violence_type=violence_type)
        if status:
            cases = cases.filter(status=status)
        if priority:
            cases = cases.filter(priority=priority)
        return cases.search(search)

    @staticmethod
    def get_case(actor, pk) -> Case:
        case = Case.objects.active().select_related('school', 'created_by').filter(pk=pk).first()
        if case is None:
            raise EntityNotFound("Case not found")
        can(actor, Action.VIEW, EntityType.CASE, case).raise_if_denied()
        return case

    @staticmethod
    def create_case(actor, data, request=None) -> Case:
        """
        Register a case.

        Directors and teachers always file into their own school; a school in
        the payload is ignored for them. Administrators must name one.
        """
        data = dict(data)
        school = data.pop('school', None)
        if is_school_scoped(actor.role):
            school_id = actor.school_id
        else:
            school_id = school.pk if school is not None else None

        can(actor, Action.CREATE, EntityType.CASE, Case(school_id=school_id)).raise_if_denied()

        for attempt in range(1, CASE_NUMBER_ATTEMPTS + 1):
            try:
                with transaction.atomic():
                    case = Case(
                        case_number=next_case_number(),
                        school_id=school_id,
                        created_by_id=actor.id,
                        **data
                    )
                    case.full_clean(exclude=['case_number'])
                    case.save()
                break
            except IntegrityError:
                # Two cases were numbered concurrently; take the next number.
                if attempt == CASE_NUMBER_ATTEMPTS:
                    raise
                logger.warning(f"Case number collision, retrying (attempt {attempt})")

        logger.info(f"Case {case.case_number} created by user {actor.id} in school {school_id}")
        audit.record_create(
            case, actor.id, request=request,
            metadata={
                'violence_type': case.violence_type,
                'school_id': case.school_id,
                'priority': case.priority,
            },
        )
        return case

    @staticmethod
    def update_case(actor, pk, data, request=None) -> Case:
        """
        Apply a patch. A status change is audited twice: once inside the
        generic UPDATED entry and once as its own STATUS_CHANGE entry.
        """
        data = dict(data)
        if 'school' in data:
            raise PreconditionFailed("A case cannot be moved to another school")

        with transaction.atomic():
            case = Case.objects.select_for_update().filter(pk=pk, is_deleted=False).first()
            if case is None:
                raise EntityNotFound("Case not found")

            changes = audit.compute_changes(case, data)
            can(actor, Action.UPDATE, EntityType.CASE, case).raise_if_denied()
            if 'status' in changes:
                can(actor, Action.CHANGE_STATUS, EntityType.CASE, case).raise_if_denied()

            old_status = case.status
            if changes:
                case.update_fields(data)

        audit.record_update(case, changes, actor.id, request=request)
        if 'status' in changes:
            audit.record_status_change(case, old_status, case.status, actor.id, request=request)
        return case

    @staticmethod
    def delete_case(actor, pk, request=None) -> Case:
        with transaction.atomic():
            case = Case.objects.select_for_update().filter(pk=pk, is_deleted=False).first()
            if case is None:
                raise EntityNotFound("Case not found")
            can(actor, Action.DELETE, EntityType.CASE, case).raise_if_denied()
            case.soft_delete(actor.id)

        logger.info(f"Case {case.case_number} deleted by user {actor.id}")
        audit.record_delete(case, actor.id, request=request)
        return case
