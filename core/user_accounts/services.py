"""
Account services: user management through the permission evaluator, plus
the session events (login, logout, password changes) that land in the audit
trail.
"""
import logging

from django.contrib.auth import authenticate
from django.db import transaction

from core.access.constants import Action, EntityType
from core.access.exceptions import EntityNotFound, PreconditionFailed
from core.access.filters import apply_scope
from core.access.permissions import can
from core.access.roles import Role, is_school_scoped
from core.audit import services as audit
from core.user_accounts.models import CustomUser
from campus.schools.services import SchoolService

logger = logging.getLogger(__name__)


# Fields an account owner may change on their own profile.
PROFILE_FIELDS = ('name', 'phone_number', 'department', 'biography', 'pfp_url')

SYSTEM_WIDE_SCHOOL = "Administrators and regular users cannot be assigned to a school"


class UserService:
    """Service layer for account management"""

    @staticmethod
    def list_users(actor, search=None, role=None, school_id=None):
        users = apply_scope(
            CustomUser.objects.select_related('school'),
            actor,
            EntityType.USER,
            school_id=school_id,
        )
        if role:
            users = users.filter(role=role)
        return users.search(search)

    @staticmethod
    def find_active(pk) -> CustomUser:
        """Fetch an account that is not soft deleted, without an access check."""
        target = CustomUser.objects.active().select_related('school').filter(pk=pk).first()
        if target is None:
            raise EntityNotFound("User not found")
        return target

    @staticmethod
    def get_user(actor, pk) -> CustomUser:
        target = UserService.find_active(pk)
        can(actor, Action.VIEW, EntityType.USER, target).raise_if_denied()
        return target

    @staticmethod
    def get_editable(actor, pk) -> CustomUser:
        """Fetch an account ``actor`` may edit at all, before the patch is validated."""
        target = UserService.find_active(pk)
        can(actor, Action.UPDATE, EntityType.USER, target).raise_if_denied()
        return target

    @staticmethod
    def create_user(actor, data, request=None) -> CustomUser:
        """
        Create an account on behalf of ``actor``.

        A director's new teachers always land in the director's own school,
        whatever the payload says.
        """
        data = dict(data)
        password = data.pop('password')
        school = data.pop('school', None)
        role = data.pop('role', Role.USER)

        school_id = school.pk if school is not None else None
        if actor.role == Role.DIRECTOR:
            school_id = actor.school_id if school_id is None else school_id

        proposed = CustomUser(role=role, school_id=school_id)
        can(actor, Action.CREATE, EntityType.USER, proposed).raise_if_denied()
        if not is_school_scoped(role) and school_id is not None:
            raise PreconditionFailed(SYSTEM_WIDE_SCHOOL)

        with transaction.atomic():
            school = SchoolService.lock_active_school(school_id) if school_id is not None else None
            user = CustomUser.objects.create_user(
                role=role,
                school=school,
                password=password,
                created_by_id=actor.id,
                **data
            )

        logger.info(f"User {user.email} ({user.role}) created by user {actor.id}")
        audit.record_create(
            user, actor.id, request=request,
            metadata={'role': user.role, 'school_id': user.school_id},
        )
        return user

    @staticmethod
    def update_user(actor, pk, data, request=None) -> CustomUser:
        """
        Apply a patch to another account (or one's own).

        Role and school changes are separate actions and are evaluated on
        their own, so a self-update can never carry an escalation.
        """
        data = dict(data)
        if 'school' in data:
            school = data.pop('school')
            data['school_id'] = school.pk if school is not None else None

        with transaction.atomic():
            target = CustomUser.objects.select_for_update().filter(pk=pk, is_deleted=False).first()
            if target is None:
                raise EntityNotFound("User not found")

            new_role = data.get('role', target.role)
            # Leaving a school-scoped role also leaves the school.
            if not is_school_scoped(new_role) and 'school_id' not in data and target.school_id is not None:
                data['school_id'] = None

            changes = audit.compute_changes(target, data)
            if not changes:
                can(actor, Action.UPDATE, EntityType.USER, target).raise_if_denied()
                return target

            if 'role' in changes:
                can(actor, Action.CHANGE_ROLE, EntityType.USER, target).raise_if_denied()
            if 'school_id' in changes:
                can(actor, Action.ASSIGN_SCHOOL, EntityType.USER, target).raise_if_denied()
            if set(changes) - {'role', 'school_id'}:
                can(actor, Action.UPDATE, EntityType.USER, target).raise_if_denied()

            new_school_id = data.get('school_id', target.school_id)
            if is_school_scoped(new_role) and new_school_id is None:
                raise PreconditionFailed("A school is required for directors and teachers")
            if not is_school_scoped(new_role) and new_school_id is not None:
                raise PreconditionFailed(SYSTEM_WIDE_SCHOOL)
            if 'school_id' in changes and new_school_id is not None:
                SchoolService.lock_active_school(new_school_id)

            for field_name, value in data.items():
                setattr(target, field_name, value)
            target.full_clean(exclude=['password'])
            target.save()

        audit.record_update(target, changes, actor.id, request=request)
        return target

    @staticmethod
    def update_profile(user, data, request=None) -> CustomUser:
        """Self-service update restricted to non-privileged fields."""
        patch = {k: v for k, v in data.items() if k in PROFILE_FIELDS}
        changes = audit.compute_changes(user, patch)
        if changes:
            for field_name, value in patch.items():
                setattr(user, field_name, value)
            user.save(update_fields=list(patch) + ['updated_at'])
        audit.record_update(user, changes, user.pk, request=request)
        return user

    @staticmethod
    def delete_user(actor, pk, request=None) -> CustomUser:
        with transaction.atomic():
            target = CustomUser.objects.select_for_update().filter(pk=pk, is_deleted=False).first()
            if target is None:
                raise EntityNotFound("User not found")
            can(actor, Action.DELETE, EntityType.USER, target).raise_if_denied()
            target.soft_delete(actor.id)

        logger.info(f"User {target.email} deleted by user {actor.id}")
        audit.record_delete(target, actor.id, request=request, metadata={'role': target.role})
        return target

    @staticmethod
    def reset_password(actor, pk, temporary_password, request=None) -> CustomUser:
        """Set a temporary password the owner must change at next sign-in."""
        target = UserService.find_active(pk)
        can(actor, Action.RESET_PASSWORD, EntityType.USER, target).raise_if_denied()

        target.set_password(temporary_password)
        target.force_password_change = True
        target.save(update_fields=['password', 'force_password_change', 'updated_at'])

        logger.info(f"Password of {target.email} reset by user {actor.id}")
        audit.record_password_reset(target, actor.id, request=request)
        return target


class AuthService:
    """Session events for the authentication endpoints"""

    @staticmethod
    def register(data, request=None) -> CustomUser:
        """Public sign-up. Always creates a USER without a school."""
        user = CustomUser.objects.create_user(
            email=data['email'],
            name=data['name'],
            password=data['password'],
            phone_number=data.get('phone_number', ''),
            role=Role.USER,
        )
        audit.record_create(user, user.pk, request=request, metadata={'source': 'registration'})
        return user

    @staticmethod
    def login(request, email, password):
        """
        Authenticate and record the attempt.

        Returns:
            CustomUser or None when the credentials are rejected
        """
        user = authenticate(request, username=email, password=password)
        if user is None:
            logger.warning(f"Failed login attempt for {email}")
            known = CustomUser.objects.filter(email__iexact=email).first()
            audit.record_login(known, request=request, email=email, success=False)
            return None

        audit.record_login(user, request=request)
        return user

    @staticmethod
    def logout(user, request=None):
        audit.record_logout(user, request=request)

    @staticmethod
    def change_password(user, old_password, new_password, request=None):
        if not user.check_password(old_password):
            raise PreconditionFailed("Old password is incorrect")
        user.set_password(new_password)
        user.force_password_change = False
        user.save(update_fields=['password', 'force_password_change', 'updated_at'])
        audit.record_password_change(user, request=request)
        return user
