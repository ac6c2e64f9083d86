"""
Tests for User Account API Views.
Covers registration, login, profile management and account administration.
"""
from rest_framework import status
from rest_framework.test import APIClient, APITestCase
from rest_framework_simplejwt.tokens import RefreshToken

from campus.library.models import LibraryItem
from core.access.roles import Role
from core.audit.models import AuditAction, AuditLog
from core.base.test_utils import DEFAULT_PASSWORD, authenticate, library_payload, make_school, make_user
from core.user_accounts.models import CustomUser


class RegistrationAPITest(APITestCase):
    """Test user registration endpoint"""

    def setUp(self):
        self.client = APIClient()
        self.url = '/auth/register/'
        self.valid_data = {
            'email': 'newuser@example.com',
            'name': 'New User',
            'phone_number': '+1234567890',
            'password': 'SecurePass123',
            'confirm_password': 'SecurePass123'
        }

    def test_register_creates_plain_user(self):
        response = self.client.post(self.url, self.valid_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data['data']
        self.assertEqual(data['user']['role'], Role.USER)
        self.assertIsNone(data['user']['school'])
        self.assertIn('access', data['tokens'])

    def test_role_in_payload_is_ignored(self):
        response = self.client.post(self.url, {**self.valid_data, 'role': Role.SUPER_ADMIN}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(CustomUser.objects.get(email='newuser@example.com').role, Role.USER)

    def test_register_duplicate_email(self):
        self.client.post(self.url, self.valid_data, format='json')
        response = self.client.post(self.url, self.valid_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_weak_password(self):
        data = {**self.valid_data, 'password': 'weak', 'confirm_password': 'weak'}
        response = self.client.post(self.url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class LoginAPITest(APITestCase):
    """Test user login endpoint and its audit entries"""

    def setUp(self):
        self.client = APIClient()
        self.url = '/auth/login/'
        self.user = make_user(email='testuser@example.com')

    def test_login_success_is_audited(self):
        data = {'email': 'testuser@example.com', 'password': DEFAULT_PASSWORD}
        response = self.client.post(self.url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('tokens', response.data['data'])
        entry = AuditLog.objects.get(action=AuditAction.LOGIN)
        self.assertEqual(entry.user, self.user)

    def test_login_failure_is_audited(self):
        data = {'email': 'testuser@example.com', 'password': 'WrongPass123'}
        response = self.client.post(self.url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        entry = AuditLog.objects.get(action=AuditAction.LOGIN_FAILED)
        self.assertIsNone(entry.user)
        self.assertEqual(entry.metadata, {'email': 'testuser@example.com'})

    def test_deleted_user_cannot_log_in(self):
        self.user.soft_delete()
        data = {'email': 'testuser@example.com', 'password': DEFAULT_PASSWORD}
        response = self.client.post(self.url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class LogoutAPITest(APITestCase):

    def setUp(self):
        self.client = APIClient()
        self.user = make_user()
        self.refresh = RefreshToken.for_user(self.user)
        authenticate(self.client, self.user)

    def test_logout_blacklists_and_audits(self):
        response = self.client.post('/auth/logout/', {'refresh': str(self.refresh)}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(AuditLog.objects.filter(action=AuditAction.LOGOUT, user=self.user).exists())

        response = self.client.post('/auth/token/refresh/', {'refresh': str(self.refresh)}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_invalid_token(self):
        response = self.client.post('/auth/logout/', {'refresh': 'garbage'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class ChangePasswordAPITest(APITestCase):

    def setUp(self):
        self.client = APIClient()
        self.user = make_user()
        authenticate(self.client, self.user)
        self.url = '/auth/change-password/'

    def test_change_password(self):
        data = {
            'old_password': DEFAULT_PASSWORD,
            'new_password': 'BrandNew456',
            'confirm_password': 'BrandNew456',
        }
        response = self.client.post(self.url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('BrandNew456'))
        self.assertTrue(AuditLog.objects.filter(action=AuditAction.PASSWORD_CHANGED).exists())

    def test_wrong_old_password(self):
        data = {
            'old_password': 'Nope12345',
            'new_password': 'BrandNew456',
            'confirm_password': 'BrandNew456',
        }
        response = self.client.post(self.url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['data']['code'], 'precondition_failed')


class UserProfileAPITest(APITestCase):
    """Profile updates never touch role or school"""

    def setUp(self):
        self.client = APIClient()
        self.url = '/accounts/profile/'
        self.school = make_school()
        self.user = make_user(Role.PROFESOR, school=self.school, name='Old Name')
        authenticate(self.client, self.user)

    def test_get_profile(self):
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['email'], self.user.email)

    def test_update_profile_is_audited(self):
        response = self.client.patch(self.url, {'name': 'New Name'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        entry = AuditLog.objects.get(action=AuditAction.UPDATED)
        self.assertEqual(entry.changes, {'name': {'from': 'Old Name', 'to': 'New Name'}})

    def test_role_and_school_are_read_only(self):
        other = make_school()
        self.client.patch(self.url, {'role': Role.ADMIN, 'school': other.pk}, format='json')
        self.user.refresh_from_db()
        self.assertEqual(self.user.role, Role.PROFESOR)
        self.assertEqual(self.user.school, self.school)


class UserManagementAPITest(APITestCase):

    def setUp(self):
        self.client = APIClient()
        self.school_a = make_school()
        self.school_b = make_school()
        self.super_admin = make_user(Role.SUPER_ADMIN)
        self.admin = make_user(Role.ADMIN)
        self.director_a = make_user(Role.DIRECTOR, school=self.school_a)
        self.teacher_a = make_user(Role.PROFESOR, school=self.school_a)
        self.teacher_b = make_user(Role.PROFESOR, school=self.school_b)

    def detail_url(self, user):
        return f'/accounts/users/{user.pk}/'

    def test_admin_lists_users(self):
        authenticate(self.client, self.admin)
        response = self.client.get('/accounts/users/', {'school_id': self.school_a.pk})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['count'], 2)

    def test_non_admin_lists_only_self(self):
        authenticate(self.client, self.teacher_a)
        response = self.client.get('/accounts/users/')
        results = response.data['data']['results']
        self.assertEqual([u['id'] for u in results], [self.teacher_a.pk])

    def test_director_creates_teacher_in_own_school(self):
        authenticate(self.client, self.director_a)
        data = {
            'email': 'newteacher@example.com',
            'name': 'New Teacher',
            'password': 'SecurePass123',
            'role': Role.PROFESOR,
        }
        response = self.client.post('/accounts/users/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        created = CustomUser.objects.get(email='newteacher@example.com')
        self.assertEqual(created.school, self.school_a)
        self.assertEqual(created.created_by, self.director_a)

    def test_director_cannot_create_in_other_school(self):
        authenticate(self.client, self.director_a)
        data = {
            'email': 'sneaky@example.com',
            'name': 'Sneaky',
            'password': 'SecurePass123',
            'role': Role.PROFESOR,
            'school': self.school_b.pk,
        }
        response = self.client.post('/accounts/users/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(CustomUser.objects.filter(email='sneaky@example.com').exists())

    def test_admin_cannot_create_admin(self):
        authenticate(self.client, self.admin)
        data = {'email': 'a2@example.com', 'name': 'A2', 'password': 'SecurePass123', 'role': Role.ADMIN}
        response = self.client.post('/accounts/users/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_scoped_role_requires_school(self):
        authenticate(self.client, self.admin)
        data = {'email': 'd2@example.com', 'name': 'D2', 'password': 'SecurePass123', 'role': Role.DIRECTOR}
        response = self.client.post('/accounts/users/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['data']['code'], 'school_required')

    def test_teacher_cannot_promote_self(self):
        authenticate(self.client, self.teacher_a)
        response = self.client.patch(self.detail_url(self.teacher_a), {'role': Role.ADMIN}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.teacher_a.refresh_from_db()
        self.assertEqual(self.teacher_a.role, Role.PROFESOR)

    def test_teacher_can_edit_own_name_through_detail(self):
        authenticate(self.client, self.teacher_a)
        response = self.client.patch(self.detail_url(self.teacher_a), {'name': 'Renamed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_super_admin_changes_role(self):
        authenticate(self.client, self.super_admin)
        response = self.client.patch(self.detail_url(self.teacher_a), {'role': Role.DIRECTOR}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        entry = AuditLog.objects.get(action=AuditAction.UPDATED, entity_id=str(self.teacher_a.pk))
        self.assertEqual(entry.changes, {'role': {'from': Role.PROFESOR, 'to': Role.DIRECTOR}})

    def test_admin_cannot_change_role(self):
        authenticate(self.client, self.admin)
        response = self.client.patch(self.detail_url(self.teacher_a), {'role': Role.DIRECTOR}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_reassigns_school(self):
        authenticate(self.client, self.admin)
        response = self.client.patch(self.detail_url(self.teacher_a), {'school': self.school_b.pk}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.teacher_a.refresh_from_db()
        self.assertEqual(self.teacher_a.school, self.school_b)

    def test_director_cannot_view_other_accounts(self):
        authenticate(self.client, self.director_a)
        response = self.client.get(self.detail_url(self.teacher_a))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_director_deletes_own_teacher_only(self):
        authenticate(self.client, self.director_a)
        response = self.client.delete(self.detail_url(self.teacher_b))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        response = self.client.delete(self.detail_url(self.teacher_a))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.teacher_a.refresh_from_db()
        self.assertTrue(self.teacher_a.is_deleted)
        self.assertEqual(self.teacher_a.deleted_by, self.director_a)

    def test_admin_cannot_delete_admin(self):
        other_admin = make_user(Role.ADMIN)
        authenticate(self.client, self.admin)
        response = self.client.delete(self.detail_url(other_admin))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertIn('super administrators', response.data['message'])

    def test_nobody_deletes_themselves(self):
        authenticate(self.client, self.super_admin)
        response = self.client.delete(self.detail_url(self.super_admin))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_deleted_user_is_not_found(self):
        self.teacher_b.soft_delete(self.admin)
        authenticate(self.client, self.admin)
        response = self.client.get(self.detail_url(self.teacher_b))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['data']['code'], 'not_found')

    def test_admin_resets_regular_user_password(self):
        plain = make_user(Role.USER)
        authenticate(self.client, self.admin)
        response = self.client.post(
            f'{self.detail_url(plain)}reset-password/',
            {'temporary_password': 'TempPass123'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        plain.refresh_from_db()
        self.assertTrue(plain.force_password_change)
        self.assertTrue(plain.check_password('TempPass123'))
        self.assertTrue(AuditLog.objects.filter(action=AuditAction.PASSWORD_RESET).exists())

    def test_admin_cannot_reset_director_password(self):
        authenticate(self.client, self.admin)
        response = self.client.post(
            f'{self.detail_url(self.director_a)}reset-password/',
            {'temporary_password': 'TempPass123'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.director_a.refresh_from_db()
        self.assertTrue(self.director_a.check_password(DEFAULT_PASSWORD))

    def test_director_cannot_reset_teacher_password(self):
        authenticate(self.client, self.director_a)
        response = self.client.post(
            f'{self.detail_url(self.teacher_a)}reset-password/',
            {'temporary_password': 'TempPass123'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.teacher_a.refresh_from_db()
        self.assertFalse(self.teacher_a.force_password_change)
        self.assertFalse(AuditLog.objects.filter(action=AuditAction.PASSWORD_RESET).exists())

    def test_super_admin_resets_director_password(self):
        authenticate(self.client, self.super_admin)
        response = self.client.post(
            f'{self.detail_url(self.director_a)}reset-password/',
            {'temporary_password': 'TempPass123'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.director_a.refresh_from_db()
        self.assertTrue(self.director_a.check_password('TempPass123'))

    def test_email_is_not_editable_by_managers(self):
        original = self.teacher_a.email
        authenticate(self.client, self.director_a)
        response = self.client.patch(
            self.detail_url(self.teacher_a),
            {'email': 'hijacked@example.com', 'department': 'Math'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.teacher_a.refresh_from_db()
        self.assertEqual(self.teacher_a.email, original)
        self.assertEqual(self.teacher_a.department, 'Math')

    def test_promotion_to_admin_drops_school(self):
        authenticate(self.client, self.super_admin)
        response = self.client.patch(self.detail_url(self.director_a), {'role': Role.ADMIN}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.director_a.refresh_from_db()
        self.assertEqual(self.director_a.role, Role.ADMIN)
        self.assertIsNone(self.director_a.school)

        entry = AuditLog.objects.get(action=AuditAction.UPDATED, entity_id=str(self.director_a.pk))
        self.assertEqual(entry.changes['school_id'], {'from': self.school_a.pk, 'to': None})

        authenticate(self.client, self.director_a)
        response = self.client.post('/library/', library_payload(visibility='PUBLIC'), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(LibraryItem.objects.get(created_by=self.director_a).school_id)

    def test_system_wide_roles_cannot_hold_a_school(self):
        plain = make_user(Role.USER)
        authenticate(self.client, self.admin)
        response = self.client.patch(self.detail_url(plain), {'school': self.school_a.pk}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['data']['code'], 'precondition_failed')
        plain.refresh_from_db()
        self.assertIsNone(plain.school)

        authenticate(self.client, self.super_admin)
        data = {
            'email': 'a3@example.com', 'name': 'A3', 'password': 'SecurePass123',
            'role': Role.ADMIN, 'school': self.school_a.pk,
        }
        response = self.client.post('/accounts/users/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(CustomUser.objects.filter(email='a3@example.com').exists())

    def test_admin_cannot_assign_school_to_admin(self):
        other_admin = make_user(Role.ADMIN)
        authenticate(self.client, self.admin)
        response = self.client.patch(self.detail_url(other_admin), {'school': self.school_a.pk}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_super_admin_demotes_admin_into_school(self):
        other_admin = make_user(Role.ADMIN)
        authenticate(self.client, self.super_admin)
        response = self.client.patch(
            self.detail_url(other_admin),
            {'role': Role.DIRECTOR, 'school': self.school_b.pk},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        other_admin.refresh_from_db()
        self.assertEqual(other_admin.role, Role.DIRECTOR)
        self.assertEqual(other_admin.school, self.school_b)

    def test_unmanaged_account_is_refused_before_validation(self):
        authenticate(self.client, self.teacher_a)
        response = self.client.patch(
            self.detail_url(self.director_a),
            {'phone_number': 'not a phone', 'school': 999999},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['data']['code'], 'authorization_denied')

    def test_list_rejects_malformed_filters(self):
        authenticate(self.client, self.admin)
        response = self.client.get('/accounts/users/', {'school_id': 'abc'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('school_id', response.data['data']['errors'])

        response = self.client.get('/accounts/users/', {'role': 'WIZARD'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
