from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from campus.schools.models import School
from core.access.roles import Role
from core.audit.models import AuditAction, AuditLog
from core.base.test_utils import authenticate, make_school, make_user


class SchoolAPITest(APITestCase):

    def setUp(self):
        self.client = APIClient()
        self.url = '/schools/'
        self.admin = make_user(Role.ADMIN)
        self.school = make_school(name='Central High', code='CEN001')
        self.other = make_school(name='East High', code='EST002')
        self.director = make_user(Role.DIRECTOR, school=self.school)

    def detail_url(self, school):
        return f'{self.url}{school.pk}/'

    def test_admin_creates_school(self):
        authenticate(self.client, self.admin)
        data = {'name': 'North High', 'code': 'nth-003', 'type': 'PUBLIC'}
        response = self.client.post(self.url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['code'], 'NTH-003')
        self.assertTrue(AuditLog.objects.filter(action=AuditAction.CREATED, entity_type='School').exists())

    def test_duplicate_code_rejected(self):
        authenticate(self.client, self.admin)
        data = {'name': 'Copy School', 'code': 'CEN001', 'type': 'PRIVATE'}
        response = self.client.post(self.url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_code_of_deleted_school_can_be_reused(self):
        self.other.soft_delete(self.admin)
        authenticate(self.client, self.admin)
        data = {'name': 'New East', 'code': 'EST002', 'type': 'PUBLIC'}
        response = self.client.post(self.url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_director_cannot_create_school(self):
        authenticate(self.client, self.director)
        data = {'name': 'Rogue School', 'code': 'RGE004', 'type': 'PUBLIC'}
        response = self.client.post(self.url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_director_lists_only_own_school(self):
        authenticate(self.client, self.director)
        response = self.client.get(self.url)
        results = response.data['data']['results']
        self.assertEqual([s['id'] for s in results], [self.school.pk])

    def test_director_cannot_view_other_school(self):
        authenticate(self.client, self.director)
        response = self.client.get(self.detail_url(self.other))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_update_audits_only_changed_fields(self):
        authenticate(self.client, self.admin)
        response = self.client.patch(
            self.detail_url(self.school),
            {'name': 'Central High', 'district': 'Downtown'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        entry = AuditLog.objects.get(action=AuditAction.UPDATED)
        self.assertEqual(entry.changes, {'district': {'from': '', 'to': 'Downtown'}})

    def test_noop_update_writes_no_entry(self):
        authenticate(self.client, self.admin)
        self.client.patch(self.detail_url(self.school), {'name': 'Central High'}, format='json')
        self.assertFalse(AuditLog.objects.filter(action=AuditAction.UPDATED).exists())


class SchoolDeletionTest(APITestCase):
    """A school with active users cannot be deleted"""

    def setUp(self):
        self.client = APIClient()
        self.admin = make_user(Role.ADMIN)
        self.school = make_school(name='Busy School')
        self.teacher = make_user(Role.PROFESOR, school=self.school)
        authenticate(self.client, self.admin)
        self.url = f'/schools/{self.school.pk}/'

    def test_delete_blocked_by_active_users(self):
        response = self.client.delete(self.url)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['data']['code'], 'precondition_failed')
        self.assertIn('1 active user', response.data['message'])
        self.school.refresh_from_db()
        self.assertFalse(self.school.is_deleted)
        self.assertFalse(AuditLog.objects.filter(action=AuditAction.DELETED).exists())

    def test_soft_deleted_users_do_not_block(self):
        self.teacher.soft_delete(self.admin)
        response = self.client.delete(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        school = School.objects.get(pk=self.school.pk)
        self.assertTrue(school.is_deleted)
        self.assertEqual(school.deleted_by, self.admin)
        self.assertTrue(AuditLog.objects.filter(action=AuditAction.DELETED, entity_id=str(school.pk)).exists())

    def test_deleted_school_cannot_take_new_users(self):
        self.teacher.soft_delete(self.admin)
        self.client.delete(self.url)
        data = {
            'email': 'late@example.com',
            'name': 'Late Teacher',
            'password': 'SecurePass123',
            'role': Role.PROFESOR,
            'school': self.school.pk,
        }
        response = self.client.post('/accounts/users/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
