from django.test import override_settings
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from campus.library.models import LibraryItem
from core.access.constants import Visibility
from core.access.roles import Role
from core.audit.models import AuditAction, AuditLog
from core.base.test_utils import authenticate, library_payload, make_school, make_user


class LibraryAPITest(APITestCase):

    def setUp(self):
        self.client = APIClient()
        self.url = '/library/'
        self.school_a = make_school()
        self.school_b = make_school()
        self.admin = make_user(Role.ADMIN)
        self.director_a = make_user(Role.DIRECTOR, school=self.school_a)
        self.director_b = make_user(Role.DIRECTOR, school=self.school_b)
        self.teacher_a = make_user(Role.PROFESOR, school=self.school_a)
        self.teacher_b = make_user(Role.PROFESOR, school=self.school_b)

    def upload(self, user, **overrides):
        authenticate(self.client, user)
        response = self.client.post(self.url, library_payload(**overrides), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        return LibraryItem.objects.get(pk=response.data['data']['id'])

    def visible_ids(self, user):
        authenticate(self.client, user)
        response = self.client.get(self.url)
        return {i['id'] for i in response.data['data']['results']}

    def test_public_upload_goes_through_approval(self):
        item = self.upload(self.director_a, visibility=Visibility.PUBLIC)
        self.assertFalse(item.is_approved)
        self.assertEqual(item.school, self.school_a)

        self.assertIn(item.pk, self.visible_ids(self.director_a))
        self.assertNotIn(item.pk, self.visible_ids(self.teacher_a))
        self.assertNotIn(item.pk, self.visible_ids(self.teacher_b))

        authenticate(self.client, self.admin)
        response = self.client.post(f'{self.url}{item.pk}/approve/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['approval_state'], 'PUBLIC_APPROVED')
        self.assertTrue(AuditLog.objects.filter(action=AuditAction.APPROVED, entity_id=str(item.pk)).exists())

        self.assertIn(item.pk, self.visible_ids(self.teacher_a))
        self.assertIn(item.pk, self.visible_ids(self.teacher_b))

    def test_private_items_stay_in_school(self):
        item = self.upload(self.director_a)
        self.assertTrue(item.is_approved)
        self.assertIn(item.pk, self.visible_ids(self.teacher_a))
        self.assertNotIn(item.pk, self.visible_ids(self.teacher_b))
        self.assertNotIn(item.pk, self.visible_ids(self.director_b))

        authenticate(self.client, self.teacher_b)
        response = self.client.get(f'{self.url}{item.pk}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_public_upload_is_approved_immediately(self):
        item = self.upload(self.admin, visibility=Visibility.PUBLIC)
        self.assertTrue(item.is_approved)
        self.assertIsNone(item.school)
        self.assertEqual(item.approved_by, self.admin)
        self.assertIn(item.pk, self.visible_ids(self.teacher_b))

    def test_teacher_cannot_upload(self):
        authenticate(self.client, self.teacher_a)
        response = self.client.post(self.url, library_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    @override_settings(LIBRARY_MAX_FILE_SIZE=1000)
    def test_file_size_limit(self):
        authenticate(self.client, self.director_a)
        response = self.client.post(self.url, library_payload(file_size=1001), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_title_edit_keeps_approval(self):
        item = self.upload(self.admin, visibility=Visibility.PUBLIC)
        authenticate(self.client, self.admin)
        response = self.client.patch(f'{self.url}{item.pk}/', {'title': 'Renamed guide'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        item.refresh_from_db()
        self.assertTrue(item.is_approved)
        entry = AuditLog.objects.get(action=AuditAction.UPDATED)
        self.assertEqual(list(entry.changes), ['title'])

    def test_director_republishing_needs_approval_again(self):
        item = self.upload(self.director_a)
        authenticate(self.client, self.director_a)
        response = self.client.patch(f'{self.url}{item.pk}/', {'visibility': Visibility.PUBLIC}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['approval_state'], 'PUBLIC_PENDING')
        self.assertNotIn(item.pk, self.visible_ids(self.teacher_b))

    def test_director_cannot_edit_other_schools_items(self):
        item = self.upload(self.director_b, visibility=Visibility.PUBLIC)
        authenticate(self.client, self.admin)
        self.client.post(f'{self.url}{item.pk}/approve/')

        authenticate(self.client, self.director_a)
        response = self.client.patch(f'{self.url}{item.pk}/', {'title': 'Hijacked'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.delete(f'{self.url}{item.pk}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_director_cannot_approve(self):
        item = self.upload(self.director_a, visibility=Visibility.PUBLIC)
        authenticate(self.client, self.director_a)
        response = self.client.post(f'{self.url}{item.pk}/approve/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_approving_private_item_fails(self):
        item = self.upload(self.director_a)
        authenticate(self.client, self.admin)
        response = self.client.post(f'{self.url}{item.pk}/approve/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['data']['code'], 'precondition_failed')

    def test_admin_pending_queue(self):
        pending = self.upload(self.director_a, visibility=Visibility.PUBLIC)
        self.upload(self.director_a)
        authenticate(self.client, self.admin)
        response = self.client.get(self.url, {'pending': 'true'})
        self.assertEqual([i['id'] for i in response.data['data']['results']], [pending.pk])

    def test_deleted_items_disappear(self):
        item = self.upload(self.director_a)
        authenticate(self.client, self.director_a)
        response = self.client.delete(f'{self.url}{item.pk}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertNotIn(item.pk, self.visible_ids(self.teacher_a))
