from datetime import date
from unittest import mock

from django.test import RequestFactory, TestCase
from rest_framework import status
from rest_framework.test import APIClient

from campus.schools.models import School
from core.access.constants import EntityType
from core.access.roles import Role
from core.audit import services as audit
from core.audit.models import AuditAction, AuditLog, AuditLogImmutable
from core.base.test_utils import authenticate, make_school, make_user


class ComputeChangesTest(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.school = make_school(name='North High', district='North')

    def test_only_differing_fields_are_reported(self):
        changes = audit.compute_changes(self.school, {'name': 'North High', 'district': 'South'})
        self.assertEqual(changes, {'district': {'from': 'North', 'to': 'South'}})

    def test_identical_patch_yields_empty_diff(self):
        self.assertEqual(audit.compute_changes(self.school, {'name': 'North High'}), {})

    def test_foreign_keys_compare_by_id(self):
        other = make_school()
        user = make_user(Role.DIRECTOR, school=self.school)
        self.assertEqual(audit.compute_changes(user, {'school_id': self.school.pk}), {})
        self.assertEqual(
            audit.compute_changes(user, {'school': other}),
            {'school': {'from': self.school.pk, 'to': other.pk}},
        )

    def test_values_are_json_safe(self):
        changes = audit.compute_changes(self.school, {'name': date(2024, 1, 2)})
        self.assertEqual(changes['name']['to'], '2024-01-02')


class RecorderTest(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.admin = make_user(Role.ADMIN)
        cls.school = make_school(name='Central')

    def test_record_create_stores_label_and_actor(self):
        entry = audit.record_create(self.school, self.admin.pk)
        self.assertEqual(entry.action, AuditAction.CREATED)
        self.assertEqual(entry.entity_type, EntityType.SCHOOL)
        self.assertEqual(entry.entity_id, str(self.school.pk))
        self.assertEqual(entry.entity_label, 'Central')
        self.assertEqual(entry.user, self.admin)

    def test_empty_update_writes_nothing(self):
        self.assertIsNone(audit.record_update(self.school, {}, self.admin.pk))
        self.assertFalse(AuditLog.objects.exists())

    def test_status_change_entry(self):
        entry = audit.record_status_change(self.school, 'OPEN', 'CLOSED', self.admin.pk)
        self.assertEqual(entry.changes, {'status': {'from': 'OPEN', 'to': 'CLOSED'}})

    def test_request_metadata(self):
        request = RequestFactory().get(
            '/', HTTP_X_FORWARDED_FOR='203.0.113.7, 10.0.0.1', HTTP_USER_AGENT='pytest'
        )
        entry = audit.record_logout(self.admin, request=request)
        self.assertEqual(entry.ip_address, '203.0.113.7')
        self.assertEqual(entry.user_agent, 'pytest')

    def test_invalid_ip_is_dropped(self):
        request = RequestFactory().get('/', REMOTE_ADDR='not-an-ip')
        entry = audit.record_logout(self.admin, request=request)
        self.assertIsNone(entry.ip_address)

    def test_failed_login_has_no_actor(self):
        entry = audit.record_login(None, email='ghost@example.com', success=False)
        self.assertEqual(entry.action, AuditAction.LOGIN_FAILED)
        self.assertIsNone(entry.user)
        self.assertEqual(entry.metadata, {'email': 'ghost@example.com'})

    def test_write_failure_is_swallowed_and_logged(self):
        with mock.patch.object(AuditLog.objects, 'create', side_effect=RuntimeError('disk full')):
            with self.assertLogs('core.audit.services', level='ERROR'):
                self.assertIsNone(audit.record_delete(self.school, self.admin.pk))


class ImmutabilityTest(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.entry = audit.record(AuditAction.CREATED, EntityType.SCHOOL, 1, 'Central')

    def test_entries_cannot_be_saved_again(self):
        self.entry.description = 'edited'
        with self.assertRaises(AuditLogImmutable):
            self.entry.save()

    def test_entries_cannot_be_deleted(self):
        with self.assertRaises(AuditLogImmutable):
            self.entry.delete()
        with self.assertRaises(AuditLogImmutable):
            AuditLog.objects.all().delete()

    def test_bulk_update_is_refused(self):
        with self.assertRaises(AuditLogImmutable):
            AuditLog.objects.update(description='edited')


class AuditLogAPITest(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.url = '/audit-logs/'
        self.admin = make_user(Role.ADMIN)
        self.school = make_school()
        self.director = make_user(Role.DIRECTOR, school=self.school)
        audit.record_create(self.school, self.admin.pk)
        audit.record_login(self.director)

    def test_admin_lists_entries(self):
        authenticate(self.client, self.admin)
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['count'], 2)

    def test_filter_by_entity(self):
        authenticate(self.client, self.admin)
        response = self.client.get(self.url, {'entity_type': 'School', 'entity_id': self.school.pk})
        results = response.data['data']['results']
        self.assertEqual(len(results), 1)
        self.assertEqual(results[0]['action'], AuditAction.CREATED)

    def test_profile_alias_filters_users(self):
        authenticate(self.client, self.admin)
        response = self.client.get(self.url, {'entity_type': 'Profile'})
        self.assertEqual(response.data['data']['count'], 1)

    def test_non_admin_is_forbidden(self):
        authenticate(self.client, self.director)
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['data']['code'], 'authorization_denied')

    def test_unauthenticated(self):
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
