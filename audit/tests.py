from django.core.cache import cache
from django.test import RequestFactory, TestCase

from authentication.models import User, UserRole
from .models import AuditEventType, AuditLog, AuditSeverity


class AuditLogTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(
            'auditor@example.com', 'StrongPass123!', name='Audra Auditor', role=UserRole.ADMIN,
        )

    def test_log_records_actor_target_and_request(self):
        request = RequestFactory().post(
            '/api/users/', HTTP_USER_AGENT='pytest', HTTP_X_FORWARDED_FOR='203.0.113.9, 10.0.0.1',
        )

        entry = AuditLog.log(
            event_type=AuditEventType.USER_CREATED,
            actor=self.user,
            target=self.user,
            request=request,
            description='User created',
        )

        self.assertEqual(entry.actor_id, str(self.user.id))
        self.assertEqual(entry.actor_role, UserRole.ADMIN)
        self.assertEqual(entry.actor_email, 'auditor@example.com')
        self.assertEqual(entry.target_type, 'User')
        self.assertEqual(entry.target_id, str(self.user.id))
        self.assertEqual(entry.ip_address, '203.0.113.9')
        self.assertEqual(entry.request_method, 'POST')
        self.assertEqual(entry.request_path, '/api/users/')
        self.assertEqual(entry.severity, AuditSeverity.INFO)

    def test_failures_default_to_warning(self):
        entry = AuditLog.log(event_type=AuditEventType.AUTH_LOGIN_FAILED, success=False)

        self.assertEqual(entry.severity, AuditSeverity.WARNING)
        self.assertEqual(entry.actor_id, '')

    def test_entries_are_immutable(self):
        entry = AuditLog.log(event_type=AuditEventType.AUTH_LOGOUT, actor=self.user)
        entry.description = 'edited'

        with self.assertRaises(PermissionError):
            entry.save()
        with self.assertRaises(PermissionError):
            entry.delete()
        with self.assertRaises(PermissionError):
            AuditLog.objects.update(description='edited')
        with self.assertRaises(PermissionError):
            AuditLog.objects.delete()

        self.assertEqual(AuditLog.objects.get(pk=entry.pk).description, '')


class AuditLoggingMiddlewareTests(TestCase):
    def setUp(self):
        cache.clear()

    def test_api_requests_are_logged(self):
        with self.assertLogs('civicpulse.audit', level='INFO') as logs:
            self.client.get('/api/reports/')

        self.assertEqual(len(logs.output), 1)
        self.assertIn('method=GET path=/api/reports/', logs.output[0])
        self.assertIn('user=anonymous', logs.output[0])
        self.assertIn('status=200', logs.output[0])

    def test_client_errors_are_warnings(self):
        with self.assertLogs('civicpulse.audit', level='WARNING') as logs:
            self.client.get('/api/auth/me/')

        self.assertIn('status=401', logs.output[0])
