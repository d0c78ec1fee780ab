from io import StringIO

from django.core.management import CommandError, call_command
from django.urls import reverse
from rest_framework import status

from audit.models import AuditEventType, AuditLog
from civicpulse_backend.testing import TEST_PASSWORD, CivicPulseTestCase
from .backends import issue_token
from .models import User, UserRole, UserStatus


class RegisterTests(CivicPulseTestCase):
    url = reverse('authentication:register')

    def test_register_creates_citizen_and_sets_cookie(self):
        response = self.client.post(self.url, {
            'name': 'Nina New',
            'email': 'Nina@Example.com',
            'password': TEST_PASSWORD,
            'role': 'admin',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        body = response.json()
        self.assertTrue(body['success'])
        self.assertTrue(body['token'])
        self.assertEqual(body['data']['email'], 'nina@example.com')
        self.assertEqual(body['data']['role'], UserRole.CITIZEN)
        self.assertNotIn('password', body['data'])
        self.assertEqual(response.cookies['token'].value, body['token'])
        self.assertTrue(response.cookies['token']['httponly'])

        user = User.objects.get(email='nina@example.com')
        self.assertEqual(user.role, UserRole.CITIZEN)
        self.assertTrue(
            AuditLog.objects.filter(event_type=AuditEventType.AUTH_REGISTERED, actor_id=str(user.id)).exists()
        )

    def test_duplicate_email_is_rejected(self):
        response = self.client.post(self.url, {
            'name': 'Copy Cat',
            'email': 'CITIZEN@example.com',
            'password': TEST_PASSWORD,
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()['message'], 'Validation error: email - Email already in use')

    def test_weak_password_is_rejected(self):
        response = self.client.post(self.url, {
            'name': 'Weak Pass',
            'email': 'weak@example.com',
            'password': '123',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(User.objects.filter(email='weak@example.com').exists())


class LoginTests(CivicPulseTestCase):
    url = reverse('authentication:login')

    def test_missing_fields(self):
        response = self.client.post(self.url, {'email': 'citizen@example.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()['message'], 'Please provide an email and password')

    def test_wrong_password(self):
        response = self.client.post(self.url, {
            'email': 'citizen@example.com',
            'password': 'not-the-password',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.json()['message'], 'Invalid credentials')
        self.assertTrue(
            AuditLog.objects.filter(event_type=AuditEventType.AUTH_LOGIN_FAILED, success=False).exists()
        )

    def test_unknown_email_uses_same_message(self):
        response = self.client.post(self.url, {
            'email': 'nobody@example.com',
            'password': TEST_PASSWORD,
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.json()['message'], 'Invalid credentials')

    def test_inactive_account(self):
        self.citizen.status = UserStatus.INACTIVE
        self.citizen.save()

        response = self.client.post(self.url, {
            'email': 'citizen@example.com',
            'password': TEST_PASSWORD,
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_login_success(self):
        response = self.client.post(self.url, {
            'email': 'Citizen@Example.com',
            'password': TEST_PASSWORD,
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        body = response.json()
        self.assertEqual(body['data']['id'], str(self.citizen.id))
        self.assertEqual(response.cookies['token'].value, body['token'])


class SessionTests(CivicPulseTestCase):
    me_url = reverse('authentication:current-user')

    def test_me_with_bearer_token(self):
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {issue_token(self.officer)}')
        response = self.client.get(self.me_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['data']['email'], 'officer@example.com')

    def test_me_with_cookie(self):
        self.client.cookies['token'] = issue_token(self.citizen)
        response = self.client.get(self.me_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['data']['name'], 'Casey Citizen')

    def test_me_shows_department_name(self):
        department = self.create_department()
        self.officer.department = department
        self.officer.save()
        self.login_as(self.officer)

        response = self.client.get(self.me_url)
        self.assertEqual(response.json()['data']['department'], {
            'id': str(department.id),
            'name': 'Public Works',
        })

    def test_me_requires_authentication(self):
        response = self.client.get(self.me_url)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_invalid_cookie_is_treated_as_anonymous(self):
        self.client.cookies['token'] = 'garbage'

        self.assertEqual(self.client.get(self.me_url).status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(self.client.get(reverse('reports:report-list')).status_code, status.HTTP_200_OK)

    def test_inactive_user_token_is_rejected(self):
        token = issue_token(self.citizen)
        self.citizen.status = UserStatus.INACTIVE
        self.citizen.save()

        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
        response = self.client.get(self.me_url)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_deleted_user_token_is_rejected(self):
        token = issue_token(self.citizen)
        self.citizen.delete()

        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
        response = self.client.get(self.me_url)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_logout_clears_cookie(self):
        self.login_as(self.citizen)
        response = self.client.get(reverse('authentication:logout'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json(), {'success': True, 'data': {}})
        self.assertEqual(response.cookies['token'].value, 'none')
        self.assertTrue(
            AuditLog.objects.filter(event_type=AuditEventType.AUTH_LOGOUT, actor_id=str(self.citizen.id)).exists()
        )

    def test_logout_cookie_placeholder_is_anonymous(self):
        self.client.cookies['token'] = 'none'
        self.assertEqual(self.client.get(self.me_url).status_code, status.HTTP_401_UNAUTHORIZED)


class ChangePasswordTests(CivicPulseTestCase):
    url = reverse('authentication:change-password')

    def test_wrong_current_password(self):
        self.login_as(self.citizen)
        response = self.client.post(self.url, {
            'currentPassword': 'wrong-password',
            'newPassword': 'An0ther-Strong-Pass',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.json()['message'], 'Current password is incorrect')

    def test_missing_fields(self):
        self.login_as(self.citizen)
        response = self.client.post(self.url, {'currentPassword': TEST_PASSWORD}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_change_password(self):
        self.login_as(self.citizen)
        response = self.client.post(self.url, {
            'currentPassword': TEST_PASSWORD,
            'newPassword': 'An0ther-Strong-Pass',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.json()['token'])
        self.citizen.refresh_from_db()
        self.assertTrue(self.citizen.check_password('An0ther-Strong-Pass'))


class UserAdministrationTests(CivicPulseTestCase):
    list_url = reverse('users:user-list')

    def detail_url(self, user):
        return reverse('users:user-detail', args=[user.id])

    def test_list_requires_admin(self):
        self.login_as(self.citizen)
        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(
            response.json()['message'],
            'User role citizen is not authorized to access this route',
        )

    def test_admin_lists_and_filters_users(self):
        self.login_as(self.admin)
        response = self.client.get(self.list_url, {'role[in]': 'officer,admin'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        emails = {row['email'] for row in response.json()['data']}
        self.assertEqual(emails, {'officer@example.com', 'admin@example.com'})

    def test_admin_creates_officer(self):
        department = self.create_department()
        self.login_as(self.admin)
        response = self.client.post(self.list_url, {
            'name': 'Nick Officer',
            'email': 'nick@example.com',
            'password': TEST_PASSWORD,
            'role': UserRole.OFFICER,
            'department': str(department.id),
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        user = User.objects.get(email='nick@example.com')
        self.assertEqual(user.role, UserRole.OFFICER)
        self.assertEqual(user.department, department)

    def test_officers_sorted_by_name(self):
        self.create_user('zed@example.com', name='Zed Officer', role=UserRole.OFFICER)
        self.create_user('amy@example.com', name='Amy Officer', role=UserRole.OFFICER)
        self.login_as(self.admin)

        response = self.client.get(reverse('users:officer-list'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        body = response.json()
        self.assertEqual(body['count'], 3)
        self.assertEqual(
            [row['name'] for row in body['data']],
            ['Amy Officer', 'Oscar Officer', 'Zed Officer'],
        )

    def test_user_reads_own_account(self):
        self.login_as(self.citizen)
        response = self.client.get(self.detail_url(self.citizen))
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_user_cannot_read_someone_else(self):
        self.login_as(self.citizen)
        response = self.client.get(self.detail_url(self.other_citizen))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_user_updates_own_profile(self):
        self.login_as(self.citizen)
        response = self.client.put(self.detail_url(self.citizen), {'phone': '555-0100'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.citizen.refresh_from_db()
        self.assertEqual(self.citizen.phone, '555-0100')

    def test_non_admin_cannot_change_role(self):
        self.login_as(self.citizen)
        response = self.client.put(self.detail_url(self.citizen), {'role': 'admin'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.json()['message'], 'Not authorized to change role')
        self.citizen.refresh_from_db()
        self.assertEqual(self.citizen.role, UserRole.CITIZEN)

    def test_admin_changes_role(self):
        self.login_as(self.admin)
        response = self.client.put(self.detail_url(self.citizen), {'role': 'officer'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['data']['role'], 'officer')
        self.assertTrue(
            AuditLog.objects.filter(
                event_type=AuditEventType.USER_ROLE_CHANGED,
                target_id=str(self.citizen.id),
            ).exists()
        )

    def test_delete_is_admin_only(self):
        self.login_as(self.citizen)
        response = self.client.delete(self.detail_url(self.citizen))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_soft_deletes_user(self):
        self.login_as(self.admin)
        response = self.client.delete(self.detail_url(self.other_citizen))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json(), {'success': True, 'data': {}})
        self.assertFalse(User.objects.filter(pk=self.other_citizen.pk).exists())
        self.assertTrue(User.objects.all_with_deleted().filter(pk=self.other_citizen.pk).exists())

        response = self.client.get(self.detail_url(self.other_citizen))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class CreateAdminCommandTests(CivicPulseTestCase):
    def test_creates_admin(self):
        out = StringIO()
        call_command('create_admin', email='Boss@Example.com', password=TEST_PASSWORD, stdout=out)

        user = User.objects.get(email='boss@example.com')
        self.assertEqual(user.role, UserRole.ADMIN)
        self.assertTrue(user.is_superuser)
        self.assertTrue(user.check_password(TEST_PASSWORD))
        self.assertIn('Created admin: boss@example.com', out.getvalue())

    def test_promotes_existing_user_without_resetting_password(self):
        out = StringIO()
        call_command('create_admin', email='citizen@example.com', password='Other-Pass-999', stdout=out)

        self.citizen.refresh_from_db()
        self.assertEqual(self.citizen.role, UserRole.ADMIN)
        self.assertTrue(self.citizen.check_password(TEST_PASSWORD))
        self.assertIn('Promoted to admin', out.getvalue())

    def test_force_resets_password(self):
        call_command(
            'create_admin', email='citizen@example.com', password='Other-Pass-999',
            force=True, stdout=StringIO(),
        )
        self.citizen.refresh_from_db()
        self.assertTrue(self.citizen.check_password('Other-Pass-999'))

    def test_email_required(self):
        with self.assertRaises(CommandError):
            call_command('create_admin', email='', password=TEST_PASSWORD, stdout=StringIO())
