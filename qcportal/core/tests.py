"""
Test suite for the core app
Tests: login/refresh/logout, users, pages, page grants, role capabilities,
response envelopes, export helpers and list cache invalidation
"""
from datetime import date
from io import StringIO
from unittest import mock

from django.core.cache import cache
from django.core.management import call_command
from django.test import TestCase, SimpleTestCase
from rest_framework import status

from qcportal.core.envelope import first_error_message, envelope_exception_handler
from qcportal.core.export import filter_for_export, field_header
from qcportal.core.model_cache import (
    cache_master_list, get_cached_master_list, cache_project_options, get_cached_project_options
)
from qcportal.core.models import Page, UserPermission, AuditLog, User
from qcportal.core.permissions import (
    role_permissions, has_page_permission, user_capabilities, require_capability, require_page_permission
)
from qcportal.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from qcportal.core.utils import parse_bool

PASSWORD = 'Testpass123!'


class LoginTests(TestCase):
    """Test account login, token refresh and logout"""

    def setUp(self):
        self.user = TestDataFactory.create_user(username='qc.lead', email='qc.lead@test.com', role='qc')
        self.client = AuthenticatedAPIClient()

    def _login(self, **credentials):
        return self.client.post('/api/account/Login', credentials, format='json')

    def test_login_with_email(self):
        """Test login returns tokens, role capabilities and page grants"""
        TestDataFactory.grant_page(self.user, 'Discrepancies', create=True)
        response = self._login(email='qc.lead@test.com', password=PASSWORD)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        data = response.data['data']
        self.assertIn('accessToken', data)
        self.assertIn('refreshToken', data)
        self.assertEqual(data['role'], 'qc')
        self.assertTrue(data['permissions']['canCreateDiscrepancy'])
        self.assertFalse(data['permissions']['canCreateProject'])
        self.assertEqual(data['permissionsDto'][0]['page']['pageName'], 'Discrepancies')

    def test_login_with_username(self):
        """Test login accepts the username in place of the email"""
        response = self._login(username='QC.LEAD', password=PASSWORD)
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_login_wrong_password(self):
        """Test wrong password is rejected with an error envelope"""
        response = self._login(email='qc.lead@test.com', password='wrong')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['error'], 'Invalid email or password')

    def test_login_disabled_account(self):
        """Test deactivated users cannot log in"""
        self.user.is_active = False
        self.user.save()
        response = self._login(email='qc.lead@test.com', password=PASSWORD)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_login_without_identifier(self):
        """Test login without email or username fails validation"""
        response = self._login(password=PASSWORD)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['success'])

    def test_login_is_audited(self):
        """Test a successful login writes an audit entry"""
        self._login(email='qc.lead@test.com', password=PASSWORD)
        self.assertTrue(AuditLog.objects.filter(action='login', user=self.user).exists())

    def test_refresh_token(self):
        """Test a refresh token yields a new access token"""
        login = self._login(email='qc.lead@test.com', password=PASSWORD).data['data']
        response = self.client.post('/api/account/RefreshToken', {'refreshToken': login['refreshToken']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('accessToken', response.data['data'])

    def test_refresh_token_missing(self):
        response = self.client.post('/api/account/RefreshToken', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_refresh_token_invalid(self):
        response = self.client.post('/api/account/RefreshToken', {'refreshToken': 'not-a-token'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_logout_blacklists_refresh_token(self):
        """Test a logged out refresh token can no longer be used"""
        login = self._login(email='qc.lead@test.com', password=PASSWORD).data['data']
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {login['accessToken']}")
        response = self.client.post('/api/account/Logout', {'refreshToken': login['refreshToken']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.post('/api/account/RefreshToken', {'refreshToken': login['refreshToken']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_requires_authentication(self):
        """Test unauthenticated requests get a 401 envelope"""
        response = self.client.get('/api/Account/Me')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data['success'])

    def test_me(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/Account/Me')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['userName'], 'qc.lead')
        self.assertIn('permissions', response.data['data'])


class UserAPITests(TestCase):
    """Test user management endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_list_users(self):
        response = self.client.get('/api/Account/GetAllUsersAsync')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['data']), 2)

    def test_list_users_by_role(self):
        response = self.client.get('/api/Account/GetAllUsersAsync', {'role': 'admin'})
        self.assertEqual([u['userName'] for u in response.data['data']], [self.admin.username])

    def test_register_user(self):
        """Test admin can register a user"""
        data = {
            'userName': 'new.engineer',
            'email': 'new.engineer@test.com',
            'firstName': 'New',
            'role': 'engineer',
            'password': 'Qc-Portal-2024!',
            'confirmPassword': 'Qc-Portal-2024!',
        }
        response = self.client.post('/api/Account/register', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(User.objects.get(username='new.engineer').check_password('Qc-Portal-2024!'))

    def test_register_password_mismatch(self):
        data = {
            'userName': 'new.engineer',
            'email': 'new.engineer@test.com',
            'password': 'Qc-Portal-2024!',
            'confirmPassword': 'Something-else-1',
        }
        response = self.client.post('/api/Account/register', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password', response.data['error'])

    def test_register_requires_admin(self):
        """Test non-admins cannot register users"""
        self.client.authenticate_user(self.user)
        data = {'userName': 'x', 'email': 'x@test.com', 'password': 'Qc-Portal-2024!'}
        response = self.client.post('/api/Account/register', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(response.data['success'])

    def test_update_self_cannot_change_role(self):
        """Test users editing themselves keep their role"""
        self.client.authenticate_user(self.user)
        response = self.client.put(f'/api/Account/users/{self.user.id}',
                                   {'firstName': 'Renamed', 'role': 'admin'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.first_name, 'Renamed')
        self.assertEqual(self.user.role, 'engineer')

    def test_update_other_user_requires_admin(self):
        self.client.authenticate_user(self.user)
        response = self.client.put(f'/api/Account/users/{self.admin.id}', {'firstName': 'x'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_delete_deactivates_user(self):
        """Test deleting a user only deactivates the account"""
        response = self.client.delete(f'/api/Account/users/{self.user.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertFalse(self.user.is_active)

    def test_cannot_deactivate_self(self):
        response = self.client.delete(f'/api/Account/users/{self.admin.id}')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_user_not_found(self):
        response = self.client.get('/api/Account/users/99999')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'User not found')

    def test_roles(self):
        response = self.client.get('/api/Account/GetAllRolesAsync')
        self.assertIn('project_manager', [role['id'] for role in response.data['data']])


class PagePermissionAPITests(TestCase):
    """Test pages and per-user page grants"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_create_page(self):
        response = self.client.post('/api/Pages', {'pageName': 'Reports'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(Page.objects.filter(name='Reports').exists())

    def test_page_cannot_be_its_own_parent(self):
        page = TestDataFactory.create_page()
        response = self.client.put(f'/api/Pages/{page.id}', {'parentPageId': page.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_page_soft_deletes(self):
        page = TestDataFactory.create_page()
        response = self.client.delete(f'/api/Pages/{page.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        page.refresh_from_db()
        self.assertFalse(page.is_live)

    def test_grant_page_permission(self):
        """Test admin grants a user edit rights on a page"""
        page = TestDataFactory.create_page(name='Divisions')
        data = {'userId': self.user.id, 'pageId': page.id, 'pagePermission': True, 'canView': True, 'canEdit': True}
        response = self.client.post('/api/UserPermissions', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['userId'], str(self.user.id))
        self.assertTrue(has_page_permission(self.user, 'divisions', 'edit'))
        self.assertFalse(has_page_permission(self.user, 'divisions', 'delete'))

    def test_revoke_page_permission(self):
        grant = TestDataFactory.grant_page(self.user, 'Products')
        response = self.client.delete(f'/api/UserPermissions/{grant.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(UserPermission.objects.filter(pk=grant.id).exists())

    def test_non_admin_sees_only_own_grants(self):
        TestDataFactory.grant_page(self.user, 'Products')
        TestDataFactory.grant_page(self.admin, 'Divisions')
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/UserPermissions/GetAll')
        self.assertEqual(len(response.data['data']), 1)

        response = self.client.get(f'/api/UserPermissions/GetByUserId/{self.admin.id}')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_audit_logs_admin_only(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/AuditLogs/GetAll')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/AuditLogs/GetAll')
        self.assertEqual(response.status_code, status.HTTP_200_OK)


class PermissionTests(TestCase):
    """Test role capabilities and page grant checks"""

    def test_role_capabilities(self):
        self.assertTrue(role_permissions('admin')['canManageUsers'])
        self.assertTrue(role_permissions('project_manager')['canCreateProject'])
        self.assertFalse(role_permissions('project_manager')['canDeleteProject'])
        self.assertFalse(role_permissions('qc')['canCreateProject'])

    def test_unknown_role_gets_base_permissions(self):
        permissions = role_permissions('visitor')
        self.assertTrue(permissions['canCreateClarification'])
        self.assertFalse(permissions['canExportData'])

    def test_superuser_has_admin_capabilities(self):
        user = TestDataFactory.create_user(is_superuser=True)
        self.assertTrue(user_capabilities(user)['canDeleteProject'])

    def test_admin_passes_page_checks(self):
        admin = TestDataFactory.create_admin()
        self.assertTrue(has_page_permission(admin, 'Anything', 'delete'))

    def test_page_check_without_grant(self):
        user = TestDataFactory.create_user()
        self.assertFalse(has_page_permission(user, 'Divisions', 'view'))

    def test_require_capability_answers_forbidden_envelope(self):
        """Test a missing capability yields the 403 envelope and a granted one yields None"""
        request = mock.Mock(user=TestDataFactory.create_user(role='qc'))
        with self.assertLogs('qcportal.core', level='WARNING'):
            response = require_capability(request, 'canCreateProject', 'create projects')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data, {'success': False, 'error': 'You do not have permission to create projects'})
        self.assertIsNone(require_capability(request, 'canCreateDiscrepancy', 'create discrepancies'))

    def test_require_page_permission(self):
        user = TestDataFactory.create_user()
        TestDataFactory.grant_page(user, 'Products', view=True, create=False)
        request = mock.Mock(user=user)
        self.assertIsNone(require_page_permission(request, 'Products', 'view'))
        with self.assertLogs('qcportal.core', level='WARNING'):
            response = require_page_permission(request, 'Products', 'create')
        self.assertEqual(response.data['error'], 'You do not have permission to create products')


class EnvelopeAndHelperTests(SimpleTestCase):
    """Test error flattening, boolean parsing and export helpers"""

    def test_first_error_message(self):
        self.assertEqual(first_error_message({'projectNo': ['This field is required.']}),
                         'projectNo: This field is required.')
        self.assertEqual(first_error_message({'non_field_errors': ['Bad dates']}), 'Bad dates')
        self.assertEqual(first_error_message([]), 'Invalid request')

    def test_unexpected_error_envelope(self):
        """Test unhandled exceptions become a generic 500 envelope"""
        with self.assertLogs('qcportal.core.envelope', level='ERROR'):
            response = envelope_exception_handler(RuntimeError('boom'), {})
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data, {'success': False, 'error': 'An unexpected error occurred'})

    def test_parse_bool(self):
        self.assertTrue(parse_bool('true'))
        self.assertFalse(parse_bool('0'))
        self.assertIsNone(parse_bool('maybe'))
        self.assertIsNone(parse_bool(None))

    def test_field_header(self):
        self.assertEqual(field_header('createdAt'), 'Created At')
        self.assertEqual(field_header('status'), 'Status')

    def test_filter_for_export_date_range(self):
        """Test rows outside the range or without a date are dropped"""
        rows = [
            {'id': 1, 'createdAt': '2024-05-01T10:00:00Z', 'status': 'Open'},
            {'id': 2, 'dateRaised': '2024-06-15', 'status': 'Closed'},
            {'id': 3, 'status': 'Open'},
        ]
        result = filter_for_export(rows, ['id'], date_range=(date(2024, 5, 1), date(2024, 5, 31)))
        self.assertEqual(result, [{'id': 1}])

    def test_filter_for_export_filters_and_fields(self):
        rows = [{'id': 1, 'status': 'Open', 'x': 'a'}, {'id': 2, 'status': 'Closed', 'x': 'b'}]
        result = filter_for_export(rows, ['id', 'missing'], filters={'status': 'Closed'})
        self.assertEqual(result, [{'id': 2, 'missing': None}])


class ListCacheTests(TestCase):
    """Test cached lists are dropped when their rows change"""

    def setUp(self):
        cache.clear()

    def test_division_change_invalidates_division_and_activity_lists(self):
        cache_master_list('Division', 'all', [{'divisionId': 1}])
        cache_master_list('Activity', 'live', [{'activityId': 1}])
        TestDataFactory.create_division()
        self.assertIsNone(get_cached_master_list('Division', 'all'))
        self.assertIsNone(get_cached_master_list('Activity', 'live'))

    def test_unrelated_change_keeps_cache(self):
        cache_master_list('Product', 'all', [{'productId': 1}])
        TestDataFactory.create_division()
        self.assertIsNotNone(get_cached_master_list('Product', 'all'))

    def test_planning_change_invalidates_project_options(self):
        cache_project_options([{'value': 0, 'label': 'Select a project'}])
        TestDataFactory.create_planning()
        self.assertIsNone(get_cached_project_options())


class CommandTests(TestCase):
    """Test core management commands"""

    def test_seed_pages(self):
        """Test seeding creates the menu pages and is repeatable"""
        call_command('seed_pages', stdout=StringIO())
        call_command('seed_pages', stdout=StringIO())
        divisions = Page.objects.get(name='Divisions')
        self.assertEqual(divisions.parent.name, 'Masters')
        self.assertEqual(Page.objects.filter(name='Divisions').count(), 1)

    def test_check_cache(self):
        out = StringIO()
        call_command('check_cache', stdout=out)
        self.assertIn('Cache SET/GET: Success', out.getvalue())
