"""
Test suite for master data
Tests: list filters and caching, create/update/soft delete, page grants,
duplicate names and the seed command
"""
from io import StringIO

from django.core.cache import cache
from django.core.management import call_command
from django.test import TestCase
from rest_framework import status

from qcportal.core.models import AuditLog
from qcportal.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from qcportal.masters.models import Division, Activity, ErrorCategory, ErrorSubCategory, ResourceRole


class DivisionAPITests(TestCase):
    """Test Division endpoints"""

    def setUp(self):
        cache.clear()
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_create_division(self):
        response = self.client.post('/api/Divisions', {'divisionName': 'Switchgear', 'description': 'LV/MV'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['message'], 'Data saved successfully')
        self.assertEqual(response.data['data']['divisionName'], 'Switchgear')
        self.assertTrue(response.data['data']['isLive'])
        self.assertTrue(AuditLog.objects.filter(action='create', model_name='Division').exists())

    def test_create_duplicate_name_case_insensitive(self):
        """Test division names are unique regardless of case"""
        TestDataFactory.create_division(name='Switchgear')
        response = self.client.post('/api/Divisions', {'divisionName': 'SWITCHGEAR'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'divisionName: Division name already exists')

    def test_create_accepts_lowercase_islive(self):
        """Test the legacy 'islive' key is read as isLive"""
        response = self.client.post('/api/Divisions', {'divisionName': 'Retired', 'islive': False}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertFalse(Division.objects.get(name='Retired').is_live)

    def test_list_filter_is_live(self):
        TestDataFactory.create_division(name='Live one')
        TestDataFactory.create_division(name='Retired one', is_live=False)
        response = self.client.get('/api/Divisions/GetAll', {'isLive': 'true'})
        self.assertEqual([row['divisionName'] for row in response.data['data']], ['Live one'])

        response = self.client.get('/api/Divisions/GetAll')
        self.assertEqual(len(response.data['data']), 2)

    def test_unrecognised_is_live_does_not_fill_live_cache(self):
        """Test an isLive value the filter ignores is cached as the full list"""
        TestDataFactory.create_division(name='Live one')
        TestDataFactory.create_division(name='Retired one', is_live=False)
        response = self.client.get('/api/Divisions/GetAll', {'isLive': '1'})
        self.assertEqual(len(response.data['data']), 2)

        response = self.client.get('/api/Divisions/GetAll', {'isLive': 'true'})
        self.assertEqual([row['divisionName'] for row in response.data['data']], ['Live one'])

        response = self.client.get('/api/Divisions/GetAll', {'isLive': 'false'})
        self.assertEqual([row['divisionName'] for row in response.data['data']], ['Retired one'])

    def test_list_cache_is_refreshed_after_create(self):
        """Test a cached list reflects rows created afterwards"""
        TestDataFactory.create_division(name='First')
        self.assertEqual(len(self.client.get('/api/Divisions/GetAll').data['data']), 1)
        self.client.post('/api/Divisions', {'divisionName': 'Second'}, format='json')
        self.assertEqual(len(self.client.get('/api/Divisions/GetAll').data['data']), 2)

    def test_update_division(self):
        division = TestDataFactory.create_division(name='Old')
        response = self.client.put(f'/api/Divisions/{division.id}', {'divisionName': 'New'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Data updated successfully')
        division.refresh_from_db()
        self.assertEqual(division.name, 'New')
        log = AuditLog.objects.get(action='update', model_name='Division')
        self.assertEqual(log.changes['name'], {'old': 'Old', 'new': 'New'})

    def test_update_keeps_own_name(self):
        """Test saving a row under its own name is not a duplicate"""
        division = TestDataFactory.create_division(name='Same')
        response = self.client.put(f'/api/Divisions/{division.id}', {'divisionName': 'Same'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_delete_is_soft(self):
        """Test delete retires the row instead of removing it"""
        division = TestDataFactory.create_division()
        response = self.client.delete(f'/api/Divisions/{division.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['data']['isLive'])
        division.refresh_from_db()
        self.assertFalse(division.is_live)

    def test_not_found(self):
        response = self.client.get('/api/Divisions/99999')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Division not found')


class MasterPermissionTests(TestCase):
    """Test page grants gate master data changes"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_list_without_grant(self):
        """Test any authenticated user can read master lists"""
        TestDataFactory.create_product()
        response = self.client.get('/api/Products/GetAll')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_create_without_grant(self):
        response = self.client.post('/api/Products', {'productName': 'Breaker'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error'], 'You do not have permission to create products')

    def test_create_with_grant(self):
        TestDataFactory.grant_page(self.user, 'Products', create=True)
        response = self.client.post('/api/Products', {'productName': 'Breaker'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_edit_grant_does_not_allow_delete(self):
        TestDataFactory.grant_page(self.user, 'Error Categories', edit=True)
        category = TestDataFactory.create_error_category()
        response = self.client.put(f'/api/ErrorCategories/{category.id}', {'errorCategoryName': 'Renamed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.delete(f'/api/ErrorCategories/{category.id}')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class ActivityAPITests(TestCase):
    """Test Activity endpoints"""

    def setUp(self):
        cache.clear()
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.division = TestDataFactory.create_division()

    def test_create_activity(self):
        data = {'activityName': 'Design', 'divisionId': self.division.id, 'order': 2}
        response = self.client.post('/api/Activities', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['division']['divisionId'], self.division.id)

    def test_create_activity_unknown_division(self):
        response = self.client.post('/api/Activities', {'activityName': 'Design', 'divisionId': 99999}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(response.data['error'].startswith('divisionId'))

    def test_list_filter_by_division_in_order(self):
        """Test activities come back in division order"""
        TestDataFactory.create_activity(name='Second', division=self.division, order=2)
        TestDataFactory.create_activity(name='First', division=self.division, order=1)
        TestDataFactory.create_activity(name='Elsewhere')
        response = self.client.get('/api/Activities/GetAll', {'divisionId': self.division.id})
        self.assertEqual([row['activityName'] for row in response.data['data']], ['First', 'Second'])

    def test_division_rename_shows_in_cached_activities(self):
        """Test renaming a division drops the cached activity list"""
        TestDataFactory.create_activity(division=self.division)
        self.client.get('/api/Activities/GetAll')
        self.division.name = 'Renamed division'
        self.division.save()
        response = self.client.get('/api/Activities/GetAll')
        self.assertEqual(response.data['data'][0]['division']['divisionName'], 'Renamed division')


class ResourceAPITests(TestCase):
    """Test resource roles and resources"""

    def setUp(self):
        cache.clear()
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.role = TestDataFactory.create_resource_role(name='Powell EDH Engineer')

    def test_roles_embed_live_resources(self):
        TestDataFactory.create_resource(name='Alice', role=self.role)
        TestDataFactory.create_resource(name='Bob', role=self.role, is_live=False)
        response = self.client.get('/api/ResourceRoles/GetAll')
        role = response.data['data'][0]
        self.assertEqual([r['resourceName'] for r in role['resources']], ['Alice'])

    def test_resources_filter_by_role(self):
        TestDataFactory.create_resource(name='Alice', role=self.role)
        TestDataFactory.create_resource(name='Carol')
        response = self.client.get('/api/Resources/GetAll', {'resourceRoleId': self.role.id})
        self.assertEqual(len(response.data['data']), 1)
        self.assertEqual(response.data['data'][0]['resourceRoleName'], 'Powell EDH Engineer')

    def test_create_resource(self):
        data = {'resourceName': 'Dave', 'resourceRoleId': self.role.id}
        response = self.client.post('/api/Resources', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)


class ErrorSubCategoryAPITests(TestCase):
    """Test error sub-categories"""

    def setUp(self):
        cache.clear()
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.category = TestDataFactory.create_error_category(name='Dimensional')

    def test_duplicate_within_category(self):
        TestDataFactory.create_error_sub_category(name='Tolerance', category=self.category)
        data = {'errorSubCategoryName': 'tolerance', 'errorCategoryId': self.category.id}
        response = self.client.post('/api/ErrorSubCategories', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_same_name_in_other_category(self):
        """Test sub-category names only need to be unique within a category"""
        TestDataFactory.create_error_sub_category(name='Specification', category=self.category)
        other = TestDataFactory.create_error_category(name='Material')
        data = {'errorSubCategoryName': 'Specification', 'errorCategoryId': other.id}
        response = self.client.post('/api/ErrorSubCategories', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['errorCategory']['errorCategoryName'], 'Material')

    def test_filter_by_category(self):
        TestDataFactory.create_error_sub_category(category=self.category)
        TestDataFactory.create_error_sub_category()
        response = self.client.get('/api/ErrorSubCategories/GetAll', {'errorCategoryId': self.category.id})
        self.assertEqual(len(response.data['data']), 1)


class DrawingDescriptionAPITests(TestCase):
    def setUp(self):
        cache.clear()
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_create_and_retire(self):
        response = self.client.post('/api/DrawingDescriptions', {'description': 'General arrangement'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        pk = response.data['data']['drawingDescId']

        self.client.delete(f'/api/DrawingDescriptions/{pk}')
        response = self.client.get('/api/DrawingDescriptions/GetAll', {'isLive': 'false'})
        self.assertEqual([row['drawingDescId'] for row in response.data['data']], [pk])


class SeedMastersCommandTests(TestCase):
    """Test the seed_masters command"""

    def test_seed_creates_defaults(self):
        call_command('seed_masters', stdout=StringIO())
        self.assertEqual(ErrorCategory.objects.count(), 6)
        self.assertTrue(ErrorSubCategory.objects.filter(category__name='Dimensional', name='Tolerance').exists())
        self.assertTrue(ResourceRole.objects.filter(name='Powell EDH Manager').exists())

    def test_seed_is_repeatable(self):
        call_command('seed_masters', stdout=StringIO())
        out = StringIO()
        call_command('seed_masters', stdout=out)
        self.assertIn('Rows Created: 0', out.getvalue())
        self.assertEqual(ErrorCategory.objects.count(), 6)

    def test_clear_retires_custom_categories(self):
        """Test --clear retires rows that are not part of the defaults"""
        custom = TestDataFactory.create_error_category(name='Custom')
        call_command('seed_masters', '--clear', stdout=StringIO())
        custom.refresh_from_db()
        self.assertFalse(custom.is_live)
        self.assertTrue(ErrorCategory.objects.get(name='Dimensional').is_live)

    def test_activity_model_ordering(self):
        division = TestDataFactory.create_division()
        TestDataFactory.create_activity(name='B', division=division, order=2)
        TestDataFactory.create_activity(name='A', division=division, order=1)
        self.assertEqual(list(Activity.objects.values_list('name', flat=True)), ['A', 'B'])
