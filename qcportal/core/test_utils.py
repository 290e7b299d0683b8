"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from qcportal.core.models import Page, UserPermission
from qcportal.masters.models import (
    Division, Activity, Product, ResourceRole, Resource,
    ErrorCategory, ErrorSubCategory, DrawingDescription
)
from qcportal.projects.models import ProjectPlanning, ProjectActivity
from qcportal.clarifications.models import Clarification
from qcportal.discrepancies.models import Discrepancy
from decimal import Decimal
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='Testpass123!', role='engineer', is_superuser=False):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            role=role,
            is_superuser=is_superuser,
            is_staff=is_superuser
        )

    @staticmethod
    def create_admin(**kwargs):
        return TestDataFactory.create_user(role='admin', **kwargs)

    @staticmethod
    def create_page(name=None, parent=None):
        if not name:
            name = f'Page_{TestDataFactory.random_string(6)}'
        return Page.objects.create(name=name, parent=parent)

    @staticmethod
    def grant_page(user, page_name, view=True, create=False, edit=False, delete=False):
        """Give a user grants on a page, creating the page when needed"""
        page, _ = Page.objects.get_or_create(name=page_name)
        return UserPermission.objects.create(
            user=user,
            page=page,
            page_permission=True,
            can_view=view,
            can_create=create,
            can_edit=edit,
            can_delete=delete
        )

    # Masters
    @staticmethod
    def create_division(name=None, is_live=True):
        if not name:
            name = f'Division_{TestDataFactory.random_string(6)}'
        return Division.objects.create(name=name, description=f'{name} description', is_live=is_live)

    @staticmethod
    def create_activity(name=None, division=None, order=1, is_live=True):
        if not name:
            name = f'Activity_{TestDataFactory.random_string(6)}'
        if division is None:
            division = TestDataFactory.create_division()
        return Activity.objects.create(name=name, division=division, order=order, is_live=is_live)

    @staticmethod
    def create_product(name=None, is_live=True):
        if not name:
            name = f'Product_{TestDataFactory.random_string(6)}'
        return Product.objects.create(name=name, is_live=is_live)

    @staticmethod
    def create_resource_role(name=None, is_live=True):
        if not name:
            name = f'Role_{TestDataFactory.random_string(6)}'
        return ResourceRole.objects.create(name=name, is_live=is_live)

    @staticmethod
    def create_resource(name=None, role=None, is_live=True):
        if not name:
            name = f'Resource_{TestDataFactory.random_string(6)}'
        if role is None:
            role = TestDataFactory.create_resource_role()
        return Resource.objects.create(name=name, role=role, is_live=is_live)

    @staticmethod
    def create_error_category(name=None, is_live=True):
        if not name:
            name = f'Category_{TestDataFactory.random_string(6)}'
        return ErrorCategory.objects.create(name=name, is_live=is_live)

    @staticmethod
    def create_error_sub_category(name=None, category=None, is_live=True):
        if not name:
            name = f'SubCategory_{TestDataFactory.random_string(6)}'
        if category is None:
            category = TestDataFactory.create_error_category()
        return ErrorSubCategory.objects.create(name=name, category=category, is_live=is_live)

    @staticmethod
    def create_drawing_description(description=None, is_live=True):
        if not description:
            description = f'Drawing {TestDataFactory.random_string(6)}'
        return DrawingDescription.objects.create(description=description, is_live=is_live)

    # Projects
    @staticmethod
    def create_planning(project_no=None, division=None, product=None, user=None, **kwargs):
        """Create a test planning"""
        if not project_no:
            project_no = f'PRJ-{TestDataFactory.random_string(6).upper()}'
        return ProjectPlanning.objects.create(
            project_no=project_no,
            project_name=kwargs.pop('project_name', f'Project {project_no}'),
            customer_name=kwargs.pop('customer_name', 'Powell'),
            division=division or TestDataFactory.create_division(),
            product=product or TestDataFactory.create_product(),
            units=kwargs.pop('units', 1),
            system_voltage_kv=kwargs.pop('system_voltage_kv', Decimal('13.80')),
            created_by=user,
            **kwargs
        )

    @staticmethod
    def create_project_activity(planning=None, activity=None, user=None, **kwargs):
        if planning is None:
            planning = TestDataFactory.create_planning(user=user)
        if activity is None:
            activity = TestDataFactory.create_activity(division=planning.division)
        return ProjectActivity.objects.create(planning=planning, activity=activity, created_by=user, **kwargs)

    @staticmethod
    def create_clarification(project_activity=None, user=None, **kwargs):
        """Create a test clarification"""
        if project_activity is None:
            project_activity = TestDataFactory.create_project_activity(user=user)
        return Clarification.objects.create(
            planning=project_activity.planning,
            project_activity=project_activity,
            description=kwargs.pop('description', 'Which revision applies?'),
            raised_by=user,
            criticality=kwargs.pop('criticality', 'Medium'),
            date_raised=kwargs.pop('date_raised', timezone.localdate()),
            created_by=user,
            **kwargs
        )

    @staticmethod
    def create_discrepancy(project_activity=None, user=None, **kwargs):
        """Create a test discrepancy"""
        if project_activity is None:
            project_activity = TestDataFactory.create_project_activity(user=user)
        return Discrepancy.objects.create(
            planning=project_activity.planning,
            project_activity=project_activity,
            error_description=kwargs.pop('error_description', 'Dimension mismatch'),
            created_by=user,
            **kwargs
        )


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
