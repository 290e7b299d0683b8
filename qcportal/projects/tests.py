"""
Test suite for projects
Tests: planning creation with activities, updates adding activities, derived
status, dropdown options, export, project activities and quick notes
"""
from django.core.cache import cache
from django.test import TestCase, SimpleTestCase
from rest_framework import status

from qcportal.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from qcportal.projects.models import ProjectPlanning, ProjectActivity, ProjectQuickNote
from qcportal.projects.options import make_option, option_label, with_placeholder, PLACEHOLDER_OPTION
from qcportal.projects.utils import add_missing_activities


class ProjectOptionTests(SimpleTestCase):
    """Test project dropdown option helpers"""

    def test_label_uses_product_name(self):
        project = {'planningId': 7, 'projectNo': 'P-7', 'projectName': 'Substation', 'product': {'productName': 'MCC'}}
        self.assertEqual(option_label(project), 'P-7 - MCC')
        option = make_option(project)
        self.assertEqual(option['value'], 7)
        self.assertEqual(option['product'], 'MCC')

    def test_label_falls_back_to_project_name(self):
        self.assertEqual(option_label({'projectNo': 'P-1', 'projectName': 'Substation'}), 'P-1 - Substation')
        self.assertEqual(option_label({'projectNo': 'P-1'}), 'P-1 - Project')

    def test_with_placeholder_sorts_by_label(self):
        options = [{'value': 2, 'label': 'b'}, {'value': 1, 'label': 'A'}]
        result = with_placeholder(options)
        self.assertEqual(result[0], PLACEHOLDER_OPTION)
        self.assertEqual([o['value'] for o in result[1:]], [1, 2])


class PlanningModelTests(TestCase):
    """Test planning status derivation and activity backfill"""

    def setUp(self):
        self.planning = TestDataFactory.create_planning()

    def test_status_not_started_without_activities(self):
        self.assertEqual(self.planning.derived_status(), 'Not Started')

    def test_status_in_progress(self):
        TestDataFactory.create_project_activity(planning=self.planning, activity_status='In Progress')
        TestDataFactory.create_project_activity(planning=self.planning)
        self.assertEqual(self.planning.derived_status(), 'In Progress')

    def test_status_ignores_retired_activities(self):
        TestDataFactory.create_project_activity(planning=self.planning, activity_status='Completed', is_live=False)
        self.assertEqual(self.planning.derived_status(), 'Not Started')

    def test_status_completed_flag(self):
        self.planning.is_completed = True
        self.assertEqual(self.planning.derived_status(), 'Completed')

    def test_stored_status_wins(self):
        self.planning.project_status = 'On Hold'
        self.assertEqual(self.planning.derived_status(), 'On Hold')

    def test_add_missing_activities(self):
        """Test live rows are kept, retired rows revived and new rows created"""
        live = TestDataFactory.create_project_activity(planning=self.planning, activity_status='In Progress')
        retired = TestDataFactory.create_project_activity(planning=self.planning, is_live=False)
        new_activity = TestDataFactory.create_activity(division=self.planning.division)

        touched = add_missing_activities(
            self.planning, [live.activity_id, retired.activity_id, new_activity.id, new_activity.id]
        )
        self.assertEqual(len(touched), 2)
        live.refresh_from_db()
        retired.refresh_from_db()
        self.assertEqual(live.activity_status, 'In Progress')
        self.assertTrue(retired.is_live)
        self.assertEqual(self.planning.project_activities.filter(activity=new_activity).count(), 1)


class PlanningAPITests(TestCase):
    """Test planning endpoints"""

    def setUp(self):
        cache.clear()
        self.manager = TestDataFactory.create_user(role='project_manager')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.manager)
        self.division = TestDataFactory.create_division()
        self.product = TestDataFactory.create_product(name='MCC')
        self.design = TestDataFactory.create_activity(name='Design', division=self.division, order=1)
        self.review = TestDataFactory.create_activity(name='Review', division=self.division, order=2)

    def _payload(self, **overrides):
        data = {
            'projectNo': 'PRJ-100',
            'projectName': 'Substation upgrade',
            'customerName': 'Powell',
            'divisionId': self.division.id,
            'productId': self.product.id,
            'projectReceivedDate': '2024-05-01T00:00:00Z',
            'units': 2,
            'systemVoltageInKV': 13.8,
            'activitesList': [self.design.id, self.review.id, self.design.id],
        }
        data.update(overrides)
        return data

    def test_create_with_activities(self):
        """Test a planning is created with one activity per distinct id"""
        response = self.client.post('/api/Plannings/CreatePlanningWithActivities', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data['data']
        self.assertEqual(data['projectStatus'], 'Not Started')
        self.assertEqual(data['productName'], 'MCC')
        self.assertEqual(data['projectReceivedDate'], '2024-05-01')
        self.assertEqual([a['activityName'] for a in data['projectActivities']], ['Design', 'Review'])
        self.assertTrue(all(a['activityStatus'] == 'Not Started' for a in data['projectActivities']))

    def test_create_with_unknown_activity_creates_nothing(self):
        response = self.client.post('/api/Plannings/CreatePlanningWithActivities',
                                    self._payload(activitesList=[self.design.id, 99999]), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('99999', response.data['error'])
        self.assertFalse(ProjectPlanning.objects.exists())

    def test_create_duplicate_project_no(self):
        TestDataFactory.create_planning(project_no='PRJ-100')
        response = self.client.post('/api/Plannings/CreatePlanningWithActivities', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'projectNo: Project number already exists')

    def test_create_rejects_bad_numbers(self):
        response = self.client.post('/api/Plannings/CreatePlanningWithActivities',
                                    self._payload(systemVoltageInKV=0), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post('/api/Plannings/CreatePlanningWithActivities',
                                    self._payload(units=0), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_requires_capability(self):
        """Test engineers cannot create projects"""
        self.client.authenticate_user(TestDataFactory.create_user(role='engineer'))
        response = self.client.post('/api/Plannings/CreatePlanningWithActivities', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error'], 'You do not have permission to create projects')

    def test_update_adds_missing_activities(self):
        """Test updating with activitesList adds only the missing activities"""
        planning = TestDataFactory.create_planning(division=self.division, product=self.product)
        existing = TestDataFactory.create_project_activity(planning=planning, activity=self.design,
                                                           activity_status='In Progress')
        response = self.client.put(f'/api/Plannings/{planning.id}',
                                   {'projectName': 'Renamed', 'activitesList': [self.design.id, self.review.id]},
                                   format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['projectName'], 'Renamed')
        self.assertEqual(len(response.data['data']['projectActivities']), 2)
        existing.refresh_from_db()
        self.assertEqual(existing.activity_status, 'In Progress')
        self.assertEqual(response.data['data']['projectStatus'], 'In Progress')

    def test_delete_requires_delete_capability(self):
        """Test project managers cannot delete but admins soft delete"""
        planning = TestDataFactory.create_planning()
        response = self.client.delete(f'/api/Plannings/{planning.id}')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(TestDataFactory.create_admin())
        response = self.client.delete(f'/api/Plannings/{planning.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        planning.refresh_from_db()
        self.assertFalse(planning.is_live)

    def test_list_filters(self):
        TestDataFactory.create_planning(project_no='ALPHA-1', customer_name='Acme')
        TestDataFactory.create_planning(project_no='BETA-2', customer_name='Globex')
        response = self.client.get('/api/Plannings/GetAll', {'search': 'acme'})
        self.assertEqual([p['projectNo'] for p in response.data['data']], ['ALPHA-1'])

    def test_options(self):
        """Test options start with the placeholder and skip retired plannings"""
        TestDataFactory.create_planning(project_no='B-2', product=self.product)
        TestDataFactory.create_planning(project_no='A-1', product=self.product)
        TestDataFactory.create_planning(project_no='C-3', is_live=False)
        response = self.client.get('/api/Plannings/Options')
        labels = [option['label'] for option in response.data['data']]
        self.assertEqual(labels, ['Select a project', 'A-1 - MCC', 'B-2 - MCC'])

    def test_options_refresh_after_create(self):
        self.client.get('/api/Plannings/Options')
        self.client.post('/api/Plannings/CreatePlanningWithActivities', self._payload(), format='json')
        response = self.client.get('/api/Plannings/Options')
        self.assertEqual(response.data['data'][1]['label'], 'PRJ-100 - MCC')

    def test_export_csv(self):
        TestDataFactory.create_planning(project_no='EXP-1')
        response = self.client.get('/api/Plannings/Export', {'fields': 'projectNo,units'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'text/csv')
        self.assertIn('attachment; filename="projects_', response['Content-Disposition'])
        lines = response.content.decode().splitlines()
        self.assertEqual(lines[0], 'Project No,Units')
        self.assertEqual(lines[1], 'EXP-1,1')

    def test_not_found(self):
        response = self.client.get('/api/Plannings/99999')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Project not found')


class ProjectActivityAPITests(TestCase):
    """Test project activity endpoints"""

    def setUp(self):
        self.manager = TestDataFactory.create_user(role='project_manager')
        self.engineer = TestDataFactory.create_user(role='engineer')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.manager)
        self.row = TestDataFactory.create_project_activity(cp_assigned_engineer=self.engineer)

    def test_list_for_planning(self):
        TestDataFactory.create_project_activity(planning=self.row.planning, is_live=False)
        response = self.client.get(f'/api/Plannings/{self.row.planning_id}/ProjectActivities')
        self.assertEqual(len(response.data['data']), 1)

    def test_add_duplicate_activity(self):
        data = {'planningId': self.row.planning_id, 'activityId': self.row.activity_id}
        response = self.client.post('/api/ProjectActivities', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('already planned', response.data['error'])

    def test_assigned_engineer_can_update(self):
        """Test the assigned engineer may update their own activity"""
        self.client.authenticate_user(self.engineer)
        response = self.client.put(f'/api/ProjectActivities/{self.row.id}',
                                   {'activityStatus': 'In Progress', 'actualHours': 4.5}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.row.refresh_from_db()
        self.assertEqual(self.row.activity_status, 'In Progress')
        self.assertEqual(self.row.modified_by, self.engineer)

    def test_other_engineer_cannot_update(self):
        self.client.authenticate_user(TestDataFactory.create_user(role='engineer'))
        response = self.client.put(f'/api/ProjectActivities/{self.row.id}', {'activityStatus': 'Completed'},
                                   format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_finish_before_start(self):
        data = {'cpPlannedStartDate': '2024-05-10', 'cpPlannedFinishedDate': '2024-05-01'}
        response = self.client.put(f'/api/ProjectActivities/{self.row.id}', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(response.data['error'].startswith('cpPlannedFinishedDate'))

    def test_blank_date_clears_value(self):
        self.row.sigma_start_date = '2024-05-01'
        self.row.save()
        response = self.client.put(f'/api/ProjectActivities/{self.row.id}', {'sigmaStartDate': ''}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.row.refresh_from_db()
        self.assertIsNone(self.row.sigma_start_date)

    def test_delete_is_soft(self):
        response = self.client.delete(f'/api/ProjectActivities/{self.row.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(ProjectActivity.objects.get(pk=self.row.id).is_live)


class ProjectQuickNoteAPITests(TestCase):
    """Test project quick notes"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.planning = TestDataFactory.create_planning()

    def test_create_and_list(self):
        response = self.client.post('/api/ProjectQuickNotes',
                                    {'planningId': self.planning.id, 'quickNotes': 'Awaiting GA drawings'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['createdBy'], self.user.username)

        response = self.client.get(f'/api/ProjectQuickNotes/GetProjectQuickNotesWithPlanningId/{self.planning.id}')
        self.assertEqual(len(response.data['data']), 1)

    def test_only_owner_can_delete(self):
        note = ProjectQuickNote.objects.create(planning=self.planning, quick_notes='Mine', created_by=self.user)
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.delete(f'/api/ProjectQuickNotes/{note.id}')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(self.user)
        response = self.client.delete(f'/api/ProjectQuickNotes/{note.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(ProjectQuickNote.objects.filter(pk=note.id).exists())
