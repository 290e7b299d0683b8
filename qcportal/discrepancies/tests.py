"""
Test suite for discrepancies
Tests: QC cycle clamping, QC level parsing, error category consistency,
resolve permissions, summary counts and export
"""
from django.test import TestCase, SimpleTestCase
from rest_framework import status

from qcportal.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from qcportal.discrepancies.models import Discrepancy, clamp_qc_cycle


class ClampQcCycleTests(SimpleTestCase):
    def test_clamp(self):
        self.assertEqual(clamp_qc_cycle(5), 5)
        self.assertEqual(clamp_qc_cycle('7'), 7)
        self.assertEqual(clamp_qc_cycle(2.9), 2)
        self.assertEqual(clamp_qc_cycle(0), 1)
        self.assertEqual(clamp_qc_cycle(-4), 1)
        self.assertEqual(clamp_qc_cycle(250), 100)

    def test_non_numeric_becomes_one(self):
        self.assertEqual(clamp_qc_cycle('abc'), 1)
        self.assertEqual(clamp_qc_cycle(None), 1)
        self.assertEqual(clamp_qc_cycle(''), 1)

    def test_non_finite(self):
        self.assertEqual(clamp_qc_cycle('inf'), 100)
        self.assertEqual(clamp_qc_cycle('1e999'), 100)
        self.assertEqual(clamp_qc_cycle('-Infinity'), 1)
        self.assertEqual(clamp_qc_cycle('nan'), 1)


class DiscrepancyAPITests(TestCase):
    """Test discrepancy endpoints"""

    def setUp(self):
        self.qc = TestDataFactory.create_user(role='qc')
        self.engineer = TestDataFactory.create_user(role='engineer')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.qc)
        self.row = TestDataFactory.create_project_activity()
        self.category = TestDataFactory.create_error_category(name='Dimensional')
        self.sub_category = TestDataFactory.create_error_sub_category(name='Tolerance', category=self.category)

    def _payload(self, **overrides):
        data = {
            'planningId': self.row.planning_id,
            'projectActivityId': self.row.id,
            'qcLevelId': 'QC3',
            'qcCycle': 2,
            'drawingNumber': 'DWG-1001',
            'errorSubCategoryId': self.sub_category.id,
            'errorDescription': 'Hole spacing out of tolerance',
            'criticalityIndex': 'High',
        }
        data.update(overrides)
        return data

    def test_create_discrepancy(self):
        """Test a sub-category alone fills in its category"""
        response = self.client.post('/api/Discrepancies', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data['data']
        self.assertEqual(data['qcLevelId'], 3)
        self.assertEqual(data['qcLevel'], 'QC3')
        self.assertEqual(data['errorCategoryId'], self.category.id)
        self.assertEqual(data['errorCategory'], 'Dimensional')
        self.assertEqual(data['statusOfError'], 'Identified')

    def test_qc_cycle_is_clamped(self):
        """Test out-of-range QC cycles are clamped instead of rejected"""
        response = self.client.post('/api/Discrepancies', self._payload(qcCycle=500), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['qcCycle'], 100)

        response = self.client.post('/api/Discrepancies', self._payload(qcCycle='abc'), format='json')
        self.assertEqual(response.data['data']['qcCycle'], 1)

        response = self.client.post('/api/Discrepancies', self._payload(qcCycle=None), format='json')
        self.assertEqual(response.data['data']['qcCycle'], 1)

        response = self.client.post('/api/Discrepancies', self._payload(qcCycle='Infinity'), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['qcCycle'], 100)

    def test_invalid_qc_level(self):
        response = self.client.post('/api/Discrepancies', self._payload(qcLevelId=9), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_sub_category_from_other_category(self):
        other = TestDataFactory.create_error_category(name='Material')
        response = self.client.post('/api/Discrepancies', self._payload(errorCategoryId=other.id), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'],
                         'errorSubCategoryId: Sub-category does not belong to the selected error category')

    def test_activity_from_other_project(self):
        other = TestDataFactory.create_project_activity()
        response = self.client.post('/api/Discrepancies', self._payload(projectActivityId=other.id), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_requires_capability(self):
        self.client.authenticate_user(TestDataFactory.create_user(role='project_manager'))
        response = self.client.post('/api/Discrepancies', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_owner_cannot_resolve(self):
        """Test engineers may edit their own discrepancy but not resolve it"""
        discrepancy = TestDataFactory.create_discrepancy(project_activity=self.row, user=self.engineer)
        self.client.authenticate_user(self.engineer)
        response = self.client.put(f'/api/Discrepancies/{discrepancy.id}', {'remarks': 'Checked again'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.put(f'/api/Discrepancies/{discrepancy.id}', {'statusOfError': 'Corrected'},
                                   format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_qc_resolves(self):
        discrepancy = TestDataFactory.create_discrepancy(project_activity=self.row, user=self.engineer)
        response = self.client.put(f'/api/Discrepancies/{discrepancy.id}',
                                   {'statusOfError': 'Corrected', 'dateResolved': '2024-05-20T08:00:00Z'},
                                   format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['dateResolved'], '2024-05-20')
        discrepancy.refresh_from_db()
        self.assertFalse(discrepancy.is_open)

    def test_stranger_cannot_delete(self):
        discrepancy = TestDataFactory.create_discrepancy(project_activity=self.row, user=self.qc)
        self.client.authenticate_user(self.engineer)
        response = self.client.delete(f'/api/Discrepancies/{discrepancy.id}')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_delete_is_soft(self):
        discrepancy = TestDataFactory.create_discrepancy(project_activity=self.row, user=self.qc)
        response = self.client.delete(f'/api/Discrepancies/{discrepancy.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Discrepancy.objects.get(pk=discrepancy.id).is_live)

    def test_list_filters(self):
        TestDataFactory.create_discrepancy(project_activity=self.row, qc_level=3, status_of_error='Corrected')
        TestDataFactory.create_discrepancy(project_activity=self.row, qc_level=1)
        TestDataFactory.create_discrepancy(qc_level=3)
        response = self.client.get('/api/Discrepancies/GetAll', {'planningId': self.row.planning_id, 'qcLevelId': 3})
        self.assertEqual(len(response.data['data']), 1)
        response = self.client.get('/api/Discrepancies/GetAll', {'statusOfError': 'identified'})
        self.assertEqual(len(response.data['data']), 2)

    def test_export(self):
        TestDataFactory.create_discrepancy(project_activity=self.row, qc_level=2, drawing_number='DWG-7')
        response = self.client.get('/api/Discrepancies/Export', {'fields': 'drawingNumber,qcLevel'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        lines = response.content.decode().splitlines()
        self.assertEqual(lines, ['Drawing Number,Qc Level', 'DWG-7,QC2'])


class DiscrepancySummaryTests(TestCase):
    """Test discrepancy summary counts"""

    def setUp(self):
        self.user = TestDataFactory.create_user(role='qc')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.row = TestDataFactory.create_project_activity()
        TestDataFactory.create_discrepancy(project_activity=self.row, criticality='High')
        TestDataFactory.create_discrepancy(project_activity=self.row, criticality='Low', status_of_error='Corrected')
        TestDataFactory.create_discrepancy(project_activity=self.row, status_of_error='Ignored')
        TestDataFactory.create_discrepancy(project_activity=self.row, criticality='High', is_live=False)
        TestDataFactory.create_discrepancy(criticality='Medium')

    def test_summary_for_planning(self):
        response = self.client.get('/api/Discrepancies/Summary', {'planningId': self.row.planning_id})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data['data']
        self.assertEqual(data['total'], 3)
        self.assertEqual(data['open'], 1)
        self.assertEqual(data['byStatus'], {'Identified': 1, 'In Review': 0, 'Corrected': 1, 'Ignored': 1})
        self.assertEqual(data['byCriticality'], {'Low': 1, 'Medium': 0, 'High': 1, 'Unspecified': 1})

    def test_summary_all(self):
        response = self.client.get('/api/Discrepancies/Summary')
        self.assertEqual(response.data['data']['total'], 4)

    def test_summary_bad_planning_id(self):
        response = self.client.get('/api/Discrepancies/Summary', {'planningId': 'abc'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'planningId must be a number')
