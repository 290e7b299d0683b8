"""
Test suite for clarifications
Tests: raising, closing and reopening, ownership rules, age, quick notes,
file attachments and export
"""
import os
import shutil
import tempfile
from datetime import date, timedelta

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status

from qcportal.core.models import AuditLog
from qcportal.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from qcportal.clarifications.models import Clarification, ClarificationFileUpload


class ClarificationModelTests(TestCase):
    """Test Clarification model methods"""

    def setUp(self):
        self.user = TestDataFactory.create_user()

    def test_closing_stamps_date_closed(self):
        clarification = TestDataFactory.create_clarification(user=self.user)
        self.assertIsNone(clarification.date_closed)
        clarification.status = 'Closed'
        clarification.save()
        self.assertIsNotNone(clarification.date_closed)

    def test_age_while_open(self):
        clarification = TestDataFactory.create_clarification(user=self.user, date_raised=date(2024, 5, 1))
        self.assertEqual(clarification.age_in_days(today=date(2024, 5, 11)), 10)

    def test_age_when_closed(self):
        """Test age stops counting at the closed date"""
        clarification = TestDataFactory.create_clarification(
            user=self.user, date_raised=date(2024, 5, 1), date_closed=date(2024, 5, 4), status='Closed'
        )
        self.assertEqual(clarification.age_in_days(today=date(2024, 6, 1)), 3)

    def test_str(self):
        clarification = TestDataFactory.create_clarification(user=self.user)
        self.assertIn(clarification.planning.project_no, str(clarification))


class ClarificationAPITests(TestCase):
    """Test clarification endpoints"""

    def setUp(self):
        self.engineer = TestDataFactory.create_user(role='engineer')
        self.manager = TestDataFactory.create_user(role='project_manager')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.engineer)
        self.row = TestDataFactory.create_project_activity()

    def _payload(self, **overrides):
        data = {
            'planningId': self.row.planning_id,
            'projectActivityId': self.row.id,
            'docReference': 'GA-001 rev B',
            'clarificationDescription': 'Busbar rating not stated',
            'raisedById': self.engineer.id,
            'criticalityIndex': 'High',
            'dateRaised': '2024-05-01',
        }
        data.update(overrides)
        return data

    def test_create_clarification(self):
        response = self.client.post('/api/Clarifications', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data['data']
        self.assertEqual(data['status'], 'Open')
        self.assertEqual(data['projectNo'], self.row.planning.project_no)
        self.assertEqual(data['raisedBy'], self.engineer.username)
        self.assertEqual(data['uploadFiles'], [])
        self.assertIsNone(data['dateClosed'])

    def test_create_activity_from_other_project(self):
        """Test the activity must belong to the selected project"""
        other = TestDataFactory.create_project_activity()
        response = self.client.post('/api/Clarifications', self._payload(projectActivityId=other.id), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'projectActivityId: Activity does not belong to the selected project')

    def test_create_invalid_criticality(self):
        response = self.client.post('/api/Clarifications', self._payload(criticalityIndex='Urgent'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_owner_cannot_close(self):
        """Test closing needs the resolve capability"""
        clarification = TestDataFactory.create_clarification(project_activity=self.row, user=self.engineer)
        response = self.client.put(f'/api/Clarifications/{clarification.id}', {'status': 'Closed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_owner_can_edit_description(self):
        clarification = TestDataFactory.create_clarification(project_activity=self.row, user=self.engineer)
        response = self.client.put(f'/api/Clarifications/{clarification.id}',
                                   {'clarificationDescription': 'Updated'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_stranger_cannot_edit(self):
        clarification = TestDataFactory.create_clarification(project_activity=self.row, user=self.manager)
        response = self.client.put(f'/api/Clarifications/{clarification.id}',
                                   {'clarificationDescription': 'Updated'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_close_and_reopen(self):
        """Test closing stamps the date and reopening clears it"""
        clarification = TestDataFactory.create_clarification(project_activity=self.row, user=self.engineer)
        self.client.authenticate_user(self.manager)
        response = self.client.put(f'/api/Clarifications/{clarification.id}',
                                   {'status': 'Closed', 'response': 'Use 2000A', 'responsesFromId': self.manager.id},
                                   format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNotNone(response.data['data']['dateClosed'])
        self.assertEqual(response.data['data']['responsesFrom'], self.manager.username)

        response = self.client.put(f'/api/Clarifications/{clarification.id}', {'status': 'Open'}, format='json')
        self.assertIsNone(response.data['data']['dateClosed'])
        log = AuditLog.objects.filter(action='update', model_name='Clarification').first()
        self.assertIn('status', log.changes)

    def test_closed_before_raised(self):
        clarification = TestDataFactory.create_clarification(project_activity=self.row, user=self.engineer,
                                                             date_raised=date(2024, 5, 10))
        self.client.authenticate_user(self.manager)
        response = self.client.put(f'/api/Clarifications/{clarification.id}',
                                   {'status': 'Closed', 'dateClosed': '2024-05-01'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_closing_stamp_checked_against_date_raised(self):
        """Test the stamped close date is held to the same ordering as a given one"""
        raised = timezone.localdate() + timedelta(days=5)
        clarification = TestDataFactory.create_clarification(project_activity=self.row, user=self.engineer,
                                                             date_raised=raised)
        self.client.authenticate_user(self.manager)
        response = self.client.put(f'/api/Clarifications/{clarification.id}', {'status': 'Closed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'dateClosed: Date closed cannot be before date raised')
        clarification.refresh_from_db()
        self.assertIsNone(clarification.date_closed)

    def test_list_filters(self):
        TestDataFactory.create_clarification(project_activity=self.row, user=self.engineer, criticality='High')
        TestDataFactory.create_clarification(project_activity=self.row, user=self.engineer, criticality='Low')
        TestDataFactory.create_clarification(user=self.engineer, criticality='High')
        response = self.client.get('/api/Clarifications/GetAll',
                                   {'planningId': self.row.planning_id, 'criticalityIndex': 'high'})
        self.assertEqual(len(response.data['data']), 1)

    def test_get_clarification(self):
        clarification = TestDataFactory.create_clarification(project_activity=self.row, user=self.engineer)
        response = self.client.get(f'/api/Clarifications/GetClarification/{clarification.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['clarificationId'], clarification.id)

        response = self.client.get('/api/Clarifications/GetClarification/99999')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_delete_is_soft(self):
        clarification = TestDataFactory.create_clarification(project_activity=self.row, user=self.engineer)
        response = self.client.delete(f'/api/Clarifications/{clarification.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Clarification.objects.get(pk=clarification.id).is_live)

    def test_export(self):
        TestDataFactory.create_clarification(project_activity=self.row, user=self.engineer, date_raised=date(2024, 5, 2))
        TestDataFactory.create_clarification(project_activity=self.row, user=self.engineer, date_raised=date(2024, 7, 2))
        response = self.client.get('/api/Clarifications/Export',
                                   {'fields': 'projectNo,dateRaised', 'start': '2024-05-01', 'end': '2024-05-31'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        lines = response.content.decode().splitlines()
        self.assertEqual(lines[0], 'Project No,Date Raised')
        self.assertEqual(len(lines), 2)


class ClarificationQuickNoteAPITests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.clarification = TestDataFactory.create_clarification(user=self.user)

    def test_create_update_and_list(self):
        response = self.client.post('/api/ClarificationQuickNotes',
                                    {'clarificationId': self.clarification.id, 'quickNotes': 'Asked customer'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        note_id = response.data['data']['clarificationQuickNotesId']

        response = self.client.put(f'/api/ClarificationQuickNotes/{note_id}', {'quickNotes': 'Customer replied'},
                                   format='json')
        self.assertEqual(response.data['data']['modifiedBy'], self.user.username)

        response = self.client.get(
            f'/api/ClarificationQuickNotes/GetClarificationQuickNotesWithClarificationId/{self.clarification.id}'
        )
        self.assertEqual([n['quickNotes'] for n in response.data['data']], ['Customer replied'])


class ClarificationFileUploadTests(TestCase):
    """Test clarification attachments"""

    def setUp(self):
        self.media_root = tempfile.mkdtemp()
        self.media_override = override_settings(MEDIA_ROOT=self.media_root)
        self.media_override.enable()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.clarification = TestDataFactory.create_clarification(user=self.user)

    def tearDown(self):
        self.media_override.disable()
        shutil.rmtree(self.media_root, ignore_errors=True)

    def _upload(self, content=b'%PDF-1.4 test', name='markup.pdf', **fields):
        data = {
            'File': SimpleUploadedFile(name, content, content_type='application/pdf'),
            'ClarificationId': self.clarification.id,
        }
        data.update(fields)
        return self.client.post('/api/ClarificationFileUploads', data, format='multipart')

    def test_upload_file(self):
        """Test uploading records metadata and defaults the uploader"""
        response = self._upload()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data['data']
        self.assertEqual(data['fileName'], 'markup.pdf')
        self.assertEqual(data['fileSize'], len(b'%PDF-1.4 test'))
        self.assertEqual(data['uploadedBy'], self.user.username)
        self.assertEqual(data['datafrom'], 'clarification')
        self.assertTrue(data['filePath'].startswith('http://testserver/media/clarifications/'))
        self.assertTrue(AuditLog.objects.filter(action='upload').exists())

    def test_upload_keeps_given_metadata(self):
        response = self._upload(UploadedBy='Customer portal', DataFrom='discrepancy')
        self.assertEqual(response.data['data']['uploadedBy'], 'Customer portal')
        self.assertEqual(response.data['data']['datafrom'], 'discrepancy')

    def test_upload_unknown_clarification(self):
        response = self._upload(ClarificationId=99999)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @override_settings(QC_MAX_UPLOAD_MB=1)
    def test_upload_too_large(self):
        response = self._upload(content=b'x' * (1024 * 1024 + 1))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'File: File is larger than the 1 MB upload limit')

    def test_files_listed_with_clarification(self):
        self._upload()
        response = self.client.get(
            f'/api/ClarificationFileUploads/GetClarificationFileUploadWithClarificationId/{self.clarification.id}'
        )
        self.assertEqual(len(response.data['data']), 1)
        response = self.client.get(f'/api/Clarifications/GetClarification/{self.clarification.id}')
        self.assertEqual(len(response.data['data']['uploadFiles']), 1)

    def test_delete_removes_file(self):
        file_id = self._upload().data['data']['fileId']
        path = ClarificationFileUpload.objects.get(pk=file_id).file.path
        self.assertTrue(os.path.exists(path))

        response = self.client.delete(f'/api/ClarificationFileUploads/{file_id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(os.path.exists(path))
        self.assertFalse(ClarificationFileUpload.objects.filter(pk=file_id).exists())

    def test_other_engineer_cannot_delete_file(self):
        """Test attachments are removed only by the clarification's owner or a resolver"""
        file_id = self._upload().data['data']['fileId']
        path = ClarificationFileUpload.objects.get(pk=file_id).file.path

        self.client.authenticate_user(TestDataFactory.create_user(role='engineer'))
        response = self.client.delete(f'/api/ClarificationFileUploads/{file_id}')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(os.path.exists(path))
        self.assertTrue(ClarificationFileUpload.objects.filter(pk=file_id).exists())

        self.client.authenticate_user(TestDataFactory.create_user(role='project_manager'))
        response = self.client.delete(f'/api/ClarificationFileUploads/{file_id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(os.path.exists(path))
