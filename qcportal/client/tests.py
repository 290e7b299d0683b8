"""
Test suite for the API client
Tests: payload cleaning, envelope unwrapping, error mapping, GET cache,
services and the local project store
"""
import json
import os
import shutil
import tempfile
from datetime import date, datetime
from unittest import mock

import requests
from django.test import SimpleTestCase

from qcportal.client.api import ApiService, ApiResponse, clean_data
from qcportal.client.services import PortalServices
from qcportal.client.store import ProjectStore, STORE_NAME


def fake_response(body=None, status_code=200, reason='OK', content_type='application/json'):
    response = mock.Mock()
    response.ok = 200 <= status_code < 300
    response.status_code = status_code
    response.reason = reason
    response.headers = {'content-type': content_type}
    if isinstance(body, (dict, list)):
        response.json.return_value = body
        response.text = json.dumps(body)
    else:
        response.json.side_effect = ValueError('No JSON')
        response.text = body or ''
    return response


def fake_session(*responses):
    session = mock.Mock()
    session.headers = {}
    session.request.side_effect = list(responses)
    return session


class CleanDataTests(SimpleTestCase):
    def test_drops_empty_values(self):
        payload = {
            'projectNo': 'P-1',
            'projectName': '',
            'customerName': None,
            'activitesList': [],
            'nested': {'a': None},
            'units': 0,
            'isCompleted': False,
        }
        self.assertEqual(clean_data(payload), {'projectNo': 'P-1', 'units': 0, 'isCompleted': False})

    def test_dates_become_iso(self):
        cleaned = clean_data({'dateRaised': date(2024, 5, 1), 'at': datetime(2024, 5, 1, 8, 30)})
        self.assertEqual(cleaned, {'dateRaised': '2024-05-01', 'at': '2024-05-01T08:30:00'})

    def test_lists_are_cleaned(self):
        self.assertEqual(clean_data([1, None, '', {'x': ''}, 2]), [1, 2])

    def test_nothing_left(self):
        self.assertIsNone(clean_data({'a': None}))


class ApiServiceTests(SimpleTestCase):
    """Test request handling of ApiService"""

    def test_get_unwraps_envelope(self):
        session = fake_session(fake_response({'success': True, 'data': [{'divisionId': 1}], 'message': 'ok'}))
        api = ApiService('http://qc.local/', session=session)
        response = api.get('/api/Divisions/GetAll', params={'isLive': 'true'})
        self.assertTrue(response.success)
        self.assertEqual(response.data, [{'divisionId': 1}])
        self.assertEqual(response.message, 'ok')
        session.request.assert_called_once_with(
            'GET', 'http://qc.local/api/Divisions/GetAll', timeout=10, params={'isLive': 'true'}
        )

    def test_plain_json_body(self):
        api = ApiService('http://qc.local', session=fake_session(fake_response([1, 2])))
        self.assertEqual(api.get('/api/x').data, [1, 2])

    def test_error_envelope(self):
        body = {'success': False, 'error': 'Project number already exists'}
        api = ApiService('http://qc.local', session=fake_session(fake_response(body, 400, 'Bad Request')))
        response = api.post('/api/Plannings/CreatePlanningWithActivities', {'projectNo': 'P-1'})
        self.assertFalse(response.success)
        self.assertEqual(response.error, 'Project number already exists')

    def test_error_message_fallback(self):
        body = {'message': 'Service is down for maintenance'}
        api = ApiService('http://qc.local', session=fake_session(fake_response(body, 503, 'Service Unavailable')))
        self.assertEqual(api.get('/api/x').error, 'Service is down for maintenance')

    def test_error_without_body(self):
        response = fake_response('<html>Bad gateway</html>', 502, 'Bad Gateway', content_type='text/html')
        api = ApiService('http://qc.local', session=fake_session(response))
        self.assertEqual(api.get('/api/x').error, 'HTTP 502: Bad Gateway')

    def test_timeout(self):
        session = fake_session(requests.exceptions.Timeout())
        api = ApiService('http://qc.local', timeout=3, session=session)
        response = api.get('/api/x')
        self.assertFalse(response.success)
        self.assertEqual(response.error, 'Request timeout (3s)')

    def test_connection_error(self):
        session = fake_session(requests.exceptions.ConnectionError('Connection refused'))
        api = ApiService('http://qc.local', session=session)
        response = api.get('/api/x')
        self.assertFalse(response.success)
        self.assertIn('Connection refused', response.error)

    def test_bearer_token(self):
        session = fake_session()
        api = ApiService('http://qc.local', token='abc', session=session)
        self.assertEqual(session.headers['Authorization'], 'Bearer abc')
        api.set_token(None)
        self.assertNotIn('Authorization', session.headers)

    def test_post_sends_cleaned_json(self):
        session = fake_session(fake_response({'success': True, 'data': {'divisionId': 3}}, 201, 'Created'))
        api = ApiService('http://qc.local', session=session)
        api.post('/api/Divisions', {'divisionName': 'Switchgear', 'description': ''})
        self.assertEqual(session.request.call_args.kwargs['json'], {'divisionName': 'Switchgear'})

    def test_get_cache_and_write_invalidation(self):
        """Test cached GETs are reused until a write succeeds"""
        ok = {'success': True, 'data': [1]}
        session = fake_session(fake_response(ok), fake_response(ok), fake_response(ok))
        api = ApiService('http://qc.local', session=session)

        api.get('/api/Products/GetAll', use_cache=True)
        api.get('/api/Products/GetAll', use_cache=True)
        self.assertEqual(session.request.call_count, 1)

        api.delete('/api/Products/1')
        api.get('/api/Products/GetAll', use_cache=True)
        self.assertEqual(session.request.call_count, 3)

    def test_failed_get_not_cached(self):
        session = fake_session(fake_response({'error': 'nope'}, 500, 'Server Error'),
                               fake_response({'success': True, 'data': []}))
        api = ApiService('http://qc.local', session=session)
        self.assertFalse(api.get('/api/x', use_cache=True).success)
        self.assertTrue(api.get('/api/x', use_cache=True).success)

    def test_get_with_fallback(self):
        session = fake_session(requests.exceptions.ConnectionError('down'),
                               fake_response({'success': True, 'data': ['live']}))
        api = ApiService('http://qc.local', session=session)
        self.assertEqual(api.get_with_fallback('/api/x', ['mock']), (['mock'], False))
        self.assertEqual(api.get_with_fallback('/api/x', ['mock']), (['live'], True))


class ServiceTests(SimpleTestCase):
    """Test per-resource services"""

    def setUp(self):
        self.api = mock.Mock(spec=ApiService)
        self.services = PortalServices(self.api)

    def test_division_service_normalizes_islive(self):
        self.api.get.return_value = ApiResponse(success=True, data=[{'divisionId': 1, 'islive': False}])
        response = self.services.division_service.get_all()
        self.assertEqual(response.data, [{'divisionId': 1, 'isLive': False}])

        self.services.division_service.create({'divisionName': 'X', 'islive': True})
        self.api.post.assert_called_once_with('/api/Divisions', {'divisionName': 'X', 'isLive': True})

    def test_resource_routes(self):
        self.services.error_sub_category_service.get_all(errorCategoryId=2)
        self.api.get.assert_called_with('/api/ErrorSubCategories/GetAll', params={'errorCategoryId': 2})
        self.services.product_service.update(4, {'productName': 'MCC'})
        self.api.put.assert_called_with('/api/Products/4', {'productName': 'MCC'})
        self.services.clarification_service.get(9)
        self.api.get.assert_called_with('/api/Clarifications/GetClarification/9')

    def test_list_or_empty_on_failure(self):
        self.api.get.return_value = ApiResponse(success=False, error='down')
        self.assertEqual(self.services.activity_service.list_or_empty(), [])

    def test_login_sets_token(self):
        self.api.post.return_value = ApiResponse(success=True, data={'accessToken': 'a1', 'refreshToken': 'r1'})
        self.services.auth_service.login('qc@test.com', 'pw')
        self.api.set_token.assert_called_with('a1')
        self.assertEqual(self.services.auth_service.refresh_token, 'r1')

    def test_refresh_without_login(self):
        response = self.services.auth_service.refresh()
        self.assertFalse(response.success)
        self.api.post.assert_not_called()

    def test_sync_store(self):
        plannings = [{'planningId': 1, 'projectNo': 'P-1', 'product': {'productName': 'MCC'}}]
        self.api.get.return_value = ApiResponse(success=True, data=plannings)
        store = mock.Mock()
        self.assertTrue(self.services.project_service.sync_store(store))
        self.api.get.assert_called_with('/api/Plannings/GetAll', params={'isLive': 'true'})
        store.set_projects.assert_called_once_with(plannings)

    def test_sync_store_failure_keeps_store(self):
        self.api.get.return_value = ApiResponse(success=False, error='down')
        store = mock.Mock()
        self.assertFalse(self.services.project_service.sync_store(store))
        store.set_projects.assert_not_called()

    def test_upload_file(self):
        directory = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, directory, True)
        path = os.path.join(directory, 'markup.pdf')
        with open(path, 'wb') as f:
            f.write(b'%PDF')
        self.services.clarification_service.upload_file(5, path, uploaded_by='qc')
        args, kwargs = self.api.upload.call_args
        self.assertEqual(args[0], '/api/ClarificationFileUploads')
        self.assertEqual(kwargs['files']['File'][0], 'markup.pdf')
        self.assertEqual(kwargs['data']['ClarificationId'], 5)

    def test_masters_snapshot(self):
        self.api.get.return_value = ApiResponse(success=True, data=[{'id': 1}])
        snapshot = self.services.masters_snapshot(names=('product', 'drawing_description'))
        self.assertEqual(snapshot, {'product': [{'id': 1}], 'drawing_description': [{'id': 1}]})


class ProjectStoreTests(SimpleTestCase):
    """Test the persisted project picker store"""

    def setUp(self):
        self.directory = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.directory, True)
        self.path = os.path.join(self.directory, f'{STORE_NAME}.json')

    def _project(self, planning_id, project_no, product='MCC', name=None):
        return {'planningId': planning_id, 'projectNo': project_no, 'projectName': name,
                'product': {'productName': product} if product else None}

    def test_empty_store_has_placeholder(self):
        store = ProjectStore(self.directory)
        self.assertEqual(store.get_project_options(), [{'value': 0, 'label': 'Select a project'}])

    def test_add_replaces_same_value(self):
        store = ProjectStore(self.directory)
        store.add_project(self._project(1, 'P-1'))
        store.add_project(self._project(1, 'P-1', product='Switchboard'))
        self.assertEqual(len(store.projects), 1)
        self.assertEqual(store.projects[0]['label'], 'P-1 - Switchboard')

    def test_update_ignores_unknown(self):
        store = ProjectStore(self.directory)
        store.add_project(self._project(1, 'P-1'))
        store.update_project(self._project(2, 'P-2'))
        self.assertEqual([p['value'] for p in store.projects], [1])
        store.update_project(self._project(1, 'P-1b', product=None, name='Renamed'))
        self.assertEqual(store.projects[0]['label'], 'P-1b - Renamed')

    def test_remove_and_set(self):
        store = ProjectStore(self.directory)
        store.set_projects([self._project(2, 'B-2'), self._project(1, 'A-1')])
        store.remove_project(2)
        options = store.get_project_options()
        self.assertEqual([o['label'] for o in options], ['Select a project', 'A-1 - MCC'])

    def test_persists_between_instances(self):
        ProjectStore(self.directory).add_project(self._project(1, 'P-1'))
        with open(self.path, encoding='utf-8') as f:
            payload = json.load(f)
        self.assertEqual(payload['version'], 1)
        self.assertEqual(ProjectStore(self.directory).projects[0]['value'], 1)

    def test_other_version_is_discarded(self):
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump({'state': {'projects': [{'value': 1, 'label': 'old'}]}, 'version': 0}, f)
        self.assertEqual(ProjectStore(self.directory).projects, [])

    def test_corrupt_file_is_discarded(self):
        with open(self.path, 'w', encoding='utf-8') as f:
            f.write('{not json')
        self.assertEqual(ProjectStore(self.directory).projects, [])
