"""
Per-resource services over ApiService.

Every method returns an ApiResponse; nothing here raises on HTTP failures.
"""
import logging
import os
from typing import Any, Dict, Iterable, List, Optional

from .api import ApiService, ApiResponse

logger = logging.getLogger(__name__)

API_PREFIX = '/api'


class ResourceService:
    """CRUD over the <Resource>/GetAll, <Resource> and <Resource>/<id> routes"""

    def __init__(self, api: ApiService, resource: str):
        self.api = api
        self.resource = resource

    def _url(self, suffix: str = '') -> str:
        return f"{API_PREFIX}/{self.resource}{suffix}"

    def get_all(self, **params) -> ApiResponse:
        return self.api.get(self._url('/GetAll'), params=params or None)

    def get(self, pk: int) -> ApiResponse:
        return self.api.get(self._url(f'/{pk}'))

    def create(self, data: Dict) -> ApiResponse:
        return self.api.post(self._url(), data)

    def update(self, pk: int, data: Dict) -> ApiResponse:
        return self.api.put(self._url(f'/{pk}'), data)

    def delete(self, pk: int) -> ApiResponse:
        return self.api.delete(self._url(f'/{pk}'))

    def list_or_empty(self, **params) -> List[Dict]:
        """Rows from get_all, or [] when the call fails"""
        response = self.get_all(**params)
        if not response.success:
            logger.warning(f"Could not load {self.resource}: {response.error}")
            return []
        return response.data or []


class DivisionService(ResourceService):
    """Divisions; rows sent with a lowercase 'islive' key are normalized"""

    def __init__(self, api: ApiService):
        super().__init__(api, 'Divisions')

    @staticmethod
    def _normalize(data: Dict) -> Dict:
        data = dict(data)
        if 'islive' in data:
            value = data.pop('islive')
            data.setdefault('isLive', value)
        return data

    def get_all(self, **params) -> ApiResponse:
        response = super().get_all(**params)
        if response.success and isinstance(response.data, list):
            response.data = [self._normalize(row) for row in response.data]
        return response

    def create(self, data: Dict) -> ApiResponse:
        return super().create(self._normalize(data))

    def update(self, pk: int, data: Dict) -> ApiResponse:
        return super().update(pk, self._normalize(data))


class ProjectService(ResourceService):
    def __init__(self, api: ApiService):
        super().__init__(api, 'Plannings')

    def create(self, data: Dict) -> ApiResponse:
        return self.api.post(self._url('/CreatePlanningWithActivities'), data)

    def get_options(self) -> ApiResponse:
        return self.api.get(self._url('/Options'))

    def get_activities(self, planning_id: int) -> ApiResponse:
        return self.api.get(self._url(f'/{planning_id}/ProjectActivities'))

    def create_activity(self, data: Dict) -> ApiResponse:
        return self.api.post(f'{API_PREFIX}/ProjectActivities', data)

    def update_activity(self, pk: int, data: Dict) -> ApiResponse:
        return self.api.put(f'{API_PREFIX}/ProjectActivities/{pk}', data)

    def delete_activity(self, pk: int) -> ApiResponse:
        return self.api.delete(f'{API_PREFIX}/ProjectActivities/{pk}')

    def get_quick_notes(self, planning_id: int) -> ApiResponse:
        return self.api.get(f'{API_PREFIX}/ProjectQuickNotes/GetProjectQuickNotesWithPlanningId/{planning_id}')

    def create_quick_note(self, data: Dict) -> ApiResponse:
        return self.api.post(f'{API_PREFIX}/ProjectQuickNotes', data)

    def update_quick_note(self, pk: int, data: Dict) -> ApiResponse:
        return self.api.put(f'{API_PREFIX}/ProjectQuickNotes/{pk}', data)

    def delete_quick_note(self, pk: int) -> ApiResponse:
        return self.api.delete(f'{API_PREFIX}/ProjectQuickNotes/{pk}')

    def sync_store(self, store, **params) -> bool:
        """Replace the store's projects with the live plannings from the API"""
        params.setdefault('isLive', 'true')
        response = self.get_all(**params)
        if not response.success:
            logger.warning(f"Project store not synced: {response.error}")
            return False
        store.set_projects(response.data or [])
        return True


class ClarificationService(ResourceService):
    def __init__(self, api: ApiService):
        super().__init__(api, 'Clarifications')

    def get(self, pk: int) -> ApiResponse:
        return self.api.get(self._url(f'/GetClarification/{pk}'))

    def get_quick_notes(self, clarification_id: int) -> ApiResponse:
        return self.api.get(
            f'{API_PREFIX}/ClarificationQuickNotes/GetClarificationQuickNotesWithClarificationId/{clarification_id}'
        )

    def create_quick_note(self, data: Dict) -> ApiResponse:
        return self.api.post(f'{API_PREFIX}/ClarificationQuickNotes', data)

    def update_quick_note(self, pk: int, data: Dict) -> ApiResponse:
        return self.api.put(f'{API_PREFIX}/ClarificationQuickNotes/{pk}', data)

    def delete_quick_note(self, pk: int) -> ApiResponse:
        return self.api.delete(f'{API_PREFIX}/ClarificationQuickNotes/{pk}')

    def get_files(self, clarification_id: int) -> ApiResponse:
        return self.api.get(
            f'{API_PREFIX}/ClarificationFileUploads/GetClarificationFileUploadWithClarificationId/{clarification_id}'
        )

    def upload_file(self, clarification_id: int, path: str, uploaded_by: Optional[str] = None,
                    data_from: Optional[str] = None) -> ApiResponse:
        """Attach a local file to a clarification"""
        form = {
            'ClarificationId': clarification_id,
            'UploadedBy': uploaded_by,
            'DataFrom': data_from,
        }
        with open(path, 'rb') as handle:
            files = {'File': (os.path.basename(path), handle)}
            return self.api.upload(f'{API_PREFIX}/ClarificationFileUploads', files=files, data=form)

    def delete_file(self, pk: int) -> ApiResponse:
        return self.api.delete(f'{API_PREFIX}/ClarificationFileUploads/{pk}')


class DiscrepancyService(ResourceService):
    def __init__(self, api: ApiService):
        super().__init__(api, 'Discrepancies')

    def summary(self, planning_id: Optional[int] = None) -> ApiResponse:
        params = {'planningId': planning_id} if planning_id else None
        return self.api.get(self._url('/Summary'), params=params)


class AuthService:
    """Login/refresh/logout; keeps the ApiService bearer token current"""

    def __init__(self, api: ApiService):
        self.api = api
        self.refresh_token: Optional[str] = None

    def login(self, email: str, password: str) -> ApiResponse:
        response = self.api.post(f'{API_PREFIX}/account/Login', {'email': email, 'password': password})
        if response.success:
            self._remember(response.data)
            logger.info(f"Logged in as {email}")
        return response

    def refresh(self) -> ApiResponse:
        if not self.refresh_token:
            return ApiResponse(success=False, error='Not logged in')
        response = self.api.post(f'{API_PREFIX}/account/RefreshToken', {'refreshToken': self.refresh_token})
        if response.success:
            self._remember(response.data)
        return response

    def logout(self) -> ApiResponse:
        response = self.api.post(f'{API_PREFIX}/account/Logout', {'refreshToken': self.refresh_token})
        self.api.set_token(None)
        self.refresh_token = None
        return response

    def me(self) -> ApiResponse:
        return self.api.get(f'{API_PREFIX}/Account/Me')

    def _remember(self, payload: Dict):
        self.api.set_token(payload.get('accessToken'))
        self.refresh_token = payload.get('refreshToken') or self.refresh_token


class UserService:
    def __init__(self, api: ApiService):
        self.api = api

    def get_all(self) -> ApiResponse:
        return self.api.get(f'{API_PREFIX}/Account/GetAllUsersAsync')

    def get_roles(self) -> ApiResponse:
        return self.api.get(f'{API_PREFIX}/Account/GetAllRolesAsync')

    def register(self, data: Dict) -> ApiResponse:
        return self.api.post(f'{API_PREFIX}/Account/register', data)

    def get(self, pk: int) -> ApiResponse:
        return self.api.get(f'{API_PREFIX}/Account/users/{pk}')

    def update(self, pk: int, data: Dict) -> ApiResponse:
        return self.api.put(f'{API_PREFIX}/Account/users/{pk}', data)

    def delete(self, pk: int) -> ApiResponse:
        return self.api.delete(f'{API_PREFIX}/Account/users/{pk}')


class UserPermissionService(ResourceService):
    def __init__(self, api: ApiService):
        super().__init__(api, 'UserPermissions')

    def get_by_user(self, user_id: int) -> ApiResponse:
        return self.api.get(self._url(f'/GetByUserId/{user_id}'))


class PortalServices:
    """All services bound to one ApiService"""

    def __init__(self, api: ApiService):
        self.api = api
        self.auth_service = AuthService(api)
        self.user_service = UserService(api)
        self.page_service = ResourceService(api, 'Pages')
        self.user_permission_service = UserPermissionService(api)
        self.division_service = DivisionService(api)
        self.activity_service = ResourceService(api, 'Activities')
        self.product_service = ResourceService(api, 'Products')
        self.resource_role_service = ResourceService(api, 'ResourceRoles')
        self.resource_service = ResourceService(api, 'Resources')
        self.error_category_service = ResourceService(api, 'ErrorCategories')
        self.error_sub_category_service = ResourceService(api, 'ErrorSubCategories')
        self.drawing_description_service = ResourceService(api, 'DrawingDescriptions')
        self.project_service = ProjectService(api)
        self.clarification_service = ClarificationService(api)
        self.discrepancy_service = DiscrepancyService(api)

    def masters_snapshot(self, names: Iterable[str] = ('division', 'activity', 'product', 'resource_role',
                                                       'resource', 'error_category', 'error_sub_category',
                                                       'drawing_description')) -> Dict[str, Any]:
        """Live rows of each named master list; a failed list comes back empty"""
        return {
            name: getattr(self, f'{name}_service').list_or_empty(isLive='true')
            for name in names
        }
