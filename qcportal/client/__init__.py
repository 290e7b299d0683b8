"""
Python client for the QC portal REST API.

    api = ApiService('http://localhost:8000')
    services = PortalServices(api)
    services.auth_service.login('qc@example.com', 'secret')
    store = ProjectStore('/tmp')
    services.project_service.sync_store(store)
"""
from .api import ApiService, ApiResponse, clean_data
from .services import PortalServices
from .store import ProjectStore

__all__ = ['ApiService', 'ApiResponse', 'clean_data', 'PortalServices', 'ProjectStore']
