"""
HTTP plumbing shared by every service: request/response handling, envelope
unwrapping, payload cleaning and a small GET cache.
"""
import logging
import time
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Optional, Tuple

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10  # seconds
DEFAULT_CACHE_TTL = 5 * 60  # seconds

_DROP = object()


@dataclass
class ApiResponse:
    success: bool
    data: Any = None
    error: Optional[str] = None
    message: Optional[str] = None


def _clean(value):
    if value is None or value == '':
        return _DROP
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        items = [item for item in (_clean(item) for item in value) if item is not _DROP]
        return items if items else _DROP
    if isinstance(value, dict):
        cleaned = {}
        for key, item in value.items():
            item = _clean(item)
            if item is not _DROP:
                cleaned[key] = item
        return cleaned if cleaned else _DROP
    return value


def clean_data(value):
    """
    Strip a request payload before sending it.

    None and empty strings are removed, lists and dicts left empty by that are
    removed too, dates become ISO strings. False and 0 are kept. Returns None
    when nothing is left.
    """
    cleaned = _clean(value)
    return None if cleaned is _DROP else cleaned


def _parse_body(response):
    content_type = response.headers.get('content-type', '')
    if 'application/json' in content_type:
        try:
            return response.json()
        except ValueError:
            return response.text
    return response.text


def _is_envelope(body):
    return isinstance(body, dict) and 'success' in body and ('data' in body or 'error' in body)


class ApiService:
    """Thin wrapper over a requests.Session that never raises on HTTP failures"""

    def __init__(self, base_url: str, token: Optional[str] = None, timeout: int = DEFAULT_TIMEOUT,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self._cache: Dict[str, Tuple[float, Any]] = {}
        if token:
            self.set_token(token)

    def set_token(self, token: Optional[str]):
        if token:
            self.session.headers['Authorization'] = f'Bearer {token}'
        else:
            self.session.headers.pop('Authorization', None)

    def _request(self, method: str, endpoint: str, data: Any = None, params: Optional[Dict] = None,
                 files: Optional[Dict] = None) -> ApiResponse:
        url = f"{self.base_url}{endpoint}"
        kwargs = {'timeout': self.timeout}
        if params:
            kwargs['params'] = params
        if files is not None:
            kwargs['files'] = files
            kwargs['data'] = clean_data(data) or {}
        elif data is not None and method in ('POST', 'PUT'):
            kwargs['json'] = clean_data(data)

        try:
            response = self.session.request(method, url, **kwargs)
        except requests.exceptions.Timeout:
            logger.warning(f"{method} {endpoint} timed out after {self.timeout}s")
            return ApiResponse(success=False, error=f'Request timeout ({self.timeout}s)')
        except requests.exceptions.RequestException as e:
            logger.warning(f"{method} {endpoint} failed: {str(e)}")
            return ApiResponse(success=False, error=str(e) or 'An unexpected error occurred')

        body = _parse_body(response)
        if not response.ok:
            error = None
            if isinstance(body, dict):
                error = body.get('error') or body.get('message')
            error = error or f'HTTP {response.status_code}: {response.reason}'
            logger.warning(f"{method} {endpoint} -> {error}")
            return ApiResponse(success=False, error=error)

        if _is_envelope(body):
            if not body['success']:
                return ApiResponse(success=False, error=body.get('error') or body.get('message') or 'Request failed')
            return ApiResponse(success=True, data=body.get('data'), message=body.get('message'))
        return ApiResponse(success=True, data=body)

    # Cache
    @staticmethod
    def _cache_key(endpoint: str, params: Optional[Dict]) -> str:
        if not params:
            return endpoint
        query = '&'.join(f"{key}={params[key]}" for key in sorted(params))
        return f"{endpoint}?{query}"

    def clear_cache(self):
        self._cache.clear()

    # Verbs
    def get(self, endpoint: str, params: Optional[Dict] = None, use_cache: bool = False,
            cache_ttl: int = DEFAULT_CACHE_TTL) -> ApiResponse:
        key = self._cache_key(endpoint, params)
        if use_cache:
            cached = self._cache.get(key)
            if cached and cached[0] > time.monotonic():
                return ApiResponse(success=True, data=cached[1])

        response = self._request('GET', endpoint, params=params)
        if use_cache and response.success:
            self._cache[key] = (time.monotonic() + cache_ttl, response.data)
        return response

    def post(self, endpoint: str, data: Any = None) -> ApiResponse:
        return self._write('POST', endpoint, data)

    def put(self, endpoint: str, data: Any = None) -> ApiResponse:
        return self._write('PUT', endpoint, data)

    def delete(self, endpoint: str) -> ApiResponse:
        return self._write('DELETE', endpoint)

    def upload(self, endpoint: str, files: Dict, data: Optional[Dict] = None) -> ApiResponse:
        """Multipart POST"""
        return self._write('POST', endpoint, data, files=files)

    def _write(self, method, endpoint, data=None, files=None):
        response = self._request(method, endpoint, data=data, files=files)
        # Any successful write may change what GETs return
        if response.success:
            self.clear_cache()
        return response

    def get_with_fallback(self, endpoint: str, fallback: Any, params: Optional[Dict] = None) -> Tuple[Any, bool]:
        """(data, True) when the API answers, (fallback, False) otherwise"""
        response = self.get(endpoint, params=params)
        if response.success:
            return response.data, True
        logger.warning(f"API unavailable for {endpoint}, using fallback data: {response.error}")
        return fallback, False
