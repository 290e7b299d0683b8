"""
Local project picker store.

Persisted as JSON under the name 'project-store':
    {"state": {"projects": [<option>, ...]}, "version": 1}
A file written with another version, or one that cannot be read, is ignored
and the store starts empty.
"""
import json
import logging
import os
import tempfile
from typing import Dict, List

from qcportal.projects.options import make_option, with_placeholder

logger = logging.getLogger(__name__)

STORE_NAME = 'project-store'
STORE_VERSION = 1


class ProjectStore:
    def __init__(self, directory: str):
        self.path = os.path.join(directory, f'{STORE_NAME}.json')
        self.projects: List[Dict] = self._load()

    def _load(self) -> List[Dict]:
        if not os.path.exists(self.path):
            return []
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                payload = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Discarding unreadable {STORE_NAME}: {str(e)}")
            return []

        if not isinstance(payload, dict) or payload.get('version') != STORE_VERSION:
            logger.warning(f"Discarding {STORE_NAME} with version {payload.get('version') if isinstance(payload, dict) else None}")
            return []
        projects = (payload.get('state') or {}).get('projects')
        return projects if isinstance(projects, list) else []

    def _save(self):
        payload = {'state': {'projects': self.projects}, 'version': STORE_VERSION}
        directory = os.path.dirname(self.path) or '.'
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=f'.{STORE_NAME}-')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(payload, f)
            os.replace(tmp_path, self.path)
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def add_project(self, project: Dict):
        """Add a serialized planning, replacing any option with the same value"""
        option = make_option(project)
        self.projects = [p for p in self.projects if p['value'] != option['value']] + [option]
        self._save()

    def update_project(self, project: Dict):
        """Replace the option for this planning; unknown plannings are ignored"""
        option = make_option(project)
        self.projects = [option if p['value'] == option['value'] else p for p in self.projects]
        self._save()

    def remove_project(self, planning_id: int):
        self.projects = [p for p in self.projects if p['value'] != planning_id]
        self._save()

    def set_projects(self, projects: List[Dict]):
        self.projects = [make_option(project) for project in projects]
        self._save()

    def get_project_options(self) -> List[Dict]:
        return with_placeholder(self.projects)
