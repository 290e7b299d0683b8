"""
Role-based and page-based access control.

Roles carry a fixed set of capability flags; pages carry per-user
view/create/edit/delete grants stored in UserPermission.
"""
import logging

from rest_framework import status
from rest_framework.permissions import BasePermission

from .envelope import api_error

logger = logging.getLogger('qcportal.core')

ROLE_CAPABILITIES = (
    'canCreateProject',
    'canEditProject',
    'canDeleteProject',
    'canCreateClarification',
    'canResolveClarification',
    'canCreateDiscrepancy',
    'canResolveDiscrepancy',
    'canExportData',
    'canManageUsers',
)

BASE_PERMISSIONS = {
    'canCreateProject': False,
    'canEditProject': False,
    'canDeleteProject': False,
    'canCreateClarification': True,
    'canResolveClarification': False,
    'canCreateDiscrepancy': False,
    'canResolveDiscrepancy': False,
    'canExportData': False,
    'canManageUsers': False,
}

ROLE_GRANTS = {
    'admin': {
        'canCreateProject': True,
        'canEditProject': True,
        'canDeleteProject': True,
        'canResolveClarification': True,
        'canCreateDiscrepancy': True,
        'canResolveDiscrepancy': True,
        'canExportData': True,
        'canManageUsers': True,
    },
    'project_manager': {
        'canCreateProject': True,
        'canEditProject': True,
        'canResolveClarification': True,
        'canResolveDiscrepancy': True,
        'canExportData': True,
    },
    'qc': {
        'canCreateDiscrepancy': True,
        'canResolveDiscrepancy': True,
        'canExportData': True,
    },
    'engineer': {
        'canCreateClarification': True,
        'canCreateDiscrepancy': True,
        'canExportData': True,
    },
}

PAGE_ACTIONS = {
    'view': 'can_view',
    'create': 'can_create',
    'edit': 'can_edit',
    'delete': 'can_delete',
    'canView': 'can_view',
    'canCreate': 'can_create',
    'canEdit': 'can_edit',
    'canDelete': 'can_delete',
    'pagePermission': 'page_permission',
}


def role_permissions(role):
    """Capability flags for a role; unknown roles get the base set"""
    permissions = dict(BASE_PERMISSIONS)
    permissions.update(ROLE_GRANTS.get(role, {}))
    return permissions


def user_capabilities(user):
    if getattr(user, 'is_superuser', False):
        return role_permissions('admin')
    return role_permissions(getattr(user, 'role', None))


def has_capability(user, capability):
    if not user or not user.is_authenticated:
        return False
    return bool(user_capabilities(user).get(capability, False))


def has_page_permission(user, page_name, action):
    """
    True when the user holds the given grant on the page.

    Page names compare case-insensitively. Admins and superusers always pass;
    a user without a record for the page has no access.
    """
    if not user or not user.is_authenticated:
        return False
    if user.is_admin_role:
        return True
    field = PAGE_ACTIONS.get(action)
    if not field or not page_name:
        return False
    grant = user.page_permissions.select_related('page').filter(page__name__iexact=page_name).first()
    if grant is None:
        return False
    return bool(getattr(grant, field))


class IsAdminRole(BasePermission):
    """Allows access only to users with the admin role (or superusers)"""
    message = 'Only administrators can perform this action'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_admin_role)


def forbidden(request, action, reason='without permission'):
    """403 envelope for a refused action, logged with the caller's name"""
    logger.warning(f"User {request.user.username} attempted to {action} {reason}")
    return api_error(f'You do not have permission to {action}', status.HTTP_403_FORBIDDEN)


def require_capability(request, capability, action):
    """
    None when the caller's role has the capability flag, else a 403 envelope.

    Usage:
        denied = require_capability(request, 'canCreateProject', 'create projects')
        if denied is not None:
            return denied
    """
    if has_capability(request.user, capability):
        return None
    return forbidden(request, action, reason=f'without {capability}')


def require_page_permission(request, page_name, action):
    """None when the caller holds the page grant for action, else a 403 envelope"""
    if has_page_permission(request.user, page_name, action):
        return None
    return forbidden(request, f'{action} {page_name.lower()}')
