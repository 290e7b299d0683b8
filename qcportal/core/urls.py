from django.urls import path
from .views import (
    login, refresh_token, logout, user_me,
    user_list, user_register, user_detail, role_list,
    page_list, page_create, page_detail,
    user_permission_list, user_permissions_by_user, user_permission_create, user_permission_detail,
    audit_log_list
)

urlpatterns = [
    # Auth endpoints
    path('account/Login', login, name='account-login'),
    path('account/RefreshToken', refresh_token, name='account-refresh'),
    path('account/Logout', logout, name='account-logout'),
    path('Account/Me', user_me, name='account-me'),

    # User endpoints
    path('Account/GetAllUsersAsync', user_list, name='user-list'),
    path('Account/register', user_register, name='user-register'),
    path('Account/users/<int:pk>', user_detail, name='user-detail'),
    path('Account/GetAllRolesAsync', role_list, name='role-list'),

    # Page endpoints
    path('Pages/GetAll', page_list, name='page-list'),
    path('Pages', page_create, name='page-create'),
    path('Pages/<int:pk>', page_detail, name='page-detail'),

    # UserPermission endpoints
    path('UserPermissions/GetAll', user_permission_list, name='user-permission-list'),
    path('UserPermissions/GetByUserId/<int:user_id>', user_permissions_by_user, name='user-permissions-by-user'),
    path('UserPermissions', user_permission_create, name='user-permission-create'),
    path('UserPermissions/<int:pk>', user_permission_detail, name='user-permission-detail'),

    # AuditLog endpoints
    path('AuditLogs/GetAll', audit_log_list, name='audit-log-list'),
]
