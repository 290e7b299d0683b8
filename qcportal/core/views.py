import logging
from datetime import datetime, timezone as dt_timezone

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework_simplejwt.tokens import RefreshToken, AccessToken
from rest_framework_simplejwt.serializers import TokenRefreshSerializer
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from django.contrib.auth import get_user_model
from django.contrib.auth.models import update_last_login
from django.core.exceptions import ObjectDoesNotExist
from django.db import IntegrityError
from django.db.models import Q

from .envelope import api_success, api_error, validation_error
from .models import Page, UserPermission, AuditLog
from .permissions import IsAdminRole, user_capabilities
from .serializers import (
    UserSerializer, UserCreateSerializer, UserUpdateSerializer, LoginSerializer,
    PageSerializer, UserPermissionSerializer, AuditLogSerializer
)
from .utils import create_audit_log, soft_delete, integrity_error_message, parse_bool, snapshot, diff_fields

logger = logging.getLogger('qcportal.core')

User = get_user_model()

USER_AUDIT_FIELDS = ['first_name', 'last_name', 'email', 'phone', 'role', 'is_active']


def _token_expiry(token):
    return datetime.fromtimestamp(token['exp'], tz=dt_timezone.utc).isoformat()


def build_auth_payload(user):
    """Tokens plus the profile and page grants the UI keeps after login"""
    refresh = RefreshToken.for_user(user)
    refresh['role'] = user.role
    access = refresh.access_token
    grants = user.page_permissions.select_related('page').all()
    return {
        'accessToken': str(access),
        'refreshToken': str(refresh),
        'expireAt': _token_expiry(access),
        'userId': str(user.id),
        'email': user.email,
        'userName': user.username,
        'role': user.role,
        'permissions': user_capabilities(user),
        'permissionsDto': UserPermissionSerializer(grants, many=True).data,
    }


# Account views
@api_view(['POST'])
@permission_classes([AllowAny])
def login(request):
    """Log in with email or username and password"""
    serializer = LoginSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_error(serializer.errors)

    identifier = serializer.validated_data.get('email') or serializer.validated_data.get('username')
    user = User.objects.filter(Q(email__iexact=identifier) | Q(username__iexact=identifier)).first()
    if user is None or not user.check_password(serializer.validated_data['password']):
        logger.warning(f"Failed login attempt for '{identifier}'")
        return api_error('Invalid email or password', status.HTTP_401_UNAUTHORIZED)
    if not user.is_active:
        logger.warning(f"Login attempt for disabled account '{identifier}'")
        return api_error('User account is disabled.', status.HTTP_401_UNAUTHORIZED)

    update_last_login(None, user)
    create_audit_log(request=request, action='login', model_name='User', object_id=user.id,
                     object_name=user.username, user=user)
    logger.info(f"User {user.username} logged in")
    return api_success(build_auth_payload(user), message='Login successful!')


@api_view(['POST'])
@permission_classes([AllowAny])
def refresh_token(request):
    """Exchange a refresh token for a new access token"""
    token = request.data.get('refreshToken') or request.data.get('refresh')
    if not token:
        return api_error('refreshToken is required')

    serializer = TokenRefreshSerializer(data={'refresh': token})
    try:
        serializer.is_valid(raise_exception=True)
    except (InvalidToken, TokenError):
        return api_error('Token is invalid or expired.', status.HTTP_401_UNAUTHORIZED)
    except (ObjectDoesNotExist, User.DoesNotExist, AuthenticationFailed):
        # User referenced in token doesn't exist anymore or was deactivated
        return api_error('Token is invalid. User no longer exists.', status.HTTP_401_UNAUTHORIZED)

    access = serializer.validated_data['access']
    data = {
        'accessToken': access,
        'refreshToken': serializer.validated_data.get('refresh', token),
        'expireAt': _token_expiry(AccessToken(access)),
    }
    return api_success(data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout(request):
    """Blacklist the caller's refresh token"""
    token = request.data.get('refreshToken') or request.data.get('refresh')
    if token:
        try:
            RefreshToken(token).blacklist()
        except TokenError:
            return api_error('Token is invalid or expired.')
    create_audit_log(request=request, action='logout', model_name='User', object_id=request.user.id,
                     object_name=request.user.username)
    logger.info(f"User {request.user.username} logged out")
    return api_success(None, message='Logged out')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Current user with role capabilities and page grants"""
    data = UserSerializer(request.user).data
    data['permissions'] = user_capabilities(request.user)
    data['permissionsDto'] = UserPermissionSerializer(
        request.user.page_permissions.select_related('page').all(), many=True
    ).data
    return api_success(data)


# User views
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_list(request):
    """List users (active and deactivated)"""
    users = User.objects.all().order_by('username')
    role = request.query_params.get('role')
    if role:
        users = users.filter(role=role)
    is_live = parse_bool(request.query_params.get('isLive'))
    if is_live is not None:
        users = users.filter(is_active=is_live)
    return api_success(UserSerializer(users, many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def user_register(request):
    """Register a new user (admin only)"""
    serializer = UserCreateSerializer(data=request.data)
    if not serializer.is_valid():
        logger.warning(f"User registration validation failed: {serializer.errors}")
        return validation_error(serializer.errors)
    try:
        user = serializer.save()
    except IntegrityError as e:
        logger.error(f"IntegrityError registering user: {str(e)}", exc_info=True)
        return api_error(integrity_error_message(e, 'A user with this username or email already exists'))
    create_audit_log(request=request, action='create', model_name='User', object_id=user.id,
                     object_name=user.username, changes={'role': user.role, 'email': user.email})
    logger.info(f"User '{user.username}' registered by {request.user.username}")
    return api_success(UserSerializer(user).data, status.HTTP_201_CREATED, message='User registered successfully!')


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def user_detail(request, pk):
    """Retrieve, update or deactivate a user"""
    user = User.objects.filter(pk=pk).first()
    if user is None:
        return api_error('User not found', status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return api_success(UserSerializer(user).data)

    is_self = user.pk == request.user.pk
    if not request.user.is_admin_role and not (is_self and request.method == 'PUT'):
        logger.warning(f"User {request.user.username} attempted to modify user {pk} without admin privileges")
        return api_error('Only administrators can modify users', status.HTTP_403_FORBIDDEN)

    if request.method == 'PUT':
        data = request.data.copy()
        if not request.user.is_admin_role:
            # Users editing themselves cannot change their role or status
            data.pop('role', None)
            data.pop('isLive', None)
        serializer = UserUpdateSerializer(user, data=data, partial=True)
        if not serializer.is_valid():
            return validation_error(serializer.errors)
        before = snapshot(user, USER_AUDIT_FIELDS)
        try:
            serializer.save()
        except IntegrityError as e:
            return api_error(integrity_error_message(e, 'A user with this email already exists'))
        changes = diff_fields(user, USER_AUDIT_FIELDS, before)
        if changes:
            create_audit_log(request=request, action='update', model_name='User', object_id=user.id,
                             object_name=user.username, changes=changes)
        return api_success(UserSerializer(user).data, message='Data updated successfully')

    # DELETE deactivates; users are never removed
    if is_self:
        return api_error('You cannot deactivate your own account')
    user.is_active = False
    user.save(update_fields=['is_active', 'updated_at'])
    create_audit_log(request=request, action='delete', model_name='User', object_id=user.id,
                     object_name=user.username, changes={'is_active': {'old': True, 'new': False}})
    logger.info(f"User {user.username} deactivated by {request.user.username}")
    return api_success(UserSerializer(user).data, message='Data deleted successfully')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def role_list(request):
    """Available roles"""
    roles = [
        {'id': value, 'name': label, 'normalizedName': value.upper()}
        for value, label in User.ROLE_CHOICES
    ]
    return api_success(roles)


# Page views
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def page_list(request):
    pages = Page.objects.all()
    is_live = parse_bool(request.query_params.get('isLive'))
    if is_live is not None:
        pages = pages.filter(is_live=is_live)
    return api_success(PageSerializer(pages, many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def page_create(request):
    serializer = PageSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_error(serializer.errors)
    page = serializer.save()
    create_audit_log(request=request, action='create', model_name='Page', object_id=page.id, object_name=page.name)
    return api_success(serializer.data, status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def page_detail(request, pk):
    page = Page.objects.filter(pk=pk).first()
    if page is None:
        return api_error('Page not found', status.HTTP_404_NOT_FOUND)
    if request.method == 'GET':
        return api_success(PageSerializer(page).data)
    if not request.user.is_admin_role:
        return api_error('Only administrators can modify pages', status.HTTP_403_FORBIDDEN)
    if request.method == 'PUT':
        serializer = PageSerializer(page, data=request.data, partial=True)
        if not serializer.is_valid():
            return validation_error(serializer.errors)
        serializer.save()
        return api_success(serializer.data)
    soft_delete(page, request, object_name=page.name)
    return api_success(PageSerializer(page).data)


# User permission views
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_permission_list(request):
    """All page grants; non-admins only see their own"""
    grants = UserPermission.objects.select_related('page', 'user').order_by('user_id', 'page__name')
    user_id = request.query_params.get('userId')
    if not request.user.is_admin_role:
        grants = grants.filter(user=request.user)
    elif user_id:
        grants = grants.filter(user_id=user_id)
    return api_success(UserPermissionSerializer(grants, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_permissions_by_user(request, user_id):
    if not request.user.is_admin_role and str(request.user.pk) != str(user_id):
        return api_error('You can only view your own permissions', status.HTTP_403_FORBIDDEN)
    grants = UserPermission.objects.select_related('page').filter(user_id=user_id).order_by('page__name')
    return api_success(UserPermissionSerializer(grants, many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def user_permission_create(request):
    serializer = UserPermissionSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_error(serializer.errors)
    grant = serializer.save()
    create_audit_log(request=request, action='create', model_name='UserPermission', object_id=grant.id,
                     object_name=str(grant), changes=request.data)
    return api_success(UserPermissionSerializer(grant).data, status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def user_permission_detail(request, pk):
    grant = UserPermission.objects.select_related('page', 'user').filter(pk=pk).first()
    if grant is None:
        return api_error('Permission not found', status.HTTP_404_NOT_FOUND)
    if request.method == 'GET':
        return api_success(UserPermissionSerializer(grant).data)
    if request.method == 'PUT':
        serializer = UserPermissionSerializer(grant, data=request.data, partial=True)
        if not serializer.is_valid():
            return validation_error(serializer.errors)
        serializer.save()
        create_audit_log(request=request, action='update', model_name='UserPermission', object_id=grant.id,
                         object_name=str(grant), changes=request.data)
        return api_success(serializer.data)
    # Grants are plain rows without a live flag
    grant_id, grant_name = grant.id, str(grant)
    grant.delete()
    create_audit_log(request=request, action='delete', model_name='UserPermission', object_id=grant_id,
                     object_name=grant_name)
    return api_success(None, message='Data deleted successfully')


# AuditLog views (read-only)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def audit_log_list(request):
    """List audit logs with filtering"""
    queryset = AuditLog.objects.select_related('user').all()
    action = request.query_params.get('action')
    model_name = request.query_params.get('modelName')
    user_id = request.query_params.get('user')
    if action:
        queryset = queryset.filter(action=action)
    if model_name:
        queryset = queryset.filter(model_name=model_name)
    if user_id:
        queryset = queryset.filter(user_id=user_id)
    try:
        limit = min(int(request.query_params.get('limit', 200)), 1000)
    except ValueError:
        limit = 200
    return api_success(AuditLogSerializer(queryset[:limit], many=True).data)
