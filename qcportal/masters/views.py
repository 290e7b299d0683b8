import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from django.db import IntegrityError
from django.db.models import Prefetch

from qcportal.core.envelope import api_success, api_error, validation_error
from qcportal.core.model_cache import get_cached_master_list, cache_master_list, master_list_variant
from qcportal.core.permissions import require_page_permission
from qcportal.core.utils import create_audit_log, soft_delete, integrity_error_message, snapshot, diff_fields
from .filters import LiveFilterSet, ActivityFilter, ResourceFilter, ErrorSubCategoryFilter
from .models import (
    Division, Activity, Product, ResourceRole, Resource,
    ErrorCategory, ErrorSubCategory, DrawingDescription
)
from .serializers import (
    DivisionSerializer, ActivitySerializer, ProductSerializer, ResourceRoleSerializer,
    ResourceSerializer, ErrorCategorySerializer, ErrorSubCategorySerializer, DrawingDescriptionSerializer
)

logger = logging.getLogger('qcportal.masters')

AUDIT_FIELDS = ['name', 'description', 'is_live', 'order', 'division_id', 'role_id', 'category_id']

# Page names as granted in UserPermission
PAGE_NAMES = {
    'Division': 'Divisions',
    'Activity': 'Activities',
    'Product': 'Products',
    'ResourceRole': 'Resource Roles',
    'Resource': 'Resources',
    'ErrorCategory': 'Error Categories',
    'ErrorSubCategory': 'Error Sub Categories',
    'DrawingDescription': 'Drawing Descriptions',
}


def _audit_fields(instance):
    return [name for name in AUDIT_FIELDS if hasattr(instance, name)]


def _list_response(request, model_name, queryset, serializer_class, filterset_class=LiveFilterSet):
    """
    Serialized list honoring the filterset's query parameters.

    Lists filtered only by isLive come from (and go to) the master list cache.
    """
    params = request.query_params
    cacheable = all(key == 'isLive' for key in params.keys())

    filterset = filterset_class(params, queryset=queryset)
    if not filterset.is_valid():
        return validation_error(filterset.errors)
    # Same reading of isLive as the filter applies
    variant = master_list_variant(filterset.form.cleaned_data.get('isLive'))

    if cacheable:
        cached = get_cached_master_list(model_name, variant)
        if cached is not None:
            return api_success(cached)

    data = list(serializer_class(filterset.qs, many=True).data)

    if cacheable:
        cache_master_list(model_name, variant, data)
    return api_success(data)


def _create_response(request, model_name, serializer_class):
    denied = require_page_permission(request, PAGE_NAMES[model_name], 'create')
    if denied is not None:
        return denied

    serializer = serializer_class(data=request.data)
    if not serializer.is_valid():
        logger.warning(f"{model_name} validation failed: {serializer.errors}")
        return validation_error(serializer.errors)
    try:
        instance = serializer.save()
    except IntegrityError as e:
        logger.error(f"IntegrityError creating {model_name}: {str(e)}", exc_info=True)
        return api_error(integrity_error_message(e, f'{model_name} with this name already exists'))

    create_audit_log(request=request, action='create', model_name=model_name, object_id=instance.pk,
                     object_name=str(instance), changes=serializer.data)
    logger.info(f"{model_name} '{instance}' created by {request.user.username}")
    return api_success(serializer.data, status.HTTP_201_CREATED, message='Data saved successfully')


def _detail_response(request, model_name, queryset, pk, serializer_class):
    """GET, PUT (partial) or soft DELETE of one master row"""
    instance = queryset.filter(pk=pk).first()
    if instance is None:
        return api_error(f'{model_name} not found', status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return api_success(serializer_class(instance).data)

    action = 'edit' if request.method == 'PUT' else 'delete'
    denied = require_page_permission(request, PAGE_NAMES[model_name], action)
    if denied is not None:
        return denied

    if request.method == 'PUT':
        serializer = serializer_class(instance, data=request.data, partial=True)
        if not serializer.is_valid():
            logger.warning(f"{model_name} {pk} validation failed: {serializer.errors}")
            return validation_error(serializer.errors)
        fields = _audit_fields(instance)
        before = snapshot(instance, fields)
        try:
            serializer.save()
        except IntegrityError as e:
            logger.error(f"IntegrityError updating {model_name} {pk}: {str(e)}", exc_info=True)
            return api_error(integrity_error_message(e, f'{model_name} with this name already exists'))
        changes = diff_fields(instance, fields, before)
        if changes:
            create_audit_log(request=request, action='update', model_name=model_name, object_id=instance.pk,
                             object_name=str(instance), changes=changes)
        return api_success(serializer.data, message='Data updated successfully')

    soft_delete(instance, request)
    logger.info(f"{model_name} '{instance}' deactivated by {request.user.username}")
    return api_success(serializer_class(instance).data, message='Data deleted successfully')


# Division views
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def division_list(request):
    """List divisions, optionally filtered by isLive"""
    return _list_response(request, 'Division', Division.objects.all(), DivisionSerializer)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def division_create(request):
    return _create_response(request, 'Division', DivisionSerializer)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def division_detail(request, pk):
    return _detail_response(request, 'Division', Division.objects.all(), pk, DivisionSerializer)


# Activity views
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def activity_list(request):
    """List activities in division order; filters: isLive, divisionId"""
    queryset = Activity.objects.select_related('division')
    return _list_response(request, 'Activity', queryset, ActivitySerializer, ActivityFilter)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def activity_create(request):
    return _create_response(request, 'Activity', ActivitySerializer)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def activity_detail(request, pk):
    return _detail_response(request, 'Activity', Activity.objects.select_related('division'), pk, ActivitySerializer)


# Product views
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_list(request):
    return _list_response(request, 'Product', Product.objects.all(), ProductSerializer)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def product_create(request):
    return _create_response(request, 'Product', ProductSerializer)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def product_detail(request, pk):
    return _detail_response(request, 'Product', Product.objects.all(), pk, ProductSerializer)


# ResourceRole views
def _resource_role_queryset():
    return ResourceRole.objects.prefetch_related(
        Prefetch('resources', queryset=Resource.objects.select_related('role'))
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def resource_role_list(request):
    """List resource roles with their live resources embedded"""
    return _list_response(request, 'ResourceRole', _resource_role_queryset(), ResourceRoleSerializer)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def resource_role_create(request):
    return _create_response(request, 'ResourceRole', ResourceRoleSerializer)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def resource_role_detail(request, pk):
    return _detail_response(request, 'ResourceRole', _resource_role_queryset(), pk, ResourceRoleSerializer)


# Resource views
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def resource_list(request):
    """List resources; filters: isLive, resourceRoleId"""
    queryset = Resource.objects.select_related('role')
    return _list_response(request, 'Resource', queryset, ResourceSerializer, ResourceFilter)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def resource_create(request):
    return _create_response(request, 'Resource', ResourceSerializer)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def resource_detail(request, pk):
    return _detail_response(request, 'Resource', Resource.objects.select_related('role'), pk, ResourceSerializer)


# ErrorCategory views
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def error_category_list(request):
    return _list_response(request, 'ErrorCategory', ErrorCategory.objects.all(), ErrorCategorySerializer)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def error_category_create(request):
    return _create_response(request, 'ErrorCategory', ErrorCategorySerializer)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def error_category_detail(request, pk):
    return _detail_response(request, 'ErrorCategory', ErrorCategory.objects.all(), pk, ErrorCategorySerializer)


# ErrorSubCategory views
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def error_sub_category_list(request):
    """List error sub-categories; filters: isLive, errorCategoryId"""
    queryset = ErrorSubCategory.objects.select_related('category')
    return _list_response(request, 'ErrorSubCategory', queryset, ErrorSubCategorySerializer, ErrorSubCategoryFilter)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def error_sub_category_create(request):
    return _create_response(request, 'ErrorSubCategory', ErrorSubCategorySerializer)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def error_sub_category_detail(request, pk):
    queryset = ErrorSubCategory.objects.select_related('category')
    return _detail_response(request, 'ErrorSubCategory', queryset, pk, ErrorSubCategorySerializer)


# DrawingDescription views
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def drawing_description_list(request):
    return _list_response(request, 'DrawingDescription', DrawingDescription.objects.all(), DrawingDescriptionSerializer)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def drawing_description_create(request):
    return _create_response(request, 'DrawingDescription', DrawingDescriptionSerializer)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def drawing_description_detail(request, pk):
    queryset = DrawingDescription.objects.all()
    return _detail_response(request, 'DrawingDescription', queryset, pk, DrawingDescriptionSerializer)
