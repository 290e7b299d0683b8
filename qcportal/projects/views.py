import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from django.db import IntegrityError
from django.db.models import Prefetch

from qcportal.core.envelope import api_success, api_error, validation_error
from qcportal.core.export import export_csv, export_params, filter_for_export
from qcportal.core.model_cache import get_cached_project_options, cache_project_options
from qcportal.core.permissions import forbidden, has_capability, require_capability
from qcportal.core.utils import create_audit_log, soft_delete, integrity_error_message, snapshot, diff_fields
from .filters import PlanningFilter
from .models import ProjectPlanning, ProjectActivity, ProjectQuickNote
from .options import make_option, with_placeholder
from .serializers import (
    ProjectPlanningSerializer, ProjectPlanningDetailSerializer,
    ProjectActivitySerializer, ProjectQuickNoteSerializer
)

logger = logging.getLogger('qcportal.projects')

PLANNING_AUDIT_FIELDS = [
    'project_no', 'project_name', 'product_code', 'customer_name', 'division_id', 'product_id',
    'project_received_date', 'units', 'system_voltage_kv', 'is_completed', 'project_status', 'is_live',
]
ACTIVITY_AUDIT_FIELDS = ['activity_status', 'cp_assigned_engineer_id', 'cp_qc_engineer_id', 'actual_hours', 'is_live']

PLANNING_EXPORT_FIELDS = [
    'planningId', 'projectNo', 'projectName', 'customerName', 'divisionName', 'productName',
    'productCode', 'units', 'systemVoltageInKV', 'projectReceivedDate', 'projectStatus',
    'isCompleted', 'createdAt',
]


def _planning_queryset():
    return ProjectPlanning.objects.select_related(
        'division', 'product', 'created_by', 'modified_by'
    ).prefetch_related(
        Prefetch('project_activities', queryset=ProjectActivity.objects.select_related(
            'activity', 'planning', 'powell_edh_manager', 'powell_edh_engineer',
            'cp_project_engineer', 'cp_assigned_engineer', 'cp_qc_engineer', 'created_by', 'modified_by'
        ))
    )


def _activity_queryset():
    return ProjectActivity.objects.select_related(
        'activity', 'planning', 'powell_edh_manager', 'powell_edh_engineer',
        'cp_project_engineer', 'cp_assigned_engineer', 'cp_qc_engineer', 'created_by', 'modified_by'
    )


# Planning views
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def planning_list(request):
    """
    List plannings (projects).

    Filters: divisionId, productId, isCompleted, isLive, search (project number,
    project name or customer name).
    """
    filterset = PlanningFilter(request.query_params, queryset=_planning_queryset())
    if not filterset.is_valid():
        return validation_error(filterset.errors)
    serializer = ProjectPlanningSerializer(filterset.qs, many=True)
    return api_success(serializer.data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def planning_create_with_activities(request):
    """Create a planning and one project activity per id in activitesList, atomically"""
    denied = require_capability(request, 'canCreateProject', 'create projects')
    if denied is not None:
        return denied

    serializer = ProjectPlanningSerializer(data=request.data)
    if not serializer.is_valid():
        logger.warning(f"Planning validation failed: {serializer.errors}")
        return validation_error(serializer.errors)
    try:
        planning = serializer.save(created_by=request.user, modified_by=request.user)
    except IntegrityError as e:
        logger.error(f"IntegrityError creating planning: {str(e)}", exc_info=True)
        return api_error(integrity_error_message(e, 'Project number already exists'))

    planning = _planning_queryset().get(pk=planning.pk)
    create_audit_log(request=request, action='create', model_name='ProjectPlanning', object_id=planning.id,
                     object_name=planning.project_no,
                     changes={'activities': list(planning.project_activities.values_list('activity_id', flat=True))})
    logger.info(f"Planning {planning.project_no} created by {request.user.username} "
                f"with {planning.project_activities.count()} activities")
    return api_success(ProjectPlanningDetailSerializer(planning).data, status.HTTP_201_CREATED,
                       message='Data saved successfully')


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def planning_detail(request, pk):
    """Retrieve, update (adds missing activities) or soft delete a planning"""
    planning = _planning_queryset().filter(pk=pk).first()
    if planning is None:
        return api_error('Project not found', status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return api_success(ProjectPlanningDetailSerializer(planning).data)

    if request.method == 'PUT':
        denied = require_capability(request, 'canEditProject', 'edit projects')
        if denied is not None:
            return denied
        serializer = ProjectPlanningSerializer(planning, data=request.data, partial=True)
        if not serializer.is_valid():
            logger.warning(f"Planning {pk} validation failed: {serializer.errors}")
            return validation_error(serializer.errors)
        before = snapshot(planning, PLANNING_AUDIT_FIELDS)
        try:
            serializer.save(modified_by=request.user)
        except IntegrityError as e:
            logger.error(f"IntegrityError updating planning {pk}: {str(e)}", exc_info=True)
            return api_error(integrity_error_message(e, 'Project number already exists'))
        changes = diff_fields(planning, PLANNING_AUDIT_FIELDS, before)
        if changes:
            create_audit_log(request=request, action='update', model_name='ProjectPlanning', object_id=planning.id,
                             object_name=planning.project_no, changes=changes)
        planning = _planning_queryset().get(pk=pk)
        return api_success(ProjectPlanningDetailSerializer(planning).data, message='Data updated successfully')

    denied = require_capability(request, 'canDeleteProject', 'delete projects')
    if denied is not None:
        return denied
    soft_delete(planning, request, object_name=planning.project_no)
    logger.info(f"Planning {planning.project_no} deactivated by {request.user.username}")
    return api_success(ProjectPlanningSerializer(planning).data, message='Data deleted successfully')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def planning_options(request):
    """Project dropdown options: placeholder first, then live plannings sorted by label"""
    options = get_cached_project_options()
    if options is None:
        plannings = ProjectPlanning.objects.filter(is_live=True).select_related('product')
        options = with_placeholder([
            make_option({
                'planningId': planning.id,
                'projectNo': planning.project_no,
                'projectName': planning.project_name,
                'product': planning.product.name if planning.product_id else None,
            })
            for planning in plannings
        ])
        cache_project_options(options)
    return api_success(options)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def planning_export(request):
    """CSV export of plannings; query: fields, start, end and exact-match filters"""
    denied = require_capability(request, 'canExportData', 'export data')
    if denied is not None:
        return denied
    include_fields, date_range, filters = export_params(request, PLANNING_EXPORT_FIELDS)
    rows = ProjectPlanningSerializer(_planning_queryset(), many=True).data
    rows = filter_for_export(rows, include_fields, date_range, filters)
    create_audit_log(request=request, action='export', model_name='ProjectPlanning', object_id='*',
                     object_name='Plannings export', changes={'rows': len(rows), 'fields': include_fields})
    return export_csv(rows, include_fields, 'projects')


# Project activity views
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def planning_activities(request, pk):
    """Live project activities of a planning"""
    if not ProjectPlanning.objects.filter(pk=pk).exists():
        return api_error('Project not found', status.HTTP_404_NOT_FOUND)
    rows = _activity_queryset().filter(planning_id=pk, is_live=True)
    return api_success(ProjectActivitySerializer(rows, many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def project_activity_create(request):
    denied = require_capability(request, 'canEditProject', 'add project activities')
    if denied is not None:
        return denied
    serializer = ProjectActivitySerializer(data=request.data)
    if not serializer.is_valid():
        return validation_error(serializer.errors)
    planning = serializer.validated_data['planning']
    activity = serializer.validated_data['activity']
    if planning.project_activities.filter(activity=activity, is_live=True).exists():
        return api_error(f"{activity.name} is already planned on {planning.project_no}")
    row = serializer.save(created_by=request.user, modified_by=request.user)
    create_audit_log(request=request, action='create', model_name='ProjectActivity', object_id=row.id,
                     object_name=str(row))
    return api_success(ProjectActivitySerializer(row).data, status.HTTP_201_CREATED, message='Data saved successfully')


def _is_assigned(user, row):
    return user.pk in (row.cp_project_engineer_id, row.cp_assigned_engineer_id, row.cp_qc_engineer_id)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def project_activity_detail(request, pk):
    """Retrieve, update or soft delete a project activity"""
    row = _activity_queryset().filter(pk=pk).first()
    if row is None:
        return api_error('Project activity not found', status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return api_success(ProjectActivitySerializer(row).data)

    if request.method == 'PUT':
        # Assigned engineers may update their own activity
        if not (has_capability(request.user, 'canEditProject') or _is_assigned(request.user, row)):
            return forbidden(request, 'edit project activities')
        serializer = ProjectActivitySerializer(row, data=request.data, partial=True)
        if not serializer.is_valid():
            logger.warning(f"Project activity {pk} validation failed: {serializer.errors}")
            return validation_error(serializer.errors)
        before = snapshot(row, ACTIVITY_AUDIT_FIELDS)
        serializer.save(modified_by=request.user)
        changes = diff_fields(row, ACTIVITY_AUDIT_FIELDS, before)
        if changes:
            create_audit_log(request=request, action='update', model_name='ProjectActivity', object_id=row.id,
                             object_name=str(row), changes=changes)
        return api_success(serializer.data, message='Data updated successfully')

    denied = require_capability(request, 'canEditProject', 'delete project activities')
    if denied is not None:
        return denied
    soft_delete(row, request)
    return api_success(ProjectActivitySerializer(row).data, message='Data deleted successfully')


# Quick note views
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def quick_notes_by_planning(request, planning_id):
    notes = ProjectQuickNote.objects.select_related('created_by').filter(planning_id=planning_id)
    return api_success(ProjectQuickNoteSerializer(notes, many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def quick_note_create(request):
    serializer = ProjectQuickNoteSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_error(serializer.errors)
    note = serializer.save(created_by=request.user)
    return api_success(ProjectQuickNoteSerializer(note).data, status.HTTP_201_CREATED, message='Data saved successfully')


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def quick_note_detail(request, pk):
    note = ProjectQuickNote.objects.select_related('created_by').filter(pk=pk).first()
    if note is None:
        return api_error('Quick note not found', status.HTTP_404_NOT_FOUND)
    if request.method == 'GET':
        return api_success(ProjectQuickNoteSerializer(note).data)

    if note.created_by_id != request.user.pk and not request.user.is_admin_role:
        return api_error('You can only change your own notes', status.HTTP_403_FORBIDDEN)

    if request.method == 'PUT':
        serializer = ProjectQuickNoteSerializer(note, data=request.data, partial=True)
        if not serializer.is_valid():
            return validation_error(serializer.errors)
        serializer.save()
        return api_success(serializer.data, message='Data updated successfully')

    # Notes have no live flag
    note.delete()
    return api_success(None, message='Data deleted successfully')
