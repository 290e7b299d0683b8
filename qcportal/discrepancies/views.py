import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from django.db.models import Count

from qcportal.core.envelope import api_success, api_error, validation_error
from qcportal.core.export import export_csv, export_params, filter_for_export
from qcportal.core.permissions import forbidden, has_capability, require_capability
from qcportal.core.utils import create_audit_log, soft_delete, snapshot, diff_fields
from qcportal.clarifications.models import CRITICALITY_CHOICES
from .filters import DiscrepancyFilter
from .models import Discrepancy, STATUS_OF_ERROR_CHOICES, RESOLVED_STATUSES
from .serializers import DiscrepancySerializer

logger = logging.getLogger('qcportal.discrepancies')

AUDIT_FIELDS = [
    'status_of_error', 'criticality', 'qc_level', 'qc_cycle', 'error_category_id', 'error_sub_category_id',
    'date_resolved', 'recurring_issue', 'remarks', 'is_live',
]

EXPORT_FIELDS = [
    'discrepancyId', 'projectNo', 'activityName', 'qcLevel', 'qcCycle', 'drawingNumber', 'drawingDescription',
    'errorCategory', 'errorSubCategory', 'errorDescription', 'criticalityIndex', 'statusOfError',
    'recurringIssue', 'dateResolved', 'createdBy', 'createdAt',
]


def _discrepancy_queryset():
    return Discrepancy.objects.select_related(
        'planning', 'project_activity__activity', 'drawing_description',
        'error_category', 'error_sub_category', 'created_by', 'modified_by'
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def discrepancy_list(request):
    """
    List discrepancies.

    Filters: planningId, projectActivityId, errorCategoryId, errorSubCategoryId,
    statusOfError, criticalityIndex, qcLevelId, recurringIssue, isLive.
    """
    filterset = DiscrepancyFilter(request.query_params, queryset=_discrepancy_queryset())
    if not filterset.is_valid():
        return validation_error(filterset.errors)
    return api_success(DiscrepancySerializer(filterset.qs, many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def discrepancy_create(request):
    denied = require_capability(request, 'canCreateDiscrepancy', 'create discrepancies')
    if denied is not None:
        return denied

    serializer = DiscrepancySerializer(data=request.data)
    if not serializer.is_valid():
        logger.warning(f"Discrepancy validation failed: {serializer.errors}")
        return validation_error(serializer.errors)
    discrepancy = serializer.save(created_by=request.user, modified_by=request.user)
    create_audit_log(request=request, action='create', model_name='Discrepancy', object_id=discrepancy.id,
                     object_name=discrepancy.planning.project_no,
                     changes={'statusOfError': discrepancy.status_of_error, 'qcCycle': discrepancy.qc_cycle})
    logger.info(f"Discrepancy {discrepancy.id} recorded on {discrepancy.planning.project_no}")
    return api_success(serializer.data, status.HTTP_201_CREATED, message='Data saved successfully')


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def discrepancy_detail(request, pk):
    """Retrieve, update or soft delete a discrepancy"""
    discrepancy = _discrepancy_queryset().filter(pk=pk).first()
    if discrepancy is None:
        return api_error('Discrepancy not found', status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return api_success(DiscrepancySerializer(discrepancy).data)

    can_resolve = has_capability(request.user, 'canResolveDiscrepancy')
    is_owner = discrepancy.created_by_id == request.user.pk
    if not (can_resolve or is_owner):
        return forbidden(request, 'change this discrepancy')

    if request.method == 'PUT':
        new_status = request.data.get('statusOfError')
        if new_status in RESOLVED_STATUSES and new_status != discrepancy.status_of_error and not can_resolve:
            return forbidden(request, 'resolve discrepancies')
        serializer = DiscrepancySerializer(discrepancy, data=request.data, partial=True)
        if not serializer.is_valid():
            logger.warning(f"Discrepancy {pk} validation failed: {serializer.errors}")
            return validation_error(serializer.errors)
        before = snapshot(discrepancy, AUDIT_FIELDS)
        serializer.save(modified_by=request.user)
        changes = diff_fields(discrepancy, AUDIT_FIELDS, before)
        if changes:
            create_audit_log(request=request, action='update', model_name='Discrepancy', object_id=discrepancy.id,
                             object_name=discrepancy.planning.project_no, changes=changes)
        return api_success(serializer.data, message='Data updated successfully')

    soft_delete(discrepancy, request, object_name=discrepancy.planning.project_no)
    logger.info(f"Discrepancy {pk} deactivated by {request.user.username}")
    return api_success(DiscrepancySerializer(discrepancy).data, message='Data deleted successfully')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def discrepancy_summary(request):
    """Counts of live discrepancies by status and criticality, optionally for one planning"""
    queryset = Discrepancy.objects.filter(is_live=True)
    planning_id = request.query_params.get('planningId')
    if planning_id:
        if not planning_id.isdigit():
            return api_error('planningId must be a number')
        queryset = queryset.filter(planning_id=planning_id)

    by_status = {value: 0 for value, _ in STATUS_OF_ERROR_CHOICES}
    for row in queryset.values('status_of_error').annotate(count=Count('id')).order_by():
        by_status[row['status_of_error']] = row['count']

    by_criticality = {value: 0 for value, _ in CRITICALITY_CHOICES}
    for row in queryset.values('criticality').annotate(count=Count('id')).order_by():
        by_criticality[row['criticality'] or 'Unspecified'] = row['count']

    total = sum(by_status.values())
    resolved = sum(by_status.get(value, 0) for value in RESOLVED_STATUSES)
    return api_success({
        'total': total,
        'open': total - resolved,
        'byStatus': by_status,
        'byCriticality': by_criticality,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def discrepancy_export(request):
    """CSV export of discrepancies; query: fields, start, end and exact-match filters"""
    denied = require_capability(request, 'canExportData', 'export data')
    if denied is not None:
        return denied
    include_fields, date_range, filters = export_params(request, EXPORT_FIELDS)
    rows = DiscrepancySerializer(_discrepancy_queryset(), many=True).data
    rows = filter_for_export(rows, include_fields, date_range, filters)
    create_audit_log(request=request, action='export', model_name='Discrepancy', object_id='*',
                     object_name='Discrepancies export', changes={'rows': len(rows), 'fields': include_fields})
    return export_csv(rows, include_fields, 'discrepancies')
