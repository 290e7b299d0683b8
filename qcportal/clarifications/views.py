import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, parser_classes
from rest_framework.parsers import MultiPartParser, FormParser
from rest_framework.permissions import IsAuthenticated
from django.conf import settings
from django.utils import timezone

from qcportal.core.envelope import api_success, api_error, validation_error
from qcportal.core.export import export_csv, export_params, filter_for_export
from qcportal.core.permissions import forbidden, has_capability, require_capability
from qcportal.core.utils import create_audit_log, soft_delete, snapshot, diff_fields
from .filters import ClarificationFilter
from .models import Clarification, ClarificationQuickNote, ClarificationFileUpload
from .serializers import (
    ClarificationSerializer, ClarificationQuickNoteSerializer,
    ClarificationFileUploadSerializer, FileUploadFormSerializer
)

logger = logging.getLogger('qcportal.clarifications')

AUDIT_FIELDS = ['status', 'criticality', 'response', 'responses_from_id', 'date_closed', 'description', 'is_live']

EXPORT_FIELDS = [
    'clarificationId', 'projectNo', 'activityName', 'docReference', 'clarificationDescription',
    'raisedBy', 'response', 'responsesFrom', 'status', 'criticalityIndex', 'dateRaised', 'dateClosed', 'age',
]


def _clarification_queryset():
    return Clarification.objects.select_related(
        'planning', 'project_activity__activity', 'raised_by', 'responses_from', 'created_by'
    ).prefetch_related('files')


def _is_owner(user, clarification):
    return user.pk in (clarification.created_by_id, clarification.raised_by_id)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def clarification_list(request):
    """List clarifications; filters: planningId, projectActivityId, status, criticalityIndex, isLive"""
    filterset = ClarificationFilter(request.query_params, queryset=_clarification_queryset())
    if not filterset.is_valid():
        return validation_error(filterset.errors)
    serializer = ClarificationSerializer(filterset.qs, many=True, context={'request': request})
    return api_success(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def clarification_get(request, pk):
    clarification = _clarification_queryset().filter(pk=pk).first()
    if clarification is None:
        return api_error('Clarification not found', status.HTTP_404_NOT_FOUND)
    return api_success(ClarificationSerializer(clarification, context={'request': request}).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def clarification_create(request):
    denied = require_capability(request, 'canCreateClarification', 'create clarifications')
    if denied is not None:
        return denied

    serializer = ClarificationSerializer(data=request.data, context={'request': request})
    if not serializer.is_valid():
        logger.warning(f"Clarification validation failed: {serializer.errors}")
        return validation_error(serializer.errors)
    clarification = serializer.save(created_by=request.user, modified_by=request.user)
    create_audit_log(request=request, action='create', model_name='Clarification', object_id=clarification.id,
                     object_name=clarification.planning.project_no,
                     changes={'status': clarification.status, 'criticality': clarification.criticality})
    logger.info(f"Clarification {clarification.id} raised on {clarification.planning.project_no}")
    return api_success(serializer.data, status.HTTP_201_CREATED, message='Data saved successfully')


@api_view(['PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def clarification_detail(request, pk):
    """Update or soft delete a clarification"""
    clarification = _clarification_queryset().filter(pk=pk).first()
    if clarification is None:
        return api_error('Clarification not found', status.HTTP_404_NOT_FOUND)

    can_resolve = has_capability(request.user, 'canResolveClarification')

    if request.method == 'PUT':
        if not (can_resolve or _is_owner(request.user, clarification)):
            return forbidden(request, 'edit this clarification')
        if request.data.get('status') == 'Closed' and clarification.status != 'Closed' and not can_resolve:
            return forbidden(request, 'close clarifications')

        serializer = ClarificationSerializer(clarification, data=request.data, partial=True, context={'request': request})
        if not serializer.is_valid():
            logger.warning(f"Clarification {pk} validation failed: {serializer.errors}")
            return validation_error(serializer.errors)
        before = snapshot(clarification, AUDIT_FIELDS)
        serializer.save(modified_by=request.user)
        changes = diff_fields(clarification, AUDIT_FIELDS, before)
        if changes:
            create_audit_log(request=request, action='update', model_name='Clarification', object_id=clarification.id,
                             object_name=clarification.planning.project_no, changes=changes)
        return api_success(serializer.data, message='Data updated successfully')

    if not (can_resolve or _is_owner(request.user, clarification)):
        return forbidden(request, 'delete this clarification')
    soft_delete(clarification, request, object_name=clarification.planning.project_no)
    logger.info(f"Clarification {pk} deactivated by {request.user.username}")
    return api_success(ClarificationSerializer(clarification, context={'request': request}).data,
                       message='Data deleted successfully')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def clarification_export(request):
    """CSV export of clarifications; query: fields, start, end and exact-match filters"""
    denied = require_capability(request, 'canExportData', 'export data')
    if denied is not None:
        return denied
    include_fields, date_range, filters = export_params(request, EXPORT_FIELDS)
    rows = ClarificationSerializer(_clarification_queryset(), many=True, context={'request': request}).data
    rows = filter_for_export(rows, include_fields, date_range, filters, date_fields=('dateRaised', 'createdAt'))
    create_audit_log(request=request, action='export', model_name='Clarification', object_id='*',
                     object_name='Clarifications export', changes={'rows': len(rows), 'fields': include_fields})
    return export_csv(rows, include_fields, 'clarifications')


# Quick notes
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def quick_notes_by_clarification(request, clarification_id):
    notes = ClarificationQuickNote.objects.select_related('created_by', 'modified_by').filter(
        clarification_id=clarification_id
    )
    return api_success(ClarificationQuickNoteSerializer(notes, many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def quick_note_create(request):
    serializer = ClarificationQuickNoteSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_error(serializer.errors)
    note = serializer.save(created_by=request.user, modified_by=request.user)
    return api_success(ClarificationQuickNoteSerializer(note).data, status.HTTP_201_CREATED,
                       message='Data saved successfully')


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def quick_note_detail(request, pk):
    note = ClarificationQuickNote.objects.select_related('created_by', 'modified_by').filter(pk=pk).first()
    if note is None:
        return api_error('Quick note not found', status.HTTP_404_NOT_FOUND)
    if request.method == 'GET':
        return api_success(ClarificationQuickNoteSerializer(note).data)

    if note.created_by_id != request.user.pk and not request.user.is_admin_role:
        return api_error('You can only change your own notes', status.HTTP_403_FORBIDDEN)

    if request.method == 'PUT':
        serializer = ClarificationQuickNoteSerializer(note, data=request.data, partial=True)
        if not serializer.is_valid():
            return validation_error(serializer.errors)
        serializer.save(modified_by=request.user)
        return api_success(serializer.data, message='Data updated successfully')

    note.delete()
    return api_success(None, message='Data deleted successfully')


# File uploads
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def files_by_clarification(request, clarification_id):
    files = ClarificationFileUpload.objects.filter(clarification_id=clarification_id)
    return api_success(ClarificationFileUploadSerializer(files, many=True, context={'request': request}).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@parser_classes([MultiPartParser, FormParser])
def file_upload(request):
    """Attach a file to a clarification (multipart form)"""
    max_size = settings.QC_MAX_UPLOAD_MB * 1024 * 1024
    form = FileUploadFormSerializer(data=request.data, max_size=max_size)
    if not form.is_valid():
        logger.warning(f"File upload rejected: {form.errors}")
        return validation_error(form.errors)

    data = form.validated_data
    uploaded = data['File']
    now = timezone.now()
    record = ClarificationFileUpload.objects.create(
        clarification=data['ClarificationId'],
        file=uploaded,
        file_name=uploaded.name,
        content_type=getattr(uploaded, 'content_type', '') or '',
        file_size=uploaded.size,
        uploaded_at=data.get('UploadedAt') or now,
        uploaded_by=data.get('UploadedBy') or request.user.username,
        modified_at=data.get('ModifiedAt') or now,
        modified_by=data.get('ModifiedBy') or request.user.username,
        data_from=data.get('DataFrom') or 'clarification',
    )
    create_audit_log(request=request, action='upload', model_name='ClarificationFileUpload', object_id=record.id,
                     object_name=record.file_name,
                     changes={'clarificationId': record.clarification_id, 'fileSize': record.file_size})
    logger.info(f"File '{record.file_name}' ({record.file_size} bytes) attached to clarification "
                f"{record.clarification_id} by {request.user.username}")
    return api_success(ClarificationFileUploadSerializer(record, context={'request': request}).data,
                       status.HTTP_201_CREATED, message='File uploaded successfully')


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated])
def file_detail(request, pk):
    record = ClarificationFileUpload.objects.filter(pk=pk).first()
    if record is None:
        return api_error('File not found', status.HTTP_404_NOT_FOUND)
    if request.method == 'GET':
        return api_success(ClarificationFileUploadSerializer(record, context={'request': request}).data)

    clarification = record.clarification
    if not (has_capability(request.user, 'canResolveClarification') or _is_owner(request.user, clarification)):
        return forbidden(request, 'delete files of this clarification')

    file_name, clarification_id = record.file_name, record.clarification_id
    record.file.delete(save=False)
    record.delete()
    create_audit_log(request=request, action='delete', model_name='ClarificationFileUpload', object_id=pk,
                     object_name=file_name, changes={'clarificationId': clarification_id})
    return api_success(None, message='File deleted successfully')
