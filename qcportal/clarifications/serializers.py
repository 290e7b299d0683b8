from rest_framework import serializers
from django.contrib.auth import get_user_model
from django.utils import timezone

from qcportal.core.serializers import LenientDateField
from qcportal.projects.models import ProjectPlanning, ProjectActivity
from .models import Clarification, ClarificationQuickNote, ClarificationFileUpload, CRITICALITY_CHOICES

User = get_user_model()


class ClarificationFileUploadSerializer(serializers.ModelSerializer):
    fileId = serializers.IntegerField(source='id', read_only=True)
    fileName = serializers.CharField(source='file_name', read_only=True)
    filePath = serializers.SerializerMethodField()
    contentType = serializers.CharField(source='content_type', read_only=True)
    fileSize = serializers.IntegerField(source='file_size', read_only=True)
    uploadedAt = serializers.DateTimeField(source='uploaded_at', read_only=True)
    uploadedBy = serializers.CharField(source='uploaded_by', read_only=True)
    modifiedAt = serializers.DateTimeField(source='modified_at', read_only=True)
    modifiedBy = serializers.CharField(source='modified_by', read_only=True)
    clarificationId = serializers.IntegerField(source='clarification_id', read_only=True)
    datafrom = serializers.CharField(source='data_from', read_only=True)

    class Meta:
        model = ClarificationFileUpload
        fields = ['fileId', 'fileName', 'filePath', 'contentType', 'fileSize', 'uploadedAt', 'uploadedBy',
                  'modifiedAt', 'modifiedBy', 'clarificationId', 'datafrom']

    def get_filePath(self, obj):
        if not obj.file:
            return None
        request = self.context.get('request')
        return request.build_absolute_uri(obj.file.url) if request else obj.file.url


class FileUploadFormSerializer(serializers.Serializer):
    """Multipart form of POST /api/ClarificationFileUploads"""
    File = serializers.FileField()
    ClarificationId = serializers.PrimaryKeyRelatedField(queryset=Clarification.objects.all())
    UploadedBy = serializers.CharField(required=False, allow_blank=True)
    UploadedAt = serializers.DateTimeField(required=False, allow_null=True)
    ModifiedBy = serializers.CharField(required=False, allow_blank=True)
    ModifiedAt = serializers.DateTimeField(required=False, allow_null=True)
    DataFrom = serializers.CharField(required=False, allow_blank=True)

    def __init__(self, *args, max_size=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.max_size = max_size

    def validate_File(self, value):
        if self.max_size and value.size > self.max_size:
            limit_mb = self.max_size // (1024 * 1024)
            raise serializers.ValidationError(f'File is larger than the {limit_mb} MB upload limit')
        return value


class ClarificationSerializer(serializers.ModelSerializer):
    clarificationId = serializers.IntegerField(source='id', read_only=True)
    planningId = serializers.PrimaryKeyRelatedField(source='planning', queryset=ProjectPlanning.objects.all())
    projectNo = serializers.CharField(source='planning.project_no', read_only=True)
    projectActivityId = serializers.PrimaryKeyRelatedField(
        source='project_activity', queryset=ProjectActivity.objects.all()
    )
    activityName = serializers.CharField(source='project_activity.activity.name', read_only=True)
    docReference = serializers.CharField(source='doc_reference', required=False, allow_blank=True, allow_null=True)
    clarificationDescription = serializers.CharField(source='description')
    raisedById = serializers.PrimaryKeyRelatedField(source='raised_by', queryset=User.objects.all())
    raisedBy = serializers.CharField(source='raised_by.username', read_only=True, default=None)
    response = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    responsesFromId = serializers.PrimaryKeyRelatedField(
        source='responses_from', queryset=User.objects.all(), required=False, allow_null=True
    )
    responsesFrom = serializers.CharField(source='responses_from.username', read_only=True, default=None)
    status = serializers.ChoiceField(choices=Clarification.STATUS_CHOICES, required=False)
    criticalityIndex = serializers.ChoiceField(source='criticality', choices=CRITICALITY_CHOICES)
    dateRaised = LenientDateField(source='date_raised')
    dateClosed = LenientDateField(source='date_closed', required=False, allow_null=True)
    age = serializers.SerializerMethodField()
    isLive = serializers.BooleanField(source='is_live', required=False)
    uploadFiles = ClarificationFileUploadSerializer(source='files', many=True, read_only=True)
    createdBy = serializers.CharField(source='created_by.username', read_only=True, default=None)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    modifiedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Clarification
        fields = [
            'clarificationId', 'planningId', 'projectNo', 'projectActivityId', 'activityName',
            'docReference', 'clarificationDescription', 'raisedById', 'raisedBy', 'response',
            'responsesFromId', 'responsesFrom', 'status', 'criticalityIndex', 'dateRaised', 'dateClosed',
            'age', 'isLive', 'uploadFiles', 'createdBy', 'createdAt', 'modifiedAt',
        ]

    def get_age(self, obj):
        return obj.age_in_days()

    def validate_docReference(self, value):
        return value or ''

    def validate_response(self, value):
        return value or ''

    def validate(self, attrs):
        planning = attrs.get('planning', getattr(self.instance, 'planning', None))
        activity = attrs.get('project_activity', getattr(self.instance, 'project_activity', None))
        if planning is not None and activity is not None and activity.planning_id != planning.pk:
            raise serializers.ValidationError({'projectActivityId': 'Activity does not belong to the selected project'})

        raised = attrs.get('date_raised', getattr(self.instance, 'date_raised', None))
        closed = attrs.get('date_closed', getattr(self.instance, 'date_closed', None))
        if attrs.get('status', getattr(self.instance, 'status', None)) == 'Closed' and closed is None:
            closed = timezone.localdate()
            attrs['date_closed'] = closed
        if raised and closed and closed < raised:
            raise serializers.ValidationError({'dateClosed': 'Date closed cannot be before date raised'})

        # Reopening clears the closed date
        if attrs.get('status') in ('Open', 'In Review') and 'date_closed' not in attrs:
            attrs['date_closed'] = None
        return attrs


class ClarificationQuickNoteSerializer(serializers.ModelSerializer):
    clarificationQuickNotesId = serializers.IntegerField(source='id', read_only=True)
    clarificationId = serializers.PrimaryKeyRelatedField(source='clarification', queryset=Clarification.objects.all())
    quickNotes = serializers.CharField(source='quick_notes')
    createdBy = serializers.CharField(source='created_by.username', read_only=True, default=None)
    createdTime = serializers.DateTimeField(source='created_at', read_only=True)
    modifiedBy = serializers.CharField(source='modified_by.username', read_only=True, default=None)
    modifiedTime = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = ClarificationQuickNote
        fields = ['clarificationQuickNotesId', 'clarificationId', 'quickNotes',
                  'createdBy', 'createdTime', 'modifiedBy', 'modifiedTime']
