from rest_framework import serializers

from qcportal.clarifications.models import CRITICALITY_CHOICES
from qcportal.core.serializers import LenientDateField
from qcportal.masters.models import DrawingDescription, ErrorCategory, ErrorSubCategory
from qcportal.projects.models import ProjectPlanning, ProjectActivity
from .models import Discrepancy, QC_LEVEL_CHOICES, STATUS_OF_ERROR_CHOICES, clamp_qc_cycle


class QcCycleField(serializers.Field):
    """Never rejects: values are clamped into 1..100"""

    def validate_empty_values(self, data):
        if data is None:
            return (True, clamp_qc_cycle(data))
        return super().validate_empty_values(data)

    def to_internal_value(self, data):
        return clamp_qc_cycle(data)

    def to_representation(self, value):
        return value


class QcLevelField(serializers.ChoiceField):
    """Accepts 3, '3' or 'QC3'"""

    def to_internal_value(self, data):
        if isinstance(data, str) and data.upper().startswith('QC'):
            data = data[2:]
        return super().to_internal_value(data)


class DiscrepancySerializer(serializers.ModelSerializer):
    discrepancyId = serializers.IntegerField(source='id', read_only=True)
    planningId = serializers.PrimaryKeyRelatedField(source='planning', queryset=ProjectPlanning.objects.all())
    projectNo = serializers.CharField(source='planning.project_no', read_only=True)
    projectActivityId = serializers.PrimaryKeyRelatedField(
        source='project_activity', queryset=ProjectActivity.objects.all()
    )
    activityName = serializers.CharField(source='project_activity.activity.name', read_only=True)
    qcLevelId = QcLevelField(source='qc_level', choices=QC_LEVEL_CHOICES, required=False, allow_null=True)
    qcLevel = serializers.SerializerMethodField()
    qcCycle = QcCycleField(source='qc_cycle', required=False)
    drawingNumber = serializers.CharField(source='drawing_number', required=False, allow_blank=True, allow_null=True)
    drawingDescriptionId = serializers.PrimaryKeyRelatedField(
        source='drawing_description', queryset=DrawingDescription.objects.all(), required=False, allow_null=True
    )
    drawingDescription = serializers.CharField(source='drawing_description.description', read_only=True, default=None)
    reflectionDocumentId = serializers.CharField(source='reflection_document_id', required=False,
                                                 allow_blank=True, allow_null=True)
    errorCategoryId = serializers.PrimaryKeyRelatedField(
        source='error_category', queryset=ErrorCategory.objects.all(), required=False, allow_null=True
    )
    errorCategory = serializers.CharField(source='error_category.name', read_only=True, default=None)
    errorSubCategoryId = serializers.PrimaryKeyRelatedField(
        source='error_sub_category', queryset=ErrorSubCategory.objects.all(), required=False, allow_null=True
    )
    errorSubCategory = serializers.CharField(source='error_sub_category.name', read_only=True, default=None)
    errorDescription = serializers.CharField(source='error_description', required=False, allow_blank=True, allow_null=True)
    criticalityIndex = serializers.ChoiceField(source='criticality', choices=CRITICALITY_CHOICES, required=False,
                                               allow_blank=True)
    statusOfError = serializers.ChoiceField(source='status_of_error', choices=STATUS_OF_ERROR_CHOICES, required=False)
    remarks = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    recurringIssue = serializers.BooleanField(source='recurring_issue', required=False)
    dateResolved = LenientDateField(source='date_resolved', required=False, allow_null=True)
    isLive = serializers.BooleanField(source='is_live', required=False)
    createdBy = serializers.CharField(source='created_by.username', read_only=True, default=None)
    modifiedBy = serializers.CharField(source='modified_by.username', read_only=True, default=None)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    modifiedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Discrepancy
        fields = [
            'discrepancyId', 'planningId', 'projectNo', 'projectActivityId', 'activityName',
            'qcLevelId', 'qcLevel', 'qcCycle', 'drawingNumber', 'drawingDescriptionId', 'drawingDescription',
            'reflectionDocumentId', 'errorCategoryId', 'errorCategory', 'errorSubCategoryId', 'errorSubCategory',
            'errorDescription', 'criticalityIndex', 'statusOfError', 'remarks', 'recurringIssue', 'dateResolved',
            'isLive', 'createdBy', 'modifiedBy', 'createdAt', 'modifiedAt',
        ]

    def get_qcLevel(self, obj):
        return f"QC{obj.qc_level}" if obj.qc_level else None

    def validate_drawingNumber(self, value):
        return value or ''

    def validate_reflectionDocumentId(self, value):
        return value or ''

    def validate_errorDescription(self, value):
        return value or ''

    def validate_remarks(self, value):
        return value or ''

    def validate(self, attrs):
        planning = attrs.get('planning', getattr(self.instance, 'planning', None))
        activity = attrs.get('project_activity', getattr(self.instance, 'project_activity', None))
        if planning is not None and activity is not None and activity.planning_id != planning.pk:
            raise serializers.ValidationError({'projectActivityId': 'Activity does not belong to the selected project'})

        category = attrs.get('error_category', getattr(self.instance, 'error_category', None))
        sub_category = attrs.get('error_sub_category', getattr(self.instance, 'error_sub_category', None))
        if sub_category is not None:
            if category is None:
                attrs['error_category'] = sub_category.category
            elif sub_category.category_id != category.pk:
                raise serializers.ValidationError(
                    {'errorSubCategoryId': 'Sub-category does not belong to the selected error category'}
                )
        return attrs
