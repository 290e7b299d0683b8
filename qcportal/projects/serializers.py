from rest_framework import serializers
from rest_framework.validators import UniqueValidator
from django.contrib.auth import get_user_model
from django.db import transaction

from qcportal.core.serializers import LenientDateField
from qcportal.masters.models import Division, Activity, Product, Resource
from qcportal.masters.serializers import DivisionSerializer, ProductSerializer
from .models import ProjectPlanning, ProjectActivity, ProjectQuickNote, ACTIVITY_STATUS_CHOICES
from .utils import add_missing_activities

User = get_user_model()


class ProjectActivitySerializer(serializers.ModelSerializer):
    projectActivityId = serializers.IntegerField(source='id', read_only=True)
    planningId = serializers.PrimaryKeyRelatedField(source='planning', queryset=ProjectPlanning.objects.all())
    activityId = serializers.PrimaryKeyRelatedField(source='activity', queryset=Activity.objects.all())
    activityName = serializers.CharField(source='activity.name', read_only=True)
    projectNo = serializers.CharField(source='planning.project_no', read_only=True)

    sigmaStartDate = LenientDateField(source='sigma_start_date', required=False, allow_null=True)
    sigmaFinishDate = LenientDateField(source='sigma_finish_date', required=False, allow_null=True)
    cpPlannedStartDate = LenientDateField(source='cp_planned_start_date', required=False, allow_null=True)
    cpPlannedFinishedDate = LenientDateField(source='cp_planned_finished_date', required=False, allow_null=True)
    cpActualStartDate = LenientDateField(source='cp_actual_start_date', required=False, allow_null=True)
    cpActualFinishedDate = LenientDateField(source='cp_actual_finished_date', required=False, allow_null=True)
    cpPlannedQCStartDate = LenientDateField(source='cp_planned_qc_start_date', required=False, allow_null=True)
    plannedQCCompletionDate = LenientDateField(source='planned_qc_completion_date', required=False, allow_null=True)
    cpActualQCStartDate = LenientDateField(source='cp_actual_qc_start_date', required=False, allow_null=True)
    actualQCCompletionDate = LenientDateField(source='actual_qc_completion_date', required=False, allow_null=True)

    powellEDHManagerId = serializers.PrimaryKeyRelatedField(
        source='powell_edh_manager', queryset=Resource.objects.all(), required=False, allow_null=True
    )
    powellEDHEngineerId = serializers.PrimaryKeyRelatedField(
        source='powell_edh_engineer', queryset=Resource.objects.all(), required=False, allow_null=True
    )
    powellEDHManager = serializers.CharField(source='powell_edh_manager.name', read_only=True, default=None)
    powellEDHEngineer = serializers.CharField(source='powell_edh_engineer.name', read_only=True, default=None)

    cpProjectEngineerId = serializers.PrimaryKeyRelatedField(
        source='cp_project_engineer', queryset=User.objects.all(), required=False, allow_null=True
    )
    cpAssignedEngineerId = serializers.PrimaryKeyRelatedField(
        source='cp_assigned_engineer', queryset=User.objects.all(), required=False, allow_null=True
    )
    cpqcEngineerId = serializers.PrimaryKeyRelatedField(
        source='cp_qc_engineer', queryset=User.objects.all(), required=False, allow_null=True
    )
    cpProjectEngineer = serializers.CharField(source='cp_project_engineer.username', read_only=True, default=None)
    cpAssignedEngineer = serializers.CharField(source='cp_assigned_engineer.username', read_only=True, default=None)
    cpqcEngineer = serializers.CharField(source='cp_qc_engineer.username', read_only=True, default=None)

    plannedHours = serializers.DecimalField(source='planned_hours', max_digits=8, decimal_places=2, min_value=0,
                                            required=False, allow_null=True, coerce_to_string=False)
    actualHours = serializers.DecimalField(source='actual_hours', max_digits=8, decimal_places=2, min_value=0,
                                           required=False, allow_null=True, coerce_to_string=False)
    noOfErrorsFoundByCPQCEngineer = serializers.IntegerField(source='errors_by_cpqc_engineer', min_value=0, required=False)
    noOfErrorsFoundInInternalReview = serializers.IntegerField(source='errors_in_internal_review', min_value=0, required=False)
    noOfErrorsFoundByCustomer = serializers.IntegerField(source='errors_by_customer', min_value=0, required=False)
    cpComments = serializers.CharField(source='cp_comments', required=False, allow_blank=True)
    activityStatus = serializers.ChoiceField(source='activity_status', choices=ACTIVITY_STATUS_CHOICES, required=False)
    isLive = serializers.BooleanField(source='is_live', required=False)
    createdBy = serializers.CharField(source='created_by.username', read_only=True, default=None)
    modifiedBy = serializers.CharField(source='modified_by.username', read_only=True, default=None)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    modifiedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = ProjectActivity
        fields = [
            'projectActivityId', 'planningId', 'projectNo', 'activityId', 'activityName',
            'sigmaStartDate', 'sigmaFinishDate', 'cpPlannedStartDate', 'cpPlannedFinishedDate',
            'cpActualStartDate', 'cpActualFinishedDate', 'cpPlannedQCStartDate', 'plannedQCCompletionDate',
            'cpActualQCStartDate', 'actualQCCompletionDate',
            'powellEDHManagerId', 'powellEDHManager', 'powellEDHEngineerId', 'powellEDHEngineer',
            'cpProjectEngineerId', 'cpProjectEngineer', 'cpAssignedEngineerId', 'cpAssignedEngineer',
            'cpqcEngineerId', 'cpqcEngineer',
            'plannedHours', 'actualHours', 'noOfErrorsFoundByCPQCEngineer', 'noOfErrorsFoundInInternalReview',
            'noOfErrorsFoundByCustomer', 'cpComments', 'activityStatus', 'isLive',
            'createdBy', 'modifiedBy', 'createdAt', 'modifiedAt',
        ]

    def validate(self, attrs):
        pairs = [
            ('cp_planned_start_date', 'cp_planned_finished_date', 'cpPlannedFinishedDate'),
            ('cp_actual_start_date', 'cp_actual_finished_date', 'cpActualFinishedDate'),
            ('sigma_start_date', 'sigma_finish_date', 'sigmaFinishDate'),
        ]
        for start_field, end_field, label in pairs:
            start = attrs.get(start_field, getattr(self.instance, start_field, None))
            end = attrs.get(end_field, getattr(self.instance, end_field, None))
            if start and end and end < start:
                raise serializers.ValidationError({label: 'Finish date cannot be before the start date'})
        return attrs


class ProjectPlanningSerializer(serializers.ModelSerializer):
    planningId = serializers.IntegerField(source='id', read_only=True)
    projectNo = serializers.CharField(
        source='project_no', max_length=100,
        validators=[UniqueValidator(ProjectPlanning.objects.all(), message='Project number already exists')]
    )
    projectName = serializers.CharField(source='project_name', required=False, allow_blank=True, allow_null=True)
    productCode = serializers.CharField(source='product_code', required=False, allow_blank=True, allow_null=True)
    customerName = serializers.CharField(source='customer_name', required=False, allow_blank=True, allow_null=True)
    divisionId = serializers.PrimaryKeyRelatedField(source='division', queryset=Division.objects.all())
    division = DivisionSerializer(read_only=True)
    divisionName = serializers.CharField(source='division.name', read_only=True)
    productId = serializers.PrimaryKeyRelatedField(source='product', queryset=Product.objects.all())
    product = ProductSerializer(read_only=True)
    productName = serializers.CharField(source='product.name', read_only=True)
    projectReceivedDate = LenientDateField(source='project_received_date', required=False, allow_null=True)
    units = serializers.IntegerField(min_value=1, required=False)
    systemVoltageInKV = serializers.DecimalField(source='system_voltage_kv', max_digits=8, decimal_places=2,
                                                 required=False, coerce_to_string=False)
    isCompleted = serializers.BooleanField(source='is_completed', required=False)
    projectStatus = serializers.CharField(source='project_status', required=False, allow_blank=True, max_length=30)
    isLive = serializers.BooleanField(source='is_live', required=False)
    createdBy = serializers.CharField(source='created_by.username', read_only=True, default=None)
    modifiedBy = serializers.CharField(source='modified_by.username', read_only=True, default=None)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    modifiedAt = serializers.DateTimeField(source='updated_at', read_only=True)
    activitesList = serializers.ListField(child=serializers.IntegerField(min_value=1), write_only=True, required=False)

    class Meta:
        model = ProjectPlanning
        fields = [
            'planningId', 'projectNo', 'projectName', 'productCode', 'customerName',
            'divisionId', 'division', 'divisionName', 'productId', 'product', 'productName',
            'projectReceivedDate', 'units', 'systemVoltageInKV', 'isCompleted', 'projectStatus', 'isLive',
            'createdBy', 'modifiedBy', 'createdAt', 'modifiedAt', 'activitesList',
        ]

    def validate_systemVoltageInKV(self, value):
        if value is not None and value <= 0:
            raise serializers.ValidationError('System voltage must be greater than 0')
        return value

    def validate_projectName(self, value):
        return value or ''

    def validate_productCode(self, value):
        return value or ''

    def validate_customerName(self, value):
        return value or ''

    def validate_activitesList(self, value):
        ids = list(dict.fromkeys(value))
        found = set(Activity.objects.filter(id__in=ids).values_list('id', flat=True))
        missing = [activity_id for activity_id in ids if activity_id not in found]
        if missing:
            raise serializers.ValidationError(f"Unknown activity ids: {', '.join(str(i) for i in missing)}")
        return ids

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data['projectStatus'] = instance.derived_status()
        return data

    def create(self, validated_data):
        activity_ids = validated_data.pop('activitesList', [])
        with transaction.atomic():
            planning = super().create(validated_data)
            add_missing_activities(planning, activity_ids, validated_data.get('created_by'))
        return planning

    def update(self, instance, validated_data):
        activity_ids = validated_data.pop('activitesList', None)
        with transaction.atomic():
            planning = super().update(instance, validated_data)
            if activity_ids:
                add_missing_activities(planning, activity_ids, validated_data.get('modified_by'))
        return planning


class ProjectPlanningDetailSerializer(ProjectPlanningSerializer):
    projectActivities = serializers.SerializerMethodField()

    class Meta(ProjectPlanningSerializer.Meta):
        fields = ProjectPlanningSerializer.Meta.fields + ['projectActivities']

    def get_projectActivities(self, obj):
        rows = [row for row in obj.project_activities.all() if row.is_live]
        return ProjectActivitySerializer(rows, many=True).data


class ProjectQuickNoteSerializer(serializers.ModelSerializer):
    planningQuickNotesId = serializers.IntegerField(source='id', read_only=True)
    planningId = serializers.PrimaryKeyRelatedField(source='planning', queryset=ProjectPlanning.objects.all())
    quickNotes = serializers.CharField(source='quick_notes')
    createdBy = serializers.CharField(source='created_by.username', read_only=True, default=None)
    createdTime = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = ProjectQuickNote
        fields = ['planningQuickNotesId', 'planningId', 'quickNotes', 'createdBy', 'createdTime']
