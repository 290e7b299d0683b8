from rest_framework import serializers
from rest_framework.validators import UniqueValidator
from .models import (
    Division, Activity, Product, ResourceRole, Resource,
    ErrorCategory, ErrorSubCategory, DrawingDescription
)


class DivisionSerializer(serializers.ModelSerializer):
    divisionId = serializers.IntegerField(source='id', read_only=True)
    divisionName = serializers.CharField(
        source='name', max_length=200,
        validators=[UniqueValidator(Division.objects.all(), message='Division name already exists', lookup='iexact')]
    )
    isLive = serializers.BooleanField(source='is_live', required=False)

    class Meta:
        model = Division
        fields = ['divisionId', 'divisionName', 'description', 'isLive']
        extra_kwargs = {'description': {'required': False, 'allow_blank': True}}

    def to_internal_value(self, data):
        # Older clients send the flag as 'islive'
        if hasattr(data, 'keys') and 'islive' in data and 'isLive' not in data:
            data = {**data, 'isLive': data['islive']}
        return super().to_internal_value(data)


class ActivitySerializer(serializers.ModelSerializer):
    activityId = serializers.IntegerField(source='id', read_only=True)
    activityName = serializers.CharField(source='name', max_length=200)
    divisionId = serializers.PrimaryKeyRelatedField(source='division', queryset=Division.objects.all())
    division = DivisionSerializer(read_only=True)
    order = serializers.IntegerField(min_value=0, required=False)
    isLive = serializers.BooleanField(source='is_live', required=False)

    class Meta:
        model = Activity
        fields = ['activityId', 'activityName', 'order', 'divisionId', 'division', 'isLive']


class ProductSerializer(serializers.ModelSerializer):
    productId = serializers.IntegerField(source='id', read_only=True)
    productName = serializers.CharField(
        source='name', max_length=200,
        validators=[UniqueValidator(Product.objects.all(), message='Product name already exists', lookup='iexact')]
    )
    isLive = serializers.BooleanField(source='is_live', required=False)

    class Meta:
        model = Product
        fields = ['productId', 'productName', 'description', 'isLive']
        extra_kwargs = {'description': {'required': False, 'allow_blank': True}}


class ResourceSerializer(serializers.ModelSerializer):
    resourceId = serializers.IntegerField(source='id', read_only=True)
    resourceName = serializers.CharField(source='name', max_length=200)
    resourceRoleId = serializers.PrimaryKeyRelatedField(source='role', queryset=ResourceRole.objects.all())
    resourceRoleName = serializers.CharField(source='role.name', read_only=True)
    isLive = serializers.BooleanField(source='is_live', required=False)

    class Meta:
        model = Resource
        fields = ['resourceId', 'resourceName', 'resourceRoleId', 'resourceRoleName', 'isLive']


class ResourceRoleSerializer(serializers.ModelSerializer):
    resourceRoleId = serializers.IntegerField(source='id', read_only=True)
    resourceRoleName = serializers.CharField(
        source='name', max_length=200,
        validators=[UniqueValidator(ResourceRole.objects.all(), message='Resource role name already exists', lookup='iexact')]
    )
    isLive = serializers.BooleanField(source='is_live', required=False)
    resources = serializers.SerializerMethodField()

    class Meta:
        model = ResourceRole
        fields = ['resourceRoleId', 'resourceRoleName', 'isLive', 'resources']

    def get_resources(self, obj):
        live = [resource for resource in obj.resources.all() if resource.is_live]
        return ResourceSerializer(live, many=True).data


class ErrorCategorySerializer(serializers.ModelSerializer):
    errorCategoryId = serializers.IntegerField(source='id', read_only=True)
    errorCategoryName = serializers.CharField(
        source='name', max_length=200,
        validators=[UniqueValidator(ErrorCategory.objects.all(), message='Error category name already exists', lookup='iexact')]
    )
    isLive = serializers.BooleanField(source='is_live', required=False)

    class Meta:
        model = ErrorCategory
        fields = ['errorCategoryId', 'errorCategoryName', 'isLive']


class ErrorSubCategorySerializer(serializers.ModelSerializer):
    errorSubCategoryId = serializers.IntegerField(source='id', read_only=True)
    errorSubCategoryName = serializers.CharField(source='name', max_length=200)
    errorCategoryId = serializers.PrimaryKeyRelatedField(source='category', queryset=ErrorCategory.objects.all())
    errorCategory = ErrorCategorySerializer(source='category', read_only=True)
    isLive = serializers.BooleanField(source='is_live', required=False)

    class Meta:
        model = ErrorSubCategory
        fields = ['errorSubCategoryId', 'errorSubCategoryName', 'errorCategoryId', 'errorCategory', 'isLive']
        validators = []

    def validate(self, attrs):
        category = attrs.get('category', getattr(self.instance, 'category', None))
        name = attrs.get('name', getattr(self.instance, 'name', None))
        duplicates = ErrorSubCategory.objects.filter(category=category, name__iexact=name)
        if self.instance is not None:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if category is not None and name and duplicates.exists():
            raise serializers.ValidationError(
                {'errorSubCategoryName': f"'{name}' already exists in {category.name}"}
            )
        return attrs


class DrawingDescriptionSerializer(serializers.ModelSerializer):
    drawingDescId = serializers.IntegerField(source='id', read_only=True)
    isLive = serializers.BooleanField(source='is_live', required=False)

    class Meta:
        model = DrawingDescription
        fields = ['drawingDescId', 'description', 'isLive']
