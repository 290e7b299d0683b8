from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from .models import User, Page, UserPermission, AuditLog


class LenientDateField(serializers.DateField):
    """Date field that also accepts ISO datetimes ('2024-05-01T00:00:00Z') and blanks"""

    def to_internal_value(self, value):
        if value in ('', None):
            if self.allow_null:
                return None
            self.fail('required')
        if isinstance(value, str) and 'T' in value:
            value = value.split('T', 1)[0]
        return super().to_internal_value(value)


class UserSerializer(serializers.ModelSerializer):
    userId = serializers.CharField(source='id', read_only=True)
    userName = serializers.CharField(source='username', read_only=True)
    firstName = serializers.CharField(source='first_name', required=False, allow_blank=True)
    lastName = serializers.CharField(source='last_name', required=False, allow_blank=True)
    phoneNumber = serializers.CharField(source='phone', required=False, allow_blank=True, allow_null=True)
    changepondEmpId = serializers.IntegerField(source='changepond_emp_id', required=False)
    isLive = serializers.BooleanField(source='is_active', required=False)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = User
        fields = ['userId', 'userName', 'firstName', 'lastName', 'email', 'phoneNumber',
                  'role', 'changepondEmpId', 'isLive', 'createdAt']


class UserCreateSerializer(serializers.ModelSerializer):
    userName = serializers.CharField(source='username')
    firstName = serializers.CharField(source='first_name', required=False, allow_blank=True)
    lastName = serializers.CharField(source='last_name', required=False, allow_blank=True)
    phoneNumber = serializers.CharField(source='phone', required=False, allow_blank=True, allow_null=True)
    changepondEmpId = serializers.IntegerField(source='changepond_emp_id', required=False)
    password = serializers.CharField(write_only=True, validators=[validate_password])
    confirmPassword = serializers.CharField(write_only=True, required=False)

    class Meta:
        model = User
        fields = ['userName', 'firstName', 'lastName', 'email', 'phoneNumber', 'role',
                  'changepondEmpId', 'password', 'confirmPassword']

    def validate(self, attrs):
        confirm = attrs.pop('confirmPassword', None)
        if confirm is not None and attrs['password'] != confirm:
            raise serializers.ValidationError({"password": "Passwords don't match"})
        return attrs

    def create(self, validated_data):
        password = validated_data.pop('password')
        user = User(**validated_data, is_active=True)
        user.set_password(password)
        user.save()
        return user


class UserUpdateSerializer(UserSerializer):
    password = serializers.CharField(write_only=True, required=False, allow_blank=True, validators=[validate_password])

    class Meta(UserSerializer.Meta):
        fields = UserSerializer.Meta.fields + ['password']

    def update(self, instance, validated_data):
        password = validated_data.pop('password', None)
        instance = super().update(instance, validated_data)
        if password:
            instance.set_password(password)
            instance.save(update_fields=['password'])
        return instance


class LoginSerializer(serializers.Serializer):
    email = serializers.CharField(required=False, allow_blank=True)
    username = serializers.CharField(required=False, allow_blank=True)
    password = serializers.CharField(write_only=True)

    def validate(self, attrs):
        if not attrs.get('email') and not attrs.get('username'):
            raise serializers.ValidationError("Email or username is required")
        return attrs


class PageSerializer(serializers.ModelSerializer):
    pageId = serializers.IntegerField(source='id', read_only=True)
    pageName = serializers.CharField(source='name')
    parentPageId = serializers.PrimaryKeyRelatedField(
        source='parent', queryset=Page.objects.all(), required=False, allow_null=True
    )
    isLive = serializers.BooleanField(source='is_live', required=False)

    class Meta:
        model = Page
        fields = ['pageId', 'pageName', 'description', 'parentPageId', 'isLive']

    def validate_parentPageId(self, value):
        if value is not None and self.instance is not None and value.pk == self.instance.pk:
            raise serializers.ValidationError("A page cannot be its own parent")
        return value


class UserPermissionSerializer(serializers.ModelSerializer):
    permissonId = serializers.IntegerField(source='id', read_only=True)
    userId = serializers.PrimaryKeyRelatedField(source='user', queryset=User.objects.all())
    pageId = serializers.PrimaryKeyRelatedField(source='page', queryset=Page.objects.all())
    page = PageSerializer(read_only=True)
    pagePermission = serializers.BooleanField(source='page_permission', required=False)
    canView = serializers.BooleanField(source='can_view', required=False)
    canCreate = serializers.BooleanField(source='can_create', required=False)
    canEdit = serializers.BooleanField(source='can_edit', required=False)
    canDelete = serializers.BooleanField(source='can_delete', required=False)

    class Meta:
        model = UserPermission
        fields = ['permissonId', 'userId', 'pageId', 'page', 'pagePermission',
                  'canView', 'canCreate', 'canEdit', 'canDelete']

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data['userId'] = str(instance.user_id)
        return data


class AuditLogSerializer(serializers.ModelSerializer):
    userName = serializers.CharField(source='user.username', read_only=True, default=None)
    modelName = serializers.CharField(source='model_name')
    objectId = serializers.CharField(source='object_id')
    objectName = serializers.CharField(source='object_name')
    ipAddress = serializers.CharField(source='ip_address')
    createdAt = serializers.DateTimeField(source='created_at')

    class Meta:
        model = AuditLog
        fields = ['id', 'userName', 'action', 'modelName', 'objectId', 'objectName',
                  'changes', 'ipAddress', 'createdAt']
