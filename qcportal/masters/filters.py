import django_filters
from .models import Activity, Resource, ErrorSubCategory


class LiveFilterSet(django_filters.FilterSet):
    """Adds the isLive query parameter shared by every master list"""
    isLive = django_filters.BooleanFilter(field_name='is_live')


class ActivityFilter(LiveFilterSet):
    divisionId = django_filters.NumberFilter(field_name='division_id')

    class Meta:
        model = Activity
        fields = ['isLive', 'divisionId']


class ResourceFilter(LiveFilterSet):
    resourceRoleId = django_filters.NumberFilter(field_name='role_id')

    class Meta:
        model = Resource
        fields = ['isLive', 'resourceRoleId']


class ErrorSubCategoryFilter(LiveFilterSet):
    errorCategoryId = django_filters.NumberFilter(field_name='category_id')

    class Meta:
        model = ErrorSubCategory
        fields = ['isLive', 'errorCategoryId']
