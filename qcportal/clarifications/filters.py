import django_filters
from .models import Clarification


class ClarificationFilter(django_filters.FilterSet):
    planningId = django_filters.NumberFilter(field_name='planning_id')
    projectActivityId = django_filters.NumberFilter(field_name='project_activity_id')
    status = django_filters.CharFilter(field_name='status', lookup_expr='iexact')
    criticalityIndex = django_filters.CharFilter(field_name='criticality', lookup_expr='iexact')
    isLive = django_filters.BooleanFilter(field_name='is_live')
    raisedFrom = django_filters.DateFilter(field_name='date_raised', lookup_expr='gte')
    raisedTo = django_filters.DateFilter(field_name='date_raised', lookup_expr='lte')

    class Meta:
        model = Clarification
        fields = ['planningId', 'projectActivityId', 'status', 'criticalityIndex', 'isLive', 'raisedFrom', 'raisedTo']
