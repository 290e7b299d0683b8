import django_filters
from .models import Discrepancy


class DiscrepancyFilter(django_filters.FilterSet):
    planningId = django_filters.NumberFilter(field_name='planning_id')
    projectActivityId = django_filters.NumberFilter(field_name='project_activity_id')
    errorCategoryId = django_filters.NumberFilter(field_name='error_category_id')
    errorSubCategoryId = django_filters.NumberFilter(field_name='error_sub_category_id')
    statusOfError = django_filters.CharFilter(field_name='status_of_error', lookup_expr='iexact')
    criticalityIndex = django_filters.CharFilter(field_name='criticality', lookup_expr='iexact')
    qcLevelId = django_filters.NumberFilter(field_name='qc_level')
    recurringIssue = django_filters.BooleanFilter(field_name='recurring_issue')
    isLive = django_filters.BooleanFilter(field_name='is_live')

    class Meta:
        model = Discrepancy
        fields = ['planningId', 'projectActivityId', 'errorCategoryId', 'errorSubCategoryId',
                  'statusOfError', 'criticalityIndex', 'qcLevelId', 'recurringIssue', 'isLive']
