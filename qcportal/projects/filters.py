import django_filters
from django.db.models import Q
from .models import ProjectPlanning


class PlanningFilter(django_filters.FilterSet):
    """Filters for the planning list"""
    search = django_filters.CharFilter(method='filter_search', label='Search')
    divisionId = django_filters.NumberFilter(field_name='division_id')
    productId = django_filters.NumberFilter(field_name='product_id')
    isCompleted = django_filters.BooleanFilter(field_name='is_completed')
    isLive = django_filters.BooleanFilter(field_name='is_live')

    class Meta:
        model = ProjectPlanning
        fields = ['search', 'divisionId', 'productId', 'isCompleted', 'isLive']

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(project_no__icontains=value) |
            Q(project_name__icontains=value) |
            Q(customer_name__icontains=value)
        )
