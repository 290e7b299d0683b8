from django.contrib import admin
from .models import Discrepancy


@admin.register(Discrepancy)
class DiscrepancyAdmin(admin.ModelAdmin):
    list_display = ['id', 'planning', 'project_activity', 'qc_level', 'qc_cycle', 'error_category',
                    'criticality', 'status_of_error', 'recurring_issue', 'is_live', 'created_at']
    list_filter = ['status_of_error', 'criticality', 'qc_level', 'recurring_issue', 'is_live', 'error_category']
    search_fields = ['planning__project_no', 'drawing_number', 'error_description']
    raw_id_fields = ['project_activity']
    ordering = ['-created_at']
