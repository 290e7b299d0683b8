from django.contrib import admin
from .models import ProjectPlanning, ProjectActivity, ProjectQuickNote


class ProjectActivityInline(admin.TabularInline):
    model = ProjectActivity
    extra = 0
    fields = ['activity', 'activity_status', 'cp_assigned_engineer', 'cp_qc_engineer', 'is_live']
    raw_id_fields = ['cp_assigned_engineer', 'cp_qc_engineer']


@admin.register(ProjectPlanning)
class ProjectPlanningAdmin(admin.ModelAdmin):
    list_display = ['project_no', 'project_name', 'customer_name', 'division', 'product', 'units',
                    'is_completed', 'is_live', 'created_at']
    list_filter = ['division', 'product', 'is_completed', 'is_live']
    search_fields = ['project_no', 'project_name', 'customer_name']
    ordering = ['-created_at']
    inlines = [ProjectActivityInline]


@admin.register(ProjectActivity)
class ProjectActivityAdmin(admin.ModelAdmin):
    list_display = ['planning', 'activity', 'activity_status', 'cp_assigned_engineer', 'is_live']
    list_filter = ['activity_status', 'is_live', 'activity__division']
    search_fields = ['planning__project_no', 'activity__name']


@admin.register(ProjectQuickNote)
class ProjectQuickNoteAdmin(admin.ModelAdmin):
    list_display = ['planning', 'created_by', 'created_at']
    search_fields = ['planning__project_no', 'quick_notes']
