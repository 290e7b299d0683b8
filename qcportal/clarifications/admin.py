from django.contrib import admin
from .models import Clarification, ClarificationQuickNote, ClarificationFileUpload


class ClarificationFileInline(admin.TabularInline):
    model = ClarificationFileUpload
    extra = 0
    readonly_fields = ['file_name', 'content_type', 'file_size', 'uploaded_at', 'uploaded_by']


@admin.register(Clarification)
class ClarificationAdmin(admin.ModelAdmin):
    list_display = ['id', 'planning', 'project_activity', 'status', 'criticality', 'raised_by',
                    'date_raised', 'date_closed', 'is_live']
    list_filter = ['status', 'criticality', 'is_live']
    search_fields = ['planning__project_no', 'description', 'doc_reference']
    date_hierarchy = 'date_raised'
    inlines = [ClarificationFileInline]


@admin.register(ClarificationQuickNote)
class ClarificationQuickNoteAdmin(admin.ModelAdmin):
    list_display = ['clarification', 'created_by', 'created_at']
    search_fields = ['quick_notes']


@admin.register(ClarificationFileUpload)
class ClarificationFileUploadAdmin(admin.ModelAdmin):
    list_display = ['file_name', 'clarification', 'file_size', 'uploaded_by', 'uploaded_at']
    search_fields = ['file_name']
