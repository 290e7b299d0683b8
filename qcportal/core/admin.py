from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User, Page, UserPermission, AuditLog


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ['username', 'email', 'first_name', 'last_name', 'role', 'is_active', 'is_staff']
    list_filter = ['role', 'is_active', 'is_staff', 'is_superuser']
    search_fields = ['username', 'email', 'first_name', 'last_name']
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Portal', {'fields': ('role', 'phone', 'changepond_emp_id')}),
    )


@admin.register(Page)
class PageAdmin(admin.ModelAdmin):
    list_display = ['name', 'parent', 'is_live', 'created_at']
    list_filter = ['is_live']
    search_fields = ['name', 'description']
    ordering = ['name']


@admin.register(UserPermission)
class UserPermissionAdmin(admin.ModelAdmin):
    list_display = ['user', 'page', 'page_permission', 'can_view', 'can_create', 'can_edit', 'can_delete']
    list_filter = ['page', 'can_view', 'can_create', 'can_edit', 'can_delete']
    search_fields = ['user__username', 'page__name']


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ['created_at', 'user', 'action', 'model_name', 'object_id', 'object_name', 'ip_address']
    list_filter = ['action', 'model_name', 'created_at']
    search_fields = ['object_name', 'object_id', 'user__username']
    readonly_fields = ['user', 'action', 'model_name', 'object_id', 'object_name', 'changes', 'ip_address', 'created_at']
    ordering = ['-created_at']
