from django.contrib import admin
from .models import (
    Division, Activity, Product, ResourceRole, Resource,
    ErrorCategory, ErrorSubCategory, DrawingDescription
)


@admin.register(Division)
class DivisionAdmin(admin.ModelAdmin):
    list_display = ['name', 'description', 'is_live', 'created_at']
    list_filter = ['is_live']
    search_fields = ['name', 'description']


@admin.register(Activity)
class ActivityAdmin(admin.ModelAdmin):
    list_display = ['name', 'division', 'order', 'is_live']
    list_filter = ['division', 'is_live']
    search_fields = ['name']
    ordering = ['division', 'order']


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'description', 'is_live']
    list_filter = ['is_live']
    search_fields = ['name']


class ResourceInline(admin.TabularInline):
    model = Resource
    extra = 0


@admin.register(ResourceRole)
class ResourceRoleAdmin(admin.ModelAdmin):
    list_display = ['name', 'is_live']
    list_filter = ['is_live']
    search_fields = ['name']
    inlines = [ResourceInline]


@admin.register(Resource)
class ResourceAdmin(admin.ModelAdmin):
    list_display = ['name', 'role', 'is_live']
    list_filter = ['role', 'is_live']
    search_fields = ['name']


@admin.register(ErrorCategory)
class ErrorCategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'is_live']
    list_filter = ['is_live']
    search_fields = ['name']


@admin.register(ErrorSubCategory)
class ErrorSubCategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'category', 'is_live']
    list_filter = ['category', 'is_live']
    search_fields = ['name', 'category__name']


@admin.register(DrawingDescription)
class DrawingDescriptionAdmin(admin.ModelAdmin):
    list_display = ['description', 'is_live']
    list_filter = ['is_live']
    search_fields = ['description']
