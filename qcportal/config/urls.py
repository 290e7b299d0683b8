"""
URL configuration for the QC portal.

Every API route lives under /api/ using the resource naming the browser UI
calls (e.g. /api/Divisions/GetAll, /api/ErrorCategories/{id}).
"""
from django.contrib import admin
from django.urls import path, include, re_path
from django.conf import settings
from django.views.static import serve

admin.site.site_header = "QC Portal Admin Panel"
admin.site.site_title = "QC Portal Admin"
admin.site.index_title = "Project Quality Control Administration"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('qcportal.core.urls')),
    path('api/', include('qcportal.masters.urls')),
    path('api/', include('qcportal.projects.urls')),
    path('api/', include('qcportal.clarifications.urls')),
    path('api/', include('qcportal.discrepancies.urls')),
    re_path(r'^media/(?P<path>.*)$', serve, {'document_root': settings.MEDIA_ROOT}),
    re_path(r'^static/(?P<path>.*)$', serve, {'document_root': settings.STATIC_ROOT}),
]
