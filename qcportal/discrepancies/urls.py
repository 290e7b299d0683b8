from django.urls import path
from . import views

urlpatterns = [
    path('Discrepancies/GetAll', views.discrepancy_list, name='discrepancy-list'),
    path('Discrepancies/Summary', views.discrepancy_summary, name='discrepancy-summary'),
    path('Discrepancies/Export', views.discrepancy_export, name='discrepancy-export'),
    path('Discrepancies', views.discrepancy_create, name='discrepancy-create'),
    path('Discrepancies/<int:pk>', views.discrepancy_detail, name='discrepancy-detail'),
]
