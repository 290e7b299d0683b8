from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from qcportal.masters.models import Division, Activity, Product, Resource

ACTIVITY_STATUS_CHOICES = [
    ('Not Started', 'Not Started'),
    ('In Progress', 'In Progress'),
    ('Hold', 'Hold'),
    ('Suspended', 'Suspended'),
    ('Withdrawn', 'Withdrawn'),
    ('Completed', 'Completed'),
]


class ProjectPlanning(models.Model):
    """A customer project (planning) and the activities planned for it"""
    project_no = models.CharField(max_length=100, unique=True)
    project_name = models.CharField(max_length=255, blank=True)
    product_code = models.CharField(max_length=100, blank=True)
    customer_name = models.CharField(max_length=255, blank=True)
    division = models.ForeignKey(Division, on_delete=models.PROTECT, related_name='plannings')
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name='plannings')
    project_received_date = models.DateField(null=True, blank=True)
    units = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    system_voltage_kv = models.DecimalField(max_digits=8, decimal_places=2, default=Decimal('1.00'))
    is_completed = models.BooleanField(default=False)
    project_status = models.CharField(max_length=30, blank=True)
    is_live = models.BooleanField(default=True, db_index=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                   related_name='created_plannings')
    modified_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                    related_name='modified_plannings')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.project_no

    def derived_status(self):
        """Stored status, else Completed / In Progress / Not Started from the activities"""
        if self.project_status:
            return self.project_status
        if self.is_completed:
            return 'Completed'
        statuses = {activity.activity_status for activity in self.project_activities.all() if activity.is_live}
        if statuses & {'In Progress', 'Completed'}:
            return 'In Progress'
        return 'Not Started'

    class Meta:
        db_table = 'project_plannings'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['project_no'], name='plannings_project_no_idx'),
            models.Index(fields=['-created_at'], name='plannings_created_idx'),
        ]


class ProjectActivity(models.Model):
    """One master activity scheduled on a planning, with dates, people and QC counts"""
    planning = models.ForeignKey(ProjectPlanning, on_delete=models.CASCADE, related_name='project_activities')
    activity = models.ForeignKey(Activity, on_delete=models.PROTECT, related_name='project_activities')

    sigma_start_date = models.DateField(null=True, blank=True)
    sigma_finish_date = models.DateField(null=True, blank=True)
    cp_planned_start_date = models.DateField(null=True, blank=True)
    cp_planned_finished_date = models.DateField(null=True, blank=True)
    cp_actual_start_date = models.DateField(null=True, blank=True)
    cp_actual_finished_date = models.DateField(null=True, blank=True)
    cp_planned_qc_start_date = models.DateField(null=True, blank=True)
    planned_qc_completion_date = models.DateField(null=True, blank=True)
    cp_actual_qc_start_date = models.DateField(null=True, blank=True)
    actual_qc_completion_date = models.DateField(null=True, blank=True)

    # Powell EDH team (external resources)
    powell_edh_manager = models.ForeignKey(Resource, on_delete=models.SET_NULL, null=True, blank=True,
                                           related_name='managed_activities')
    powell_edh_engineer = models.ForeignKey(Resource, on_delete=models.SET_NULL, null=True, blank=True,
                                            related_name='engineered_activities')

    # CP team (users)
    cp_project_engineer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True,
                                            blank=True, related_name='project_engineer_activities')
    cp_assigned_engineer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True,
                                             blank=True, related_name='assigned_activities')
    cp_qc_engineer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True,
                                       blank=True, related_name='qc_activities')

    planned_hours = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)
    actual_hours = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)
    errors_by_cpqc_engineer = models.PositiveIntegerField(default=0)
    errors_in_internal_review = models.PositiveIntegerField(default=0)
    errors_by_customer = models.PositiveIntegerField(default=0)
    cp_comments = models.TextField(blank=True)
    activity_status = models.CharField(max_length=20, choices=ACTIVITY_STATUS_CHOICES, default='Not Started')
    is_live = models.BooleanField(default=True, db_index=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                   related_name='created_project_activities')
    modified_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                    related_name='modified_project_activities')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.planning.project_no} - {self.activity.name}"

    class Meta:
        db_table = 'project_activities'
        ordering = ['activity__order', 'id']
        verbose_name_plural = 'project activities'


class ProjectQuickNote(models.Model):
    planning = models.ForeignKey(ProjectPlanning, on_delete=models.CASCADE, related_name='quick_notes')
    quick_notes = models.TextField()
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                   related_name='project_quick_notes')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Note on {self.planning.project_no}"

    class Meta:
        db_table = 'project_quick_notes'
        ordering = ['-created_at']
