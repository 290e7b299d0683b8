import math

from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models

from qcportal.clarifications.models import CRITICALITY_CHOICES
from qcportal.masters.models import DrawingDescription, ErrorCategory, ErrorSubCategory
from qcportal.projects.models import ProjectPlanning, ProjectActivity

QC_LEVEL_CHOICES = [
    (1, 'CPQC2 - Second Level'),
    (2, 'CPQC3 - Final Level'),
    (3, 'Powell Engineer'),
    (4, 'Powell Assembly'),
    (5, 'Powell Inspection'),
    (6, 'Customer Inspection'),
    (7, 'Customer Returns'),
]

STATUS_OF_ERROR_CHOICES = [
    ('Identified', 'Identified'),
    ('In Review', 'In Review'),
    ('Corrected', 'Corrected'),
    ('Ignored', 'Ignored'),
]

# Statuses that no longer count as open
RESOLVED_STATUSES = ('Corrected', 'Ignored')

QC_CYCLE_MIN = 1
QC_CYCLE_MAX = 100


class Discrepancy(models.Model):
    """A QC error found on a drawing of a project activity"""
    planning = models.ForeignKey(ProjectPlanning, on_delete=models.PROTECT, related_name='discrepancies')
    project_activity = models.ForeignKey(ProjectActivity, on_delete=models.PROTECT, related_name='discrepancies')
    qc_level = models.PositiveSmallIntegerField(choices=QC_LEVEL_CHOICES, null=True, blank=True)
    qc_cycle = models.PositiveSmallIntegerField(
        default=QC_CYCLE_MIN, validators=[MinValueValidator(QC_CYCLE_MIN), MaxValueValidator(QC_CYCLE_MAX)]
    )
    drawing_number = models.CharField(max_length=100, blank=True)
    drawing_description = models.ForeignKey(DrawingDescription, on_delete=models.SET_NULL, null=True, blank=True,
                                            related_name='discrepancies')
    reflection_document_id = models.CharField(max_length=100, blank=True)
    error_category = models.ForeignKey(ErrorCategory, on_delete=models.PROTECT, null=True, blank=True,
                                       related_name='discrepancies')
    error_sub_category = models.ForeignKey(ErrorSubCategory, on_delete=models.PROTECT, null=True, blank=True,
                                           related_name='discrepancies')
    error_description = models.TextField(blank=True)
    criticality = models.CharField(max_length=10, choices=CRITICALITY_CHOICES, blank=True)
    status_of_error = models.CharField(max_length=20, choices=STATUS_OF_ERROR_CHOICES, default='Identified',
                                       db_index=True)
    remarks = models.TextField(blank=True)
    recurring_issue = models.BooleanField(default=False)
    date_resolved = models.DateField(null=True, blank=True)
    is_live = models.BooleanField(default=True, db_index=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                   related_name='created_discrepancies')
    modified_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                    related_name='modified_discrepancies')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Discrepancy #{self.pk} on {self.planning.project_no}"

    @property
    def is_open(self):
        return self.status_of_error not in RESOLVED_STATUSES

    class Meta:
        db_table = 'discrepancies'
        ordering = ['-created_at']
        verbose_name_plural = 'discrepancies'
        indexes = [
            models.Index(fields=['planning', 'status_of_error'], name='discrepancy_plan_status_idx'),
        ]


def clamp_qc_cycle(value):
    """QC cycle forced into 1..100; anything non-numeric becomes 1"""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return QC_CYCLE_MIN
    if math.isnan(number):
        return QC_CYCLE_MIN
    return int(max(QC_CYCLE_MIN, min(QC_CYCLE_MAX, number)))
