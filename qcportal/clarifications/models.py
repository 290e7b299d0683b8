import math

from django.conf import settings
from django.db import models
from django.utils import timezone

from qcportal.projects.models import ProjectPlanning, ProjectActivity

CRITICALITY_CHOICES = [
    ('Low', 'Low'),
    ('Medium', 'Medium'),
    ('High', 'High'),
]


class Clarification(models.Model):
    """A query raised on a project activity and the response to it"""
    STATUS_CHOICES = [
        ('Open', 'Open'),
        ('In Review', 'In Review'),
        ('Closed', 'Closed'),
    ]

    planning = models.ForeignKey(ProjectPlanning, on_delete=models.PROTECT, related_name='clarifications')
    project_activity = models.ForeignKey(ProjectActivity, on_delete=models.PROTECT, related_name='clarifications')
    doc_reference = models.CharField(max_length=255, blank=True)
    description = models.TextField()
    raised_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True,
                                  related_name='raised_clarifications')
    response = models.TextField(blank=True)
    responses_from = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                       related_name='answered_clarifications')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='Open', db_index=True)
    criticality = models.CharField(max_length=10, choices=CRITICALITY_CHOICES)
    date_raised = models.DateField()
    date_closed = models.DateField(null=True, blank=True)
    is_live = models.BooleanField(default=True, db_index=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                   related_name='created_clarifications')
    modified_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                    related_name='modified_clarifications')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Clarification #{self.pk} on {self.planning.project_no}"

    def age_in_days(self, today=None):
        """Whole days between raising and closing (or today while open), rounded up"""
        if self.date_raised is None:
            return None
        end = self.date_closed or today or timezone.localdate()
        return math.ceil(abs((end - self.date_raised).days))

    def save(self, *args, **kwargs):
        if self.status == 'Closed' and self.date_closed is None:
            self.date_closed = timezone.localdate()
        super().save(*args, **kwargs)

    class Meta:
        db_table = 'clarifications'
        ordering = ['-date_raised', '-id']


class ClarificationQuickNote(models.Model):
    clarification = models.ForeignKey(Clarification, on_delete=models.CASCADE, related_name='quick_notes')
    quick_notes = models.TextField()
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                   related_name='clarification_quick_notes')
    modified_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                    related_name='modified_clarification_quick_notes')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Note on clarification #{self.clarification_id}"

    class Meta:
        db_table = 'clarification_quick_notes'
        ordering = ['-created_at']


class ClarificationFileUpload(models.Model):
    """File attached to a clarification"""
    clarification = models.ForeignKey(Clarification, on_delete=models.CASCADE, related_name='files')
    file = models.FileField(upload_to='clarifications/%Y/%m/')
    file_name = models.CharField(max_length=255)
    content_type = models.CharField(max_length=150, blank=True)
    file_size = models.PositiveBigIntegerField(default=0)
    uploaded_at = models.DateTimeField(default=timezone.now)
    uploaded_by = models.CharField(max_length=150, blank=True)
    modified_at = models.DateTimeField(null=True, blank=True)
    modified_by = models.CharField(max_length=150, blank=True)
    data_from = models.CharField(max_length=50, blank=True, help_text="Screen the file was uploaded from")

    def __str__(self):
        return self.file_name

    class Meta:
        db_table = 'clarification_file_uploads'
        ordering = ['-uploaded_at']
