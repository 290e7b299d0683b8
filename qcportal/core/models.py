from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Portal user with a single application role"""
    ROLE_CHOICES = [
        ('engineer', 'Engineer'),
        ('qc', 'QC'),
        ('project_manager', 'Project Manager'),
        ('admin', 'Admin'),
    ]

    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=20, blank=True, null=True)
    role = models.CharField(max_length=30, choices=ROLE_CHOICES, default='engineer', db_index=True)
    changepond_emp_id = models.IntegerField(default=0, help_text="Employee number in the HR system")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def is_admin_role(self):
        return self.role == 'admin' or self.is_superuser

    class Meta:
        db_table = 'users'


class Page(models.Model):
    """A screen of the UI that per-user permissions are granted on"""
    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True)
    parent = models.ForeignKey('self', on_delete=models.SET_NULL, null=True, blank=True, related_name='children')
    is_live = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'pages'
        ordering = ['name']


class UserPermission(models.Model):
    """View/create/edit/delete grants of one user on one page"""
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='page_permissions')
    page = models.ForeignKey(Page, on_delete=models.CASCADE, related_name='user_permissions')
    page_permission = models.BooleanField(default=False)
    can_view = models.BooleanField(default=False)
    can_create = models.BooleanField(default=False)
    can_edit = models.BooleanField(default=False)
    can_delete = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.user.username} -> {self.page.name}"

    class Meta:
        db_table = 'user_permissions'
        unique_together = [('user', 'page')]


class AuditLog(models.Model):
    """Audit log for create/update/delete operations"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('login', 'Login'),
        ('logout', 'Logout'),
        ('upload', 'File Upload'),
        ('export', 'Export'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_name = models.CharField(max_length=255, blank=True, null=True, help_text="Human-readable name of the object (e.g., project number)")
    changes = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='audit_logs_created_e3f6f1_idx'),
            models.Index(fields=['action'], name='audit_logs_action_2d7c1b_idx'),
            models.Index(fields=['model_name'], name='audit_logs_model_n_8a4e0c_idx'),
        ]
