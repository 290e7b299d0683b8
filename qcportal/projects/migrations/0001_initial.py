# Generated manually
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('masters', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='ProjectPlanning',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('project_no', models.CharField(max_length=100, unique=True)),
                ('project_name', models.CharField(blank=True, max_length=255)),
                ('product_code', models.CharField(blank=True, max_length=100)),
                ('customer_name', models.CharField(blank=True, max_length=255)),
                ('project_received_date', models.DateField(blank=True, null=True)),
                ('units', models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ('system_voltage_kv', models.DecimalField(decimal_places=2, default=Decimal('1.00'), max_digits=8)),
                ('is_completed', models.BooleanField(default=False)),
                ('project_status', models.CharField(blank=True, max_length=30)),
                ('is_live', models.BooleanField(db_index=True, default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_plannings', to=settings.AUTH_USER_MODEL)),
                ('division', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='plannings', to='masters.division')),
                ('modified_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='modified_plannings', to=settings.AUTH_USER_MODEL)),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='plannings', to='masters.product')),
            ],
            options={
                'db_table': 'project_plannings',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['project_no'], name='plannings_project_no_idx'),
                    models.Index(fields=['-created_at'], name='plannings_created_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ProjectActivity',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('sigma_start_date', models.DateField(blank=True, null=True)),
                ('sigma_finish_date', models.DateField(blank=True, null=True)),
                ('cp_planned_start_date', models.DateField(blank=True, null=True)),
                ('cp_planned_finished_date', models.DateField(blank=True, null=True)),
                ('cp_actual_start_date', models.DateField(blank=True, null=True)),
                ('cp_actual_finished_date', models.DateField(blank=True, null=True)),
                ('cp_planned_qc_start_date', models.DateField(blank=True, null=True)),
                ('planned_qc_completion_date', models.DateField(blank=True, null=True)),
                ('cp_actual_qc_start_date', models.DateField(blank=True, null=True)),
                ('actual_qc_completion_date', models.DateField(blank=True, null=True)),
                ('planned_hours', models.DecimalField(blank=True, decimal_places=2, max_digits=8, null=True)),
                ('actual_hours', models.DecimalField(blank=True, decimal_places=2, max_digits=8, null=True)),
                ('errors_by_cpqc_engineer', models.PositiveIntegerField(default=0)),
                ('errors_in_internal_review', models.PositiveIntegerField(default=0)),
                ('errors_by_customer', models.PositiveIntegerField(default=0)),
                ('cp_comments', models.TextField(blank=True)),
                ('activity_status', models.CharField(choices=[('Not Started', 'Not Started'), ('In Progress', 'In Progress'), ('Hold', 'Hold'), ('Suspended', 'Suspended'), ('Withdrawn', 'Withdrawn'), ('Completed', 'Completed')], default='Not Started', max_length=20)),
                ('is_live', models.BooleanField(db_index=True, default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('activity', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='project_activities', to='masters.activity')),
                ('cp_assigned_engineer', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='assigned_activities', to=settings.AUTH_USER_MODEL)),
                ('cp_project_engineer', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='project_engineer_activities', to=settings.AUTH_USER_MODEL)),
                ('cp_qc_engineer', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='qc_activities', to=settings.AUTH_USER_MODEL)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_project_activities', to=settings.AUTH_USER_MODEL)),
                ('modified_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='modified_project_activities', to=settings.AUTH_USER_MODEL)),
                ('planning', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='project_activities', to='projects.projectplanning')),
                ('powell_edh_engineer', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='engineered_activities', to='masters.resource')),
                ('powell_edh_manager', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='managed_activities', to='masters.resource')),
            ],
            options={
                'db_table': 'project_activities',
                'ordering': ['activity__order', 'id'],
                'verbose_name_plural': 'project activities',
            },
        ),
        migrations.CreateModel(
            name='ProjectQuickNote',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quick_notes', models.TextField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='project_quick_notes', to=settings.AUTH_USER_MODEL)),
                ('planning', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='quick_notes', to='projects.projectplanning')),
            ],
            options={
                'db_table': 'project_quick_notes',
                'ordering': ['-created_at'],
            },
        ),
    ]
