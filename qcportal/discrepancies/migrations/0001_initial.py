# Generated manually
import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('masters', '0001_initial'),
        ('projects', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Discrepancy',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('qc_level', models.PositiveSmallIntegerField(blank=True, choices=[(1, 'CPQC2 - Second Level'), (2, 'CPQC3 - Final Level'), (3, 'Powell Engineer'), (4, 'Powell Assembly'), (5, 'Powell Inspection'), (6, 'Customer Inspection'), (7, 'Customer Returns')], null=True)),
                ('qc_cycle', models.PositiveSmallIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(100)])),
                ('drawing_number', models.CharField(blank=True, max_length=100)),
                ('reflection_document_id', models.CharField(blank=True, max_length=100)),
                ('error_description', models.TextField(blank=True)),
                ('criticality', models.CharField(blank=True, choices=[('Low', 'Low'), ('Medium', 'Medium'), ('High', 'High')], max_length=10)),
                ('status_of_error', models.CharField(choices=[('Identified', 'Identified'), ('In Review', 'In Review'), ('Corrected', 'Corrected'), ('Ignored', 'Ignored')], db_index=True, default='Identified', max_length=20)),
                ('remarks', models.TextField(blank=True)),
                ('recurring_issue', models.BooleanField(default=False)),
                ('date_resolved', models.DateField(blank=True, null=True)),
                ('is_live', models.BooleanField(db_index=True, default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_discrepancies', to=settings.AUTH_USER_MODEL)),
                ('drawing_description', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='discrepancies', to='masters.drawingdescription')),
                ('error_category', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='discrepancies', to='masters.errorcategory')),
                ('error_sub_category', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='discrepancies', to='masters.errorsubcategory')),
                ('modified_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='modified_discrepancies', to=settings.AUTH_USER_MODEL)),
                ('planning', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='discrepancies', to='projects.projectplanning')),
                ('project_activity', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='discrepancies', to='projects.projectactivity')),
            ],
            options={
                'db_table': 'discrepancies',
                'ordering': ['-created_at'],
                'verbose_name_plural': 'discrepancies',
                'indexes': [models.Index(fields=['planning', 'status_of_error'], name='discrepancy_plan_status_idx')],
            },
        ),
    ]
