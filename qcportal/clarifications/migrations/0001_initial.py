# Generated manually
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('projects', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Clarification',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('doc_reference', models.CharField(blank=True, max_length=255)),
                ('description', models.TextField()),
                ('response', models.TextField(blank=True)),
                ('status', models.CharField(choices=[('Open', 'Open'), ('In Review', 'In Review'), ('Closed', 'Closed')], db_index=True, default='Open', max_length=20)),
                ('criticality', models.CharField(choices=[('Low', 'Low'), ('Medium', 'Medium'), ('High', 'High')], max_length=10)),
                ('date_raised', models.DateField()),
                ('date_closed', models.DateField(blank=True, null=True)),
                ('is_live', models.BooleanField(db_index=True, default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_clarifications', to=settings.AUTH_USER_MODEL)),
                ('modified_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='modified_clarifications', to=settings.AUTH_USER_MODEL)),
                ('planning', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='clarifications', to='projects.projectplanning')),
                ('project_activity', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='clarifications', to='projects.projectactivity')),
                ('raised_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='raised_clarifications', to=settings.AUTH_USER_MODEL)),
                ('responses_from', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='answered_clarifications', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'clarifications',
                'ordering': ['-date_raised', '-id'],
            },
        ),
        migrations.CreateModel(
            name='ClarificationQuickNote',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quick_notes', models.TextField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('clarification', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='quick_notes', to='clarifications.clarification')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='clarification_quick_notes', to=settings.AUTH_USER_MODEL)),
                ('modified_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='modified_clarification_quick_notes', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'clarification_quick_notes',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='ClarificationFileUpload',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('file', models.FileField(upload_to='clarifications/%Y/%m/')),
                ('file_name', models.CharField(max_length=255)),
                ('content_type', models.CharField(blank=True, max_length=150)),
                ('file_size', models.PositiveBigIntegerField(default=0)),
                ('uploaded_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('uploaded_by', models.CharField(blank=True, max_length=150)),
                ('modified_at', models.DateTimeField(blank=True, null=True)),
                ('modified_by', models.CharField(blank=True, max_length=150)),
                ('data_from', models.CharField(blank=True, help_text='Screen the file was uploaded from', max_length=50)),
                ('clarification', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='files', to='clarifications.clarification')),
            ],
            options={
                'db_table': 'clarification_file_uploads',
                'ordering': ['-uploaded_at'],
            },
        ),
    ]
