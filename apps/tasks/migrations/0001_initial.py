import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('departments', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Task',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=50)),
                ('instructions', models.CharField(blank=True, max_length=160)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('in_review', 'In Review'), ('done', 'Done'), ('cancelled', 'Cancelled')], db_index=True, default='pending', max_length=15)),
                ('urgency', models.CharField(choices=[('high', 'High'), ('medium', 'Medium'), ('low', 'Low')], db_index=True, default='low', max_length=10)),
                ('original_due_at', models.DateTimeField(help_text='Deadline committed at creation (never amended)')),
                ('due_at', models.DateTimeField(db_index=True, help_text='Current committed deadline, mirrors the last history entry')),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('delivered_at', models.DateTimeField(blank=True, help_text='Last time a responsible user submitted evidence', null=True)),
                ('reviewed_at', models.DateTimeField(blank=True, null=True)),
                ('closed_at', models.DateTimeField(blank=True, help_text='Set when a reviewer approves the task', null=True)),
                ('cancelled_at', models.DateTimeField(blank=True, null=True)),
                ('delivery_comment', models.TextField(blank=True)),
                ('review_feedback', models.TextField(blank=True)),
                ('assigner', models.ForeignKey(help_text='User who created this task', on_delete=django.db.models.deletion.PROTECT, related_name='assigned_tasks', to=settings.AUTH_USER_MODEL)),
                ('cancelled_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='cancelled_tasks', to=settings.AUTH_USER_MODEL)),
                ('department', models.ForeignKey(help_text='Owning department, fixed at creation', on_delete=django.db.models.deletion.PROTECT, related_name='tasks', to='departments.department')),
                ('responsibles', models.ManyToManyField(help_text='Users accountable for delivering this task', related_name='responsible_tasks', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'task',
                'verbose_name_plural': 'tasks',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['department', 'status'], name='task_department_status_idx'),
                    models.Index(fields=['due_at', 'status'], name='task_due_at_status_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='DeadlineChange',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('previous_due_at', models.DateTimeField(blank=True, null=True)),
                ('new_due_at', models.DateTimeField(blank=True, null=True)),
                ('reason', models.TextField()),
                ('changed_at', models.DateTimeField(db_index=True)),
                ('changed_by', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='deadline_changes', to=settings.AUTH_USER_MODEL)),
                ('task', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='deadline_history', to='tasks.task')),
            ],
            options={
                'verbose_name': 'deadline change',
                'verbose_name_plural': 'deadline changes',
                'ordering': ['changed_at', 'id'],
            },
        ),
        migrations.CreateModel(
            name='Evidence',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('url', models.CharField(max_length=500)),
                ('uploaded_at', models.DateTimeField()),
                ('task', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='evidence', to='tasks.task')),
                ('uploaded_by', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='uploaded_evidence', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'evidence',
                'verbose_name_plural': 'evidence',
                'ordering': ['uploaded_at', 'id'],
            },
        ),
    ]
