# Generated manually for CivicPulse audit trail

import uuid

import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='AuditLog',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('event_type', models.CharField(choices=[('auth.registered', 'Registered'), ('auth.login.success', 'Login Success'), ('auth.login.failed', 'Login Failed'), ('auth.logout', 'Logout'), ('auth.password.changed', 'Password Changed'), ('user.created', 'User Created'), ('user.updated', 'User Updated'), ('user.role.changed', 'User Role Changed'), ('user.deleted', 'User Deleted'), ('report.created', 'Report Created'), ('report.updated', 'Report Updated'), ('report.status.changed', 'Report Status Changed'), ('report.cancelled', 'Report Cancelled'), ('report.closed', 'Report Closed'), ('report.feedback', 'Report Feedback'), ('report.photo.uploaded', 'Report Photo Uploaded'), ('report.deleted', 'Report Deleted'), ('catalogue.created', 'Catalogue Entry Created'), ('catalogue.updated', 'Catalogue Entry Updated'), ('catalogue.deleted', 'Catalogue Entry Deleted')], db_index=True, max_length=50)),
                ('severity', models.CharField(choices=[('info', 'Info'), ('warning', 'Warning'), ('error', 'Error')], db_index=True, default='info', max_length=10)),
                ('timestamp', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('actor_id', models.CharField(blank=True, db_index=True, max_length=36)),
                ('actor_role', models.CharField(blank=True, max_length=20)),
                ('actor_email', models.CharField(blank=True, max_length=255)),
                ('target_type', models.CharField(blank=True, max_length=50)),
                ('target_id', models.CharField(blank=True, db_index=True, max_length=36)),
                ('ip_address', models.GenericIPAddressField(blank=True, null=True)),
                ('user_agent', models.CharField(blank=True, max_length=500)),
                ('request_method', models.CharField(blank=True, max_length=10)),
                ('request_path', models.CharField(blank=True, max_length=500)),
                ('description', models.TextField(blank=True)),
                ('metadata', models.JSONField(blank=True, default=dict)),
                ('success', models.BooleanField(default=True)),
            ],
            options={
                'verbose_name': 'Audit Log',
                'verbose_name_plural': 'Audit Logs',
                'db_table': 'audit_logs',
                'ordering': ['-timestamp'],
                'indexes': [models.Index(fields=['event_type', 'timestamp'], name='audit_logs_event_t_6a1c2e_idx'), models.Index(fields=['actor_id', 'timestamp'], name='audit_logs_actor_i_3f8b4d_idx'), models.Index(fields=['target_id', 'timestamp'], name='audit_logs_target__9d2e7a_idx')],
            },
        ),
    ]
