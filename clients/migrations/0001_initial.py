import core.models
import django.db.models.deletion
from django.db import migrations, models


STATUS_CHOICES = [('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected')]
STATUS_VALUES = ['pending', 'approved', 'rejected']


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='CarePlan',
            fields=[
                ('id', models.CharField(default=core.models.generate_id, editable=False, max_length=36, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('care_plan_date', models.DateField(blank=True, null=True)),
                ('has_gfp', models.BooleanField(default=False)),
                ('staff_notified', models.BooleanField(default=False)),
                ('notes', models.TextField(blank=True, null=True)),
                ('client', models.ForeignKey(db_column='client_id', on_delete=django.db.models.deletion.CASCADE, related_name='care_plans', to='core.client')),
            ],
            options={
                'db_table': 'care_plans',
            },
        ),
        migrations.CreateModel(
            name='WeeklyDoc',
            fields=[
                ('id', models.CharField(default=core.models.generate_id, editable=False, max_length=36, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('status', models.CharField(choices=STATUS_CHOICES, default='pending', max_length=20)),
                ('week_id', models.CharField(help_text='Format: YYYY-Wxx', max_length=10)),
                ('monday', models.BooleanField(default=False)),
                ('tuesday', models.BooleanField(default=False)),
                ('wednesday', models.BooleanField(default=False)),
                ('thursday', models.BooleanField(default=False)),
                ('friday', models.BooleanField(default=False)),
                ('saturday', models.BooleanField(default=False)),
                ('sunday', models.BooleanField(default=False)),
                ('client', models.ForeignKey(db_column='client_id', on_delete=django.db.models.deletion.CASCADE, to='core.client')),
            ],
            options={
                'db_table': 'weekly_docs',
                'default_related_name': 'weekly_docs',
                'indexes': [models.Index(fields=['week_id'], name='idx_weekly_docs_week_id')],
                'constraints': [
                    models.UniqueConstraint(fields=('client', 'week_id'), name='weekly_docs_client_week_unique'),
                    models.CheckConstraint(condition=models.Q(('status__in', STATUS_VALUES)), name='weekly_docs_status_valid'),
                ],
            },
        ),
        migrations.CreateModel(
            name='MonthlyReport',
            fields=[
                ('id', models.CharField(default=core.models.generate_id, editable=False, max_length=36, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('status', models.CharField(choices=STATUS_CHOICES, default='pending', max_length=20)),
                ('month_id', models.CharField(help_text='Format: YYYY-MM', max_length=7)),
                ('sent', models.BooleanField(default=False)),
                ('client', models.ForeignKey(db_column='client_id', on_delete=django.db.models.deletion.CASCADE, to='core.client')),
            ],
            options={
                'db_table': 'monthly_reports',
                'default_related_name': 'monthly_reports',
                'indexes': [models.Index(fields=['month_id'], name='idx_monthly_reports_month_id')],
                'constraints': [
                    models.UniqueConstraint(fields=('client', 'month_id'), name='monthly_reports_client_month_unique'),
                    models.CheckConstraint(condition=models.Q(('status__in', STATUS_VALUES)), name='monthly_reports_status_valid'),
                ],
            },
        ),
        migrations.CreateModel(
            name='VismaTime',
            fields=[
                ('id', models.CharField(default=core.models.generate_id, editable=False, max_length=36, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('status', models.CharField(choices=STATUS_CHOICES, default='pending', max_length=20)),
                ('week_id', models.CharField(help_text='Format: YYYY-Wxx', max_length=10)),
                ('monday', models.BooleanField(default=False)),
                ('tuesday', models.BooleanField(default=False)),
                ('wednesday', models.BooleanField(default=False)),
                ('thursday', models.BooleanField(default=False)),
                ('friday', models.BooleanField(default=False)),
                ('client', models.ForeignKey(db_column='client_id', on_delete=django.db.models.deletion.CASCADE, to='core.client')),
            ],
            options={
                'db_table': 'visma_time',
                'default_related_name': 'visma_weeks',
                'indexes': [models.Index(fields=['week_id'], name='idx_visma_time_week_id')],
                'constraints': [
                    models.UniqueConstraint(fields=('client', 'week_id'), name='visma_time_client_week_unique'),
                    models.CheckConstraint(condition=models.Q(('status__in', STATUS_VALUES)), name='visma_time_status_valid'),
                ],
            },
        ),
    ]
