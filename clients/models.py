from django.db import models
from core.models import BaseModel, Client


STATUS_CHOICES = [
    ('pending', 'Pending'),
    ('approved', 'Approved'),
    ('rejected', 'Rejected'),
]

STATUS_VALUES = [value for value, _ in STATUS_CHOICES]


class DocumentStatusModel(BaseModel):
    client = models.ForeignKey(Client, on_delete=models.CASCADE, db_column='client_id')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')

    class Meta:
        abstract = True


class CarePlan(BaseModel):
    client = models.ForeignKey(Client, on_delete=models.CASCADE, related_name='care_plans', db_column='client_id')
    care_plan_date = models.DateField(null=True, blank=True)
    has_gfp = models.BooleanField(default=False)
    staff_notified = models.BooleanField(default=False)
    notes = models.TextField(null=True, blank=True)

    class Meta:
        db_table = 'care_plans'

    def __str__(self):
        return f"{self.client} - {self.care_plan_date or 'no date'}"


class WeeklyDoc(DocumentStatusModel):
    DAYS = ['monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday']

    week_id = models.CharField(max_length=10, help_text="Format: YYYY-Wxx")
    monday = models.BooleanField(default=False)
    tuesday = models.BooleanField(default=False)
    wednesday = models.BooleanField(default=False)
    thursday = models.BooleanField(default=False)
    friday = models.BooleanField(default=False)
    saturday = models.BooleanField(default=False)
    sunday = models.BooleanField(default=False)

    class Meta:
        db_table = 'weekly_docs'
        default_related_name = 'weekly_docs'
        constraints = [
            models.UniqueConstraint(fields=['client', 'week_id'], name='weekly_docs_client_week_unique'),
            models.CheckConstraint(condition=models.Q(status__in=STATUS_VALUES), name='weekly_docs_status_valid'),
        ]
        indexes = [
            models.Index(fields=['week_id'], name='idx_weekly_docs_week_id'),
        ]

    def __str__(self):
        return f"{self.client} - {self.week_id} ({self.status})"


class MonthlyReport(DocumentStatusModel):
    month_id = models.CharField(max_length=7, help_text="Format: YYYY-MM")
    sent = models.BooleanField(default=False)

    class Meta:
        db_table = 'monthly_reports'
        default_related_name = 'monthly_reports'
        constraints = [
            models.UniqueConstraint(fields=['client', 'month_id'], name='monthly_reports_client_month_unique'),
            models.CheckConstraint(condition=models.Q(status__in=STATUS_VALUES), name='monthly_reports_status_valid'),
        ]
        indexes = [
            models.Index(fields=['month_id'], name='idx_monthly_reports_month_id'),
        ]

    def __str__(self):
        return f"{self.client} - {self.month_id} ({self.status})"


class VismaTime(DocumentStatusModel):
    DAYS = ['monday', 'tuesday', 'wednesday', 'thursday', 'friday']

    week_id = models.CharField(max_length=10, help_text="Format: YYYY-Wxx")
    monday = models.BooleanField(default=False)
    tuesday = models.BooleanField(default=False)
    wednesday = models.BooleanField(default=False)
    thursday = models.BooleanField(default=False)
    friday = models.BooleanField(default=False)

    class Meta:
        db_table = 'visma_time'
        default_related_name = 'visma_weeks'
        constraints = [
            models.UniqueConstraint(fields=['client', 'week_id'], name='visma_time_client_week_unique'),
            models.CheckConstraint(condition=models.Q(status__in=STATUS_VALUES), name='visma_time_status_valid'),
        ]
        indexes = [
            models.Index(fields=['week_id'], name='idx_visma_time_week_id'),
        ]

    def __str__(self):
        return f"{self.client} - {self.week_id} ({self.status})"
