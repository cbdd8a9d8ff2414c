import uuid
from django.db import models


def generate_id():
    return str(uuid.uuid4())


class BaseModel(models.Model):
    id = models.CharField(primary_key=True, max_length=36, default=generate_id, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class User(BaseModel):
    ROLE_CHOICES = [
        ('admin', 'Admin'),
        ('staff', 'Staff'),
    ]
    DEFAULT_ROLE = 'staff'

    email = models.CharField(max_length=254, unique=True)
    name = models.CharField(max_length=255)
    password_hash = models.CharField(max_length=255)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=DEFAULT_ROLE)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = 'users'
        constraints = [
            models.CheckConstraint(
                condition=models.Q(role__in=['admin', 'staff']),
                name='users_role_valid',
            )
        ]

    def __str__(self):
        return f"{self.name} ({self.email})"


class Client(BaseModel):
    initials = models.CharField(max_length=20)
    name = models.CharField(max_length=255)
    staff = models.ForeignKey(User, on_delete=models.CASCADE, related_name='clients', db_column='staff_id')

    class Meta:
        db_table = 'clients'

    def __str__(self):
        return f"{self.initials} - {self.name}"
