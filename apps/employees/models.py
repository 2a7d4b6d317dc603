from django.db import models
from django.core.validators import MinValueValidator
from django.utils import timezone
from decimal import Decimal
import uuid


class Designation(models.TextChoices):
    DRIVER = 'driver', 'Driver'
    STAFF = 'staff', 'Staff'
    CEO = 'ceo', 'CEO'


class Employee(models.Model):
    """
    Employee record. Drivers carry a running cash balance that mirrors
    the closing balance of their latest trip.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    code = models.CharField(max_length=20, unique=True, editable=False)

    name = models.CharField(max_length=100)
    designation = models.CharField(
        max_length=10,
        choices=Designation.choices,
        default=Designation.DRIVER
    )

    # Contact
    phone_number = models.CharField(max_length=30, blank=True)
    email = models.EmailField(blank=True)
    address = models.TextField(blank=True)

    # Route assignment (drivers)
    route_name = models.CharField(max_length=100, blank=True)
    location = models.CharField(max_length=100, blank=True)

    salary = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    balance = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00')
    )

    hire_date = models.DateField(default=timezone.localdate)
    is_active = models.BooleanField(default=True)

    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='employees_created'
    )
    updated_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='employees_updated'
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'employees'
        indexes = [
            models.Index(fields=['designation', 'is_active'], name='employees_designation_idx'),
            models.Index(fields=['route_name'], name='employees_route_idx'),
        ]
        ordering = ['code']

    def __str__(self):
        return f"{self.code} {self.name}"

    @property
    def is_driver(self):
        return self.designation == Designation.DRIVER

    def latest_balance_version(self):
        return self.balance_history.aggregate(
            latest=models.Max('version')
        )['latest'] or 0


class BalanceHistoryEntry(models.Model):
    """Append-only log of a driver's balance changes."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    employee = models.ForeignKey(
        Employee,
        on_delete=models.CASCADE,
        related_name='balance_history'
    )
    version = models.PositiveIntegerField()
    balance = models.DecimalField(max_digits=12, decimal_places=2)
    updated_at = models.DateTimeField(default=timezone.now)
    reason = models.CharField(max_length=255, blank=True)
    updated_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='balance_changes'
    )

    class Meta:
        db_table = 'employee_balance_history'
        unique_together = [['employee', 'version']]
        ordering = ['employee', 'version']
        verbose_name_plural = 'balance history entries'

    def __str__(self):
        return f"{self.employee.code} v{self.version}: {self.balance}"
