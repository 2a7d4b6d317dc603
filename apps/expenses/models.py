from django.conf import settings
from django.db import models
from django.core.validators import MinValueValidator
from django.utils import timezone
from decimal import Decimal
import uuid


class ExpenseCategory(models.TextChoices):
    PETROL = 'petrol', 'Petrol'
    MAINTENANCE = 'maintenance', 'Maintenance'
    VARIANCE = 'variance', 'Variance'
    SALARY = 'salary', 'Salary'
    OTHERS = 'others', 'Others'


class ExpenseStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    APPROVED = 'approved', 'Approved'
    REJECTED = 'rejected', 'Rejected'


class AdditionalExpense(models.Model):
    """
    Operating cost outside trip settlement (fuel top-ups, repairs, salaries).

    Expenses start pending and are approved or rejected once.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    category = models.CharField(
        max_length=20,
        choices=ExpenseCategory.choices,
        default=ExpenseCategory.OTHERS
    )
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    currency = models.CharField(max_length=3, default=settings.CURRENCY_CODE)
    date = models.DateField(default=timezone.localdate)

    # Who the expense is for (optional)
    driver = models.ForeignKey(
        'employees.Employee',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='expenses'
    )
    driver_name = models.CharField(max_length=100, blank=True)
    designation = models.CharField(max_length=10, blank=True)

    receipt_number = models.CharField(max_length=100, blank=True)
    vendor = models.CharField(max_length=200, blank=True)
    is_reimbursable = models.BooleanField(default=False)

    # Approval
    status = models.CharField(
        max_length=10,
        choices=ExpenseStatus.choices,
        default=ExpenseStatus.PENDING
    )
    approved_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='expenses_approved'
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    rejected_reason = models.CharField(max_length=255, blank=True)

    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='expenses_created'
    )
    updated_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='expenses_updated'
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'additional_expenses'
        indexes = [
            models.Index(fields=['date'], name='expenses_date_idx'),
            models.Index(fields=['status', 'category'], name='expenses_status_idx'),
            models.Index(fields=['driver', 'date'], name='expenses_driver_idx'),
        ]
        ordering = ['-date', '-created_at']

    def __str__(self):
        return f"{self.title} ({self.amount} {self.currency})"

    @property
    def is_pending(self):
        return self.status == ExpenseStatus.PENDING
