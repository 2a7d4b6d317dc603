"""Additional expense CRUD and approval workflow."""

import logging
from datetime import date
from typing import Any, Dict, Optional
from uuid import UUID

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from apps.core.services import record_history, snapshot
from apps.employees.services import get_employee_by_id
from ..models import AdditionalExpense, ExpenseStatus
from .exceptions import ExpenseNotFoundError, InvalidExpenseStateError

User = get_user_model()

logger = logging.getLogger(__name__)

HISTORY_COLLECTION = 'additionalExpenses'

UPDATABLE_FIELDS = [
    'title', 'description', 'category', 'amount', 'currency', 'date',
    'receipt_number', 'vendor', 'is_reimbursable',
]


def _get_for_update(expense_id: UUID) -> AdditionalExpense:
    try:
        return (
            AdditionalExpense.objects
            .select_for_update()
            .get(id=expense_id)
        )
    except AdditionalExpense.DoesNotExist:
        raise ExpenseNotFoundError(f"Expense {expense_id} not found")


def _assign_driver(expense: AdditionalExpense, driver_id: Optional[UUID]) -> None:
    """Attach an employee and copy their name and designation."""
    if driver_id is None:
        expense.driver = None
        expense.driver_name = ''
        expense.designation = ''
        return
    employee = get_employee_by_id(employee_id=driver_id)
    expense.driver = employee
    expense.driver_name = employee.name
    expense.designation = employee.designation


def get_expense_by_id(*, expense_id: UUID) -> AdditionalExpense:
    try:
        return AdditionalExpense.objects.select_related('driver', 'approved_by').get(id=expense_id)
    except AdditionalExpense.DoesNotExist:
        raise ExpenseNotFoundError(f"Expense {expense_id} not found")


def list_expenses(
    *,
    category: Optional[str] = None,
    status: Optional[str] = None,
    driver: Optional[UUID] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
):
    queryset = AdditionalExpense.objects.select_related('driver', 'approved_by')

    if category:
        queryset = queryset.filter(category=category)
    if status:
        queryset = queryset.filter(status=status)
    if driver:
        queryset = queryset.filter(driver_id=driver)
    if date_from:
        queryset = queryset.filter(date__gte=date_from)
    if date_to:
        queryset = queryset.filter(date__lte=date_to)

    return queryset


@transaction.atomic
def create_expense(
    *,
    title: str,
    amount,
    created_by: Optional[User] = None,
    driver_id: Optional[UUID] = None,
    **fields: Any
) -> AdditionalExpense:
    """
    Record a pending expense.

    Raises:
        EmployeeNotFoundError: If driver_id is given and doesn't exist
    """
    unknown = set(fields) - set(UPDATABLE_FIELDS)
    if unknown:
        raise TypeError(f"Unexpected expense fields: {', '.join(sorted(unknown))}")

    expense = AdditionalExpense(
        title=title,
        amount=amount,
        created_by=created_by,
        updated_by=created_by,
        **fields
    )
    _assign_driver(expense, driver_id)
    expense.save()

    record_history(
        collection_name=HISTORY_COLLECTION,
        document_id=expense.id,
        action='create',
        actor=created_by,
        after=snapshot(expense),
    )
    logger.info(f"Recorded {expense.category} expense {expense.id}: {expense.amount} {expense.currency}")

    return expense


@transaction.atomic
def update_expense(
    *,
    expense_id: UUID,
    data: Dict[str, Any],
    updated_by: Optional[User] = None,
) -> AdditionalExpense:
    """
    Edit a pending expense.

    Raises:
        ExpenseNotFoundError: If expense doesn't exist
        InvalidExpenseStateError: If the expense was already approved or rejected
        EmployeeNotFoundError: If a new driver_id doesn't exist
    """
    expense = _get_for_update(expense_id)
    if not expense.is_pending:
        raise InvalidExpenseStateError(
            f"Expense {expense_id} is {expense.status} and can no longer be edited"
        )

    before = snapshot(expense)

    for field, value in data.items():
        if field in UPDATABLE_FIELDS:
            setattr(expense, field, value)
    if 'driver_id' in data:
        _assign_driver(expense, data['driver_id'])

    expense.updated_by = updated_by
    expense.save()

    record_history(
        collection_name=HISTORY_COLLECTION,
        document_id=expense.id,
        action='update',
        actor=updated_by,
        before=before,
        after=snapshot(expense),
    )

    return expense


@transaction.atomic
def approve_expense(*, expense_id: UUID, approved_by: User) -> AdditionalExpense:
    """
    Raises:
        ExpenseNotFoundError: If expense doesn't exist
        InvalidExpenseStateError: If the expense isn't pending
    """
    expense = _get_for_update(expense_id)
    if not expense.is_pending:
        raise InvalidExpenseStateError(f"Expense {expense_id} is already {expense.status}")

    before = snapshot(expense)
    expense.status = ExpenseStatus.APPROVED
    expense.approved_by = approved_by
    expense.approved_at = timezone.now()
    expense.updated_by = approved_by
    expense.save()

    record_history(
        collection_name=HISTORY_COLLECTION,
        document_id=expense.id,
        action='update',
        actor=approved_by,
        before=before,
        after=snapshot(expense),
    )
    logger.info(f"Expense {expense.id} approved by {approved_by}")

    return expense


@transaction.atomic
def reject_expense(*, expense_id: UUID, rejected_by: User, reason: str = '') -> AdditionalExpense:
    """
    Raises:
        ExpenseNotFoundError: If expense doesn't exist
        InvalidExpenseStateError: If the expense isn't pending
    """
    expense = _get_for_update(expense_id)
    if not expense.is_pending:
        raise InvalidExpenseStateError(f"Expense {expense_id} is already {expense.status}")

    before = snapshot(expense)
    expense.status = ExpenseStatus.REJECTED
    expense.rejected_reason = reason
    expense.updated_by = rejected_by
    expense.save()

    record_history(
        collection_name=HISTORY_COLLECTION,
        document_id=expense.id,
        action='update',
        actor=rejected_by,
        before=before,
        after=snapshot(expense),
    )
    logger.info(f"Expense {expense.id} rejected by {rejected_by}")

    return expense


@transaction.atomic
def delete_expense(*, expense_id: UUID, deleted_by: Optional[User] = None) -> None:
    expense = _get_for_update(expense_id)
    before = snapshot(expense)
    expense.delete()

    record_history(
        collection_name=HISTORY_COLLECTION,
        document_id=expense_id,
        action='delete',
        actor=deleted_by,
        before=before,
    )
