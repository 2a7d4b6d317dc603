"""Driver balance bookkeeping."""

import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional
from uuid import UUID

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from apps.core.services import record_history, snapshot
from ..models import Employee, BalanceHistoryEntry
from .exceptions import EmployeeNotFoundError, NotADriverError

User = get_user_model()

logger = logging.getLogger(__name__)


def append_balance_entry(
    *,
    employee: Employee,
    balance: Decimal,
    reason: str = '',
    updated_by: Optional[User] = None,
) -> BalanceHistoryEntry:
    """Append the next balance history version (caller holds the row lock)."""
    return BalanceHistoryEntry.objects.create(
        employee=employee,
        version=employee.latest_balance_version() + 1,
        balance=balance,
        updated_at=timezone.now(),
        reason=reason,
        updated_by=updated_by,
    )


def lock_driver(*, driver_id: UUID) -> Employee:
    """
    Lock and return a driver row for the rest of the current transaction.

    Every write to a driver's trip chain goes through this lock so two
    requests can't both read the same prior balance.

    Raises:
        EmployeeNotFoundError: If employee doesn't exist
        NotADriverError: If the employee isn't a driver
    """
    try:
        driver = (
            Employee.objects
            .select_for_update()
            .get(id=driver_id)
        )
    except Employee.DoesNotExist:
        raise EmployeeNotFoundError(f"Driver {driver_id} not found")

    if not driver.is_driver:
        raise NotADriverError(f"Employee {driver.code} is not a driver")

    return driver


def lock_employees(*, employee_ids: Iterable[Any]) -> Dict[str, Employee]:
    """
    Lock several employee rows at once, always in primary key order.

    Trip writes that reach other drivers' trips (stock transfers) take
    every involved driver's lock through here before locking any trip, so
    two drivers transferring to each other queue up instead of deadlocking.
    Unknown ids are ignored; callers validate them separately.
    """
    ids = {str(employee_id) for employee_id in employee_ids if employee_id}
    if not ids:
        return {}
    locked = (
        Employee.objects
        .select_for_update()
        .filter(id__in=ids)
        .order_by('id')
    )
    return {str(employee.id): employee for employee in locked}


@transaction.atomic
def update_driver_balance(
    *,
    driver_id: UUID,
    balance: Decimal,
    reason: str,
    updated_by: Optional[User] = None,
) -> Employee:
    """
    Set a driver's current balance and append it to balance history.

    No-op (apart from returning the driver) when the balance is unchanged.

    Raises:
        EmployeeNotFoundError: If employee doesn't exist
        NotADriverError: If the employee isn't a driver
    """
    driver = lock_driver(driver_id=driver_id)

    if driver.balance == balance:
        return driver

    before = snapshot(driver)
    driver.balance = balance
    driver.updated_by = updated_by
    driver.save(update_fields=['balance', 'updated_by', 'updated_at'])

    append_balance_entry(
        employee=driver,
        balance=balance,
        reason=reason,
        updated_by=updated_by,
    )

    record_history(
        collection_name='employees',
        document_id=driver.id,
        action='update',
        actor=updated_by,
        before=before,
        after=snapshot(driver),
    )
    logger.info(f"Driver {driver.code} balance set to {balance}: {reason}")

    return driver


def get_balance_history(*, employee_id: UUID):
    try:
        employee = Employee.objects.get(id=employee_id)
    except Employee.DoesNotExist:
        raise EmployeeNotFoundError(f"Employee {employee_id} not found")
    return employee.balance_history.select_related('updated_by').order_by('version')
