"""Employee CRUD operations service."""

import logging
from decimal import Decimal
from typing import Any, Dict, Optional
from uuid import UUID

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import ProtectedError

from apps.core.services import next_code, record_history, snapshot
from ..models import Employee, Designation
from .balances import append_balance_entry
from .exceptions import EmployeeNotFoundError, EmployeeInUseError

User = get_user_model()

logger = logging.getLogger(__name__)

HISTORY_COLLECTION = 'employees'

UPDATABLE_FIELDS = [
    'name', 'designation', 'phone_number', 'email', 'address',
    'route_name', 'location', 'salary', 'hire_date', 'is_active',
]


def get_employee_by_id(*, employee_id: UUID) -> Employee:
    try:
        return Employee.objects.get(id=employee_id)
    except Employee.DoesNotExist:
        raise EmployeeNotFoundError(f"Employee {employee_id} not found")


def list_employees(
    *,
    designation: Optional[str] = None,
    is_active: Optional[bool] = None,
    route_name: Optional[str] = None,
    search: Optional[str] = None,
):
    queryset = Employee.objects.all()

    if designation:
        queryset = queryset.filter(designation=designation)
    if is_active is not None:
        queryset = queryset.filter(is_active=is_active)
    if route_name:
        queryset = queryset.filter(route_name__iexact=route_name)
    if search:
        queryset = queryset.filter(name__icontains=search)

    return queryset


def list_drivers(*, active_only: bool = True):
    return list_employees(
        designation=Designation.DRIVER,
        is_active=True if active_only else None,
    )


@transaction.atomic
def create_employee(
    *,
    name: str,
    created_by: Optional[User] = None,
    designation: str = Designation.DRIVER,
    balance: Decimal = Decimal('0.00'),
    **fields: Any
) -> Employee:
    """
    Create an employee with the next EMP-xxx code.

    A non-zero opening balance is recorded as balance history version 1.
    """
    unknown = set(fields) - set(UPDATABLE_FIELDS)
    if unknown:
        raise TypeError(f"Unexpected employee fields: {', '.join(sorted(unknown))}")

    employee = Employee.objects.create(
        code=next_code(settings.EMPLOYEE_CODE_PREFIX),
        name=name,
        designation=designation,
        balance=balance,
        created_by=created_by,
        updated_by=created_by,
        **fields
    )

    if balance:
        append_balance_entry(
            employee=employee,
            balance=balance,
            reason='Opening balance',
            updated_by=created_by,
        )

    record_history(
        collection_name=HISTORY_COLLECTION,
        document_id=employee.id,
        action='create',
        actor=created_by,
        after=snapshot(employee),
    )
    logger.info(f"Created employee {employee.code} ({designation})")

    return employee


@transaction.atomic
def update_employee(
    *,
    employee_id: UUID,
    data: Dict[str, Any],
    updated_by: Optional[User] = None,
) -> Employee:
    """
    Update an employee.

    A manual ``balance`` change appends to balance history with
    ``data['balance_update_reason']``.

    Raises:
        EmployeeNotFoundError: If employee doesn't exist
    """
    try:
        employee = (
            Employee.objects
            .select_for_update()
            .get(id=employee_id)
        )
    except Employee.DoesNotExist:
        raise EmployeeNotFoundError(f"Employee {employee_id} not found")

    before = snapshot(employee)

    for field, value in data.items():
        if field in UPDATABLE_FIELDS:
            setattr(employee, field, value)

    new_balance = data.get('balance')
    if new_balance is not None and Decimal(new_balance) != employee.balance:
        employee.balance = new_balance
        append_balance_entry(
            employee=employee,
            balance=new_balance,
            reason=data.get('balance_update_reason') or 'Manual adjustment',
            updated_by=updated_by,
        )

    employee.updated_by = updated_by
    employee.save()

    record_history(
        collection_name=HISTORY_COLLECTION,
        document_id=employee.id,
        action='update',
        actor=updated_by,
        before=before,
        after=snapshot(employee),
    )

    return employee


@transaction.atomic
def delete_employee(*, employee_id: UUID, deleted_by: Optional[User] = None) -> None:
    """
    Delete an employee.

    Raises:
        EmployeeNotFoundError: If employee doesn't exist
        EmployeeInUseError: If the employee still has trips on record
    """
    try:
        employee = (
            Employee.objects
            .select_for_update()
            .get(id=employee_id)
        )
    except Employee.DoesNotExist:
        raise EmployeeNotFoundError(f"Employee {employee_id} not found")

    before = snapshot(employee)
    try:
        with transaction.atomic():
            employee.delete()
    except ProtectedError:
        raise EmployeeInUseError(
            f"Employee {employee.code} has trips on record; deactivate instead"
        )

    record_history(
        collection_name=HISTORY_COLLECTION,
        document_id=employee_id,
        action='delete',
        actor=deleted_by,
        before=before,
    )
    logger.info(f"Deleted employee {before['code']}")
