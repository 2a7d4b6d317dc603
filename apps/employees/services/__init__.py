"""Services for employees business logic."""

from .exceptions import (
    EmployeesServiceError,
    EmployeeNotFoundError,
    NotADriverError,
    EmployeeInUseError,
)
from .employee_management import (
    create_employee,
    update_employee,
    delete_employee,
    get_employee_by_id,
    list_employees,
    list_drivers,
)
from .balances import (
    lock_driver,
    lock_employees,
    update_driver_balance,
    get_balance_history,
    append_balance_entry,
)

__all__ = [
    # Exceptions
    'EmployeesServiceError',
    'EmployeeNotFoundError',
    'NotADriverError',
    'EmployeeInUseError',
    # Employee Management
    'create_employee',
    'update_employee',
    'delete_employee',
    'get_employee_by_id',
    'list_employees',
    'list_drivers',
    # Balances
    'lock_driver',
    'lock_employees',
    'update_driver_balance',
    'get_balance_history',
    'append_balance_entry',
]
