"""Services for expenses business logic."""

from .exceptions import (
    ExpensesServiceError,
    ExpenseNotFoundError,
    InvalidExpenseStateError,
)
from .expense_management import (
    create_expense,
    update_expense,
    delete_expense,
    approve_expense,
    reject_expense,
    get_expense_by_id,
    list_expenses,
)

__all__ = [
    # Exceptions
    'ExpensesServiceError',
    'ExpenseNotFoundError',
    'InvalidExpenseStateError',
    # Expense Management
    'create_expense',
    'update_expense',
    'delete_expense',
    'approve_expense',
    'reject_expense',
    'get_expense_by_id',
    'list_expenses',
]
