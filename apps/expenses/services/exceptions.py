"""Domain-specific exceptions for expenses services."""


class ExpensesServiceError(Exception):
    """Base exception for expenses services."""
    pass


class ExpenseNotFoundError(ExpensesServiceError):
    """Raised when expense does not exist."""
    pass


class InvalidExpenseStateError(ExpensesServiceError):
    """Raised when approving, rejecting or editing an expense that is no longer pending."""
    pass
