"""Domain-specific exceptions for employees services."""


class EmployeesServiceError(Exception):
    """Base exception for employees services."""
    pass


class EmployeeNotFoundError(EmployeesServiceError):
    """Raised when employee does not exist."""
    pass


class NotADriverError(EmployeesServiceError):
    """Raised when a driver-only operation targets another designation."""
    pass


class EmployeeInUseError(EmployeesServiceError):
    """Raised when deleting an employee that still has trips or expenses."""
    pass
