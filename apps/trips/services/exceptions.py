"""Domain-specific exceptions for trips services."""


class TripsServiceError(Exception):
    """Base exception for trips services."""
    pass


class TripNotFoundError(TripsServiceError):
    """Raised when trip does not exist."""
    pass


class DuplicateTripError(TripsServiceError):
    """Raised when the driver already has a trip on that date."""
    pass


class InvalidTransferError(TripsServiceError):
    """Raised when a transfer names an unknown receiver or the sending driver."""
    pass
