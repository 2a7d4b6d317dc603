"""Domain-specific exceptions for core services."""


class CoreServiceError(Exception):
    """Base exception for core services."""
    pass


class SettingNotFoundError(CoreServiceError):
    """Raised when a setting key does not exist."""
    pass


class InvalidSequenceKeyError(CoreServiceError):
    """Raised when a counter key is empty or malformed."""
    pass
