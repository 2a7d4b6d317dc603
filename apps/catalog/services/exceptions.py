"""Domain-specific exceptions for catalog services."""


class CatalogServiceError(Exception):
    """Base exception for catalog services."""
    pass


class ProductNotFoundError(CatalogServiceError):
    """Raised when product does not exist."""
    pass


class InvalidDisplayNumberError(CatalogServiceError):
    """Raised when a display number doesn't match the product's category."""
    pass


class InvalidPriceError(CatalogServiceError):
    """Raised when a price change is rejected."""
    pass
