"""Services for catalog business logic."""

from .exceptions import (
    CatalogServiceError,
    ProductNotFoundError,
    InvalidDisplayNumberError,
    InvalidPriceError,
)
from .product_management import (
    create_product,
    update_product,
    delete_product,
    get_product_by_id,
    list_products,
    format_display_number,
    parse_display_number,
)
from .pricing import (
    price_for_date,
    get_price_history,
    record_price_change,
)

__all__ = [
    # Exceptions
    'CatalogServiceError',
    'ProductNotFoundError',
    'InvalidDisplayNumberError',
    'InvalidPriceError',
    # Product Management
    'create_product',
    'update_product',
    'delete_product',
    'get_product_by_id',
    'list_products',
    'format_display_number',
    'parse_display_number',
    # Pricing
    'price_for_date',
    'get_price_history',
    'record_price_change',
]
