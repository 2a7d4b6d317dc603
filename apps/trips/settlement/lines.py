"""
Value objects for trip settlement.

Lines are immutable. Monetary values and quantities are ``Decimal``;
``to_decimal`` converts whatever the caller has (str, int, float, Decimal)
without going through binary floating point arithmetic.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List

BAKERY = 'bakery'
FRESH = 'fresh'
CATEGORIES = (BAKERY, FRESH)

# Where a line's unit price came from
PRICE_RESOLVED = 'resolved'
PRICE_EXPLICIT = 'explicit'

ZERO = Decimal('0')


class SettlementValidationError(ValueError):
    """
    Raised when settlement inputs are malformed.

    ``errors`` maps a field path (``products[2].quantity``) to a message so
    every offending field is reported at once.
    """

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        detail = '; '.join(f"{path}: {message}" for path, message in self.errors.items())
        super().__init__(f"Invalid settlement input: {detail}")


def to_decimal(value: Any) -> Decimal:
    """
    Convert a number-like value to Decimal.

    Floats go through ``str`` so ``0.1`` becomes ``Decimal('0.1')`` rather
    than its binary expansion.

    Raises:
        InvalidOperation: If the value is not a finite number
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        raise InvalidOperation(f"Not a number: {value!r}")
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, str):
        result = Decimal(value.strip())
    elif isinstance(value, float):
        result = Decimal(repr(value))
    else:
        raise InvalidOperation(f"Not a number: {value!r}")

    if not result.is_finite():
        raise InvalidOperation(f"Not a finite number: {value!r}")
    return result


@dataclass(frozen=True)
class ProductLine:
    """
    A product quantity on a trip.

    ``transferred_from_driver_id`` is only set on accepted lines and names
    the driver who handed the stock over. ``price_source`` is
    ``PRICE_EXPLICIT`` when the caller supplied the unit price; such
    prices are never re-resolved from price history.
    """

    product_id: str
    product_name: str
    category: str
    quantity: Decimal
    unit_price: Decimal
    display_number: str = ''
    transferred_from_driver_id: str = ''
    transferred_from_driver_name: str = ''
    price_source: str = PRICE_RESOLVED

    @property
    def amount(self) -> Decimal:
        return self.quantity * self.unit_price

    @property
    def has_explicit_price(self) -> bool:
        return self.price_source == PRICE_EXPLICIT

    @property
    def provenance(self) -> str:
        """Transfer source used when reconciling accepted lines ('' if untracked)."""
        return self.transferred_from_driver_id or ''


@dataclass(frozen=True)
class TransferredProductLine(ProductLine):
    """A product line handed from the trip's driver to another driver."""

    receiving_driver_id: str = ''
    receiving_driver_name: str = ''


def line_errors(lines: Iterable[ProductLine], path: str) -> Dict[str, str]:
    """
    Validate lines and return ``{field_path: message}`` for every problem.

    Checks negative quantity or price, unknown category, and a product
    tagged with two different categories within the same list.
    """
    errors: Dict[str, str] = {}
    seen_categories: Dict[str, str] = {}

    for index, line in enumerate(lines):
        prefix = f"{path}[{index}]"

        if line.category not in CATEGORIES:
            errors[f"{prefix}.category"] = (
                f"Unknown category '{line.category}'. Valid options: {', '.join(CATEGORIES)}"
            )
        else:
            first = seen_categories.setdefault(line.product_id, line.category)
            if first != line.category:
                errors[f"{prefix}.category"] = (
                    f"Product {line.product_id} is tagged both '{first}' and '{line.category}'"
                )

        if line.quantity < ZERO:
            errors[f"{prefix}.quantity"] = 'Quantity cannot be negative'
        if line.unit_price < ZERO:
            errors[f"{prefix}.unit_price"] = 'Unit price cannot be negative'

    return errors


def validate_lines(lines: Iterable[ProductLine], path: str = 'products') -> List[ProductLine]:
    """
    Return the lines as a list if they are valid.

    Raises:
        SettlementValidationError: Listing every offending field
    """
    lines = list(lines)
    errors = line_errors(lines, path)
    if errors:
        raise SettlementValidationError(errors)
    return lines
