"""
Turn validated request lines into settlement value objects.

Product name, category and display number always come from the catalog;
a line without ``unit_price`` is priced as of the trip date.
"""

from dataclasses import replace
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from apps.catalog.models import Product
from apps.catalog.services import price_for_date, ProductNotFoundError
from apps.employees.models import Employee
from ..settlement import (
    PRICE_EXPLICIT,
    PRICE_RESOLVED,
    ProductLine,
    TransferredProductLine,
    to_decimal,
)
from .exceptions import InvalidTransferError


def load_products(entries: Iterable[Dict[str, Any]]) -> Dict[str, Product]:
    """
    Fetch every product referenced by ``entries`` keyed by str(id).

    Raises:
        ProductNotFoundError: Naming the first unknown product id
    """
    ids = {str(entry['product_id']) for entry in entries}
    products = {
        str(product.id): product
        for product in Product.objects.filter(id__in=ids).prefetch_related('price_history')
    }
    missing = sorted(ids - set(products))
    if missing:
        raise ProductNotFoundError(f"Product {missing[0]} not found")
    return products


def load_drivers(driver_ids: Iterable[Any]) -> Dict[str, Employee]:
    """
    Raises:
        InvalidTransferError: If an id is not an existing employee
    """
    ids = {str(driver_id) for driver_id in driver_ids if driver_id}
    drivers = {str(e.id): e for e in Employee.objects.filter(id__in=ids)}
    missing = sorted(ids - set(drivers))
    if missing:
        raise InvalidTransferError(f"Driver {missing[0]} not found")
    return drivers


def _unit_price(entry: Dict[str, Any], product: Product, as_of: date):
    """Return (unit_price, price_source) for a request line."""
    if entry.get('unit_price') is not None:
        return to_decimal(entry['unit_price']), PRICE_EXPLICIT
    return price_for_date(product, as_of), PRICE_RESOLVED


def _base_values(entry: Dict[str, Any], product: Product, as_of: date) -> Dict[str, Any]:
    unit_price, price_source = _unit_price(entry, product, as_of)
    return {
        'product_id': str(product.id),
        'product_name': product.name,
        'category': product.category,
        'display_number': product.display_number,
        'quantity': to_decimal(entry['quantity']),
        'unit_price': unit_price,
        'price_source': price_source,
    }


def build_product_lines(entries: List[Dict[str, Any]], *, as_of: date) -> List[ProductLine]:
    products = load_products(entries)
    return [
        ProductLine(**_base_values(entry, products[str(entry['product_id'])], as_of))
        for entry in entries
    ]


def build_transferred_lines(
    entries: List[Dict[str, Any]],
    *,
    as_of: date,
    sender: Employee,
) -> List[TransferredProductLine]:
    """
    Raises:
        ProductNotFoundError: If a product doesn't exist
        InvalidTransferError: If a receiver doesn't exist or is the sender
    """
    products = load_products(entries)
    receivers = load_drivers(entry['receiving_driver_id'] for entry in entries)

    lines = []
    for entry in entries:
        receiver = receivers[str(entry['receiving_driver_id'])]
        if receiver.id == sender.id:
            raise InvalidTransferError(f"Driver {sender.code} cannot transfer stock to themselves")
        lines.append(TransferredProductLine(
            receiving_driver_id=str(receiver.id),
            receiving_driver_name=receiver.name,
            transferred_from_driver_id=str(sender.id),
            transferred_from_driver_name=sender.name,
            **_base_values(entry, products[str(entry['product_id'])], as_of)
        ))
    return lines


def build_accepted_lines(
    entries: List[Dict[str, Any]],
    *,
    as_of: date,
    receiver: Optional[Employee] = None,
) -> List[ProductLine]:
    """Accepted lines typed in by hand; the source driver is optional."""
    products = load_products(entries)
    senders = load_drivers(entry.get('transferred_from_driver_id') for entry in entries)

    lines = []
    for entry in entries:
        sender = senders.get(str(entry.get('transferred_from_driver_id') or ''))
        if sender is not None and receiver is not None and sender.id == receiver.id:
            raise InvalidTransferError(f"Driver {receiver.code} cannot accept stock from themselves")
        lines.append(ProductLine(
            transferred_from_driver_id=str(sender.id) if sender else '',
            transferred_from_driver_name=sender.name if sender else '',
            **_base_values(entry, products[str(entry['product_id'])], as_of)
        ))
    return lines


def reprice(lines: Iterable[ProductLine], *, as_of: date) -> List[ProductLine]:
    """
    Re-resolve unit prices from the current price history.

    Lines priced explicitly on the trip, and lines whose product has since
    been deleted, keep their stored price.
    """
    lines = list(lines)
    products = {
        str(product.id): product
        for product in Product.objects.filter(
            id__in={line.product_id for line in lines if not line.has_explicit_price}
        ).prefetch_related('price_history')
    }
    repriced = []
    for line in lines:
        product = products.get(line.product_id)
        if product is None or line.has_explicit_price:
            repriced.append(line)
            continue
        repriced.append(replace(line, unit_price=price_for_date(product, as_of)))
    return repriced
