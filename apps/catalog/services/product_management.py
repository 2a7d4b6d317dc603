"""Product CRUD operations service."""

import logging
import re
from decimal import Decimal
from typing import Any, Dict, Optional
from uuid import UUID

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from apps.core.services import next_sequence, format_code, record_history, snapshot
from ..models import (
    Product,
    PriceHistoryEntry,
    ProductCategory,
    CATEGORY_CODE_PREFIX,
    CATEGORY_DISPLAY_PREFIX,
)
from .exceptions import ProductNotFoundError, InvalidDisplayNumberError

User = get_user_model()

logger = logging.getLogger(__name__)

HISTORY_COLLECTION = 'products'
DISPLAY_NUMBER_WIDTH = 3
DISPLAY_NUMBER_PATTERN = re.compile(r'^(?P<prefix>[FB])(?P<number>\d+)$')

UPDATABLE_FIELDS = [
    'name', 'description', 'sku', 'unit', 'minimum_quantity',
    'maximum_quantity', 'expiry_days', 'supplier', 'is_active',
]


def format_display_number(category: str, number: int) -> str:
    """
    Example:
        >>> format_display_number('fresh', 7)
        'F007'
    """
    return f"{CATEGORY_DISPLAY_PREFIX[category]}{number:0{DISPLAY_NUMBER_WIDTH}d}"


def parse_display_number(display_number: str, category: str) -> int:
    """
    Return the numeric part of a display number.

    Raises:
        InvalidDisplayNumberError: If the format or the category prefix is wrong
    """
    match = DISPLAY_NUMBER_PATTERN.match(display_number or '')
    expected_prefix = CATEGORY_DISPLAY_PREFIX[category]
    if not match or match.group('prefix') != expected_prefix:
        raise InvalidDisplayNumberError(
            f"Display number '{display_number}' must look like {expected_prefix}001 "
            f"for {category} products"
        )
    return int(match.group('number'))


def _make_room_for_display_number(*, product: Product, number: int, user=None) -> int:
    """
    Shift products of the same category up by one, starting at ``number``.

    Only runs when ``number`` is already taken. Returns how many products
    were renumbered.
    """
    siblings = list(
        Product.objects
        .select_for_update()
        .filter(category=product.category)
        .exclude(id=product.id)
    )
    numbered = []
    for sibling in siblings:
        match = DISPLAY_NUMBER_PATTERN.match(sibling.display_number)
        if match:
            numbered.append((int(match.group('number')), sibling))

    if not any(value == number for value, _ in numbered):
        return 0

    shifted = 0
    for value, sibling in sorted(numbered, key=lambda item: item[0], reverse=True):
        if value < number:
            continue
        sibling.display_number = format_display_number(sibling.category, value + 1)
        sibling.updated_by = user
        sibling.save(update_fields=['display_number', 'updated_by', 'updated_at'])
        shifted += 1

    logger.info(f"Shifted {shifted} {product.category} display numbers from {number}")
    return shifted


def get_product_by_id(*, product_id: UUID) -> Product:
    try:
        return Product.objects.get(id=product_id)
    except Product.DoesNotExist:
        raise ProductNotFoundError(f"Product {product_id} not found")


def list_products(
    *,
    category: Optional[str] = None,
    is_active: Optional[bool] = None,
    supplier: Optional[str] = None,
    search: Optional[str] = None,
):
    queryset = Product.objects.all()

    if category:
        queryset = queryset.filter(category=category)
    if is_active is not None:
        queryset = queryset.filter(is_active=is_active)
    if supplier:
        queryset = queryset.filter(supplier__icontains=supplier)
    if search:
        queryset = queryset.filter(name__icontains=search)

    return queryset


@transaction.atomic
def create_product(
    *,
    name: str,
    category: str,
    price: Decimal,
    created_by: Optional[User] = None,
    display_number: Optional[str] = None,
    description: str = '',
    sku: str = '',
    unit: str = 'pcs',
    minimum_quantity: int = 0,
    maximum_quantity: Optional[int] = None,
    expiry_days: Optional[int] = None,
    supplier: str = '',
    is_active: bool = True,
) -> Product:
    """
    Create a product with its first price history entry (version 1).

    The product code (PRD-FRS-001) and, unless given, the display number
    (F001) come from a per-category counter.

    Raises:
        InvalidDisplayNumberError: If display_number doesn't fit the category
    """
    if category not in ProductCategory.values:
        raise InvalidDisplayNumberError(f"Unknown category '{category}'")

    seq = next_sequence(f"product:{category}")
    display_number = display_number or format_display_number(category, seq)
    number = parse_display_number(display_number, category)

    product = Product(
        code=format_code(f"PRD-{CATEGORY_CODE_PREFIX[category]}", seq),
        display_number=display_number,
        name=name,
        category=category,
        price=price,
        description=description,
        sku=sku,
        unit=unit,
        minimum_quantity=minimum_quantity,
        maximum_quantity=maximum_quantity,
        expiry_days=expiry_days,
        supplier=supplier,
        is_active=is_active,
        created_by=created_by,
        updated_by=created_by,
    )

    _make_room_for_display_number(product=product, number=number, user=created_by)

    product.save()

    PriceHistoryEntry.objects.create(
        product=product,
        version=1,
        price=price,
        updated_at=timezone.now(),
        reason='Initial price',
        updated_by=created_by,
    )

    record_history(
        collection_name=HISTORY_COLLECTION,
        document_id=product.id,
        action='create',
        actor=created_by,
        after=snapshot(product),
    )
    logger.info(f"Created product {product.code} at {price}")

    return product


@transaction.atomic
def update_product(
    *,
    product_id: UUID,
    data: Dict[str, Any],
    updated_by: Optional[User] = None,
) -> Product:
    """
    Update a product.

    A changed ``price`` appends a new price history entry (reason taken
    from ``data['price_change_reason']``). A changed ``display_number``
    moves the product and shifts the products at or after that number.
    Category is fixed after creation.

    Raises:
        ProductNotFoundError: If product doesn't exist
        InvalidDisplayNumberError: If the new display number is malformed
    """
    try:
        product = (
            Product.objects
            .select_for_update()
            .get(id=product_id)
        )
    except Product.DoesNotExist:
        raise ProductNotFoundError(f"Product {product_id} not found")

    before = snapshot(product)

    for field, value in data.items():
        if field in UPDATABLE_FIELDS:
            setattr(product, field, value)

    new_display = data.get('display_number')
    if new_display and new_display != product.display_number:
        number = parse_display_number(new_display, product.category)
        _make_room_for_display_number(product=product, number=number, user=updated_by)
        product.display_number = new_display

    new_price = data.get('price')
    if new_price is not None and Decimal(new_price) != product.price:
        PriceHistoryEntry.objects.create(
            product=product,
            version=product.latest_version() + 1,
            price=new_price,
            updated_at=timezone.now(),
            reason=data.get('price_change_reason', ''),
            updated_by=updated_by,
        )
        logger.info(f"Price of {product.code} changed from {product.price} to {new_price}")
        product.price = new_price

    product.updated_by = updated_by
    product.save()

    record_history(
        collection_name=HISTORY_COLLECTION,
        document_id=product.id,
        action='update',
        actor=updated_by,
        before=before,
        after=snapshot(product),
    )

    return product


@transaction.atomic
def delete_product(*, product_id: UUID, deleted_by: Optional[User] = None) -> None:
    """
    Delete a product and its price history.

    Trip lines keep their own copy of name, category and price.

    Raises:
        ProductNotFoundError: If product doesn't exist
    """
    try:
        product = (
            Product.objects
            .select_for_update()
            .get(id=product_id)
        )
    except Product.DoesNotExist:
        raise ProductNotFoundError(f"Product {product_id} not found")

    before = snapshot(product)
    product.delete()

    record_history(
        collection_name=HISTORY_COLLECTION,
        document_id=product_id,
        action='delete',
        actor=deleted_by,
        before=before,
    )
    logger.info(f"Deleted product {before['code']}")
