"""Price history operations."""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Union
from uuid import UUID

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from apps.core.services import record_history, snapshot
from apps.trips.settlement import resolve_price
from ..models import Product, PriceHistoryEntry
from .exceptions import ProductNotFoundError, InvalidPriceError

User = get_user_model()

logger = logging.getLogger(__name__)


def price_for_date(product: Product, as_of: Union[date, datetime]) -> Decimal:
    """
    Return the product's unit price in effect on ``as_of``.

    Example:
        unit_price = price_for_date(product, trip.date)
    """
    return resolve_price(product.price, list(product.price_history.all()), as_of)


def get_price_history(*, product_id: UUID):
    try:
        product = Product.objects.get(id=product_id)
    except Product.DoesNotExist:
        raise ProductNotFoundError(f"Product {product_id} not found")
    return product.price_history.select_related('updated_by').order_by('version')


@transaction.atomic
def record_price_change(
    *,
    product_id: UUID,
    price: Decimal,
    effective_at: Optional[datetime] = None,
    reason: str = '',
    updated_by: Optional[User] = None,
) -> PriceHistoryEntry:
    """
    Append a price history entry, optionally backdated.

    The product's current price follows the entry only when the entry is
    the newest one by effective time. A backdated entry changes what
    existing trips resolve to; run trip recalculation to apply it.

    Raises:
        ProductNotFoundError: If product doesn't exist
        InvalidPriceError: If price is negative or effective_at is in the future
    """
    if price < 0:
        raise InvalidPriceError("Price cannot be negative")

    now = timezone.now()
    effective_at = effective_at or now
    if effective_at > now:
        raise InvalidPriceError("Price changes cannot be scheduled in the future")

    try:
        product = (
            Product.objects
            .select_for_update()
            .get(id=product_id)
        )
    except Product.DoesNotExist:
        raise ProductNotFoundError(f"Product {product_id} not found")

    before = snapshot(product)

    entry = PriceHistoryEntry.objects.create(
        product=product,
        version=product.latest_version() + 1,
        price=price,
        updated_at=effective_at,
        reason=reason,
        updated_by=updated_by,
    )

    newest = product.price_history.order_by('-updated_at', '-version').first()
    if newest.id == entry.id and product.price != price:
        product.price = price
        product.updated_by = updated_by
        product.save(update_fields=['price', 'updated_by', 'updated_at'])

    record_history(
        collection_name='products',
        document_id=product.id,
        action='update',
        actor=updated_by,
        before=before,
        after=snapshot(product, extra={'price_history_version': entry.version}),
    )
    logger.info(
        f"Recorded price {price} for {product.code} effective {effective_at.isoformat()} "
        f"(v{entry.version})"
    )

    return entry
