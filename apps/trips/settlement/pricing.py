"""
Point-in-time price resolution.

A product keeps an append-only list of price changes. A trip must be
settled with the price that was in effect on the trip's date, which is
not necessarily today's price when trips are entered after the fact.

Resolution rules:
    1. No usable history: the product's current price.
    2. Otherwise the newest entry with ``updated_at <= as_of``. Entries
       stamped with the exact same instant are ordered by ``version``.
    3. If the trip predates every entry, the oldest known price. The
       current price is never used in this case.
"""

from datetime import date, datetime, time, timezone as dt_timezone
from decimal import Decimal
from typing import Any, Iterable, List, Optional, Tuple

from .lines import to_decimal


def _field(entry: Any, name: str, default: Any = None) -> Any:
    if isinstance(entry, dict):
        return entry.get(name, default)
    return getattr(entry, name, default)


def _as_aware_datetime(value: Any) -> Optional[datetime]:
    """
    Normalise a date/datetime/ISO string to an aware UTC datetime.

    A bare date means the end of that day, so a price change made at any
    time on the trip date applies to the trip.
    """
    if value is None:
        return None
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace('Z', '+00:00'))
        except ValueError:
            try:
                value = date.fromisoformat(value)
            except ValueError:
                return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=dt_timezone.utc)
        return value.astimezone(dt_timezone.utc)
    if isinstance(value, date):
        return datetime.combine(value, time.max, tzinfo=dt_timezone.utc)
    return None


def _usable_entries(history: Iterable[Any]) -> List[Tuple[datetime, int, Decimal]]:
    """Return (updated_at, version, price) for entries that can be interpreted."""
    usable = []
    for entry in history:
        updated_at = _as_aware_datetime(_field(entry, 'updated_at'))
        raw_price = _field(entry, 'price')
        if updated_at is None or raw_price is None:
            continue
        try:
            price = to_decimal(raw_price)
        except ArithmeticError:
            continue
        try:
            version = int(_field(entry, 'version', 0) or 0)
        except (TypeError, ValueError):
            version = 0
        usable.append((updated_at, version, price))
    return usable


def resolve_price(current_price: Any, history: Optional[Iterable[Any]], as_of: Any) -> Decimal:
    """
    Resolve the unit price in effect at ``as_of``.

    Args:
        current_price: The product's price today
        history: Price history entries (model instances or dicts with
            ``price``, ``updated_at`` and optionally ``version``); may be
            None or empty. Never mutated.
        as_of: Trip date (date, datetime or ISO string)

    Returns:
        Decimal price

    Example:
        >>> history = [
        ...     {'version': 1, 'price': '4.00', 'updated_at': '2025-01-01T08:00:00Z'},
        ...     {'version': 2, 'price': '5.00', 'updated_at': '2025-02-01T08:00:00Z'},
        ... ]
        >>> resolve_price('6.00', history, date(2025, 1, 15))
        Decimal('4.00')
        >>> resolve_price('6.00', history, date(2024, 12, 1))
        Decimal('4.00')
        >>> resolve_price('6.00', [], date(2025, 1, 15))
        Decimal('6.00')
    """
    current = to_decimal(current_price)
    entries = _usable_entries(history or ())
    if not entries:
        return current

    cutoff = _as_aware_datetime(as_of)
    if cutoff is None:
        raise ValueError(f"Cannot interpret as_of date: {as_of!r}")

    in_effect = sorted(
        (entry for entry in entries if entry[0] <= cutoff),
        key=lambda entry: (entry[0], entry[1]),
    )
    if in_effect:
        return in_effect[-1][2]

    oldest = min(entries, key=lambda entry: (entry[0], entry[1]))
    return oldest[2]
