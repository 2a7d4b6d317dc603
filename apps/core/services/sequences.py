"""
Atomic named counters.

Every human-readable document code (``TRP-001``, ``EMP-014``) and every
per-driver chain position comes from here, so two concurrent requests can
never be handed the same number. The counter row is locked with
``select_for_update()`` for the duration of the caller's transaction.
"""

from django.db import transaction

from ..models import Counter
from .exceptions import InvalidSequenceKeyError

CODE_WIDTH = 3


@transaction.atomic
def next_sequence(key: str) -> int:
    """
    Increment and return the counter stored under ``key``.

    The first call for a key returns 1.

    Raises:
        InvalidSequenceKeyError: If key is blank
    """
    if not key or not key.strip():
        raise InvalidSequenceKeyError("Counter key is required")

    counter, _ = (
        Counter.objects
        .select_for_update()
        .get_or_create(key=key)
    )
    counter.seq += 1
    counter.save(update_fields=['seq', 'updated_at'])
    return counter.seq


def current_sequence(key: str) -> int:
    """Return the last value handed out for ``key`` (0 if never used)."""
    return (
        Counter.objects
        .filter(key=key)
        .values_list('seq', flat=True)
        .first()
    ) or 0


def format_code(prefix: str, seq: int, width: int = CODE_WIDTH) -> str:
    """
    Format a document code.

    Example:
        >>> format_code('TRP', 7)
        'TRP-007'
        >>> format_code('EMP', 1234)
        'EMP-1234'
    """
    return f"{prefix}-{seq:0{width}d}"


def next_code(prefix: str) -> str:
    """Allocate the next code for ``prefix`` using a counter of the same name."""
    return format_code(prefix, next_sequence(f"code:{prefix}"))
