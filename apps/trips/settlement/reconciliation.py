"""
Reconciliation of a driver's accepted products.

The same transfer can reach a receiving trip more than once: once when the
sender saves, again when the sender edits, or by hand when the receiver
types it in without saying where it came from. Collapsing rules, applied
per product id:

    1. Keep the first line for each transfer source
       (``transferred_from_driver_id``, '' when unknown).
    2. If at least one line names a source, drop the lines that don't.

Products appear in first-seen order and lines within a product keep their
relative order, so the function is idempotent and only ever removes lines.
"""

from typing import Dict, Iterable, List, TypeVar

from .lines import ProductLine

LineT = TypeVar('LineT', bound=ProductLine)


def deduplicate_accepted(lines: Iterable[LineT]) -> List[LineT]:
    """
    Collapse duplicate accepted lines.

    Example:
        Two copies of one transfer plus an untracked line for the same
        product collapse to a single tracked line::

            deduplicate_accepted([
                ProductLine('P1', 'Milk', 'fresh', 5, 2, transferred_from_driver_id='D1'),
                ProductLine('P1', 'Milk', 'fresh', 5, 2, transferred_from_driver_id='D1'),
                ProductLine('P1', 'Milk', 'fresh', 3, 2),
            ])
            # -> [ProductLine('P1', ..., transferred_from_driver_id='D1')]
    """
    by_product: Dict[str, Dict[str, LineT]] = {}

    for line in lines:
        sources = by_product.setdefault(line.product_id, {})
        sources.setdefault(line.provenance, line)

    result: List[LineT] = []
    for sources in by_product.values():
        tracked = [line for source, line in sources.items() if source]
        result.extend(tracked if tracked else sources.values())
    return result


def lines_from_driver(lines: Iterable[LineT], driver_id: str) -> List[LineT]:
    """Return the lines whose transfer source is ``driver_id``."""
    return [line for line in lines if line.provenance == str(driver_id)]


def replace_lines_from_driver(
    lines: Iterable[LineT],
    driver_id: str,
    replacement: Iterable[LineT],
) -> List[LineT]:
    """
    Swap every line sourced from ``driver_id`` for ``replacement``.

    Used when a sending driver edits their transfers: the receiver's
    accepted list keeps what came from everyone else and takes the
    sender's latest version, then goes through ``deduplicate_accepted``.
    """
    driver_id = str(driver_id)
    kept = [line for line in lines if line.provenance != driver_id]
    return deduplicate_accepted(kept + list(replacement))
