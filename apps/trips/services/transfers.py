"""
Line persistence and stock transfers between drivers' trips.

A transfer is recorded on the sender's trip. The receiver sees it as
accepted lines on their own trip for the same date: pushed when the sender
saves and the receiver's trip already exists, pulled when the receiver's
trip is created afterwards. Accepted lines never change a trip's totals.
"""

import logging
from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Set

from apps.catalog.models import Product
from apps.employees.models import Employee
from ..models import DailyTrip, TripLine
from ..settlement import (
    ProductLine,
    TransferredProductLine,
    deduplicate_accepted,
    replace_lines_from_driver,
)

logger = logging.getLogger(__name__)


def _existing_ids(model, ids: Iterable[str]) -> Set[str]:
    ids = {str(pk) for pk in ids if pk}
    if not ids:
        return set()
    return {str(pk) for pk in model.objects.filter(id__in=ids).values_list('id', flat=True)}


def write_lines(trip: DailyTrip, kind: str, lines: Iterable[ProductLine]) -> None:
    """
    Replace every line of ``kind`` on ``trip``.

    Lines keep their product and driver ids and names as recorded; the
    foreign keys are only set while the referenced rows still exist.
    """
    lines = list(lines)
    products = _existing_ids(Product, (line.product_id for line in lines))
    employees = _existing_ids(Employee, (
        driver_id
        for line in lines
        for driver_id in (getattr(line, 'receiving_driver_id', ''), line.transferred_from_driver_id)
    ))

    trip.lines.filter(kind=kind).delete()
    rows = []
    for position, line in enumerate(lines):
        receiving_driver_id = getattr(line, 'receiving_driver_id', '')
        rows.append(TripLine(
            trip=trip,
            kind=kind,
            position=position,
            product_id=line.product_id if line.product_id in products else None,
            product_ref=line.product_id,
            product_name=line.product_name,
            category=line.category,
            display_number=line.display_number,
            quantity=line.quantity,
            unit_price=line.unit_price,
            price_source=line.price_source,
            receiving_driver_id=receiving_driver_id if receiving_driver_id in employees else None,
            receiving_driver_name=getattr(line, 'receiving_driver_name', ''),
            transferred_from_driver_id=(
                line.transferred_from_driver_id
                if line.transferred_from_driver_id in employees else None
            ),
            transferred_from_driver_name=line.transferred_from_driver_name,
        ))
    TripLine.objects.bulk_create(rows)


def as_accepted(line: TransferredProductLine) -> ProductLine:
    """The receiver's view of a transferred line."""
    return ProductLine(
        product_id=line.product_id,
        product_name=line.product_name,
        category=line.category,
        quantity=line.quantity,
        unit_price=line.unit_price,
        display_number=line.display_number,
        transferred_from_driver_id=line.transferred_from_driver_id,
        transferred_from_driver_name=line.transferred_from_driver_name,
        price_source=line.price_source,
    )


def pending_transfers_to(*, driver_id, trip_date: date) -> List[ProductLine]:
    """Transfers other drivers recorded to ``driver_id`` on ``trip_date``."""
    rows = (
        TripLine.objects
        .filter(
            kind=TripLine.Kind.TRANSFER,
            receiving_driver_id=driver_id,
            trip__date=trip_date,
            trip__is_product_transferred=True,
        )
        .exclude(trip__driver_id=driver_id)
        .order_by('trip__chain_sequence', 'trip__created_at', 'position')
    )
    return [as_accepted(row.to_value()) for row in rows]


def outgoing_by_receiver(trip: DailyTrip) -> Dict[str, List[ProductLine]]:
    """Accepted lines each receiver should hold for this trip's transfers."""
    grouped: Dict[str, List[ProductLine]] = defaultdict(list)
    if not trip.is_product_transferred:
        return grouped
    for line in trip.transferred_lines():
        grouped[line.receiving_driver_id].append(as_accepted(line))
    return grouped


def propagate_transfers(trip: DailyTrip, *, previous_receivers: Iterable[str] = ()) -> Set[str]:
    """
    Push this trip's transfers into receivers' trips on the same date.

    Receivers that no longer get anything from this driver lose the lines
    they had from it. Returns the ids of the receiving trips rewritten.
    """
    outgoing = outgoing_by_receiver(trip)
    receivers = set(outgoing) | {str(r) for r in previous_receivers if r}
    sender_id = str(trip.driver_id)

    touched = set()
    receiving_trips = (
        DailyTrip.objects
        .select_for_update()
        .filter(driver_id__in=receivers, date=trip.date)
        .exclude(id=trip.id)
    )
    for receiving_trip in receiving_trips:
        accepted = replace_lines_from_driver(
            receiving_trip.accepted_lines(),
            sender_id,
            outgoing.get(str(receiving_trip.driver_id), []),
        )
        write_lines(receiving_trip, TripLine.Kind.ACCEPTED, accepted)
        touched.add(str(receiving_trip.id))
        logger.info(
            f"Synced transfers from {trip.code} into {receiving_trip.code} "
            f"({len(accepted)} accepted line(s))"
        )
    return touched


def withdraw_transfers(trip: DailyTrip) -> Set[str]:
    """Remove this trip's transfers from every receiver (trip deletion)."""
    receivers = {line.receiving_driver_id for line in trip.transferred_lines()}
    trip.is_product_transferred = False
    return propagate_transfers(trip, previous_receivers=receivers)


def merge_accepted(manual: Iterable[ProductLine], pending: Iterable[ProductLine]) -> List[ProductLine]:
    """
    Combine hand-entered accepted lines with pending transfers and reconcile.

    Pending transfers go first so the sender's copy of a line wins over a
    hand-typed one naming the same sender.
    """
    return deduplicate_accepted(list(pending) + list(manual))
