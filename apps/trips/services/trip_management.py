"""Daily trip operations: create, edit, recalculate, delete."""

import logging
from dataclasses import asdict
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction

from apps.core.services import next_code, next_sequence, record_history, snapshot
from apps.employees.models import Employee
from apps.employees.services import lock_driver, lock_employees, update_driver_balance
from ..models import DailyTrip, TripLine
from ..settlement import (
    ProductLine,
    Settlement,
    SettlementInputs,
    SettlementValidationError,
    compute_settlement,
    deduplicate_accepted,
    find_prior_trip,
    latest_trip,
    opening_balance,
    to_decimal,
)
from ..settlement.calculator import CASH_FIELDS
from ..settlement.lines import line_errors
from .exceptions import TripNotFoundError, DuplicateTripError
from .line_builder import (
    build_product_lines,
    build_transferred_lines,
    build_accepted_lines,
    reprice,
)
from .transfers import (
    write_lines,
    pending_transfers_to,
    propagate_transfers,
    withdraw_transfers,
    merge_accepted,
)

User = get_user_model()

logger = logging.getLogger(__name__)

HISTORY_COLLECTION = 'dailyTrips'


def chain_sequence_key(driver_id) -> str:
    return f"trip-chain:{driver_id}"


def settle(
    *,
    products: Sequence[ProductLine],
    transfers: Sequence[ProductLine] = (),
    accepted: Sequence[ProductLine] = (),
    cash: Dict[str, Any],
    prior_balance: Any,
) -> Tuple[SettlementInputs, Settlement]:
    """
    Validate every line list and the cash inputs, then compute.

    Raises:
        SettlementValidationError: Listing every offending field across
            products, transfers, accepted lines and cash
    """
    errors = {}
    errors.update(line_errors(transfers, 'transferred_products'))
    errors.update(line_errors(accepted, 'accepted_products'))

    inputs = settlement = None
    try:
        inputs = SettlementInputs.build(products=products, **cash)
        settlement = compute_settlement(inputs, prior_balance)
    except SettlementValidationError as e:
        errors.update(e.errors)

    if errors:
        raise SettlementValidationError(errors)
    return inputs, settlement


def _apply(trip: DailyTrip, inputs: SettlementInputs, settlement: Settlement) -> None:
    for name in CASH_FIELDS:
        setattr(trip, name, getattr(inputs, name))
    for name, value in settlement.as_dict(persisted_only=True).items():
        setattr(trip, name, value)


def _lines_for_audit(lines: List[ProductLine]) -> List[Dict[str, Any]]:
    return [asdict(line) for line in lines]


def trip_snapshot(trip: DailyTrip) -> Dict[str, Any]:
    return snapshot(trip, extra={
        'products': _lines_for_audit(trip.product_lines()),
        'transferred_products': _lines_for_audit(trip.transferred_lines()),
        'accepted_products': _lines_for_audit(trip.accepted_lines()),
    })


def sync_driver_balance(*, driver: Employee, reason: str, updated_by: Optional[User] = None) -> None:
    """Set the driver's current balance to the closing balance of their latest trip (0 if none)."""
    if not driver.is_driver:
        logger.warning(f"Skipping balance sync for {driver.code}: no longer a driver")
        return

    chain = DailyTrip.objects.filter(driver=driver).only('id', 'date', 'chain_sequence', 'balance')
    latest = latest_trip(chain)
    balance = latest.balance if latest else Decimal('0.00')
    update_driver_balance(
        driver_id=driver.id,
        balance=balance,
        reason=reason,
        updated_by=updated_by,
    )


def _receiving_driver_ids(entries: Sequence[Dict[str, Any]]) -> List[Any]:
    return [entry.get('receiving_driver_id') for entry in entries]


def _lock_trip_and_driver(
    trip_id: UUID,
    extra_driver_ids: Sequence[Any] = (),
) -> Tuple[DailyTrip, Employee]:
    """
    Lock the trip's driver and every driver its transfers reach, then the trip.

    Driver rows are locked together in id order before any trip row, the
    same order trip creation uses.
    """
    try:
        driver_id = DailyTrip.objects.values_list('driver_id', flat=True).get(id=trip_id)
    except DailyTrip.DoesNotExist:
        raise TripNotFoundError(f"Trip {trip_id} not found")

    receiver_ids = TripLine.objects.filter(
        trip_id=trip_id,
        kind=TripLine.Kind.TRANSFER,
    ).values_list('receiving_driver_id', flat=True)
    locked = lock_employees(employee_ids=[driver_id, *receiver_ids, *extra_driver_ids])

    driver = locked[str(driver_id)]
    try:
        trip = DailyTrip.objects.select_for_update().get(id=trip_id)
    except DailyTrip.DoesNotExist:
        raise TripNotFoundError(f"Trip {trip_id} not found")
    return trip, driver


def get_trip_by_id(*, trip_id: UUID) -> DailyTrip:
    try:
        return (
            DailyTrip.objects
            .select_related('driver', 'previous_trip')
            .prefetch_related('lines')
            .get(id=trip_id)
        )
    except DailyTrip.DoesNotExist:
        raise TripNotFoundError(f"Trip {trip_id} not found")


def list_trips(
    *,
    driver: Optional[UUID] = None,
    date: Optional[date] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
):
    """Trips newest first, optionally filtered by driver and date range."""
    queryset = DailyTrip.objects.select_related('driver')

    if driver:
        queryset = queryset.filter(driver_id=driver)
    if date:
        queryset = queryset.filter(date=date)
    if start_date:
        queryset = queryset.filter(date__gte=start_date)
    if end_date:
        queryset = queryset.filter(date__lte=end_date)

    return queryset.order_by('-date', '-chain_sequence', '-created_at')


@transaction.atomic
def create_trip(
    *,
    driver_id: UUID,
    date: date,
    products: Sequence[Dict[str, Any]] = (),
    transferred_products: Sequence[Dict[str, Any]] = (),
    accepted_products: Sequence[Dict[str, Any]] = (),
    is_product_transferred: Optional[bool] = None,
    created_by: Optional[User] = None,
    **cash: Any
) -> DailyTrip:
    """
    Create and settle a driver's trip for a day.

    Steps:
        1. Lock the driver and every transfer receiver, in id order, so
           concurrent trips touching the same drivers queue up
        2. Price lines without a unit price as of ``date``
        3. Merge accepted lines with transfers other drivers already
           recorded to this driver on ``date``, then reconcile
        4. Open at the closing balance of the latest trip on or before
           ``date`` and compute the settlement
        5. Push this trip's transfers to receivers' trips on ``date``
        6. Point the driver's current balance at their latest trip

    Args:
        driver_id: Driver the trip belongs to
        date: Trip date
        products: [{'product_id', 'quantity', 'unit_price'?}]
        transferred_products: Same plus 'receiving_driver_id'
        accepted_products: Same plus optional 'transferred_from_driver_id'
        is_product_transferred: Defaults to whether transfers were given
        created_by: User creating the trip
        **cash: collection_amount, purchase_amount, expiry, discount, petrol

    Returns:
        Created DailyTrip

    Raises:
        EmployeeNotFoundError: If the driver doesn't exist
        NotADriverError: If the employee isn't a driver
        DuplicateTripError: If the driver already has a trip on ``date``
        ProductNotFoundError: If a line references an unknown product
        InvalidTransferError: If a transfer names an unknown receiver or the driver
        SettlementValidationError: If quantities, prices or amounts are invalid
    """
    lock_employees(employee_ids=[driver_id, *_receiving_driver_ids(transferred_products)])
    driver = lock_driver(driver_id=driver_id)

    if DailyTrip.objects.filter(driver=driver, date=date).exists():
        raise DuplicateTripError(
            f"Driver {driver.code} already has a trip on {date.isoformat()}"
        )

    product_lines = build_product_lines(list(products), as_of=date)
    transfer_lines = build_transferred_lines(list(transferred_products), as_of=date, sender=driver)
    accepted_lines = merge_accepted(
        build_accepted_lines(list(accepted_products), as_of=date, receiver=driver),
        pending_transfers_to(driver_id=driver.id, trip_date=date),
    )
    if is_product_transferred is None:
        is_product_transferred = bool(transfer_lines)

    chain = DailyTrip.objects.filter(driver=driver).only('id', 'date', 'chain_sequence', 'balance')
    prior = find_prior_trip(chain, date)

    inputs, settlement = settle(
        products=product_lines,
        transfers=transfer_lines,
        accepted=accepted_lines,
        cash=cash,
        prior_balance=opening_balance(prior),
    )

    trip = DailyTrip(
        code=next_code(settings.TRIP_CODE_PREFIX),
        driver=driver,
        driver_name=driver.name,
        date=date,
        chain_sequence=next_sequence(chain_sequence_key(driver.id)),
        previous_trip=prior,
        is_product_transferred=is_product_transferred,
        created_by=created_by,
        updated_by=created_by,
    )
    _apply(trip, inputs, settlement)
    trip.save()

    write_lines(trip, TripLine.Kind.PRODUCT, product_lines)
    write_lines(trip, TripLine.Kind.TRANSFER, transfer_lines)
    write_lines(trip, TripLine.Kind.ACCEPTED, accepted_lines)

    propagate_transfers(trip)
    sync_driver_balance(driver=driver, reason=f"Trip {trip.code} created", updated_by=created_by)

    record_history(
        collection_name=HISTORY_COLLECTION,
        document_id=trip.id,
        action='create',
        actor=created_by,
        after=trip_snapshot(trip),
    )
    logger.info(
        f"Created trip {trip.code} for {driver.code} on {date.isoformat()}: "
        f"opening {settlement.previous_balance}, closing {settlement.balance}"
    )

    return trip


@transaction.atomic
def update_trip(
    *,
    trip_id: UUID,
    data: Dict[str, Any],
    updated_by: Optional[User] = None,
) -> DailyTrip:
    """
    Edit a trip and recompute its own settlement.

    The trip keeps its stored ``previous_balance`` unless ``data`` sets
    one explicitly. Later trips in the chain are left as they are; use
    ``driver_chain`` to see where they no longer line up.

    Raises:
        TripNotFoundError: If trip doesn't exist
        ProductNotFoundError: If a line references an unknown product
        InvalidTransferError: If a transfer names an unknown receiver or the driver
        SettlementValidationError: If quantities, prices or amounts are invalid
    """
    trip, driver = _lock_trip_and_driver(
        trip_id,
        extra_driver_ids=_receiving_driver_ids(data.get('transferred_products') or ()),
    )
    before = trip_snapshot(trip)

    if 'products' in data:
        product_lines = build_product_lines(list(data['products']), as_of=trip.date)
    else:
        product_lines = trip.product_lines()

    previous_receivers = {line.receiving_driver_id for line in trip.transferred_lines()}
    if 'transferred_products' in data:
        transfer_lines = build_transferred_lines(
            list(data['transferred_products']), as_of=trip.date, sender=driver
        )
    else:
        transfer_lines = trip.transferred_lines()

    if 'accepted_products' in data:
        accepted_lines = deduplicate_accepted(
            build_accepted_lines(list(data['accepted_products']), as_of=trip.date, receiver=driver)
        )
    else:
        accepted_lines = trip.accepted_lines()

    if data.get('is_product_transferred') is not None:
        trip.is_product_transferred = data['is_product_transferred']
    elif 'transferred_products' in data:
        trip.is_product_transferred = bool(transfer_lines)

    prior_balance = data.get('previous_balance')
    if prior_balance is None:
        prior_balance = trip.previous_balance

    inputs, settlement = settle(
        products=product_lines,
        transfers=transfer_lines,
        accepted=accepted_lines,
        cash={name: data.get(name, getattr(trip, name)) for name in CASH_FIELDS},
        prior_balance=prior_balance,
    )

    _apply(trip, inputs, settlement)
    trip.updated_by = updated_by
    trip.save()

    write_lines(trip, TripLine.Kind.PRODUCT, product_lines)
    write_lines(trip, TripLine.Kind.TRANSFER, transfer_lines)
    write_lines(trip, TripLine.Kind.ACCEPTED, accepted_lines)

    propagate_transfers(trip, previous_receivers=previous_receivers)
    sync_driver_balance(driver=driver, reason=f"Trip {trip.code} updated", updated_by=updated_by)

    record_history(
        collection_name=HISTORY_COLLECTION,
        document_id=trip.id,
        action='update',
        actor=updated_by,
        before=before,
        after=trip_snapshot(trip),
    )
    logger.info(f"Updated trip {trip.code}: closing {settlement.balance}")

    return trip


@transaction.atomic
def recalculate_trip(*, trip_id: UUID, updated_by: Optional[User] = None) -> Tuple[DailyTrip, bool]:
    """
    Re-price every line from current price history and recompute.

    Used after backdated price changes. Running it twice changes nothing
    the second time.

    Returns:
        (trip, changed)

    Raises:
        TripNotFoundError: If trip doesn't exist
    """
    trip, driver = _lock_trip_and_driver(trip_id)

    old_lines = {
        TripLine.Kind.PRODUCT: trip.product_lines(),
        TripLine.Kind.TRANSFER: trip.transferred_lines(),
        TripLine.Kind.ACCEPTED: trip.accepted_lines(),
    }
    new_lines = {kind: reprice(lines, as_of=trip.date) for kind, lines in old_lines.items()}

    inputs, settlement = settle(
        products=new_lines[TripLine.Kind.PRODUCT],
        transfers=new_lines[TripLine.Kind.TRANSFER],
        accepted=new_lines[TripLine.Kind.ACCEPTED],
        cash={name: getattr(trip, name) for name in CASH_FIELDS},
        prior_balance=trip.previous_balance,
    )

    stored = {name: to_decimal(getattr(trip, name)) for name in settlement.as_dict(persisted_only=True)}
    if new_lines == old_lines and stored == settlement.as_dict(persisted_only=True):
        return trip, False

    before = trip_snapshot(trip)

    _apply(trip, inputs, settlement)
    trip.updated_by = updated_by
    trip.save()
    for kind, lines in new_lines.items():
        write_lines(trip, kind, lines)

    propagate_transfers(trip)
    sync_driver_balance(driver=driver, reason=f"Trip {trip.code} recalculated", updated_by=updated_by)

    record_history(
        collection_name=HISTORY_COLLECTION,
        document_id=trip.id,
        action='update',
        actor=updated_by,
        before=before,
        after=trip_snapshot(trip),
    )
    logger.info(f"Recalculated trip {trip.code}: closing {settlement.balance}")

    return trip, True


@transaction.atomic
def delete_trip(*, trip_id: UUID, deleted_by: Optional[User] = None) -> None:
    """
    Delete a trip.

    Receivers lose the accepted lines this trip pushed to them and the
    driver's current balance falls back to their latest remaining trip
    (0 if none). No other trip's opening balance changes.

    Raises:
        TripNotFoundError: If trip doesn't exist
    """
    trip, driver = _lock_trip_and_driver(trip_id)
    before = trip_snapshot(trip)
    code = trip.code

    withdraw_transfers(trip)
    trip.delete()

    sync_driver_balance(driver=driver, reason=f"Trip {code} deleted", updated_by=deleted_by)

    record_history(
        collection_name=HISTORY_COLLECTION,
        document_id=trip_id,
        action='delete',
        actor=deleted_by,
        before=before,
    )
    logger.info(f"Deleted trip {code}")
