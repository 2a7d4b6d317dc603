"""Read-only settlement helpers: previews and chain audits."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from apps.employees.services import get_employee_by_id
from ..models import DailyTrip
from ..settlement import (
    ChainBreak,
    ProductLine,
    Settlement,
    find_prior_trip,
    opening_balance,
    order_chain,
    verify_chain,
)
from .line_builder import build_product_lines
from .trip_management import settle


@dataclass
class SettlementPreview:
    products: List[ProductLine]
    settlement: Settlement
    previous_trip: Optional[DailyTrip] = None


@dataclass
class DriverChain:
    trips: List[DailyTrip]
    breaks: List[ChainBreak]

    @property
    def is_consistent(self) -> bool:
        return not self.breaks


def preview_settlement(
    *,
    date: date,
    products: Sequence[Dict[str, Any]] = (),
    driver_id: Optional[UUID] = None,
    previous_balance: Optional[Decimal] = None,
    **cash: Any
) -> SettlementPreview:
    """
    Compute a settlement without saving anything.

    The opening balance is ``previous_balance`` when given, otherwise the
    closing balance of the driver's latest trip on or before ``date``
    (0 without a driver).

    Raises:
        EmployeeNotFoundError: If driver_id is given and doesn't exist
        ProductNotFoundError: If a line references an unknown product
        SettlementValidationError: If quantities, prices or amounts are invalid
    """
    product_lines = build_product_lines(list(products), as_of=date)

    prior = None
    if driver_id is not None:
        driver = get_employee_by_id(employee_id=driver_id)
        prior = find_prior_trip(DailyTrip.objects.filter(driver=driver), date)

    if previous_balance is None:
        previous_balance = opening_balance(prior)

    _, settlement = settle(products=product_lines, cash=cash, prior_balance=previous_balance)
    return SettlementPreview(products=product_lines, settlement=settlement, previous_trip=prior)


def driver_chain(*, driver_id: UUID) -> DriverChain:
    """
    A driver's trips oldest first with every broken balance link.

    Raises:
        EmployeeNotFoundError: If driver doesn't exist
    """
    driver = get_employee_by_id(employee_id=driver_id)
    trips = order_chain(DailyTrip.objects.filter(driver=driver))
    return DriverChain(trips=trips, breaks=verify_chain(trips))
