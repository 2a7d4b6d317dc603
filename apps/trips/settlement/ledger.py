"""
Per-driver running balance.

A driver's trips form a chain ordered by ``(date, chain_sequence)``; the
sequence is handed out at creation so trips on the same day keep their
creation order. A new trip opens with the closing balance of the trip
right before it in that order.

Edits and deletions never rewrite other trips. ``verify_chain`` reports
every link where a trip's opening balance no longer matches its
predecessor's closing balance, so the drift is visible instead of silent.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, List, Optional, Tuple

from .lines import ZERO, to_decimal


def chain_key(trip: Any) -> Tuple[date, int]:
    return (trip.date, trip.chain_sequence or 0)


def order_chain(trips: Iterable[Any]) -> List[Any]:
    """Return the trips sorted oldest first without touching the input."""
    return sorted(trips, key=chain_key)


def find_prior_trip(trips: Iterable[Any], new_date: date) -> Optional[Any]:
    """
    Return the trip a new trip dated ``new_date`` follows.

    That is the latest trip dated on or before ``new_date``; a new trip
    always goes after existing trips of the same day.
    """
    candidates = [trip for trip in trips if trip.date <= new_date]
    if not candidates:
        return None
    return max(candidates, key=chain_key)


def latest_trip(trips: Iterable[Any]) -> Optional[Any]:
    """Return the newest trip in the chain, or None for an empty chain."""
    trips = list(trips)
    if not trips:
        return None
    return max(trips, key=chain_key)


def opening_balance(prior_trip: Optional[Any]) -> Decimal:
    """Closing balance of ``prior_trip``, or 0 when the driver has no trips."""
    if prior_trip is None:
        return ZERO
    return to_decimal(prior_trip.balance)


@dataclass(frozen=True)
class ChainBreak:
    """A trip whose opening balance disagrees with its predecessor."""

    trip: Any
    predecessor: Optional[Any]
    expected: Decimal
    actual: Decimal

    @property
    def drift(self) -> Decimal:
        return self.actual - self.expected


def verify_chain(trips: Iterable[Any]) -> List[ChainBreak]:
    """
    Check every link of a driver's chain.

    The first trip is expected to open at 0. Each later trip is expected
    to open at the previous trip's closing balance.
    """
    breaks = []
    predecessor = None
    for trip in order_chain(trips):
        expected = opening_balance(predecessor)
        actual = to_decimal(trip.previous_balance)
        if actual != expected:
            breaks.append(ChainBreak(
                trip=trip,
                predecessor=predecessor,
                expected=expected,
                actual=actual,
            ))
        predecessor = trip
    return breaks
