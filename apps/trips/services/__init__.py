"""Services for trips business logic."""

from .exceptions import (
    TripsServiceError,
    TripNotFoundError,
    DuplicateTripError,
    InvalidTransferError,
)
from .trip_management import (
    create_trip,
    update_trip,
    recalculate_trip,
    delete_trip,
    get_trip_by_id,
    list_trips,
    settle,
    sync_driver_balance,
)
from .settlement_queries import (
    SettlementPreview,
    DriverChain,
    preview_settlement,
    driver_chain,
)
from .transfers import (
    pending_transfers_to,
    propagate_transfers,
)

__all__ = [
    # Exceptions
    'TripsServiceError',
    'TripNotFoundError',
    'DuplicateTripError',
    'InvalidTransferError',
    # Trip Management
    'create_trip',
    'update_trip',
    'recalculate_trip',
    'delete_trip',
    'get_trip_by_id',
    'list_trips',
    'settle',
    'sync_driver_balance',
    # Queries
    'SettlementPreview',
    'DriverChain',
    'preview_settlement',
    'driver_chain',
    # Transfers
    'pending_transfers_to',
    'propagate_transfers',
]
