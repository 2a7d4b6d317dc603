"""
Trip settlement engine.

Pure functions over plain values: nothing here touches the database,
takes locks or logs. The service layer loads data, calls these, and
persists the results.
"""

from .lines import (
    BAKERY,
    FRESH,
    CATEGORIES,
    PRICE_RESOLVED,
    PRICE_EXPLICIT,
    ProductLine,
    TransferredProductLine,
    SettlementValidationError,
    to_decimal,
    validate_lines,
)
from .pricing import resolve_price
from .reconciliation import (
    deduplicate_accepted,
    lines_from_driver,
    replace_lines_from_driver,
)
from .calculator import (
    GRAND_TOTAL_TERMS,
    CLOSING_BALANCE_TERMS,
    PERSISTED_FIELDS,
    SettlementInputs,
    Settlement,
    compute_settlement,
    expiry_after_tax,
    quantize,
)
from .ledger import (
    ChainBreak,
    order_chain,
    find_prior_trip,
    latest_trip,
    opening_balance,
    verify_chain,
)

__all__ = [
    # Lines
    'BAKERY',
    'FRESH',
    'CATEGORIES',
    'PRICE_RESOLVED',
    'PRICE_EXPLICIT',
    'ProductLine',
    'TransferredProductLine',
    'SettlementValidationError',
    'to_decimal',
    'validate_lines',
    # Pricing
    'resolve_price',
    # Reconciliation
    'deduplicate_accepted',
    'lines_from_driver',
    'replace_lines_from_driver',
    # Calculator
    'GRAND_TOTAL_TERMS',
    'CLOSING_BALANCE_TERMS',
    'PERSISTED_FIELDS',
    'SettlementInputs',
    'Settlement',
    'compute_settlement',
    'expiry_after_tax',
    'quantize',
    # Ledger
    'ChainBreak',
    'order_chain',
    'find_prior_trip',
    'latest_trip',
    'opening_balance',
    'verify_chain',
]
