"""
Settlement arithmetic for a single daily trip.

All money is ``Decimal``. Derived values are rounded half-up to cents, and
formulas that depend on ``expiry_after_tax`` use the rounded value, so the
persisted fields always agree with each other.

Formulas:
    total_amount      = sum(quantity * unit_price) over products
    net_total         = total_amount, split into fresh and bakery subtotals
    grand_total       = see GRAND_TOTAL_TERMS
    expiry_after_tax  = (expiry + expiry * 5%) - (expiry + expiry * 5%) * 13%
    amount_to_be      = purchase_amount - expiry_after_tax
    sales_difference  = collection_amount - amount_to_be
    profit            = 13.5% * (fresh - expiry_after_tax)
                        + 19.5% * bakery - discount
    balance           = see CLOSING_BALANCE_TERMS

Transferred and accepted lines do not enter the totals. They document stock
movement between drivers, and the cash for that stock is reported through
the collection and purchase amounts.
"""

from dataclasses import dataclass, fields
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Any, Dict, Iterable, Sequence, Tuple

from .lines import (
    BAKERY,
    FRESH,
    ZERO,
    ProductLine,
    SettlementValidationError,
    line_errors,
    to_decimal,
)

CENT = Decimal('0.01')

EXPIRY_SURCHARGE_RATE = Decimal('0.05')
EXPIRY_TAX_RATE = Decimal('0.13')
FRESH_MARGIN_RATE = Decimal('0.135')
BAKERY_MARGIN_RATE = Decimal('0.195')

# (field, sign) pairs. These two tables are the only place where a cash
# field is declared as adding to or taking away from a total.
GRAND_TOTAL_TERMS: Tuple[Tuple[str, int], ...] = (
    ('net_total', 1),
    ('collection_amount', 1),
    ('petrol', -1),
    ('discount', -1),
)

CLOSING_BALANCE_TERMS: Tuple[Tuple[str, int], ...] = (
    ('previous_balance', 1),
    ('collection_amount', 1),
    ('purchase_amount', -1),
    ('petrol', -1),
    ('discount', -1),
)

CASH_FIELDS = ('collection_amount', 'purchase_amount', 'expiry', 'discount', 'petrol')

# Derived values stored on the trip; net_total_fresh and net_total_bakery
# only feed the profit formula.
PERSISTED_FIELDS = (
    'total_amount', 'net_total', 'grand_total', 'expiry_after_tax',
    'amount_to_be', 'sales_difference', 'profit', 'previous_balance', 'balance',
)


def quantize(value: Decimal) -> Decimal:
    """Round to cents, half up."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def apply_terms(terms: Iterable[Tuple[str, int]], values: Dict[str, Decimal]) -> Decimal:
    total = ZERO
    for name, sign in terms:
        total += values[name] if sign > 0 else -values[name]
    return total


@dataclass(frozen=True)
class SettlementInputs:
    """Per-trip inputs the calculator needs."""

    products: Tuple[ProductLine, ...] = ()
    collection_amount: Decimal = ZERO
    purchase_amount: Decimal = ZERO
    expiry: Decimal = ZERO
    discount: Decimal = ZERO
    petrol: Decimal = ZERO

    @classmethod
    def build(cls, *, products: Sequence[ProductLine] = (), **cash: Any) -> 'SettlementInputs':
        """
        Build inputs from loosely typed values (str, int, float, Decimal).

        Raises:
            SettlementValidationError: If a cash value is not a number
        """
        errors = {}
        converted = {}
        for name in CASH_FIELDS:
            raw = cash.get(name)
            if raw is None:
                converted[name] = ZERO
                continue
            try:
                converted[name] = to_decimal(raw)
            except (InvalidOperation, ValueError):
                errors[name] = f"'{raw}' is not a valid amount"
        unknown = set(cash) - set(CASH_FIELDS)
        for name in sorted(unknown):
            errors[name] = 'Unknown settlement field'
        if errors:
            raise SettlementValidationError(errors)
        return cls(products=tuple(products), **converted)


@dataclass(frozen=True)
class Settlement:
    """Derived settlement values for one trip."""

    total_amount: Decimal
    net_total: Decimal
    net_total_fresh: Decimal
    net_total_bakery: Decimal
    grand_total: Decimal
    expiry_after_tax: Decimal
    amount_to_be: Decimal
    sales_difference: Decimal
    profit: Decimal
    previous_balance: Decimal
    balance: Decimal

    def as_dict(self, *, persisted_only: bool = False) -> Dict[str, Decimal]:
        names = PERSISTED_FIELDS if persisted_only else [f.name for f in fields(self)]
        return {name: getattr(self, name) for name in names}


def validate_inputs(inputs: SettlementInputs) -> None:
    """
    Raises:
        SettlementValidationError: Listing every negative cash field and
            every malformed product line
    """
    errors = line_errors(inputs.products, 'products')
    for name in CASH_FIELDS:
        if getattr(inputs, name) < ZERO:
            errors[name] = 'Amount cannot be negative'
    if errors:
        raise SettlementValidationError(errors)


def expiry_after_tax(expiry: Decimal) -> Decimal:
    """
    Expiry value after the 5% surcharge and 13% deduction.

    Evaluated in the documented order so audited figures reproduce exactly.

    Example:
        >>> expiry_after_tax(Decimal('100'))
        Decimal('91.35')
    """
    with_surcharge = expiry + expiry * EXPIRY_SURCHARGE_RATE
    return quantize(with_surcharge - with_surcharge * EXPIRY_TAX_RATE)


def category_subtotals(products: Iterable[ProductLine]) -> Dict[str, Decimal]:
    subtotals = {FRESH: ZERO, BAKERY: ZERO}
    for line in products:
        subtotals[line.category] += line.amount
    return subtotals


def compute_settlement(inputs: SettlementInputs, prior_balance: Any = ZERO) -> Settlement:
    """
    Compute every derived field of a trip.

    Pure and deterministic: the same inputs always give the same result,
    nothing is read from or written to storage.

    Args:
        inputs: Product lines and cash amounts
        prior_balance: Closing balance of the driver's previous trip (the
            new trip's opening balance); may be negative

    Returns:
        Settlement with all values rounded to cents

    Raises:
        SettlementValidationError: If a quantity, price or cash amount is
            negative or a category is unknown or inconsistent

    Example:
        >>> inputs = SettlementInputs.build(
        ...     products=[ProductLine('P1', 'Milk', 'fresh', Decimal('10'), Decimal('5'))],
        ...     collection_amount=60, purchase_amount=50, petrol=20,
        ... )
        >>> result = compute_settlement(inputs, Decimal('0'))
        >>> result.profit, result.balance
        (Decimal('6.75'), Decimal('-10.00'))
    """
    validate_inputs(inputs)
    previous_balance = to_decimal(prior_balance)

    subtotals = category_subtotals(inputs.products)
    fresh = quantize(subtotals[FRESH])
    bakery = quantize(subtotals[BAKERY])
    total_amount = quantize(subtotals[FRESH] + subtotals[BAKERY])
    net_total = total_amount

    after_tax = expiry_after_tax(inputs.expiry)
    amount_to_be = quantize(inputs.purchase_amount - after_tax)
    sales_difference = quantize(inputs.collection_amount - amount_to_be)

    profit = quantize(
        FRESH_MARGIN_RATE * (fresh - after_tax)
        + BAKERY_MARGIN_RATE * bakery
        - inputs.discount
    )

    values = {
        'net_total': net_total,
        'previous_balance': previous_balance,
        'collection_amount': inputs.collection_amount,
        'purchase_amount': inputs.purchase_amount,
        'petrol': inputs.petrol,
        'discount': inputs.discount,
    }

    return Settlement(
        total_amount=total_amount,
        net_total=net_total,
        net_total_fresh=fresh,
        net_total_bakery=bakery,
        grand_total=quantize(apply_terms(GRAND_TOTAL_TERMS, values)),
        expiry_after_tax=after_tax,
        amount_to_be=amount_to_be,
        sales_difference=sales_difference,
        profit=profit,
        previous_balance=quantize(previous_balance),
        balance=quantize(apply_terms(CLOSING_BALANCE_TERMS, values)),
    )
