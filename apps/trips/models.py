from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal
import uuid

from .settlement import (
    PRICE_EXPLICIT,
    PRICE_RESOLVED,
    ProductLine,
    TransferredProductLine,
)


def money_field(**kwargs):
    kwargs.setdefault('max_digits', 12)
    kwargs.setdefault('decimal_places', 2)
    kwargs.setdefault('default', Decimal('0.00'))
    return models.DecimalField(**kwargs)


class DailyTrip(models.Model):
    """
    One driver's settlement for one day.

    ``previous_balance`` is fixed when the trip is created from the closing
    balance of ``previous_trip``. Later edits to other trips never change it.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    code = models.CharField(max_length=20, unique=True, editable=False)

    driver = models.ForeignKey(
        'employees.Employee',
        on_delete=models.PROTECT,
        related_name='trips'
    )
    driver_name = models.CharField(max_length=100)
    date = models.DateField()

    # Position within the driver's chain; ties on date are ordered by it
    chain_sequence = models.PositiveIntegerField(editable=False)
    previous_trip = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='next_trips'
    )

    is_product_transferred = models.BooleanField(default=False)

    # Cash inputs
    collection_amount = money_field(validators=[MinValueValidator(Decimal('0.00'))])
    purchase_amount = money_field(validators=[MinValueValidator(Decimal('0.00'))])
    expiry = money_field(validators=[MinValueValidator(Decimal('0.00'))])
    discount = money_field(validators=[MinValueValidator(Decimal('0.00'))])
    petrol = money_field(validators=[MinValueValidator(Decimal('0.00'))])
    previous_balance = money_field()

    # Derived
    total_amount = money_field()
    net_total = money_field()
    grand_total = money_field()
    expiry_after_tax = money_field()
    amount_to_be = money_field()
    sales_difference = money_field()
    profit = money_field()
    balance = money_field()

    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='trips_created'
    )
    updated_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='trips_updated'
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'daily_trips'
        constraints = [
            models.UniqueConstraint(
                fields=['driver', 'date'],
                name='daily_trips_driver_date_uniq'
            ),
        ]
        indexes = [
            models.Index(fields=['driver', 'date', 'chain_sequence'], name='daily_trips_chain_idx'),
            models.Index(fields=['date'], name='daily_trips_date_idx'),
        ]
        ordering = ['-date', '-chain_sequence']

    def __str__(self):
        return f"{self.code} {self.driver_name} {self.date}"

    def product_lines(self):
        return [line.to_value() for line in self.lines.all() if line.kind == TripLine.Kind.PRODUCT]

    def transferred_lines(self):
        return [line.to_value() for line in self.lines.all() if line.kind == TripLine.Kind.TRANSFER]

    def accepted_lines(self):
        return [line.to_value() for line in self.lines.all() if line.kind == TripLine.Kind.ACCEPTED]


class TripLine(models.Model):
    """
    A product quantity on a trip.

    ``product_ref`` keeps the product id even after the product is deleted,
    so recorded trips stay reconcilable.
    """

    class Kind(models.TextChoices):
        PRODUCT = 'product', 'Product'
        TRANSFER = 'transfer', 'Transferred out'
        ACCEPTED = 'accepted', 'Accepted'

    class PriceSource(models.TextChoices):
        RESOLVED = PRICE_RESOLVED, 'Resolved from price history'
        EXPLICIT = PRICE_EXPLICIT, 'Entered on the trip'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    trip = models.ForeignKey(
        DailyTrip,
        on_delete=models.CASCADE,
        related_name='lines'
    )
    kind = models.CharField(max_length=10, choices=Kind.choices)
    position = models.PositiveIntegerField(default=0)

    product = models.ForeignKey(
        'catalog.Product',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='trip_lines'
    )
    product_ref = models.CharField(max_length=64)
    product_name = models.CharField(max_length=200)
    category = models.CharField(max_length=10)
    display_number = models.CharField(max_length=10, blank=True)
    quantity = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    unit_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    price_source = models.CharField(
        max_length=10,
        choices=PriceSource.choices,
        default=PriceSource.RESOLVED
    )

    # Transfer out: who receives the stock
    receiving_driver = models.ForeignKey(
        'employees.Employee',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='incoming_transfer_lines'
    )
    receiving_driver_name = models.CharField(max_length=100, blank=True)

    # Accepted: who handed the stock over (blank when unknown)
    transferred_from_driver = models.ForeignKey(
        'employees.Employee',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='handed_over_lines'
    )
    transferred_from_driver_name = models.CharField(max_length=100, blank=True)

    class Meta:
        db_table = 'trip_lines'
        indexes = [
            models.Index(fields=['trip', 'kind'], name='trip_lines_kind_idx'),
            models.Index(fields=['receiving_driver', 'kind'], name='trip_lines_receiver_idx'),
        ]
        ordering = ['trip', 'kind', 'position']

    def __str__(self):
        return f"{self.get_kind_display()}: {self.product_name} x {self.quantity}"

    def to_value(self):
        """Return the line as a settlement value object."""
        values = {
            'product_id': self.product_ref,
            'product_name': self.product_name,
            'category': self.category,
            'quantity': self.quantity,
            'unit_price': self.unit_price,
            'display_number': self.display_number,
            'transferred_from_driver_id': str(self.transferred_from_driver_id or ''),
            'transferred_from_driver_name': self.transferred_from_driver_name,
            'price_source': self.price_source,
        }
        if self.kind == self.Kind.TRANSFER:
            return TransferredProductLine(
                receiving_driver_id=str(self.receiving_driver_id or ''),
                receiving_driver_name=self.receiving_driver_name,
                **values
            )
        return ProductLine(**values)
