from django.db import models
from django.core.validators import MinValueValidator
from django.utils import timezone
from decimal import Decimal
import uuid


class ProductCategory(models.TextChoices):
    BAKERY = 'bakery', 'Bakery'
    FRESH = 'fresh', 'Fresh'


# Prefixes used for product codes (PRD-FRS-001) and display numbers (F001)
CATEGORY_CODE_PREFIX = {
    ProductCategory.FRESH: 'FRS',
    ProductCategory.BAKERY: 'BKR',
}
CATEGORY_DISPLAY_PREFIX = {
    ProductCategory.FRESH: 'F',
    ProductCategory.BAKERY: 'B',
}


class Product(models.Model):
    """Catalog product sold by drivers."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    code = models.CharField(max_length=20, unique=True, editable=False)
    display_number = models.CharField(max_length=10, db_index=True)

    name = models.CharField(max_length=200)
    category = models.CharField(max_length=10, choices=ProductCategory.choices)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    description = models.TextField(blank=True)
    sku = models.CharField(max_length=50, blank=True)
    unit = models.CharField(max_length=20, default='pcs')
    minimum_quantity = models.PositiveIntegerField(default=0)
    maximum_quantity = models.PositiveIntegerField(null=True, blank=True)
    expiry_days = models.PositiveIntegerField(null=True, blank=True)
    supplier = models.CharField(max_length=200, blank=True)
    is_active = models.BooleanField(default=True)

    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='products_created'
    )
    updated_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='products_updated'
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'products'
        indexes = [
            models.Index(fields=['category', 'display_number'], name='products_category_display_idx'),
            models.Index(fields=['is_active'], name='products_active_idx'),
        ]
        ordering = ['category', 'display_number']

    def __str__(self):
        return f"{self.display_number} {self.name}"

    @property
    def display_prefix(self):
        return CATEGORY_DISPLAY_PREFIX[self.category]

    def latest_version(self):
        """Return the highest price history version (0 if none)."""
        return self.price_history.aggregate(
            latest=models.Max('version')
        )['latest'] or 0


class PriceHistoryEntry(models.Model):
    """
    One price change of a product.

    Append-only: entries are never edited or deleted so trips can always
    be re-settled with the price in effect on their date.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name='price_history'
    )
    version = models.PositiveIntegerField()
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    updated_at = models.DateTimeField(default=timezone.now)
    reason = models.CharField(max_length=255, blank=True)
    updated_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='price_changes'
    )

    class Meta:
        db_table = 'product_price_history'
        unique_together = [['product', 'version']]
        indexes = [
            models.Index(fields=['product', 'updated_at'], name='price_history_product_idx'),
        ]
        ordering = ['product', 'version']
        verbose_name_plural = 'price history entries'

    def __str__(self):
        return f"{self.product.code} v{self.version}: {self.price}"
