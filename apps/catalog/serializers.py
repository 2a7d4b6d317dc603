from rest_framework import serializers
from apps.accounts.serializers import UserMinimalSerializer
from .models import Product, PriceHistoryEntry, ProductCategory


# =============================================================================
# Input Serializers
# =============================================================================

class ProductFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for product filtering.

    Query Parameters:
        category (str): bakery or fresh
        is_active (bool): Filter by active flag
        supplier (str): Substring match on supplier
        search (str): Substring match on name
    """

    category = serializers.ChoiceField(choices=ProductCategory.choices, required=False)
    is_active = serializers.BooleanField(required=False, allow_null=True, default=None)
    supplier = serializers.CharField(max_length=200, required=False)
    search = serializers.CharField(max_length=200, required=False)


class ProductWriteSerializer(serializers.Serializer):
    """Input for creating and updating products."""

    name = serializers.CharField(max_length=200)
    category = serializers.ChoiceField(choices=ProductCategory.choices)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    display_number = serializers.RegexField(
        regex=r'^[FB]\d+$',
        required=False,
        help_text='F001 for fresh, B001 for bakery; generated when omitted'
    )
    description = serializers.CharField(required=False, allow_blank=True, default='')
    sku = serializers.CharField(max_length=50, required=False, allow_blank=True, default='')
    unit = serializers.CharField(max_length=20, required=False, default='pcs')
    minimum_quantity = serializers.IntegerField(min_value=0, required=False, default=0)
    maximum_quantity = serializers.IntegerField(min_value=0, required=False, allow_null=True, default=None)
    expiry_days = serializers.IntegerField(min_value=0, required=False, allow_null=True, default=None)
    supplier = serializers.CharField(max_length=200, required=False, allow_blank=True, default='')
    is_active = serializers.BooleanField(required=False, default=True)
    price_change_reason = serializers.CharField(max_length=255, required=False, allow_blank=True)

    def validate(self, attrs):
        minimum = attrs.get('minimum_quantity')
        maximum = attrs.get('maximum_quantity')
        if maximum is not None and minimum is not None and maximum < minimum:
            raise serializers.ValidationError({
                'maximum_quantity': 'Maximum quantity must not be below minimum quantity'
            })

        category = attrs.get('category')
        display_number = attrs.get('display_number')
        if category and display_number:
            expected = 'F' if category == ProductCategory.FRESH else 'B'
            if not display_number.startswith(expected):
                raise serializers.ValidationError({
                    'display_number': f'Display number for {category} products must start with {expected}'
                })
        return attrs


class PriceChangeSerializer(serializers.Serializer):
    """Input for appending (optionally backdated) price history."""

    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    effective_at = serializers.DateTimeField(required=False)
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')


class PriceLookupSerializer(serializers.Serializer):
    date = serializers.DateField()


# =============================================================================
# Output Serializers
# =============================================================================

class PriceHistoryEntrySerializer(serializers.ModelSerializer):
    updated_by = UserMinimalSerializer(read_only=True)

    class Meta:
        model = PriceHistoryEntry
        fields = ['id', 'version', 'price', 'updated_at', 'reason', 'updated_by']
        read_only_fields = fields


class ProductSerializer(serializers.ModelSerializer):
    """Full product with its price history."""

    price_history = PriceHistoryEntrySerializer(many=True, read_only=True)

    class Meta:
        model = Product
        fields = [
            'id',
            'code',
            'display_number',
            'name',
            'category',
            'price',
            'description',
            'sku',
            'unit',
            'minimum_quantity',
            'maximum_quantity',
            'expiry_days',
            'supplier',
            'is_active',
            'price_history',
            'created_by',
            'updated_by',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class ProductListSerializer(serializers.ModelSerializer):
    """Lightweight product for list views."""

    class Meta:
        model = Product
        fields = [
            'id',
            'code',
            'display_number',
            'name',
            'category',
            'price',
            'unit',
            'supplier',
            'is_active',
        ]
        read_only_fields = fields
