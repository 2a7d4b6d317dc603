from rest_framework import serializers
from apps.accounts.serializers import UserMinimalSerializer
from apps.employees.serializers import EmployeeMinimalSerializer
from .models import DailyTrip, TripLine
from .settlement import quantize


def amount_field(**kwargs):
    kwargs.setdefault('max_digits', 12)
    kwargs.setdefault('decimal_places', 2)
    kwargs.setdefault('min_value', 0)
    kwargs.setdefault('required', False)
    return serializers.DecimalField(**kwargs)


# =============================================================================
# Input Serializers
# =============================================================================

class TripFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for trip filtering.

    Query Parameters:
        driver (uuid): Driver id
        date (date): Exact trip date
        start_date (date): Trips on or after this date
        end_date (date): Trips on or before this date
    """

    driver = serializers.UUIDField(required=False)
    date = serializers.DateField(required=False)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)

    def validate(self, attrs):
        start_date = attrs.get('start_date')
        end_date = attrs.get('end_date')
        if start_date and end_date and start_date > end_date:
            raise serializers.ValidationError({'end_date': 'End date must be on or after start date'})
        return attrs


class ProductLineInputSerializer(serializers.Serializer):
    """A product line; unit_price is resolved from price history when omitted."""

    product_id = serializers.UUIDField()
    quantity = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    unit_price = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True
    )


class TransferredLineInputSerializer(ProductLineInputSerializer):
    receiving_driver_id = serializers.UUIDField()


class AcceptedLineInputSerializer(ProductLineInputSerializer):
    transferred_from_driver_id = serializers.UUIDField(required=False, allow_null=True)


class TripCashInputSerializer(serializers.Serializer):
    collection_amount = amount_field()
    purchase_amount = amount_field()
    expiry = amount_field()
    discount = amount_field()
    petrol = amount_field()


class TripCreateSerializer(TripCashInputSerializer):
    """Input for creating a trip; derived totals are always computed server-side."""

    driver_id = serializers.UUIDField()
    date = serializers.DateField()
    products = ProductLineInputSerializer(many=True, required=False, default=list)
    transferred_products = TransferredLineInputSerializer(many=True, required=False, default=list)
    accepted_products = AcceptedLineInputSerializer(many=True, required=False, default=list)
    is_product_transferred = serializers.BooleanField(required=False, allow_null=True, default=None)

    def validate(self, attrs):
        if attrs.get('is_product_transferred') and not attrs.get('transferred_products'):
            raise serializers.ValidationError({
                'transferred_products': 'Add the transferred products or clear is_product_transferred'
            })
        return attrs


class TripUpdateSerializer(TripCashInputSerializer):
    """
    Input for editing a trip. Every field is optional; line lists replace
    the stored lines of that kind when present.

    previous_balance overrides the stored opening balance to repair a
    broken chain link.
    """

    products = ProductLineInputSerializer(many=True, required=False)
    transferred_products = TransferredLineInputSerializer(many=True, required=False)
    accepted_products = AcceptedLineInputSerializer(many=True, required=False)
    is_product_transferred = serializers.BooleanField(required=False, allow_null=True)
    previous_balance = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)


class SettlementPreviewSerializer(TripCashInputSerializer):
    date = serializers.DateField()
    driver_id = serializers.UUIDField(required=False, allow_null=True)
    products = ProductLineInputSerializer(many=True, required=False, default=list)
    previous_balance = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True
    )


# =============================================================================
# Output Serializers
# =============================================================================

class TripLineSerializer(serializers.ModelSerializer):
    product_id = serializers.CharField(source='product_ref', read_only=True)
    amount = serializers.SerializerMethodField()

    class Meta:
        model = TripLine
        fields = [
            'product_id',
            'product_name',
            'category',
            'display_number',
            'quantity',
            'unit_price',
            'price_source',
            'amount',
        ]
        read_only_fields = fields

    def get_amount(self, obj):
        return str(quantize(obj.quantity * obj.unit_price))


class TransferredLineSerializer(TripLineSerializer):
    class Meta(TripLineSerializer.Meta):
        fields = TripLineSerializer.Meta.fields + [
            'receiving_driver',
            'receiving_driver_name',
        ]
        read_only_fields = fields


class AcceptedLineSerializer(TripLineSerializer):
    class Meta(TripLineSerializer.Meta):
        fields = TripLineSerializer.Meta.fields + [
            'transferred_from_driver',
            'transferred_from_driver_name',
        ]
        read_only_fields = fields


class DailyTripListSerializer(serializers.ModelSerializer):
    """Trip totals without lines for list views."""

    class Meta:
        model = DailyTrip
        fields = [
            'id',
            'code',
            'driver',
            'driver_name',
            'date',
            'chain_sequence',
            'previous_balance',
            'collection_amount',
            'purchase_amount',
            'total_amount',
            'grand_total',
            'profit',
            'balance',
            'is_product_transferred',
            'created_at',
        ]
        read_only_fields = fields


class DailyTripSerializer(serializers.ModelSerializer):
    """Full trip with its product, transfer and accepted lines."""

    driver = EmployeeMinimalSerializer(read_only=True)
    products = serializers.SerializerMethodField()
    transferred_products = serializers.SerializerMethodField()
    accepted_products = serializers.SerializerMethodField()
    created_by = UserMinimalSerializer(read_only=True)
    updated_by = UserMinimalSerializer(read_only=True)

    class Meta:
        model = DailyTrip
        fields = [
            'id',
            'code',
            'driver',
            'driver_name',
            'date',
            'chain_sequence',
            'previous_trip',
            'products',
            'is_product_transferred',
            'transferred_products',
            'accepted_products',
            'previous_balance',
            'collection_amount',
            'purchase_amount',
            'expiry',
            'discount',
            'petrol',
            'total_amount',
            'net_total',
            'grand_total',
            'expiry_after_tax',
            'amount_to_be',
            'sales_difference',
            'profit',
            'balance',
            'created_by',
            'updated_by',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def _lines(self, obj, kind, serializer_class):
        lines = [line for line in obj.lines.all() if line.kind == kind]
        return serializer_class(lines, many=True).data

    def get_products(self, obj):
        return self._lines(obj, TripLine.Kind.PRODUCT, TripLineSerializer)

    def get_transferred_products(self, obj):
        return self._lines(obj, TripLine.Kind.TRANSFER, TransferredLineSerializer)

    def get_accepted_products(self, obj):
        return self._lines(obj, TripLine.Kind.ACCEPTED, AcceptedLineSerializer)


class SettlementSerializer(serializers.Serializer):
    """Derived settlement values, money as strings."""

    total_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    net_total = serializers.DecimalField(max_digits=14, decimal_places=2)
    net_total_fresh = serializers.DecimalField(max_digits=14, decimal_places=2)
    net_total_bakery = serializers.DecimalField(max_digits=14, decimal_places=2)
    grand_total = serializers.DecimalField(max_digits=14, decimal_places=2)
    expiry_after_tax = serializers.DecimalField(max_digits=14, decimal_places=2)
    amount_to_be = serializers.DecimalField(max_digits=14, decimal_places=2)
    sales_difference = serializers.DecimalField(max_digits=14, decimal_places=2)
    profit = serializers.DecimalField(max_digits=14, decimal_places=2)
    previous_balance = serializers.DecimalField(max_digits=14, decimal_places=2)
    balance = serializers.DecimalField(max_digits=14, decimal_places=2)


class ChainBreakSerializer(serializers.Serializer):
    trip = serializers.CharField(source='trip.id')
    trip_code = serializers.CharField(source='trip.code')
    date = serializers.DateField(source='trip.date')
    predecessor = serializers.CharField(source='predecessor.id', default=None)
    predecessor_code = serializers.CharField(source='predecessor.code', default=None)
    expected = serializers.DecimalField(max_digits=14, decimal_places=2)
    actual = serializers.DecimalField(max_digits=14, decimal_places=2)
    drift = serializers.DecimalField(max_digits=14, decimal_places=2)
