from rest_framework import serializers
from apps.accounts.serializers import UserMinimalSerializer
from .models import AdditionalExpense, ExpenseCategory, ExpenseStatus


# =============================================================================
# Input Serializers
# =============================================================================

class ExpenseFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for expense filtering.

    Query Parameters:
        category (str): petrol, maintenance, variance, salary or others
        status (str): pending, approved or rejected
        driver (uuid): Employee the expense is for
        date_from (date): Expenses on or after this date
        date_to (date): Expenses on or before this date
    """

    category = serializers.ChoiceField(choices=ExpenseCategory.choices, required=False)
    status = serializers.ChoiceField(choices=ExpenseStatus.choices, required=False)
    driver = serializers.UUIDField(required=False)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)

    def validate(self, attrs):
        date_from = attrs.get('date_from')
        date_to = attrs.get('date_to')
        if date_from and date_to and date_from > date_to:
            raise serializers.ValidationError({'date_to': 'date_to must be on or after date_from'})
        return attrs


class ExpenseWriteSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True)
    category = serializers.ChoiceField(choices=ExpenseCategory.choices, required=False)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    currency = serializers.CharField(min_length=3, max_length=3, required=False)
    date = serializers.DateField(required=False)
    driver_id = serializers.UUIDField(required=False, allow_null=True)
    receipt_number = serializers.CharField(max_length=100, required=False, allow_blank=True)
    vendor = serializers.CharField(max_length=200, required=False, allow_blank=True)
    is_reimbursable = serializers.BooleanField(required=False)

    def validate_currency(self, value):
        return value.upper()


class ExpenseRejectSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')


# =============================================================================
# Output Serializers
# =============================================================================

class AdditionalExpenseSerializer(serializers.ModelSerializer):
    approved_by = UserMinimalSerializer(read_only=True)

    class Meta:
        model = AdditionalExpense
        fields = [
            'id',
            'title',
            'description',
            'category',
            'amount',
            'currency',
            'date',
            'driver',
            'driver_name',
            'designation',
            'receipt_number',
            'vendor',
            'is_reimbursable',
            'status',
            'approved_by',
            'approved_at',
            'rejected_reason',
            'created_by',
            'updated_by',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields
