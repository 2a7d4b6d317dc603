from rest_framework import serializers
from apps.accounts.serializers import UserMinimalSerializer
from .models import Employee, BalanceHistoryEntry, Designation


# =============================================================================
# Input Serializers
# =============================================================================

class EmployeeFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for employee filtering.

    Query Parameters:
        designation (str): driver, staff or ceo
        is_active (bool): Filter by active flag
        route_name (str): Exact route (case-insensitive)
        search (str): Substring match on name
    """

    designation = serializers.ChoiceField(choices=Designation.choices, required=False)
    is_active = serializers.BooleanField(required=False, allow_null=True, default=None)
    route_name = serializers.CharField(max_length=100, required=False)
    search = serializers.CharField(max_length=100, required=False)


class EmployeeWriteSerializer(serializers.Serializer):
    """Input for creating and updating employees."""

    name = serializers.CharField(max_length=100)
    designation = serializers.ChoiceField(choices=Designation.choices, default=Designation.DRIVER)
    phone_number = serializers.CharField(max_length=30, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    address = serializers.CharField(required=False, allow_blank=True)
    route_name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    location = serializers.CharField(max_length=100, required=False, allow_blank=True)
    salary = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True
    )
    balance = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    balance_update_reason = serializers.CharField(max_length=255, required=False, allow_blank=True)
    hire_date = serializers.DateField(required=False)
    is_active = serializers.BooleanField(required=False)


# =============================================================================
# Output Serializers
# =============================================================================

class BalanceHistoryEntrySerializer(serializers.ModelSerializer):
    updated_by = UserMinimalSerializer(read_only=True)

    class Meta:
        model = BalanceHistoryEntry
        fields = ['id', 'version', 'balance', 'updated_at', 'reason', 'updated_by']
        read_only_fields = fields


class EmployeeSerializer(serializers.ModelSerializer):
    class Meta:
        model = Employee
        fields = [
            'id',
            'code',
            'name',
            'designation',
            'phone_number',
            'email',
            'address',
            'route_name',
            'location',
            'salary',
            'balance',
            'hire_date',
            'is_active',
            'created_by',
            'updated_by',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class EmployeeMinimalSerializer(serializers.ModelSerializer):
    """Driver reference embedded in trips and expenses."""

    class Meta:
        model = Employee
        fields = ['id', 'code', 'name', 'route_name']
        read_only_fields = fields
