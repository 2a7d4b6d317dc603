"""
Serializers for analytics app.

This module contains:
1. Input serializers - Query parameter validation
2. Response serializers - API documentation and output formatting

Input Serializers:
    PeriodQuerySerializer - Validates period and date range parameters
    TimeseriesQuerySerializer - Adds granularity to the period parameters

Response Serializers:
    PeriodSummarySerializer - Trip and expense totals for a range
    DriverBreakdownSerializer - Per-driver totals
    ExpenseTotalSerializer - Approved expenses per category
    TimeseriesPointSerializer - One chart bucket
    DashboardResponseSerializer - Week-over-week dashboard
"""

from rest_framework import serializers
from datetime import datetime, timedelta


def money(**kwargs):
    return serializers.DecimalField(max_digits=14, decimal_places=2, **kwargs)


# =============================================================================
# Input Serializers (Query Parameter Validation)
# =============================================================================

class PeriodQuerySerializer(serializers.Serializer):
    """
    Validate period and date range query parameters.

    Query Parameters:
        period (str): Month period in YYYY-MM format (e.g., '2025-01')
        start_date (date): Start of date range
        end_date (date): End of date range
        driver (uuid): Restrict to one driver (summary only)

    Note:
        If 'period' is provided, it takes precedence and is converted
        to start_date and end_date for the full month.
    """

    period = serializers.RegexField(
        regex=r'^\d{4}-(0[1-9]|1[0-2])$',
        required=False,
        allow_blank=True,
        help_text='Month period in YYYY-MM format'
    )
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    driver = serializers.UUIDField(required=False)

    def validate(self, attrs):
        """Parse period into date range if provided."""
        period = attrs.pop('period', None)

        if period:
            year, month = (int(part) for part in period.split('-'))
            attrs['start_date'] = datetime(year, month, 1).date()
            if month == 12:
                attrs['end_date'] = datetime(year + 1, 1, 1).date() - timedelta(days=1)
            else:
                attrs['end_date'] = datetime(year, month + 1, 1).date() - timedelta(days=1)

        start = attrs.get('start_date')
        end = attrs.get('end_date')
        if start and end and start > end:
            raise serializers.ValidationError({
                'start_date': 'Start date must be before end date'
            })

        return attrs


class TimeseriesQuerySerializer(PeriodQuerySerializer):
    """
    Query Parameters:
        granularity (str): 'day' or 'month'
    """

    VALID_GRANULARITIES = ('day', 'month')

    granularity = serializers.ChoiceField(
        choices=VALID_GRANULARITIES,
        default='day',
        help_text="Bucket size: 'day' or 'month'"
    )


class DashboardQuerySerializer(serializers.Serializer):
    today = serializers.DateField(required=False, help_text='Last day of the current week')


# =============================================================================
# Response Serializers
# =============================================================================

class PeriodSummarySerializer(serializers.Serializer):
    start_date = serializers.DateField(allow_null=True)
    end_date = serializers.DateField(allow_null=True)
    trip_count = serializers.IntegerField()
    driver_count = serializers.IntegerField()
    collection_amount = money()
    purchase_amount = money()
    expiry = money()
    expiry_after_tax = money()
    discount = money()
    petrol = money()
    total_amount = money()
    profit = money()
    sales_difference = money()
    approved_expenses = money()
    net_profit = money()


class DriverBreakdownSerializer(serializers.Serializer):
    driver_id = serializers.UUIDField()
    driver_code = serializers.CharField()
    driver_name = serializers.CharField()
    trip_count = serializers.IntegerField()
    collection_amount = money()
    purchase_amount = money()
    petrol = money()
    profit = money()
    sales_difference = money()
    closing_balance = money()


class ExpenseTotalSerializer(serializers.Serializer):
    category = serializers.CharField()
    total = money()
    count = serializers.IntegerField()


class TimeseriesPointSerializer(serializers.Serializer):
    period = serializers.CharField()
    total_amount = money()
    collection_amount = money()
    profit = money()
    trip_count = serializers.IntegerField()


class ChangeSerializer(serializers.Serializer):
    collection_amount = money(allow_null=True)
    profit = money(allow_null=True)
    net_profit = money(allow_null=True)
    trip_count = money(allow_null=True)


class DashboardResponseSerializer(serializers.Serializer):
    current = PeriodSummarySerializer()
    previous = PeriodSummarySerializer()
    change = ChangeSerializer()
    top_drivers = DriverBreakdownSerializer(many=True)


class ErrorSerializer(serializers.Serializer):
    error = serializers.CharField()
