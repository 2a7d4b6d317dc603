"""
Analytics Module
=================

Read-only aggregations over settled trips and approved expenses for
dashboards and reports.

Classes:
    AnalyticsQueries: Static methods for the analytics endpoints.

Key Features:
    - Period totals of trip cash inputs, profit and sales difference
    - Per-driver breakdown with closing balances
    - Approved expense totals by category
    - Daily or monthly timeseries for charts
    - Week-over-week dashboard with percentage change

Example:
    Monthly summary::

        from apps.analytics.analytics import AnalyticsQueries

        summary = AnalyticsQueries.period_summary(
            start_date=date(2025, 3, 1),
            end_date=date(2025, 3, 31),
        )
        print(f"{summary['trip_count']} trips, profit {summary['profit']}")

Note:
    This module never writes. Every method returns plain dicts and lists
    of Decimals, ints and strings.
"""

from datetime import date, timedelta
from decimal import Decimal

from django.db.models import Sum, Count, DecimalField, Value
from django.db.models.functions import Coalesce, TruncDay, TruncMonth
from django.utils import timezone

from apps.expenses.models import AdditionalExpense, ExpenseStatus
from apps.trips.models import DailyTrip
from apps.trips.settlement import quantize
from .exceptions import InvalidDateRangeError, InvalidGranularityError

ZERO = Decimal('0.00')

SUMMED_TRIP_FIELDS = (
    'collection_amount',
    'purchase_amount',
    'expiry',
    'expiry_after_tax',
    'discount',
    'petrol',
    'total_amount',
    'profit',
    'sales_difference',
)

VALID_GRANULARITIES = ('day', 'month')


def _sum(field):
    return Coalesce(
        Sum(field),
        Value(ZERO),
        output_field=DecimalField(max_digits=14, decimal_places=2),
    )


def _check_range(start_date, end_date):
    if start_date and end_date and start_date > end_date:
        raise InvalidDateRangeError("Start date must be on or before end date")


def _trips_in_range(start_date=None, end_date=None, driver_id=None):
    trips = DailyTrip.objects.all()
    if start_date:
        trips = trips.filter(date__gte=start_date)
    if end_date:
        trips = trips.filter(date__lte=end_date)
    if driver_id:
        trips = trips.filter(driver_id=driver_id)
    return trips


def percentage_change(current, previous):
    """
    Relative change from ``previous`` to ``current`` in percent.

    Returns None when there is nothing to compare against.

    Example:
        >>> percentage_change(Decimal('150'), Decimal('100'))
        Decimal('50.00')
    """
    if not previous:
        return None
    return quantize((Decimal(current) - Decimal(previous)) / abs(Decimal(previous)) * 100)


class AnalyticsQueries:
    """
    Aggregate queries behind the analytics endpoints.

    Methods:
        period_summary: Totals over trips in a date range.
        driver_breakdown: Totals per driver in a date range.
        expense_totals: Approved expenses by category.
        sales_timeseries: Daily or monthly totals for charts.
        dashboard: This week against last week.
    """

    @staticmethod
    def period_summary(start_date=None, end_date=None, driver_id=None):
        """
        Sum trip figures over a date range.

        Args:
            start_date (date, optional): First trip date included.
            end_date (date, optional): Last trip date included.
            driver_id (UUID, optional): Restrict to one driver.

        Returns:
            dict: ``trip_count``, ``driver_count``, one key per field in
            SUMMED_TRIP_FIELDS, plus ``approved_expenses`` and
            ``net_profit`` (profit minus approved expenses).

        Raises:
            InvalidDateRangeError: If start_date is after end_date.
        """
        _check_range(start_date, end_date)
        trips = _trips_in_range(start_date, end_date, driver_id)

        totals = trips.aggregate(
            trip_count=Count('id'),
            driver_count=Count('driver', distinct=True),
            **{field: _sum(field) for field in SUMMED_TRIP_FIELDS}
        )

        expenses = AdditionalExpense.objects.filter(status=ExpenseStatus.APPROVED)
        if start_date:
            expenses = expenses.filter(date__gte=start_date)
        if end_date:
            expenses = expenses.filter(date__lte=end_date)
        if driver_id:
            expenses = expenses.filter(driver_id=driver_id)
        approved = expenses.aggregate(total=_sum('amount'))['total']

        totals.update({
            'start_date': start_date,
            'end_date': end_date,
            'approved_expenses': approved,
            'net_profit': totals['profit'] - approved,
        })
        return totals

    @staticmethod
    def driver_breakdown(start_date=None, end_date=None):
        """
        Per-driver totals over a date range, highest profit first.

        ``closing_balance`` is the balance of each driver's latest trip in
        the range.
        """
        _check_range(start_date, end_date)
        trips = _trips_in_range(start_date, end_date)

        rows = (
            trips
            .values('driver_id', 'driver__code', 'driver__name')
            .annotate(
                trip_count=Count('id'),
                collection_amount=_sum('collection_amount'),
                purchase_amount=_sum('purchase_amount'),
                petrol=_sum('petrol'),
                profit=_sum('profit'),
                sales_difference=_sum('sales_difference'),
            )
            .order_by('-profit', 'driver__code')
        )

        latest_balances = {}
        for trip in trips.order_by('driver_id', 'date', 'chain_sequence').only(
            'driver_id', 'date', 'chain_sequence', 'balance'
        ):
            latest_balances[trip.driver_id] = trip.balance

        return [
            {
                'driver_id': row['driver_id'],
                'driver_code': row['driver__code'],
                'driver_name': row['driver__name'],
                'trip_count': row['trip_count'],
                'collection_amount': row['collection_amount'],
                'purchase_amount': row['purchase_amount'],
                'petrol': row['petrol'],
                'profit': row['profit'],
                'sales_difference': row['sales_difference'],
                'closing_balance': latest_balances.get(row['driver_id'], ZERO),
            }
            for row in rows
        ]

    @staticmethod
    def expense_totals(start_date=None, end_date=None):
        """Approved expenses per category, largest first."""
        _check_range(start_date, end_date)
        expenses = AdditionalExpense.objects.filter(status=ExpenseStatus.APPROVED)
        if start_date:
            expenses = expenses.filter(date__gte=start_date)
        if end_date:
            expenses = expenses.filter(date__lte=end_date)

        rows = (
            expenses
            .values('category')
            .annotate(total=_sum('amount'), count=Count('id'))
            .order_by('-total', 'category')
        )
        return [
            {'category': row['category'], 'total': row['total'], 'count': row['count']}
            for row in rows
        ]

    @staticmethod
    def sales_timeseries(start_date=None, end_date=None, granularity='day'):
        """
        Trip totals bucketed per day or per month, oldest first.

        Returns:
            list[dict]: ``period`` ('2025-03-14' or '2025-03'),
            ``total_amount``, ``collection_amount``, ``profit``, ``trip_count``.

        Raises:
            InvalidGranularityError: If granularity isn't 'day' or 'month'.
        """
        if granularity not in VALID_GRANULARITIES:
            raise InvalidGranularityError(
                f"Invalid granularity: '{granularity}'. Valid options: {', '.join(VALID_GRANULARITIES)}"
            )
        _check_range(start_date, end_date)

        trunc = TruncDay('date') if granularity == 'day' else TruncMonth('date')
        label = '%Y-%m-%d' if granularity == 'day' else '%Y-%m'

        rows = (
            _trips_in_range(start_date, end_date)
            .annotate(bucket=trunc)
            .values('bucket')
            .annotate(
                total_amount=_sum('total_amount'),
                collection_amount=_sum('collection_amount'),
                profit=_sum('profit'),
                trip_count=Count('id'),
            )
            .order_by('bucket')
        )
        return [
            {
                'period': row['bucket'].strftime(label),
                'total_amount': row['total_amount'],
                'collection_amount': row['collection_amount'],
                'profit': row['profit'],
                'trip_count': row['trip_count'],
            }
            for row in rows
        ]

    @staticmethod
    def dashboard(today=None):
        """
        Compare the last seven days (ending ``today``) with the seven before.

        Returns:
            dict: ``current`` and ``previous`` period summaries, ``change``
            with the percentage change of collection, profit and trip
            count (None where the previous week is zero), and the current
            week's ``top_drivers``.
        """
        today = today or timezone.localdate()
        current_start = today - timedelta(days=6)
        previous_end = current_start - timedelta(days=1)
        previous_start = previous_end - timedelta(days=6)

        current = AnalyticsQueries.period_summary(current_start, today)
        previous = AnalyticsQueries.period_summary(previous_start, previous_end)

        change = {
            field: percentage_change(current[field], previous[field])
            for field in ('collection_amount', 'profit', 'net_profit', 'trip_count')
        }

        return {
            'current': current,
            'previous': previous,
            'change': change,
            'top_drivers': AnalyticsQueries.driver_breakdown(current_start, today)[:5],
        }
