"""
Domain exceptions for analytics app.

Exception Hierarchy:
    AnalyticsServiceError (base)
    ├── InvalidDateRangeError
    └── InvalidGranularityError

Usage:
    from apps.analytics.exceptions import InvalidGranularityError

    if granularity not in VALID_GRANULARITIES:
        raise InvalidGranularityError(f"Invalid granularity: {granularity}")
"""


class AnalyticsServiceError(Exception):
    """
    Base exception for all analytics service errors.

    Views catch it and answer 400:

        try:
            data = AnalyticsQueries.sales_timeseries(granularity='year')
        except AnalyticsServiceError as e:
            return Response({'error': str(e)}, status=400)
    """

    pass


class InvalidDateRangeError(AnalyticsServiceError):
    """
    Raised when start_date is after end_date.

    Example:
        raise InvalidDateRangeError("Start date must be on or before end date")
    """

    pass


class InvalidGranularityError(AnalyticsServiceError):
    """
    Raised when an invalid time granularity is specified.

    Valid granularities are: day, month.
    """

    pass
