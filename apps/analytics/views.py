from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes
from .analytics import AnalyticsQueries
from .serializers import (
    # Input serializers
    PeriodQuerySerializer,
    TimeseriesQuerySerializer,
    DashboardQuerySerializer,
    # Response serializers
    PeriodSummarySerializer,
    DriverBreakdownSerializer,
    ExpenseTotalSerializer,
    TimeseriesPointSerializer,
    DashboardResponseSerializer,
    ErrorSerializer,
)
from .exceptions import AnalyticsServiceError

PERIOD_PARAMETERS = [
    OpenApiParameter('period', OpenApiTypes.STR, description='Month period (YYYY-MM)'),
    OpenApiParameter('start_date', OpenApiTypes.DATE, description='Start date (YYYY-MM-DD)'),
    OpenApiParameter('end_date', OpenApiTypes.DATE, description='End date (YYYY-MM-DD)'),
]


@extend_schema(
    parameters=PERIOD_PARAMETERS + [
        OpenApiParameter('driver', OpenApiTypes.UUID, description='Restrict to one driver'),
    ],
    responses={
        200: PeriodSummarySerializer,
        400: ErrorSerializer,
    },
    description="Trip totals, approved expenses and net profit for a period.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def summary(request):
    """Period summary - thin HTTP handler."""
    query_serializer = PeriodQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data

    try:
        data = AnalyticsQueries.period_summary(
            start_date=params.get('start_date'),
            end_date=params.get('end_date'),
            driver_id=params.get('driver'),
        )
    except AnalyticsServiceError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(PeriodSummarySerializer(data).data)


@extend_schema(
    parameters=PERIOD_PARAMETERS,
    responses={
        200: DriverBreakdownSerializer(many=True),
        400: ErrorSerializer,
    },
    description="Per-driver trip totals for a period, highest profit first.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def drivers(request):
    query_serializer = PeriodQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data

    try:
        data = AnalyticsQueries.driver_breakdown(
            start_date=params.get('start_date'),
            end_date=params.get('end_date'),
        )
    except AnalyticsServiceError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(DriverBreakdownSerializer(data, many=True).data)


@extend_schema(
    parameters=PERIOD_PARAMETERS,
    responses={200: ExpenseTotalSerializer(many=True)},
    description="Approved expenses per category for a period.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def expenses(request):
    query_serializer = PeriodQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data

    data = AnalyticsQueries.expense_totals(
        start_date=params.get('start_date'),
        end_date=params.get('end_date'),
    )
    return Response(ExpenseTotalSerializer(data, many=True).data)


@extend_schema(
    parameters=PERIOD_PARAMETERS + [
        OpenApiParameter('granularity', OpenApiTypes.STR, description="'day' or 'month'"),
    ],
    responses={
        200: TimeseriesPointSerializer(many=True),
        400: ErrorSerializer,
    },
    description="Trip totals over time for charts.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def timeseries(request):
    query_serializer = TimeseriesQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data

    try:
        data = AnalyticsQueries.sales_timeseries(
            start_date=params.get('start_date'),
            end_date=params.get('end_date'),
            granularity=params['granularity'],
        )
    except AnalyticsServiceError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(TimeseriesPointSerializer(data, many=True).data)


@extend_schema(
    parameters=[
        OpenApiParameter('today', OpenApiTypes.DATE, description='Last day of the current week (defaults to today)'),
    ],
    responses={200: DashboardResponseSerializer},
    description="This week against last week, with percentage change.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard(request):
    query_serializer = DashboardQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)

    data = AnalyticsQueries.dashboard(today=query_serializer.validated_data.get('today'))
    return Response(DashboardResponseSerializer(data).data)
