from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema
from apps.catalog.services import ProductNotFoundError
from apps.employees.services import EmployeeNotFoundError, NotADriverError
from .models import DailyTrip
from .serializers import (
    TripFilterSerializer,
    TripCreateSerializer,
    TripUpdateSerializer,
    SettlementPreviewSerializer,
    DailyTripSerializer,
    DailyTripListSerializer,
    SettlementSerializer,
    ChainBreakSerializer,
)
from .services import (
    create_trip,
    update_trip,
    recalculate_trip,
    delete_trip,
    get_trip_by_id,
    list_trips,
    preview_settlement,
    driver_chain,
    TripNotFoundError,
    DuplicateTripError,
    InvalidTransferError,
)
from .settlement import SettlementValidationError


class TripPagination(PageNumberPagination):
    """Custom pagination for trips."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


def settlement_error_response(error):
    return Response(
        {'error': str(error), 'errors': error.errors},
        status=status.HTTP_400_BAD_REQUEST
    )


@extend_schema(tags=['trips'])
class DailyTripViewSet(viewsets.ModelViewSet):
    """
    ViewSet for daily trips.

    list: Trips newest first (filterable by driver, date, start_date, end_date)
    create: Settle and save a driver's trip for a day
    retrieve: Trip with its product, transfer and accepted lines
    update: Edit a trip and recompute it (later trips are not touched)
    destroy: Delete a trip
    """

    queryset = DailyTrip.objects.all()
    serializer_class = DailyTripSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = TripPagination
    lookup_value_regex = '[0-9a-fA-F-]{36}'

    def get_queryset(self):
        if self.action != 'list':
            return super().get_queryset()

        filter_serializer = TripFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        return list_trips(**filter_serializer.validated_data)

    def get_serializer_class(self):
        if self.action == 'list':
            return DailyTripListSerializer
        elif self.action == 'create':
            return TripCreateSerializer
        elif self.action in ['update', 'partial_update']:
            return TripUpdateSerializer
        return DailyTripSerializer

    def _detail_response(self, trip, status_code=status.HTTP_200_OK):
        trip = get_trip_by_id(trip_id=trip.id)
        return Response(DailyTripSerializer(trip).data, status=status_code)

    def retrieve(self, request, *args, **kwargs):
        try:
            trip = get_trip_by_id(trip_id=kwargs.get('pk'))
        except TripNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        return Response(DailyTripSerializer(trip).data)

    def create(self, request, *args, **kwargs):
        serializer = TripCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            trip = create_trip(created_by=request.user, **serializer.validated_data)
        except SettlementValidationError as e:
            return settlement_error_response(e)
        except (ProductNotFoundError, InvalidTransferError,
                EmployeeNotFoundError, NotADriverError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except DuplicateTripError as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)

        return self._detail_response(trip, status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        """Update a trip (PUT and PATCH are both partial)."""
        serializer = TripUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        try:
            trip = update_trip(
                trip_id=kwargs.get('pk'),
                data=serializer.validated_data,
                updated_by=request.user,
            )
        except TripNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except SettlementValidationError as e:
            return settlement_error_response(e)
        except (ProductNotFoundError, InvalidTransferError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return self._detail_response(trip)

    def destroy(self, request, *args, **kwargs):
        try:
            delete_trip(trip_id=kwargs.get('pk'), deleted_by=request.user)
        except TripNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=None, responses={200: DailyTripSerializer})
    @action(detail=True, methods=['post'])
    def recalculate(self, request, pk=None):
        """
        Re-price lines from current price history and recompute.

        POST /api/trips/{id}/recalculate/
        """
        try:
            trip, changed = recalculate_trip(trip_id=pk, updated_by=request.user)
        except TripNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except SettlementValidationError as e:
            return settlement_error_response(e)

        response = self._detail_response(trip)
        response.data['changed'] = changed
        return response

    @extend_schema(request=SettlementPreviewSerializer, responses={200: SettlementSerializer})
    @action(detail=False, methods=['post'])
    def preview(self, request):
        """
        Compute a settlement without saving it.

        POST /api/trips/preview/
        """
        serializer = SettlementPreviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            preview = preview_settlement(**serializer.validated_data)
        except SettlementValidationError as e:
            return settlement_error_response(e)
        except (ProductNotFoundError, EmployeeNotFoundError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response({
            'settlement': SettlementSerializer(preview.settlement.as_dict()).data,
            'products': [
                {
                    'product_id': line.product_id,
                    'product_name': line.product_name,
                    'category': line.category,
                    'quantity': str(line.quantity),
                    'unit_price': str(line.unit_price),
                }
                for line in preview.products
            ],
            'previous_trip': str(preview.previous_trip.id) if preview.previous_trip else None,
        })

    @extend_schema(responses={200: ChainBreakSerializer(many=True)})
    @action(detail=False, methods=['get'], url_path=r'chain/(?P<driver_id>[0-9a-fA-F-]{36})')
    def chain(self, request, driver_id=None):
        """
        A driver's trips oldest first and every link whose opening balance
        doesn't match the previous trip's closing balance.

        GET /api/trips/chain/{driver_id}/
        """
        try:
            chain = driver_chain(driver_id=driver_id)
        except EmployeeNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        return Response({
            'driver': driver_id,
            'is_consistent': chain.is_consistent,
            'trips': DailyTripListSerializer(chain.trips, many=True).data,
            'breaks': ChainBreakSerializer(chain.breaks, many=True).data,
        })
