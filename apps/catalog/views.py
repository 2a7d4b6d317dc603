from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes
from .models import Product
from .serializers import (
    ProductFilterSerializer,
    ProductWriteSerializer,
    PriceChangeSerializer,
    PriceLookupSerializer,
    ProductSerializer,
    ProductListSerializer,
    PriceHistoryEntrySerializer,
)
from .services import (
    create_product,
    update_product,
    delete_product,
    list_products,
    get_product_by_id,
    get_price_history,
    record_price_change,
    price_for_date,
    ProductNotFoundError,
    InvalidDisplayNumberError,
    InvalidPriceError,
)


class ProductPagination(PageNumberPagination):
    """Custom pagination for products."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


@extend_schema(tags=['products'])
class ProductViewSet(viewsets.ModelViewSet):
    """
    ViewSet for Product CRUD operations.

    list: Get all products (filterable by category, is_active, supplier)
    create: Create a product with its first price history entry
    retrieve: Get a product with its price history
    update: Update a product (price changes append to price history)
    destroy: Delete a product
    """

    queryset = Product.objects.prefetch_related('price_history')
    serializer_class = ProductSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = ProductPagination
    lookup_value_regex = '[0-9a-fA-F-]{36}'

    def get_queryset(self):
        """Filter products using input serializer validation."""
        if self.action != 'list':
            return super().get_queryset()

        filter_serializer = ProductFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        return list_products(**filter_serializer.validated_data)

    def get_serializer_class(self):
        """Use different serializers for different actions."""
        if self.action == 'list':
            return ProductListSerializer
        elif self.action in ['create', 'update', 'partial_update']:
            return ProductWriteSerializer
        return ProductSerializer

    def create(self, request, *args, **kwargs):
        """Create a new product."""
        serializer = ProductWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data.copy()
        data.pop('price_change_reason', None)

        try:
            product = create_product(created_by=request.user, **data)
        except InvalidDisplayNumberError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        """Update a product (PUT and PATCH are both partial)."""
        serializer = ProductWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        try:
            product = update_product(
                product_id=kwargs.get('pk'),
                data=serializer.validated_data,
                updated_by=request.user,
            )
        except ProductNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except InvalidDisplayNumberError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(ProductSerializer(product).data)

    def destroy(self, request, *args, **kwargs):
        """Delete a product."""
        try:
            delete_product(product_id=kwargs.get('pk'), deleted_by=request.user)
        except ProductNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        methods=['GET'],
        responses={200: PriceHistoryEntrySerializer(many=True)},
        description="Price history of a product, oldest version first.",
    )
    @extend_schema(
        methods=['POST'],
        request=PriceChangeSerializer,
        responses={201: PriceHistoryEntrySerializer},
        description="Append a price change. effective_at may be in the past to backfill history.",
    )
    @action(detail=True, methods=['get', 'post'], url_path='price-history')
    def price_history(self, request, pk=None):
        """
        GET  /api/products/{id}/price-history/
        POST /api/products/{id}/price-history/
        """
        try:
            if request.method == 'GET':
                entries = get_price_history(product_id=pk)
                return Response(PriceHistoryEntrySerializer(entries, many=True).data)

            serializer = PriceChangeSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            entry = record_price_change(
                product_id=pk,
                updated_by=request.user,
                **serializer.validated_data
            )
        except ProductNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except InvalidPriceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(PriceHistoryEntrySerializer(entry).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        parameters=[
            OpenApiParameter('date', OpenApiTypes.DATE, required=True, description='Trip date (YYYY-MM-DD)'),
        ],
        description="Unit price in effect on a given date.",
    )
    @action(detail=True, methods=['get'], url_path='price-on')
    def price_on(self, request, pk=None):
        """
        GET /api/products/{id}/price-on/?date=YYYY-MM-DD
        """
        query_serializer = PriceLookupSerializer(data=request.query_params)
        query_serializer.is_valid(raise_exception=True)
        as_of = query_serializer.validated_data['date']

        try:
            product = get_product_by_id(product_id=pk)
        except ProductNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        return Response({
            'product_id': str(product.id),
            'date': as_of,
            'current_price': str(product.price),
            'price': str(price_for_date(product, as_of)),
        })
