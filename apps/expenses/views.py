from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema
from apps.accounts.permissions import IsSuperAdmin
from apps.employees.services import EmployeeNotFoundError
from .models import AdditionalExpense
from .serializers import (
    ExpenseFilterSerializer,
    ExpenseWriteSerializer,
    ExpenseRejectSerializer,
    AdditionalExpenseSerializer,
)
from .services import (
    create_expense,
    update_expense,
    delete_expense,
    approve_expense,
    reject_expense,
    list_expenses,
    ExpenseNotFoundError,
    InvalidExpenseStateError,
)


class ExpensePagination(PageNumberPagination):
    """Custom pagination for expenses."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


@extend_schema(tags=['expenses'])
class AdditionalExpenseViewSet(viewsets.ModelViewSet):
    """
    ViewSet for additional expenses.

    list: Expenses newest first (filterable by category, status, driver, date range)
    create: Record a pending expense
    retrieve: Get an expense
    update: Edit a pending expense
    destroy: Delete an expense
    approve / reject: Super admin decision on a pending expense
    """

    queryset = AdditionalExpense.objects.select_related('driver', 'approved_by')
    serializer_class = AdditionalExpenseSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = ExpensePagination
    lookup_value_regex = '[0-9a-fA-F-]{36}'

    def get_permissions(self):
        if self.action in ['approve', 'reject']:
            return [IsAuthenticated(), IsSuperAdmin()]
        return super().get_permissions()

    def get_queryset(self):
        if self.action != 'list':
            return super().get_queryset()

        filter_serializer = ExpenseFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        return list_expenses(**filter_serializer.validated_data)

    def get_serializer_class(self):
        if self.action in ['create', 'update', 'partial_update']:
            return ExpenseWriteSerializer
        return AdditionalExpenseSerializer

    def create(self, request, *args, **kwargs):
        serializer = ExpenseWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            expense = create_expense(created_by=request.user, **serializer.validated_data)
        except EmployeeNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(AdditionalExpenseSerializer(expense).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        """Update an expense (PUT and PATCH are both partial)."""
        serializer = ExpenseWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        try:
            expense = update_expense(
                expense_id=kwargs.get('pk'),
                data=serializer.validated_data,
                updated_by=request.user,
            )
        except ExpenseNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except InvalidExpenseStateError as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)
        except EmployeeNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(AdditionalExpenseSerializer(expense).data)

    def destroy(self, request, *args, **kwargs):
        try:
            delete_expense(expense_id=kwargs.get('pk'), deleted_by=request.user)
        except ExpenseNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=None, responses={200: AdditionalExpenseSerializer})
    @action(detail=True, methods=['post'])
    def approve(self, request, pk=None):
        """
        POST /api/expenses/{id}/approve/
        """
        try:
            expense = approve_expense(expense_id=pk, approved_by=request.user)
        except ExpenseNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except InvalidExpenseStateError as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)

        return Response(AdditionalExpenseSerializer(expense).data)

    @extend_schema(request=ExpenseRejectSerializer, responses={200: AdditionalExpenseSerializer})
    @action(detail=True, methods=['post'])
    def reject(self, request, pk=None):
        """
        POST /api/expenses/{id}/reject/
        Body: {"reason": "optional"}
        """
        serializer = ExpenseRejectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            expense = reject_expense(
                expense_id=pk,
                rejected_by=request.user,
                reason=serializer.validated_data['reason'],
            )
        except ExpenseNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except InvalidExpenseStateError as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)

        return Response(AdditionalExpenseSerializer(expense).data)
