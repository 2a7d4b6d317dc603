from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema
from .models import Employee
from .serializers import (
    EmployeeFilterSerializer,
    EmployeeWriteSerializer,
    EmployeeSerializer,
    EmployeeMinimalSerializer,
    BalanceHistoryEntrySerializer,
)
from .services import (
    create_employee,
    update_employee,
    delete_employee,
    list_employees,
    list_drivers,
    get_balance_history,
    EmployeeNotFoundError,
    EmployeeInUseError,
)


class EmployeePagination(PageNumberPagination):
    """Custom pagination for employees."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


@extend_schema(tags=['employees'])
class EmployeeViewSet(viewsets.ModelViewSet):
    """
    ViewSet for Employee CRUD operations.

    list: Get all employees (filterable by designation, is_active, route_name)
    create: Create an employee with the next EMP code
    retrieve: Get an employee
    update: Update an employee (balance changes append to balance history)
    destroy: Delete an employee without trips
    """

    queryset = Employee.objects.all()
    serializer_class = EmployeeSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = EmployeePagination
    lookup_value_regex = '[0-9a-fA-F-]{36}'

    def get_queryset(self):
        if self.action != 'list':
            return super().get_queryset()

        filter_serializer = EmployeeFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        return list_employees(**filter_serializer.validated_data)

    def get_serializer_class(self):
        if self.action in ['create', 'update', 'partial_update']:
            return EmployeeWriteSerializer
        return EmployeeSerializer

    def create(self, request, *args, **kwargs):
        serializer = EmployeeWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data.copy()
        data.pop('balance_update_reason', None)

        employee = create_employee(created_by=request.user, **data)
        return Response(EmployeeSerializer(employee).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        """Update an employee (PUT and PATCH are both partial)."""
        serializer = EmployeeWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        try:
            employee = update_employee(
                employee_id=kwargs.get('pk'),
                data=serializer.validated_data,
                updated_by=request.user,
            )
        except EmployeeNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        return Response(EmployeeSerializer(employee).data)

    def destroy(self, request, *args, **kwargs):
        try:
            delete_employee(employee_id=kwargs.get('pk'), deleted_by=request.user)
        except EmployeeNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except EmployeeInUseError as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)

        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(responses={200: EmployeeMinimalSerializer(many=True)})
    @action(detail=False, methods=['get'])
    def drivers(self, request):
        """
        Active drivers, unpaginated, for trip entry pickers.

        GET /api/employees/drivers/
        """
        return Response(EmployeeMinimalSerializer(list_drivers(), many=True).data)

    @extend_schema(responses={200: BalanceHistoryEntrySerializer(many=True)})
    @action(detail=True, methods=['get'], url_path='balance-history')
    def balance_history(self, request, pk=None):
        """
        GET /api/employees/{id}/balance-history/
        """
        try:
            entries = get_balance_history(employee_id=pk)
        except EmployeeNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        return Response(BalanceHistoryEntrySerializer(entries, many=True).data)
