import pytest
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole
from apps.employees.models import Designation
from apps.employees.services import create_employee


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def manager(db):
    return User.objects.create_user(
        email='manager@example.com',
        password='TestPass123!',
        name='Manager',
        role=UserRole.MANAGER,
    )


@pytest.fixture
def authenticated_client(api_client, manager):
    """Return an API client authenticated as a manager using JWT."""
    refresh = RefreshToken.for_user(manager)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def driver(manager):
    return create_employee(
        name='Ahmed',
        route_name='North',
        phone_number='+971500000001',
        created_by=manager,
    )


@pytest.fixture
def driver_with_balance(manager):
    """Driver carrying an opening balance of 150.00."""
    return create_employee(
        name='Bilal',
        route_name='South',
        balance=Decimal('150.00'),
        created_by=manager,
    )


@pytest.fixture
def staff_member(manager):
    return create_employee(name='Office Clerk', designation=Designation.STAFF, created_by=manager)
