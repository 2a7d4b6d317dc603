import pytest
from datetime import date
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole
from apps.employees.services import create_employee
from apps.expenses.services import create_expense


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
def super_admin(db):
    return User.objects.create_user(
        email='admin@example.com',
        password='TestPass123!',
        name='Owner',
        role=UserRole.SUPER_ADMIN,
    )


def _authenticate(client, user):
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def manager_client(manager):
    return _authenticate(APIClient(), manager)


@pytest.fixture
def admin_client(super_admin):
    return _authenticate(APIClient(), super_admin)


@pytest.fixture
def driver(manager):
    return create_employee(name='Ahmed', route_name='North', created_by=manager)


@pytest.fixture
def petrol_expense(driver, manager):
    return create_expense(
        title='Van refuel',
        amount=Decimal('80.00'),
        category='petrol',
        date=date(2025, 3, 1),
        driver_id=driver.id,
        created_by=manager,
    )
