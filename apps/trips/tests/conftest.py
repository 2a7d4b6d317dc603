import pytest
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole
from apps.catalog.services import create_product
from apps.employees.models import Designation
from apps.employees.services import create_employee


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def manager(db):
    return User.objects.create_user(
        email='manager@example.com',
        password='TestPass123!',
        name='Trip Manager',
        role=UserRole.MANAGER,
    )


@pytest.fixture
def authenticated_client(api_client, manager):
    """Return an API client authenticated as a manager using JWT."""
    refresh = RefreshToken.for_user(manager)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


# =============================================================================
# Employees
# =============================================================================

@pytest.fixture
def driver(manager):
    return create_employee(name='Ahmed', route_name='North', created_by=manager)


@pytest.fixture
def other_driver(manager):
    return create_employee(name='Bilal', route_name='South', created_by=manager)


@pytest.fixture
def staff_member(manager):
    return create_employee(name='Office Clerk', designation=Designation.STAFF, created_by=manager)


# =============================================================================
# Products
# =============================================================================

@pytest.fixture
def milk(manager):
    """Fresh product at 5.00."""
    return create_product(name='Milk 1L', category='fresh', price=Decimal('5.00'), created_by=manager)


@pytest.fixture
def bread(manager):
    """Bakery product at 2.00."""
    return create_product(name='White Bread', category='bakery', price=Decimal('2.00'), created_by=manager)


@pytest.fixture
def trip_payload(driver, milk):
    """API body for the single-product trip used across tests."""
    return {
        'driver_id': str(driver.id),
        'date': '2025-03-01',
        'products': [
            {'product_id': str(milk.id), 'quantity': '10'},
        ],
        'collection_amount': '60.00',
        'purchase_amount': '50.00',
        'petrol': '20.00',
    }
