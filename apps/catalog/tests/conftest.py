import pytest
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole
from apps.catalog.services import create_product


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
def milk(manager):
    return create_product(
        name='Milk 1L',
        category='fresh',
        price=Decimal('5.00'),
        supplier='Al Rawabi',
        created_by=manager,
    )


@pytest.fixture
def yoghurt(manager):
    return create_product(name='Yoghurt', category='fresh', price=Decimal('3.50'), created_by=manager)


@pytest.fixture
def bread(manager):
    return create_product(name='White Bread', category='bakery', price=Decimal('2.00'), created_by=manager)
