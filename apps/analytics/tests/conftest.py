import pytest
from datetime import date
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole
from apps.catalog.services import create_product
from apps.employees.services import create_employee
from apps.expenses.services import create_expense, approve_expense
from apps.trips.services import create_trip


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def manager(db):
    return User.objects.create_user(
        email='manager@example.com',
        password='TestPass123!',
        role=UserRole.MANAGER,
    )


@pytest.fixture
def super_admin(db):
    return User.objects.create_user(
        email='admin@example.com',
        password='TestPass123!',
        role=UserRole.SUPER_ADMIN,
    )


@pytest.fixture
def authenticated_client(api_client, manager):
    refresh = RefreshToken.for_user(manager)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def drivers(manager):
    return (
        create_employee(name='Ahmed', created_by=manager),
        create_employee(name='Bilal', created_by=manager),
    )


@pytest.fixture
def march_trips(drivers, manager):
    """
    Three March trips:

    - Ahmed 03-01: 10 milk, collection 60, purchase 50, petrol 20 (profit 6.75, balance -10)
    - Ahmed 03-02: same with collection 100 (profit 6.75, balance 20)
    - Bilal 03-01: 5 bread, collection 10 (profit 1.95, balance 10)
    """
    ahmed, bilal = drivers
    milk = create_product(name='Milk 1L', category='fresh', price=Decimal('5.00'), created_by=manager)
    bread = create_product(name='White Bread', category='bakery', price=Decimal('2.00'), created_by=manager)

    trips = []
    for trip_date, collection in ((date(2025, 3, 1), '60'), (date(2025, 3, 2), '100')):
        trips.append(create_trip(
            driver_id=ahmed.id,
            date=trip_date,
            products=[{'product_id': milk.id, 'quantity': Decimal('10')}],
            collection_amount=Decimal(collection),
            purchase_amount=Decimal('50'),
            petrol=Decimal('20'),
            created_by=manager,
        ))
    trips.append(create_trip(
        driver_id=bilal.id,
        date=date(2025, 3, 1),
        products=[{'product_id': bread.id, 'quantity': Decimal('5')}],
        collection_amount=Decimal('10'),
        created_by=manager,
    ))
    return trips


@pytest.fixture
def expenses(drivers, manager, super_admin):
    """Approved: petrol 80 (Ahmed, March), salary 1000 (April). Pending: maintenance 50 (March)."""
    ahmed, _ = drivers
    petrol = create_expense(
        title='Refuel', amount=Decimal('80'), category='petrol',
        date=date(2025, 3, 1), driver_id=ahmed.id, created_by=manager,
    )
    salary = create_expense(
        title='Salary', amount=Decimal('1000'), category='salary',
        date=date(2025, 4, 1), created_by=manager,
    )
    create_expense(
        title='Brake pads', amount=Decimal('50'), category='maintenance',
        date=date(2025, 3, 5), created_by=manager,
    )
    for expense in (petrol, salary):
        approve_expense(expense_id=expense.id, approved_by=super_admin)
