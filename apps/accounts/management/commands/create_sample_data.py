"""
Management command to create sample data for trying out the API.

Usage:
    python manage.py create_sample_data
    python manage.py create_sample_data --days 14 --clear

This creates:
- 2 users (owner super admin, manager)
- Fresh and bakery products with a backdated price change
- 4 drivers and 1 staff member
- A settled trip per driver per day, with one stock transfer a day
- A few expenses, some approved
"""

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone
from decimal import Decimal
from datetime import datetime, time, timedelta, timezone as dt_timezone
import random

from apps.accounts.models import User, UserRole
from apps.catalog.models import Product
from apps.catalog.services import create_product, record_price_change
from apps.core.models import Counter, HistoryEntry
from apps.employees.models import Employee, Designation
from apps.employees.services import create_employee
from apps.expenses.models import AdditionalExpense
from apps.expenses.services import create_expense, approve_expense
from apps.trips.models import DailyTrip
from apps.trips.services import create_trip, DuplicateTripError

PRODUCTS = [
    ('Milk 1L', 'fresh', Decimal('5.50')),
    ('Laban 500ml', 'fresh', Decimal('2.25')),
    ('Yoghurt 1kg', 'fresh', Decimal('7.00')),
    ('Cheese Slices', 'fresh', Decimal('9.75')),
    ('White Bread', 'bakery', Decimal('4.00')),
    ('Brown Bread', 'bakery', Decimal('4.50')),
    ('Croissant 6pk', 'bakery', Decimal('8.00')),
]

DRIVERS = [
    ('Ahmed Khan', 'Deira'),
    ('Bilal Hussain', 'Bur Dubai'),
    ('Chandra Perera', 'Sharjah'),
    ('Dinesh Kumar', 'Al Qusais'),
]


class Command(BaseCommand):
    help = 'Create sample data for trying out the API'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Clear existing data before creating new sample data',
        )
        parser.add_argument(
            '--days',
            type=int,
            default=7,
            help='Number of days of trips to create, ending yesterday',
        )
        parser.add_argument(
            '--seed',
            type=int,
            default=42,
            help='Random seed for quantities and cash amounts',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        if options['clear']:
            self.stdout.write('Clearing existing data...')
            self.clear_data()

        self.stdout.write('Creating sample data...')
        rng = random.Random(options['seed'])

        users = self.create_users()
        products = self.create_products(users['owner'])
        drivers = self.create_employees(users['owner'])
        self.create_trips(users['manager'], drivers, products, options['days'], rng)
        self.create_expenses(users, drivers)

        self.stdout.write(self.style.SUCCESS('Sample data created successfully!'))
        self.stdout.write('')
        self.stdout.write('Test accounts:')
        self.stdout.write('  owner@example.com / owner123 (super admin)')
        self.stdout.write('  manager@example.com / manager123')

    def clear_data(self):
        """Clear business data and the sample accounts."""
        DailyTrip.objects.all().delete()
        AdditionalExpense.objects.all().delete()
        Employee.objects.all().delete()
        Product.objects.all().delete()
        HistoryEntry.objects.all().delete()
        Counter.objects.all().delete()
        User.objects.filter(email__in=['owner@example.com', 'manager@example.com']).delete()

    def create_users(self):
        self.stdout.write('  Creating users...')

        owner, _ = User.objects.get_or_create(
            email='owner@example.com',
            defaults={
                'name': 'Business Owner',
                'role': UserRole.SUPER_ADMIN,
                'settings_access': True,
                'is_staff': True,
                'is_superuser': True,
            }
        )
        owner.set_password('owner123')
        owner.save()

        manager, _ = User.objects.get_or_create(
            email='manager@example.com',
            defaults={
                'name': 'Route Manager',
                'role': UserRole.MANAGER,
            }
        )
        manager.set_password('manager123')
        manager.save()

        return {'owner': owner, 'manager': manager}

    def create_products(self, created_by):
        """Create products; milk gets a cheaper price backdated a month."""
        self.stdout.write('  Creating products...')

        products = []
        for name, category, price in PRODUCTS:
            product = Product.objects.filter(name=name).first()
            if product is None:
                product = create_product(
                    name=name,
                    category=category,
                    price=price,
                    created_by=created_by,
                )
            products.append(product)

        milk = products[0]
        if milk.price_history.count() == 1:
            month_ago = timezone.localdate() - timedelta(days=30)
            record_price_change(
                product_id=milk.id,
                price=milk.price - Decimal('0.50'),
                effective_at=datetime.combine(month_ago, time(6), tzinfo=dt_timezone.utc),
                reason='Price before supplier increase',
                updated_by=created_by,
            )

        return products

    def create_employees(self, created_by):
        self.stdout.write('  Creating employees...')

        drivers = []
        for name, route in DRIVERS:
            driver = Employee.objects.filter(name=name).first()
            if driver is None:
                driver = create_employee(name=name, route_name=route, created_by=created_by)
            drivers.append(driver)

        if not Employee.objects.filter(designation=Designation.STAFF).exists():
            create_employee(name='Office Accountant', designation=Designation.STAFF, created_by=created_by)

        return drivers

    def create_trips(self, created_by, drivers, products, days, rng):
        """
        One trip per driver per day, oldest first so every chain links up.

        Each day the first driver hands some stock to the second.
        """
        self.stdout.write(f'  Creating trips for {days} day(s)...')

        today = timezone.localdate()
        created = 0
        for offset in range(days, 0, -1):
            trip_date = today - timedelta(days=offset)
            for index, driver in enumerate(drivers):
                lines = [
                    {'product_id': product.id, 'quantity': Decimal(rng.randint(5, 40))}
                    for product in rng.sample(products, 4)
                ]
                transfers = []
                if index == 0:
                    transfers.append({
                        'product_id': lines[0]['product_id'],
                        'quantity': Decimal(rng.randint(1, 4)),
                        'receiving_driver_id': drivers[1].id,
                    })

                try:
                    create_trip(
                        driver_id=driver.id,
                        date=trip_date,
                        products=lines,
                        transferred_products=transfers,
                        collection_amount=Decimal(rng.randint(150, 600)),
                        purchase_amount=Decimal(rng.randint(100, 450)),
                        expiry=Decimal(rng.randint(0, 20)),
                        discount=Decimal(rng.randint(0, 10)),
                        petrol=Decimal(rng.randint(20, 60)),
                        created_by=created_by,
                    )
                except DuplicateTripError:
                    continue
                created += 1

        self.stdout.write(f'    {created} trip(s) created')

    def create_expenses(self, users, drivers):
        self.stdout.write('  Creating expenses...')

        if AdditionalExpense.objects.exists():
            return

        today = timezone.localdate()
        van_service = create_expense(
            title='Van service',
            amount=Decimal('450.00'),
            category='maintenance',
            date=today - timedelta(days=3),
            driver_id=drivers[2].id,
            vendor='Al Futtaim Auto',
            created_by=users['manager'],
        )
        salary = create_expense(
            title='Helper salary',
            amount=Decimal('1800.00'),
            category='salary',
            date=today - timedelta(days=1),
            created_by=users['manager'],
        )
        create_expense(
            title='Cash shortfall',
            amount=Decimal('35.00'),
            category='variance',
            date=today - timedelta(days=2),
            driver_id=drivers[0].id,
            created_by=users['manager'],
        )

        for expense in (van_service, salary):
            approve_expense(expense_id=expense.id, approved_by=users['owner'])
