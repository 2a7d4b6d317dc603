"""
Service layer tests for employees app.

Tests cover:
- Employee codes and opening balances
- Manual balance adjustments and balance history
- Driver locking and balance updates
- Deletion rules
"""

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from apps.core.models import HistoryEntry
from apps.employees.models import Employee, Designation
from apps.employees.services import (
    create_employee,
    update_employee,
    delete_employee,
    list_employees,
    list_drivers,
    lock_driver,
    lock_employees,
    update_driver_balance,
    get_balance_history,
    EmployeeNotFoundError,
    EmployeeInUseError,
    NotADriverError,
)


@pytest.mark.django_db
class TestCreateEmployee:

    def test_codes_are_sequential(self, manager):
        first = create_employee(name='One', created_by=manager)
        second = create_employee(name='Two', created_by=manager)

        assert first.code == 'EMP-001'
        assert second.code == 'EMP-002'

    def test_defaults_to_driver_with_zero_balance(self, driver):
        assert driver.designation == Designation.DRIVER
        assert driver.is_driver
        assert driver.balance == Decimal('0.00')
        assert not driver.balance_history.exists()

    def test_opening_balance_recorded(self, driver_with_balance):
        entry = driver_with_balance.balance_history.get()

        assert entry.version == 1
        assert entry.balance == Decimal('150.00')
        assert entry.reason == 'Opening balance'

    def test_audited(self, driver, manager):
        entry = HistoryEntry.objects.get(collection_name='employees', document_id=str(driver.id))
        assert entry.action == 'create'
        assert entry.actor == manager
        assert entry.after['code'] == driver.code

    def test_unknown_field_rejected(self, manager):
        with pytest.raises(TypeError):
            create_employee(name='Typo', routename='North', created_by=manager)


@pytest.mark.django_db
class TestUpdateEmployee:

    def test_update_fields(self, driver, manager):
        updated = update_employee(
            employee_id=driver.id,
            data={'route_name': 'East', 'hire_date': date(2024, 5, 1)},
            updated_by=manager,
        )

        assert updated.route_name == 'East'
        assert updated.hire_date == date(2024, 5, 1)
        assert updated.updated_by == manager

    def test_balance_change_appends_history(self, driver_with_balance, manager):
        update_employee(
            employee_id=driver_with_balance.id,
            data={'balance': Decimal('100.00'), 'balance_update_reason': 'Cash handed in'},
            updated_by=manager,
        )

        history = list(get_balance_history(employee_id=driver_with_balance.id))
        assert [entry.version for entry in history] == [1, 2]
        assert history[-1].balance == Decimal('100.00')
        assert history[-1].reason == 'Cash handed in'

    def test_same_balance_no_history(self, driver_with_balance, manager):
        update_employee(
            employee_id=driver_with_balance.id,
            data={'balance': Decimal('150.00')},
            updated_by=manager,
        )
        assert driver_with_balance.balance_history.count() == 1

    def test_default_adjustment_reason(self, driver, manager):
        update_employee(employee_id=driver.id, data={'balance': Decimal('-5.00')}, updated_by=manager)

        assert driver.balance_history.get().reason == 'Manual adjustment'

    def test_missing_employee(self, db):
        with pytest.raises(EmployeeNotFoundError):
            update_employee(employee_id=uuid4(), data={'name': 'Ghost'})


@pytest.mark.django_db
class TestListEmployees:

    def test_filters(self, driver, driver_with_balance, staff_member):
        assert list_employees(designation=Designation.STAFF).get() == staff_member
        assert list_employees(route_name='north').get() == driver
        assert list_employees(search='bil').get() == driver_with_balance

    def test_list_drivers_skips_inactive(self, driver, driver_with_balance, staff_member, manager):
        update_employee(employee_id=driver.id, data={'is_active': False}, updated_by=manager)

        assert list(list_drivers()) == [driver_with_balance]
        assert set(list_drivers(active_only=False)) == {driver, driver_with_balance}


@pytest.mark.django_db
class TestDriverBalance:

    def test_lock_driver(self, driver):
        assert lock_driver(driver_id=driver.id) == driver

    def test_lock_rejects_staff(self, staff_member):
        with pytest.raises(NotADriverError):
            lock_driver(driver_id=staff_member.id)

    def test_lock_missing(self, db):
        with pytest.raises(EmployeeNotFoundError):
            lock_driver(driver_id=uuid4())

    def test_lock_employees_in_id_order(self, driver, driver_with_balance, staff_member):
        locked = lock_employees(
            employee_ids=[staff_member.id, None, uuid4(), driver.id, str(driver_with_balance.id), driver.id]
        )

        assert set(locked) == {str(driver.id), str(driver_with_balance.id), str(staff_member.id)}
        assert list(locked) == sorted(locked)

    def test_lock_employees_nothing_to_lock(self, db):
        assert lock_employees(employee_ids=[None, '']) == {}

    def test_update_driver_balance(self, driver, manager):
        update_driver_balance(
            driver_id=driver.id,
            balance=Decimal('42.50'),
            reason='Trip TRP-001 created',
            updated_by=manager,
        )

        driver.refresh_from_db()
        assert driver.balance == Decimal('42.50')
        assert driver.balance_history.get().reason == 'Trip TRP-001 created'

    def test_unchanged_balance_is_noop(self, driver):
        update_driver_balance(driver_id=driver.id, balance=Decimal('0.00'), reason='No change')

        assert not driver.balance_history.exists()


@pytest.mark.django_db
class TestDeleteEmployee:

    def test_delete(self, driver, manager):
        delete_employee(employee_id=driver.id, deleted_by=manager)

        assert not Employee.objects.filter(id=driver.id).exists()
        assert HistoryEntry.objects.filter(
            collection_name='employees', document_id=str(driver.id), action='delete'
        ).exists()

    def test_driver_with_trips_cannot_be_deleted(self, driver):
        from apps.trips.services import create_trip
        create_trip(driver_id=driver.id, date=date(2025, 3, 1), collection_amount=Decimal('10'))

        with pytest.raises(EmployeeInUseError):
            delete_employee(employee_id=driver.id)
        assert Employee.objects.filter(id=driver.id).exists()
