"""
Service layer tests for trips app.

Tests cover:
- Settlement on create, opening balance from the driver's chain
- Point-in-time pricing of unpriced lines
- Transfer propagation between drivers' trips
- Edits without cascade, chain audit and repair
- Recalculation after backdated price changes
- Deletion and driver balance sync
"""

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal
from unittest.mock import patch
from uuid import uuid4

from apps.catalog.services import delete_product, record_price_change, ProductNotFoundError
from apps.core.models import HistoryEntry
from apps.employees.services import create_employee, lock_employees, NotADriverError
from apps.trips.models import DailyTrip, TripLine
from apps.trips.settlement import SettlementValidationError
from apps.trips.services import (
    create_trip,
    update_trip,
    recalculate_trip,
    delete_trip,
    preview_settlement,
    driver_chain,
    list_trips,
    DuplicateTripError,
    InvalidTransferError,
    TripNotFoundError,
)

MARCH_1 = date(2025, 3, 1)
MARCH_2 = date(2025, 3, 2)
MARCH_3 = date(2025, 3, 3)


def make_trip(driver, trip_date, product, quantity='10', user=None, **cash):
    cash.setdefault('collection_amount', Decimal('60'))
    cash.setdefault('purchase_amount', Decimal('50'))
    cash.setdefault('petrol', Decimal('20'))
    return create_trip(
        driver_id=driver.id,
        date=trip_date,
        products=[{'product_id': product.id, 'quantity': Decimal(quantity)}],
        created_by=user,
        **cash
    )


def accepted_quantities(trip):
    trip = DailyTrip.objects.get(id=trip.id)
    return [
        (line.product_id, line.quantity, line.transferred_from_driver_id)
        for line in trip.accepted_lines()
    ]


# =============================================================================
# Create
# =============================================================================

@pytest.mark.django_db
class TestCreateTrip:

    def test_first_trip_settles_from_zero(self, driver, milk, manager):
        trip = make_trip(driver, MARCH_1, milk, user=manager)

        assert trip.code == 'TRP-001'
        assert trip.driver_name == 'Ahmed'
        assert trip.previous_trip is None
        assert trip.previous_balance == Decimal('0')
        assert trip.total_amount == Decimal('50.00')
        assert trip.profit == Decimal('6.75')
        assert trip.balance == Decimal('-10.00')

        line = trip.lines.get(kind=TripLine.Kind.PRODUCT)
        assert line.product_name == 'Milk 1L'
        assert line.category == 'fresh'
        assert line.unit_price == Decimal('5.00')

    def test_driver_balance_follows_trip(self, driver, milk, manager):
        make_trip(driver, MARCH_1, milk, user=manager)

        driver.refresh_from_db()
        assert driver.balance == Decimal('-10.00')
        entry = driver.balance_history.order_by('-version').first()
        assert entry.balance == Decimal('-10.00')
        assert 'TRP-001' in entry.reason

    def test_audit_history_written(self, driver, milk, manager):
        trip = make_trip(driver, MARCH_1, milk, user=manager)

        entry = HistoryEntry.objects.get(collection_name='dailyTrips', document_id=str(trip.id))
        assert entry.action == 'create'
        assert entry.actor == manager
        assert entry.after['balance'] == '-10.00'
        assert entry.after['products'][0]['product_name'] == 'Milk 1L'

    def test_second_trip_opens_at_prior_balance(self, driver, milk):
        first = make_trip(driver, MARCH_1, milk)
        second = make_trip(driver, MARCH_2, milk, collection_amount=Decimal('100'))

        assert second.previous_trip == first
        assert second.previous_balance == Decimal('-10.00')
        assert second.balance == Decimal('20.00')
        assert second.chain_sequence > first.chain_sequence

    def test_backfilled_trip_uses_earlier_prior(self, driver, milk):
        make_trip(driver, MARCH_3, milk, collection_amount=Decimal('200'))
        backfilled = make_trip(driver, MARCH_1, milk)

        assert backfilled.previous_trip is None
        assert backfilled.previous_balance == Decimal('0')

        # The driver's balance still mirrors the latest trip by date
        driver.refresh_from_db()
        assert driver.balance == Decimal('130.00')

    def test_drivers_have_independent_chains(self, driver, other_driver, milk):
        make_trip(driver, MARCH_1, milk, collection_amount=Decimal('500'))
        other = make_trip(other_driver, MARCH_2, milk)

        assert other.previous_balance == Decimal('0')

    def test_duplicate_date_rejected(self, driver, milk):
        make_trip(driver, MARCH_1, milk)

        with pytest.raises(DuplicateTripError):
            make_trip(driver, MARCH_1, milk)

    def test_unknown_product_rejected(self, driver):
        with pytest.raises(ProductNotFoundError):
            create_trip(driver_id=driver.id, date=MARCH_1, products=[{'product_id': uuid4(), 'quantity': 1}])
        assert not DailyTrip.objects.exists()

    def test_staff_cannot_have_trips(self, staff_member, milk):
        with pytest.raises(NotADriverError):
            make_trip(staff_member, MARCH_1, milk)

    def test_invalid_cash_reports_every_field(self, driver, milk):
        with pytest.raises(SettlementValidationError) as exc_info:
            make_trip(driver, MARCH_1, milk, quantity='-1', petrol=Decimal('-5'))

        assert set(exc_info.value.errors) == {'products[0].quantity', 'petrol'}
        assert not DailyTrip.objects.exists()

    def test_explicit_unit_price_wins(self, driver, milk):
        trip = create_trip(
            driver_id=driver.id,
            date=MARCH_1,
            products=[{'product_id': milk.id, 'quantity': Decimal('2'), 'unit_price': Decimal('4.50')}],
        )
        assert trip.total_amount == Decimal('9.00')

    def test_unpriced_line_uses_price_on_trip_date(self, driver, milk, manager):
        record_price_change(
            product_id=milk.id,
            price=Decimal('4.00'),
            effective_at=datetime(2025, 1, 1, 8, tzinfo=timezone.utc),
            reason='Backfilled January price',
            updated_by=manager,
        )

        trip = make_trip(driver, date(2025, 2, 1), milk)

        assert trip.lines.get(kind=TripLine.Kind.PRODUCT).unit_price == Decimal('4.00')
        assert trip.total_amount == Decimal('40.00')

    def test_trip_before_all_price_history_uses_oldest_price(self, driver, milk, manager):
        record_price_change(
            product_id=milk.id,
            price=Decimal('4.00'),
            effective_at=datetime(2025, 1, 1, 8, tzinfo=timezone.utc),
            updated_by=manager,
        )

        trip = make_trip(driver, date(2024, 12, 1), milk)

        assert trip.lines.get(kind=TripLine.Kind.PRODUCT).unit_price == Decimal('4.00')


# =============================================================================
# Transfers
# =============================================================================

@pytest.mark.django_db
class TestTransfers:

    def transfer_trip(self, sender, receiver, product, quantity='3', trip_date=MARCH_1):
        return create_trip(
            driver_id=sender.id,
            date=trip_date,
            products=[{'product_id': product.id, 'quantity': Decimal('10')}],
            transferred_products=[{
                'product_id': product.id,
                'quantity': Decimal(quantity),
                'receiving_driver_id': receiver.id,
            }],
        )

    def test_receiver_created_later_pulls_transfer(self, driver, other_driver, milk):
        sender_trip = self.transfer_trip(driver, other_driver, milk)
        assert sender_trip.is_product_transferred

        receiver_trip = make_trip(other_driver, MARCH_1, milk, quantity='4')

        assert accepted_quantities(receiver_trip) == [(str(milk.id), Decimal('3.00'), str(driver.id))]
        # Accepted stock does not change the receiver's totals
        assert receiver_trip.total_amount == Decimal('20.00')

    def test_existing_receiver_trip_gets_transfer(self, driver, other_driver, milk):
        receiver_trip = make_trip(other_driver, MARCH_1, milk)

        self.transfer_trip(driver, other_driver, milk, quantity='2')

        assert accepted_quantities(receiver_trip) == [(str(milk.id), Decimal('2.00'), str(driver.id))]

    def test_sender_edit_replaces_receiver_lines(self, driver, other_driver, milk):
        receiver_trip = make_trip(other_driver, MARCH_1, milk)
        sender_trip = self.transfer_trip(driver, other_driver, milk, quantity='2')

        update_trip(
            trip_id=sender_trip.id,
            data={'transferred_products': [{
                'product_id': milk.id, 'quantity': Decimal('5'), 'receiving_driver_id': other_driver.id,
            }]},
        )

        assert accepted_quantities(receiver_trip) == [(str(milk.id), Decimal('5.00'), str(driver.id))]

    def test_cleared_transfer_removed_from_receiver(self, driver, other_driver, milk):
        receiver_trip = make_trip(other_driver, MARCH_1, milk)
        sender_trip = self.transfer_trip(driver, other_driver, milk)

        update_trip(trip_id=sender_trip.id, data={'transferred_products': []})

        assert accepted_quantities(receiver_trip) == []
        assert not DailyTrip.objects.get(id=sender_trip.id).is_product_transferred

    def test_hand_typed_duplicate_collapses(self, driver, other_driver, milk, bread):
        self.transfer_trip(driver, other_driver, milk, quantity='3')

        receiver_trip = create_trip(
            driver_id=other_driver.id,
            date=MARCH_1,
            accepted_products=[
                {'product_id': milk.id, 'quantity': Decimal('3'), 'transferred_from_driver_id': driver.id},
                {'product_id': milk.id, 'quantity': Decimal('3')},
                {'product_id': bread.id, 'quantity': Decimal('6')},
            ],
        )

        assert accepted_quantities(receiver_trip) == [
            (str(milk.id), Decimal('3.00'), str(driver.id)),
            (str(bread.id), Decimal('6.00'), ''),
        ]

    def test_other_dates_not_touched(self, driver, other_driver, milk):
        receiver_trip = make_trip(other_driver, MARCH_2, milk)
        self.transfer_trip(driver, other_driver, milk, trip_date=MARCH_1)

        assert accepted_quantities(receiver_trip) == []

    def test_cannot_transfer_to_self(self, driver, milk):
        with pytest.raises(InvalidTransferError):
            self.transfer_trip(driver, driver, milk)

    def test_create_locks_receivers_with_sender(self, driver, other_driver, milk):
        with patch('apps.trips.services.trip_management.lock_employees', wraps=lock_employees) as locker:
            self.transfer_trip(driver, other_driver, milk)

        locked = {str(driver_id) for driver_id in locker.call_args.kwargs['employee_ids']}
        assert locked == {str(driver.id), str(other_driver.id)}

    def test_update_locks_old_and_new_receivers(self, driver, other_driver, milk):
        third_driver = create_employee(name='Chandra', route_name='South')
        sender_trip = self.transfer_trip(driver, other_driver, milk)

        with patch('apps.trips.services.trip_management.lock_employees', wraps=lock_employees) as locker:
            update_trip(
                trip_id=sender_trip.id,
                data={'transferred_products': [{
                    'product_id': milk.id, 'quantity': Decimal('1'), 'receiving_driver_id': third_driver.id,
                }]},
            )

        assert locker.call_count == 1
        locked = {str(driver_id) for driver_id in locker.call_args.kwargs['employee_ids']}
        assert locked == {str(driver.id), str(other_driver.id), str(third_driver.id)}

    def test_deleting_sender_withdraws_transfer(self, driver, other_driver, milk):
        receiver_trip = make_trip(other_driver, MARCH_1, milk)
        sender_trip = self.transfer_trip(driver, other_driver, milk)

        delete_trip(trip_id=sender_trip.id)

        assert accepted_quantities(receiver_trip) == []


# =============================================================================
# Edit, chain audit, recalculation, delete
# =============================================================================

@pytest.mark.django_db
class TestTripLifecycle:

    def test_edit_recomputes_own_trip_only(self, driver, milk, manager):
        first = make_trip(driver, MARCH_1, milk)
        second = make_trip(driver, MARCH_2, milk)

        updated = update_trip(
            trip_id=first.id,
            data={'collection_amount': Decimal('100')},
            updated_by=manager,
        )

        assert updated.balance == Decimal('30.00')
        second.refresh_from_db()
        assert second.previous_balance == Decimal('-10.00')

        chain = driver_chain(driver_id=driver.id)
        assert not chain.is_consistent
        assert chain.breaks[0].trip.id == second.id
        assert chain.breaks[0].expected == Decimal('30.00')

    def test_previous_balance_override_repairs_chain(self, driver, milk):
        first = make_trip(driver, MARCH_1, milk)
        second = make_trip(driver, MARCH_2, milk)
        update_trip(trip_id=first.id, data={'collection_amount': Decimal('100')})

        repaired = update_trip(trip_id=second.id, data={'previous_balance': Decimal('30.00')})

        assert repaired.balance == Decimal('20.00')
        assert driver_chain(driver_id=driver.id).is_consistent
        driver.refresh_from_db()
        assert driver.balance == Decimal('20.00')

    def test_editing_latest_trip_syncs_driver(self, driver, milk):
        trip = make_trip(driver, MARCH_1, milk)

        update_trip(trip_id=trip.id, data={'petrol': Decimal('0')})

        driver.refresh_from_db()
        assert driver.balance == Decimal('10.00')

    def test_edit_products_keeps_other_lines(self, driver, milk, bread):
        trip = make_trip(driver, MARCH_1, milk)

        updated = update_trip(
            trip_id=trip.id,
            data={'products': [{'product_id': bread.id, 'quantity': Decimal('5')}]},
        )

        assert updated.total_amount == Decimal('10.00')
        assert updated.profit == Decimal('1.95')

    def test_update_missing_trip(self, db):
        with pytest.raises(TripNotFoundError):
            update_trip(trip_id=uuid4(), data={})

    def test_recalculate_after_backdated_price(self, driver, milk, manager):
        trip = make_trip(driver, date(2025, 2, 1), milk)
        assert trip.total_amount == Decimal('50.00')

        record_price_change(
            product_id=milk.id,
            price=Decimal('4.00'),
            effective_at=datetime(2025, 1, 1, 8, tzinfo=timezone.utc),
            updated_by=manager,
        )

        recalculated, changed = recalculate_trip(trip_id=trip.id, updated_by=manager)
        assert changed
        assert recalculated.total_amount == Decimal('40.00')

        again, changed_again = recalculate_trip(trip_id=trip.id, updated_by=manager)
        assert not changed_again
        assert again.total_amount == Decimal('40.00')

    def test_recalculate_keeps_explicit_prices(self, driver, milk, bread, manager):
        trip = create_trip(
            driver_id=driver.id,
            date=date(2025, 2, 1),
            products=[
                {'product_id': milk.id, 'quantity': Decimal('10'), 'unit_price': Decimal('4.00')},
                {'product_id': bread.id, 'quantity': Decimal('5')},
            ],
        )
        assert trip.total_amount == Decimal('50.00')

        for product in (milk, bread):
            record_price_change(
                product_id=product.id,
                price=Decimal('1.50'),
                effective_at=datetime(2025, 1, 1, 8, tzinfo=timezone.utc),
                updated_by=manager,
            )

        recalculated, changed = recalculate_trip(trip_id=trip.id, updated_by=manager)

        assert changed
        # Negotiated milk price stays, bread follows the backdated change
        assert recalculated.total_amount == Decimal('47.50')
        prices = {
            line.product_ref: (line.unit_price, line.price_source)
            for line in recalculated.lines.filter(kind=TripLine.Kind.PRODUCT)
        }
        assert prices == {
            str(milk.id): (Decimal('4.00'), TripLine.PriceSource.EXPLICIT),
            str(bread.id): (Decimal('1.50'), TripLine.PriceSource.RESOLVED),
        }

        _, changed_again = recalculate_trip(trip_id=trip.id, updated_by=manager)
        assert not changed_again

    def test_delete_latest_falls_back_to_previous_balance(self, driver, milk):
        make_trip(driver, MARCH_1, milk)
        second = make_trip(driver, MARCH_2, milk, collection_amount=Decimal('100'))

        delete_trip(trip_id=second.id)

        driver.refresh_from_db()
        assert driver.balance == Decimal('-10.00')

    def test_delete_middle_trip_leaves_others(self, driver, milk):
        first = make_trip(driver, MARCH_1, milk)
        second = make_trip(driver, MARCH_2, milk)
        third = make_trip(driver, MARCH_3, milk)

        delete_trip(trip_id=second.id)

        third.refresh_from_db()
        assert third.previous_balance == Decimal('-20.00')
        assert third.previous_trip is None
        assert DailyTrip.objects.filter(id=first.id).exists()

    def test_delete_only_trip_resets_balance(self, driver, milk):
        trip = make_trip(driver, MARCH_1, milk)

        delete_trip(trip_id=trip.id)

        driver.refresh_from_db()
        assert driver.balance == Decimal('0.00')
        assert HistoryEntry.objects.filter(
            collection_name='dailyTrips', document_id=str(trip.id), action='delete'
        ).exists()


# =============================================================================
# Preview and listing
# =============================================================================

@pytest.mark.django_db
class TestPreviewAndList:

    def test_preview_does_not_persist(self, driver, milk):
        make_trip(driver, MARCH_1, milk)

        preview = preview_settlement(
            driver_id=driver.id,
            date=MARCH_2,
            products=[{'product_id': milk.id, 'quantity': Decimal('10')}],
            collection_amount=Decimal('60'),
        )

        assert preview.settlement.previous_balance == Decimal('-10.00')
        assert preview.settlement.balance == Decimal('50.00')
        assert DailyTrip.objects.count() == 1

    def test_preview_explicit_opening_balance(self, milk):
        preview = preview_settlement(
            date=MARCH_1,
            products=[{'product_id': milk.id, 'quantity': Decimal('1')}],
            previous_balance=Decimal('12.50'),
        )
        assert preview.settlement.balance == Decimal('12.50')
        assert preview.previous_trip is None

    def test_list_filters(self, driver, other_driver, milk):
        make_trip(driver, MARCH_1, milk)
        make_trip(driver, MARCH_3, milk)
        make_trip(other_driver, MARCH_2, milk)

        assert list_trips(driver=driver.id).count() == 2
        assert list_trips(date=MARCH_2).count() == 1
        assert list_trips(start_date=MARCH_2, end_date=MARCH_3).count() == 2
        assert [t.date for t in list_trips()] == [MARCH_3, MARCH_2, MARCH_1]


# =============================================================================
# Products deleted after trips were recorded
# =============================================================================

@pytest.mark.django_db(transaction=True)
class TestDeletedProducts:

    def test_edit_trip_after_product_deleted(self, driver, milk, bread):
        milk_id = milk.id
        trip = create_trip(
            driver_id=driver.id,
            date=MARCH_1,
            products=[
                {'product_id': milk.id, 'quantity': Decimal('10')},
                {'product_id': bread.id, 'quantity': Decimal('5')},
            ],
        )
        delete_product(product_id=milk_id)

        updated = update_trip(trip_id=trip.id, data={'petrol': Decimal('10')})

        assert updated.petrol == Decimal('10')
        assert updated.total_amount == Decimal('60.00')
        lines = list(TripLine.objects.filter(trip=trip, kind=TripLine.Kind.PRODUCT).order_by('position'))
        assert [(line.product_ref, line.product_id) for line in lines] == [
            (str(milk_id), None),
            (str(bread.id), bread.id),
        ]
        assert lines[0].product_name == 'Milk 1L'

    def test_transfer_resynced_after_product_deleted(self, driver, other_driver, milk):
        milk_id = milk.id
        receiver_trip = make_trip(other_driver, MARCH_1, milk)
        sender_trip = create_trip(
            driver_id=driver.id,
            date=MARCH_1,
            products=[{'product_id': milk.id, 'quantity': Decimal('10')}],
            transferred_products=[{
                'product_id': milk.id,
                'quantity': Decimal('2'),
                'receiving_driver_id': other_driver.id,
            }],
        )
        delete_product(product_id=milk_id)

        update_trip(trip_id=sender_trip.id, data={'petrol': Decimal('5')})

        assert accepted_quantities(receiver_trip) == [(str(milk_id), Decimal('2.00'), str(driver.id))]
        accepted = TripLine.objects.get(trip=receiver_trip, kind=TripLine.Kind.ACCEPTED)
        assert accepted.product_id is None

    def test_recalculate_after_product_deleted(self, driver, milk):
        milk_id = milk.id
        trip = make_trip(driver, MARCH_1, milk)
        delete_product(product_id=milk_id)

        recalculated, changed = recalculate_trip(trip_id=trip.id)

        assert not changed
        assert recalculated.total_amount == Decimal('50.00')
