"""
API tests for daily trips.

Tests cover:
- Create/list/retrieve/update/delete
- Error mapping (validation, unknown product, duplicate day, missing trip)
- Preview, recalculation and chain audit actions
"""

import pytest
from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4
from django.urls import reverse
from rest_framework import status

from apps.catalog.services import record_price_change
from apps.trips.models import DailyTrip


def detail_url(trip_id):
    return reverse('trips:trip-detail', kwargs={'pk': trip_id})


@pytest.mark.django_db
class TestTripCreate:

    def test_requires_authentication(self, api_client, trip_payload):
        response = api_client.post(reverse('trips:trip-list'), trip_payload, format='json')
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_create_returns_settled_trip(self, authenticated_client, trip_payload, manager):
        response = authenticated_client.post(reverse('trips:trip-list'), trip_payload, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        data = response.data
        assert data['code'] == 'TRP-001'
        assert data['total_amount'] == '50.00'
        assert data['profit'] == '6.75'
        assert data['balance'] == '-10.00'
        assert data['previous_balance'] == '0.00'
        assert data['products'][0]['product_name'] == 'Milk 1L'
        assert data['products'][0]['unit_price'] == '5.00'
        assert data['created_by']['id'] == str(manager.id)

    def test_negative_amount_rejected(self, authenticated_client, trip_payload):
        trip_payload['petrol'] = '-1.00'

        response = authenticated_client.post(reverse('trips:trip-list'), trip_payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'petrol' in response.data
        assert not DailyTrip.objects.exists()

    def test_unknown_product(self, authenticated_client, trip_payload):
        trip_payload['products'][0]['product_id'] = str(uuid4())

        response = authenticated_client.post(reverse('trips:trip-list'), trip_payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'not found' in response.data['error']

    def test_staff_member_is_not_a_driver(self, authenticated_client, trip_payload, staff_member):
        trip_payload['driver_id'] = str(staff_member.id)

        response = authenticated_client.post(reverse('trips:trip-list'), trip_payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_second_trip_same_day_conflicts(self, authenticated_client, trip_payload):
        authenticated_client.post(reverse('trips:trip-list'), trip_payload, format='json')

        response = authenticated_client.post(reverse('trips:trip-list'), trip_payload, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_transfer_flag_without_transfers(self, authenticated_client, trip_payload):
        trip_payload['is_product_transferred'] = True

        response = authenticated_client.post(reverse('trips:trip-list'), trip_payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_transfer_shows_up_on_receiver(self, authenticated_client, trip_payload, other_driver, milk):
        trip_payload['transferred_products'] = [{
            'product_id': str(milk.id),
            'quantity': '2',
            'receiving_driver_id': str(other_driver.id),
        }]
        authenticated_client.post(reverse('trips:trip-list'), trip_payload, format='json')

        response = authenticated_client.post(reverse('trips:trip-list'), {
            'driver_id': str(other_driver.id),
            'date': '2025-03-01',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        accepted = response.data['accepted_products']
        assert len(accepted) == 1
        assert accepted[0]['quantity'] == '2.00'
        assert accepted[0]['transferred_from_driver_name'] == 'Ahmed'
        assert response.data['total_amount'] == '0.00'


@pytest.mark.django_db
class TestTripReadUpdateDelete:

    @pytest.fixture
    def trip(self, authenticated_client, trip_payload):
        response = authenticated_client.post(reverse('trips:trip-list'), trip_payload, format='json')
        return response.data

    def test_list(self, authenticated_client, trip):
        response = authenticated_client.get(reverse('trips:trip-list'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['code'] == trip['code']

    def test_list_filter_by_date_range(self, authenticated_client, trip):
        response = authenticated_client.get(
            reverse('trips:trip-list'),
            {'start_date': '2025-03-02', 'end_date': '2025-03-31'},
        )
        assert response.data['count'] == 0

    def test_list_rejects_inverted_range(self, authenticated_client, trip):
        response = authenticated_client.get(
            reverse('trips:trip-list'),
            {'start_date': '2025-03-31', 'end_date': '2025-03-01'},
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_retrieve(self, authenticated_client, trip):
        response = authenticated_client.get(detail_url(trip['id']))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['driver']['name'] == 'Ahmed'

    def test_retrieve_missing(self, authenticated_client, db):
        response = authenticated_client.get(detail_url(uuid4()))
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_patch_recomputes(self, authenticated_client, trip):
        response = authenticated_client.patch(detail_url(trip['id']), {'petrol': '0'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['balance'] == '10.00'

    def test_delete(self, authenticated_client, trip, driver):
        response = authenticated_client.delete(detail_url(trip['id']))

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not DailyTrip.objects.exists()
        driver.refresh_from_db()
        assert driver.balance == Decimal('0.00')

    def test_recalculate(self, authenticated_client, trip, milk, manager):
        record_price_change(
            product_id=milk.id,
            price=Decimal('4.00'),
            effective_at=datetime(2025, 2, 1, tzinfo=timezone.utc),
            updated_by=manager,
        )
        url = reverse('trips:trip-recalculate', kwargs={'pk': trip['id']})

        response = authenticated_client.post(url)
        assert response.status_code == status.HTTP_200_OK
        assert response.data['changed'] is True
        assert response.data['total_amount'] == '40.00'

        response = authenticated_client.post(url)
        assert response.data['changed'] is False

    def test_chain(self, authenticated_client, trip, trip_payload, driver):
        trip_payload['date'] = '2025-03-02'
        authenticated_client.post(reverse('trips:trip-list'), trip_payload, format='json')
        authenticated_client.patch(detail_url(trip['id']), {'collection_amount': '100'}, format='json')

        response = authenticated_client.get(reverse('trips:trip-chain', kwargs={'driver_id': driver.id}))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['is_consistent'] is False
        assert [t['date'] for t in response.data['trips']] == ['2025-03-01', '2025-03-02']
        assert response.data['breaks'][0]['expected'] == '30.00'
        assert response.data['breaks'][0]['actual'] == '-10.00'


@pytest.mark.django_db
class TestTripPreview:

    def test_preview_matches_create(self, authenticated_client, trip_payload):
        response = authenticated_client.post(reverse('trips:trip-preview'), trip_payload, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['settlement']['balance'] == '-10.00'
        assert response.data['settlement']['net_total_fresh'] == '50.00'
        assert response.data['previous_trip'] is None
        assert not DailyTrip.objects.exists()

    def test_preview_without_driver(self, authenticated_client, milk):
        response = authenticated_client.post(reverse('trips:trip-preview'), {
            'date': '2025-03-01',
            'products': [{'product_id': str(milk.id), 'quantity': '1'}],
            'previous_balance': '5.00',
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['settlement']['balance'] == '5.00'
