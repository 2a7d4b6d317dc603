"""
API tests for products and price history.
"""

import pytest
from uuid import uuid4
from django.urls import reverse
from rest_framework import status


@pytest.mark.django_db
class TestProductAPI:

    def test_requires_authentication(self, api_client):
        response = api_client.get(reverse('catalog:product-list'))
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_create(self, authenticated_client):
        response = authenticated_client.post(reverse('catalog:product-list'), {
            'name': 'Laban 500ml',
            'category': 'fresh',
            'price': '2.25',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['display_number'] == 'F001'
        assert response.data['price_history'][0]['price'] == '2.25'

    def test_create_invalid_category(self, authenticated_client):
        response = authenticated_client.post(reverse('catalog:product-list'), {
            'name': 'Soap',
            'category': 'household',
            'price': '1.00',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'category' in response.data

    def test_create_wrong_display_prefix(self, authenticated_client):
        response = authenticated_client.post(reverse('catalog:product-list'), {
            'name': 'Baguette',
            'category': 'bakery',
            'price': '3.00',
            'display_number': 'F001',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_list_filter(self, authenticated_client, milk, bread):
        response = authenticated_client.get(reverse('catalog:product-list'), {'category': 'bakery'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['name'] == 'White Bread'

    def test_patch_price(self, authenticated_client, milk):
        url = reverse('catalog:product-detail', kwargs={'pk': milk.id})

        response = authenticated_client.patch(url, {'price': '5.25'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['price'] == '5.25'
        assert response.data['category'] == 'fresh'

    def test_retrieve_missing(self, authenticated_client):
        url = reverse('catalog:product-detail', kwargs={'pk': uuid4()})
        response = authenticated_client.get(url)
        assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.django_db
class TestPriceHistoryAPI:

    def test_backdate_and_look_up(self, authenticated_client, milk):
        history_url = reverse('catalog:product-price-history', kwargs={'pk': milk.id})

        response = authenticated_client.post(history_url, {
            'price': '4.00',
            'effective_at': '2025-01-01T08:00:00Z',
            'reason': 'January price',
        }, format='json')
        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['version'] == 2

        response = authenticated_client.get(history_url)
        assert [entry['version'] for entry in response.data] == [1, 2]

        response = authenticated_client.get(
            reverse('catalog:product-price-on', kwargs={'pk': milk.id}),
            {'date': '2025-01-15'},
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.data['price'] == '4.00'
        assert response.data['current_price'] == '5.00'

    def test_future_price_rejected(self, authenticated_client, milk):
        response = authenticated_client.post(
            reverse('catalog:product-price-history', kwargs={'pk': milk.id}),
            {'price': '9.00', 'effective_at': '2999-01-01T00:00:00Z'},
            format='json',
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_price_on_requires_date(self, authenticated_client, milk):
        response = authenticated_client.get(reverse('catalog:product-price-on', kwargs={'pk': milk.id}))
        assert response.status_code == status.HTTP_400_BAD_REQUEST
