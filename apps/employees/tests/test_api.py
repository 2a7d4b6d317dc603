"""
API tests for employees.
"""

import pytest
from uuid import uuid4
from django.urls import reverse
from rest_framework import status

from apps.employees.models import Employee


@pytest.mark.django_db
class TestEmployeeAPI:

    def test_requires_authentication(self, api_client):
        response = api_client.get(reverse('employees:employee-list'))
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_create(self, authenticated_client):
        response = authenticated_client.post(reverse('employees:employee-list'), {
            'name': 'Chandra',
            'route_name': 'Airport',
            'balance': '25.00',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['code'] == 'EMP-001'
        assert response.data['designation'] == 'driver'
        assert response.data['balance'] == '25.00'

    def test_create_requires_name(self, authenticated_client):
        response = authenticated_client.post(reverse('employees:employee-list'), {}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'name' in response.data

    def test_list_filter_by_designation(self, authenticated_client, driver, staff_member):
        response = authenticated_client.get(reverse('employees:employee-list'), {'designation': 'staff'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['name'] == 'Office Clerk'

    def test_list_invalid_designation(self, authenticated_client):
        response = authenticated_client.get(reverse('employees:employee-list'), {'designation': 'pilot'})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_drivers_action(self, authenticated_client, driver, staff_member):
        response = authenticated_client.get(reverse('employees:employee-drivers'))

        assert response.status_code == status.HTTP_200_OK
        assert [item['name'] for item in response.data] == ['Ahmed']
        assert set(response.data[0]) == {'id', 'code', 'name', 'route_name'}

    def test_patch_balance(self, authenticated_client, driver):
        url = reverse('employees:employee-detail', kwargs={'pk': driver.id})
        response = authenticated_client.patch(url, {
            'balance': '-12.00',
            'balance_update_reason': 'Shortfall',
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['balance'] == '-12.00'
        # Partial update keeps the designation
        assert response.data['designation'] == 'driver'

        history = authenticated_client.get(
            reverse('employees:employee-balance-history', kwargs={'pk': driver.id})
        )
        assert history.status_code == status.HTTP_200_OK
        assert history.data[0]['reason'] == 'Shortfall'

    def test_patch_missing(self, authenticated_client):
        url = reverse('employees:employee-detail', kwargs={'pk': uuid4()})
        response = authenticated_client.patch(url, {'name': 'Ghost'}, format='json')
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_delete(self, authenticated_client, driver):
        url = reverse('employees:employee-detail', kwargs={'pk': driver.id})

        response = authenticated_client.delete(url)

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Employee.objects.exists()
