"""
API tests for analytics endpoints.
"""

import pytest
from django.urls import reverse
from rest_framework import status


@pytest.mark.django_db
class TestAnalyticsAPI:

    def test_requires_authentication(self, api_client):
        response = api_client.get(reverse('analytics:summary'))
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_summary_for_month(self, authenticated_client, march_trips, expenses):
        response = authenticated_client.get(reverse('analytics:summary'), {'period': '2025-03'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['trip_count'] == 3
        assert response.data['profit'] == '15.45'
        assert response.data['net_profit'] == '-64.55'
        assert response.data['start_date'] == '2025-03-01'

    def test_summary_bad_period(self, authenticated_client):
        response = authenticated_client.get(reverse('analytics:summary'), {'period': '2025-3'})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_drivers(self, authenticated_client, march_trips):
        response = authenticated_client.get(reverse('analytics:drivers'), {'period': '2025-03'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data[0]['driver_name'] == 'Ahmed'
        assert response.data[0]['closing_balance'] == '20.00'

    def test_expenses(self, authenticated_client, expenses):
        response = authenticated_client.get(reverse('analytics:expenses'), {'period': '2025-04'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data == [{'category': 'salary', 'total': '1000.00', 'count': 1}]

    def test_timeseries_monthly(self, authenticated_client, march_trips):
        response = authenticated_client.get(reverse('analytics:timeseries'), {'granularity': 'month'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data[0]['period'] == '2025-03'
        assert response.data[0]['trip_count'] == 3

    def test_timeseries_bad_granularity(self, authenticated_client):
        response = authenticated_client.get(reverse('analytics:timeseries'), {'granularity': 'week'})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_dashboard(self, authenticated_client, march_trips):
        response = authenticated_client.get(reverse('analytics:dashboard'), {'today': '2025-03-08'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['current']['trip_count'] == 1
        assert response.data['change']['trip_count'] == '-50.00'
