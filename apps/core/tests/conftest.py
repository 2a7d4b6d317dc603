import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole


def _authenticate(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


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
def settings_manager(db):
    """Manager granted access to application settings."""
    return User.objects.create_user(
        email='settings@example.com',
        password='TestPass123!',
        role=UserRole.MANAGER,
        settings_access=True,
    )


@pytest.fixture
def super_admin(db):
    return User.objects.create_user(
        email='admin@example.com',
        password='TestPass123!',
        role=UserRole.SUPER_ADMIN,
    )


@pytest.fixture
def manager_client(manager):
    return _authenticate(manager)


@pytest.fixture
def settings_client(settings_manager):
    return _authenticate(settings_manager)


@pytest.fixture
def admin_client(super_admin):
    return _authenticate(super_admin)
