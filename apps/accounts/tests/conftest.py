import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def user(db):
    """Create and return a manager."""
    return User.objects.create_user(
        email='testuser@example.com',
        password='TestPass123!',
        name='Test User',
        role=UserRole.MANAGER,
    )


@pytest.fixture
def user_inactive(db):
    """Create and return an inactive manager."""
    return User.objects.create_user(
        email='inactive@example.com',
        password='TestPass123!',
        name='Inactive User',
        is_active=False,
    )


@pytest.fixture
def super_admin(db):
    """Create and return a super admin."""
    return User.objects.create_user(
        email='admin@example.com',
        password='AdminPass123!',
        name='Owner',
        role=UserRole.SUPER_ADMIN,
    )


@pytest.fixture
def authenticated_client(api_client, user):
    """Return an API client authenticated as a manager using JWT."""
    refresh = RefreshToken.for_user(user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def admin_client(super_admin):
    """Return an API client authenticated as a super admin using JWT."""
    client = APIClient()
    refresh = RefreshToken.for_user(super_admin)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client
