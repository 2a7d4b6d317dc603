import pytest
from uuid import uuid4
from django.urls import reverse
from rest_framework import status
from apps.accounts.models import User, UserRole
from apps.core.models import HistoryEntry


# =============================================================================
# Login / Logout Tests
# =============================================================================

@pytest.mark.django_db
class TestLogin:
    """Tests for POST /api/auth/login/"""

    def test_login_success(self, api_client, user):
        """Login returns the user and a token pair."""
        url = reverse('users:login')
        response = api_client.post(url, {'email': user.email, 'password': 'TestPass123!'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['user']['role'] == 'manager'
        assert 'access' in response.data['tokens']
        assert 'refresh' in response.data['tokens']

        user.refresh_from_db()
        assert user.last_login is not None

    def test_login_case_insensitive_email(self, api_client, user):
        url = reverse('users:login')
        response = api_client.post(url, {'email': 'TestUser@Example.com', 'password': 'TestPass123!'})

        assert response.status_code == status.HTTP_200_OK

    def test_login_wrong_password(self, api_client, user):
        """Wrong password is rejected without saying which part was wrong."""
        url = reverse('users:login')
        response = api_client.post(url, {'email': user.email, 'password': 'WrongPass123!'})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['error'] == 'Invalid email or password'

    def test_login_unknown_email(self, api_client, db):
        url = reverse('users:login')
        response = api_client.post(url, {'email': 'nobody@example.com', 'password': 'TestPass123!'})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_inactive(self, api_client, user_inactive):
        url = reverse('users:login')
        response = api_client.post(url, {'email': user_inactive.email, 'password': 'TestPass123!'})

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_login_missing_fields(self, api_client, db):
        response = api_client.post(reverse('users:login'), {})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'email' in response.data

    def test_token_refresh(self, api_client, user):
        """The refresh token from login buys a new access token."""
        login = api_client.post(reverse('users:login'), {'email': user.email, 'password': 'TestPass123!'})

        response = api_client.post(reverse('token_refresh'), {'refresh': login.data['tokens']['refresh']})

        assert response.status_code == status.HTTP_200_OK
        assert 'access' in response.data


@pytest.mark.django_db
class TestLogout:
    """Tests for POST /api/auth/logout/"""

    def test_logout(self, authenticated_client):
        response = authenticated_client.post(reverse('users:logout'))
        assert response.status_code == status.HTTP_200_OK

    def test_logout_invalid_refresh(self, authenticated_client):
        response = authenticated_client.post(reverse('users:logout'), {'refresh': 'not-a-token'})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_logout_unauthenticated(self, api_client):
        response = api_client.post(reverse('users:logout'))
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


# =============================================================================
# Current User Tests
# =============================================================================

@pytest.mark.django_db
class TestCurrentUser:
    """Tests for /api/auth/me/"""

    def test_get_profile(self, authenticated_client, user):
        response = authenticated_client.get(reverse('users:current-user'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['email'] == user.email

    def test_update_profile_ignores_role(self, authenticated_client, user):
        """Managers can edit their contact details but not promote themselves."""
        response = authenticated_client.patch(
            reverse('users:current-user'),
            {'name': 'Renamed', 'city': 'Dubai', 'role': 'super_admin'},
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        user.refresh_from_db()
        assert user.name == 'Renamed'
        assert user.city == 'Dubai'
        assert user.role == UserRole.MANAGER

    def test_change_password(self, authenticated_client, user):
        response = authenticated_client.post(reverse('users:change-password'), {
            'current_password': 'TestPass123!',
            'new_password': 'BrandNewPass456!',
            'new_password_confirm': 'BrandNewPass456!',
        })

        assert response.status_code == status.HTTP_200_OK
        user.refresh_from_db()
        assert user.check_password('BrandNewPass456!')

    def test_change_password_wrong_current(self, authenticated_client):
        response = authenticated_client.post(reverse('users:change-password'), {
            'current_password': 'WrongPass123!',
            'new_password': 'BrandNewPass456!',
            'new_password_confirm': 'BrandNewPass456!',
        })

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_change_password_mismatch(self, authenticated_client):
        response = authenticated_client.post(reverse('users:change-password'), {
            'current_password': 'TestPass123!',
            'new_password': 'BrandNewPass456!',
            'new_password_confirm': 'Different456!',
        })

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'new_password_confirm' in response.data


# =============================================================================
# User Administration Tests
# =============================================================================

@pytest.mark.django_db
class TestUserAdministration:
    """Tests for /api/auth/users/ (super admin only)"""

    def test_manager_forbidden(self, authenticated_client):
        response = authenticated_client.get(reverse('users:user-list'))
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_list_filter_by_role(self, admin_client, user):
        response = admin_client.get(reverse('users:user-list'), {'role': 'manager'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['email'] == user.email

    def test_create_generates_password(self, admin_client, super_admin):
        """A user created without a password gets a generated one, shown once."""
        response = admin_client.post(reverse('users:user-list'), {
            'email': 'New.Manager@Example.com',
            'name': 'New Manager',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        password = response.data['default_password']
        assert len(password) == 12

        created = User.objects.get(email='new.manager@example.com')
        assert created.check_password(password)

        entry = HistoryEntry.objects.get(collection_name='users', document_id=str(created.id))
        assert entry.actor == super_admin
        assert 'password' not in entry.after

    def test_create_with_password(self, admin_client):
        response = admin_client.post(reverse('users:user-list'), {
            'email': 'chosen@example.com',
            'password': 'ChosenPass123!',
            'role': 'super_admin',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert 'default_password' not in response.data
        assert response.data['user']['role'] == 'super_admin'

    def test_create_duplicate_email(self, admin_client, user):
        response = admin_client.post(reverse('users:user-list'), {'email': user.email}, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_update_grants_settings_access(self, admin_client, user):
        url = reverse('users:user-detail', kwargs={'pk': user.id})

        response = admin_client.patch(url, {'settings_access': True}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['settings_access'] is True

    def test_update_missing(self, admin_client):
        url = reverse('users:user-detail', kwargs={'pk': uuid4()})
        response = admin_client.patch(url, {'name': 'Ghost'}, format='json')
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_cannot_delete_self(self, admin_client, super_admin):
        url = reverse('users:user-detail', kwargs={'pk': super_admin.id})

        response = admin_client.delete(url)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert User.objects.filter(id=super_admin.id).exists()

    def test_delete_user(self, admin_client, user):
        response = admin_client.delete(reverse('users:user-detail', kwargs={'pk': user.id}))

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not User.objects.filter(id=user.id).exists()
