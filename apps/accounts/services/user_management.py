"""Back-office user administration service."""

import logging
import secrets
from typing import Any, Dict, Optional, Tuple
from uuid import UUID

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction

from apps.core.services import record_history, snapshot
from .exceptions import (
    DuplicateEmailError,
    PasswordConfirmationError,
    SelfDeletionError,
    UserNotFoundError,
)

User = get_user_model()

logger = logging.getLogger(__name__)

HISTORY_COLLECTION = 'users'
SNAPSHOT_EXCLUDE = ('password',)

UPDATABLE_FIELDS = [
    'name', 'email', 'role', 'settings_access',
    'phone', 'city', 'state', 'is_active',
]


def _generate_password() -> str:
    return secrets.token_urlsafe(settings.DEFAULT_USER_PASSWORD_LENGTH)[:settings.DEFAULT_USER_PASSWORD_LENGTH]


def get_user_by_id(*, user_id: UUID) -> User:
    try:
        return User.objects.get(id=user_id)
    except User.DoesNotExist:
        raise UserNotFoundError(f"User {user_id} not found")


@transaction.atomic
def create_user_account(
    *,
    email: str,
    created_by: Optional[User] = None,
    name: str = '',
    role: str = 'manager',
    password: Optional[str] = None,
    settings_access: bool = False,
    phone: str = '',
    city: str = '',
    state: str = '',
    is_active: bool = True,
) -> Tuple[User, Optional[str]]:
    """
    Create a back-office user.

    When no password is supplied a random one is generated and returned
    so it can be shown to the administrator exactly once.

    Returns:
        Tuple of (user, generated_password or None)

    Raises:
        DuplicateEmailError: If the email is already registered
    """
    email = email.strip().lower()
    if User.objects.filter(email__iexact=email).exists():
        raise DuplicateEmailError(f"User with email '{email}' already exists")

    generated = None
    if not password:
        generated = _generate_password()
        password = generated

    user = User.objects.create_user(
        email=email,
        password=password,
        name=name,
        role=role,
        settings_access=settings_access,
        phone=phone,
        city=city,
        state=state,
        is_active=is_active,
    )

    record_history(
        collection_name=HISTORY_COLLECTION,
        document_id=user.id,
        action='create',
        actor=created_by,
        after=snapshot(user, exclude=SNAPSHOT_EXCLUDE),
    )
    logger.info(f"Created user {user.id} with role {role}")

    return user, generated


@transaction.atomic
def update_user_account(
    *,
    user_id: UUID,
    data: Dict[str, Any],
    updated_by: Optional[User] = None,
) -> User:
    """
    Update an existing user.

    Unknown keys in ``data`` are ignored. A ``password`` key resets the
    password without requiring the old one (administrator action).

    Raises:
        UserNotFoundError: If user doesn't exist
        DuplicateEmailError: If the new email belongs to another user
    """
    try:
        user = (
            User.objects
            .select_for_update()
            .get(id=user_id)
        )
    except User.DoesNotExist:
        raise UserNotFoundError(f"User {user_id} not found")

    before = snapshot(user, exclude=SNAPSHOT_EXCLUDE)

    email = data.get('email')
    if email:
        email = email.strip().lower()
        if User.objects.filter(email__iexact=email).exclude(id=user.id).exists():
            raise DuplicateEmailError(f"User with email '{email}' already exists")
        data = {**data, 'email': email}

    for field, value in data.items():
        if field in UPDATABLE_FIELDS:
            setattr(user, field, value)

    if data.get('password'):
        user.set_password(data['password'])

    user.save()

    record_history(
        collection_name=HISTORY_COLLECTION,
        document_id=user.id,
        action='update',
        actor=updated_by,
        before=before,
        after=snapshot(user, exclude=SNAPSHOT_EXCLUDE),
    )

    return user


@transaction.atomic
def delete_user_account(*, user_id: UUID, deleted_by: Optional[User] = None) -> None:
    """
    Permanently delete a user.

    Raises:
        UserNotFoundError: If user doesn't exist
        SelfDeletionError: If an administrator targets their own account
    """
    try:
        user = (
            User.objects
            .select_for_update()
            .get(id=user_id)
        )
    except User.DoesNotExist:
        raise UserNotFoundError(f"User {user_id} not found")

    if deleted_by is not None and deleted_by.id == user.id:
        raise SelfDeletionError("You cannot delete your own account")

    before = snapshot(user, exclude=SNAPSHOT_EXCLUDE)
    user.delete()

    record_history(
        collection_name=HISTORY_COLLECTION,
        document_id=user_id,
        action='delete',
        actor=deleted_by,
        before=before,
    )
    logger.info(f"Deleted user {user_id}")


@transaction.atomic
def change_password(*, user: User, current_password: str, new_password: str) -> None:
    """
    Change the password of the requesting user.

    Raises:
        PasswordConfirmationError: If the current password is wrong
    """
    if not user.check_password(current_password):
        raise PasswordConfirmationError("Current password is incorrect")

    user.set_password(new_password)
    user.save(update_fields=['password', 'updated_at'])
