"""Services for accounts business logic."""

from .exceptions import (
    AccountsServiceError,
    InvalidCredentialsError,
    InactiveAccountError,
    UserNotFoundError,
    DuplicateEmailError,
    PasswordConfirmationError,
    SelfDeletionError,
)
from .user_authentication import authenticate_user
from .user_management import (
    get_user_by_id,
    create_user_account,
    update_user_account,
    delete_user_account,
    change_password,
)

__all__ = [
    # Exceptions
    'AccountsServiceError',
    'InvalidCredentialsError',
    'InactiveAccountError',
    'UserNotFoundError',
    'DuplicateEmailError',
    'PasswordConfirmationError',
    'SelfDeletionError',
    # Authentication
    'authenticate_user',
    # User Management
    'get_user_by_id',
    'create_user_account',
    'update_user_account',
    'delete_user_account',
    'change_password',
]
