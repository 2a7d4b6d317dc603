"""Shared services: counters, audit history and application settings."""

from .exceptions import (
    CoreServiceError,
    SettingNotFoundError,
    InvalidSequenceKeyError,
)
from .sequences import (
    next_sequence,
    current_sequence,
    format_code,
    next_code,
)
from .audit import (
    snapshot,
    record_history,
    list_history,
)
from .settings_store import (
    list_settings,
    get_setting,
    get_setting_value,
    upsert_setting,
    update_setting,
    delete_setting,
)

__all__ = [
    # Exceptions
    'CoreServiceError',
    'SettingNotFoundError',
    'InvalidSequenceKeyError',
    # Sequences
    'next_sequence',
    'current_sequence',
    'format_code',
    'next_code',
    # Audit
    'snapshot',
    'record_history',
    'list_history',
    # Settings
    'list_settings',
    'get_setting',
    'get_setting_value',
    'upsert_setting',
    'update_setting',
    'delete_setting',
]
