"""Key/value application settings."""

import logging
from typing import Any

from django.db import transaction

from ..models import Setting
from .audit import record_history, snapshot
from .exceptions import SettingNotFoundError

logger = logging.getLogger(__name__)

HISTORY_COLLECTION = 'settings'


def list_settings():
    return Setting.objects.select_related('created_by')


def get_setting(*, key: str) -> Setting:
    try:
        return Setting.objects.get(key=key)
    except Setting.DoesNotExist:
        raise SettingNotFoundError(f"Setting '{key}' not found")


def get_setting_value(key: str, default: Any = None) -> Any:
    """Return the stored value for ``key`` or ``default`` when missing."""
    value = Setting.objects.filter(key=key).values_list('value', flat=True).first()
    return default if value is None else value


@transaction.atomic
def upsert_setting(*, key: str, value: Any, user=None) -> tuple:
    """
    Create the setting or overwrite its value.

    Returns:
        Tuple of (setting, created)
    """
    setting = Setting.objects.select_for_update().filter(key=key).first()

    if setting is None:
        setting = Setting.objects.create(
            key=key,
            value=value,
            created_by=user if user is not None and user.is_authenticated else None,
        )
        record_history(
            collection_name=HISTORY_COLLECTION,
            document_id=setting.id,
            action='create',
            actor=user,
            after=snapshot(setting),
        )
        logger.info(f"Created setting {key}")
        return setting, True

    before = snapshot(setting)
    setting.value = value
    setting.save(update_fields=['value', 'updated_at'])
    record_history(
        collection_name=HISTORY_COLLECTION,
        document_id=setting.id,
        action='update',
        actor=user,
        before=before,
        after=snapshot(setting),
    )
    return setting, False


@transaction.atomic
def update_setting(*, key: str, value: Any, user=None) -> Setting:
    """
    Overwrite the value of an existing setting.

    Raises:
        SettingNotFoundError: If key doesn't exist
    """
    if not Setting.objects.filter(key=key).exists():
        raise SettingNotFoundError(f"Setting '{key}' not found")

    setting, _ = upsert_setting(key=key, value=value, user=user)
    return setting


@transaction.atomic
def delete_setting(*, key: str, user=None) -> None:
    """
    Delete a setting.

    Raises:
        SettingNotFoundError: If key doesn't exist
    """
    try:
        setting = Setting.objects.select_for_update().get(key=key)
    except Setting.DoesNotExist:
        raise SettingNotFoundError(f"Setting '{key}' not found")

    before = snapshot(setting)
    setting_id = setting.id
    setting.delete()
    record_history(
        collection_name=HISTORY_COLLECTION,
        document_id=setting_id,
        action='delete',
        actor=user,
        before=before,
    )
    logger.info(f"Deleted setting {key}")
