"""Audit history recording and lookup."""

import json
from typing import Any, Dict, Iterable, Optional

from django.core.serializers.json import DjangoJSONEncoder
from django.db import models

from ..models import HistoryEntry, HistoryAction


def snapshot(
    instance: models.Model,
    *,
    exclude: Iterable[str] = (),
    extra: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Return a JSON-safe dict of the instance's concrete field values.

    Foreign keys are stored by id (``driver_id``). Decimals, dates and UUIDs
    are converted to strings the way DjangoJSONEncoder renders them.
    """
    exclude = set(exclude)
    data = {
        field.attname: field.value_from_object(instance)
        for field in instance._meta.concrete_fields
        if field.name not in exclude and field.attname not in exclude
    }
    if extra:
        data.update(extra)
    return json.loads(json.dumps(data, cls=DjangoJSONEncoder))


def _actor_or_none(actor):
    if actor is None or not getattr(actor, 'is_authenticated', False):
        return None
    return actor


def record_history(
    *,
    collection_name: str,
    document_id: Any,
    action: str,
    actor=None,
    before: Optional[Dict[str, Any]] = None,
    after: Optional[Dict[str, Any]] = None,
) -> HistoryEntry:
    """
    Append an audit entry.

    Args:
        collection_name: Logical document type ('dailyTrips', 'products', ...)
        document_id: Primary key of the affected document
        action: One of HistoryAction values
        actor: User performing the change (anonymous users are stored as None)
        before: Snapshot before the change (None for create)
        after: Snapshot after the change (None for delete)
    """
    if action not in HistoryAction.values:
        raise ValueError(f"Unknown history action: {action}")

    return HistoryEntry.objects.create(
        collection_name=collection_name,
        document_id=str(document_id),
        action=action,
        actor=_actor_or_none(actor),
        before=before,
        after=after,
    )


def list_history(
    *,
    collection_name: Optional[str] = None,
    document_id: Optional[str] = None,
    action: Optional[str] = None,
):
    """Return history entries, newest first, optionally filtered."""
    queryset = HistoryEntry.objects.select_related('actor')

    if collection_name:
        queryset = queryset.filter(collection_name=collection_name)
    if document_id:
        queryset = queryset.filter(document_id=str(document_id))
    if action:
        queryset = queryset.filter(action=action)

    return queryset
