from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
import uuid


class HistoryAction(models.TextChoices):
    CREATE = 'create', 'Create'
    UPDATE = 'update', 'Update'
    DELETE = 'delete', 'Delete'


class Counter(models.Model):
    """Named monotonic sequence (trip codes, employee codes, chain positions)."""

    key = models.CharField(max_length=100, unique=True)
    seq = models.PositiveBigIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'counters'

    def __str__(self):
        return f"{self.key}={self.seq}"


class HistoryEntry(models.Model):
    """Audit record of a create/update/delete on a business document."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    collection_name = models.CharField(max_length=50)
    document_id = models.CharField(max_length=64)
    action = models.CharField(max_length=10, choices=HistoryAction.choices)
    actor = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='history_entries'
    )
    before = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)
    after = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'histories'
        indexes = [
            models.Index(fields=['collection_name', 'document_id'], name='histories_document_idx'),
            models.Index(fields=['action'], name='histories_action_idx'),
            models.Index(fields=['timestamp'], name='histories_timestamp_idx'),
        ]
        ordering = ['-timestamp']
        verbose_name_plural = 'history entries'

    def __str__(self):
        return f"{self.action} {self.collection_name}/{self.document_id}"


class Setting(models.Model):
    """Free-form application setting stored as JSON under a unique key."""

    key = models.CharField(max_length=100, unique=True)
    value = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)
    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='settings_created'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'settings'
        ordering = ['key']

    def __str__(self):
        return self.key
