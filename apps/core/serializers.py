from rest_framework import serializers
from apps.accounts.serializers import UserMinimalSerializer
from .models import HistoryEntry, HistoryAction, Setting


# =============================================================================
# Input Serializers
# =============================================================================

class HistoryFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for history filtering.

    Query Parameters:
        collection_name (str): Logical document type, e.g. 'dailyTrips'
        document_id (str): Id of the affected document
        action (str): create, update or delete
    """

    collection_name = serializers.CharField(max_length=50, required=False)
    document_id = serializers.CharField(max_length=64, required=False)
    action = serializers.ChoiceField(choices=HistoryAction.choices, required=False)


class SettingUpsertSerializer(serializers.Serializer):
    """Input for creating or overwriting a setting."""

    key = serializers.SlugField(max_length=100)
    value = serializers.JSONField(allow_null=True)


class SettingValueSerializer(serializers.Serializer):
    """Input for updating the value of an existing setting."""

    value = serializers.JSONField(allow_null=True)


# =============================================================================
# Output Serializers
# =============================================================================

class HistoryEntrySerializer(serializers.ModelSerializer):
    actor = UserMinimalSerializer(read_only=True)

    class Meta:
        model = HistoryEntry
        fields = [
            'id',
            'collection_name',
            'document_id',
            'action',
            'actor',
            'before',
            'after',
            'timestamp',
        ]
        read_only_fields = fields


class SettingSerializer(serializers.ModelSerializer):
    created_by = UserMinimalSerializer(read_only=True)

    class Meta:
        model = Setting
        fields = ['id', 'key', 'value', 'created_by', 'created_at', 'updated_at']
        read_only_fields = fields
