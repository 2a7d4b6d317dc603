from django.contrib import admin
from .models import Counter, HistoryEntry, Setting


@admin.register(Counter)
class CounterAdmin(admin.ModelAdmin):
    list_display = ['key', 'seq', 'updated_at']
    search_fields = ['key']
    readonly_fields = ['updated_at']


@admin.register(HistoryEntry)
class HistoryEntryAdmin(admin.ModelAdmin):
    """Read-only view of the audit trail."""

    list_display = ['timestamp', 'collection_name', 'document_id', 'action', 'actor']
    list_filter = ['collection_name', 'action', 'timestamp']
    search_fields = ['document_id', 'actor__email']
    date_hierarchy = 'timestamp'
    readonly_fields = [
        'collection_name', 'document_id', 'action', 'actor',
        'before', 'after', 'timestamp',
    ]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(Setting)
class SettingAdmin(admin.ModelAdmin):
    list_display = ['key', 'created_by', 'updated_at']
    search_fields = ['key']
    readonly_fields = ['created_at', 'updated_at']
