from django.contrib import admin
from django.utils.html import format_html
from .models import Employee, BalanceHistoryEntry


class BalanceHistoryInline(admin.TabularInline):
    model = BalanceHistoryEntry
    extra = 0
    fields = ['version', 'balance', 'updated_at', 'reason', 'updated_by']
    readonly_fields = fields
    ordering = ['-version']

    def has_add_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = [
        'code',
        'name',
        'designation',
        'route_name',
        'balance_display',
        'is_active',
    ]
    list_filter = ['designation', 'is_active', 'route_name']
    search_fields = ['code', 'name', 'phone_number', 'route_name']
    ordering = ['code']
    readonly_fields = ['code', 'balance', 'created_by', 'updated_by', 'created_at', 'updated_at']
    inlines = [BalanceHistoryInline]

    def balance_display(self, obj):
        """Negative balances (driver owes) in red."""
        color = '#B85C5C' if obj.balance < 0 else '#6B8E5E'
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color, obj.balance
        )
    balance_display.short_description = 'Balance'
    balance_display.admin_order_field = 'balance'
