from django.contrib import admin
from django.utils.html import format_html
from .models import DailyTrip, TripLine


class TripLineInline(admin.TabularInline):
    """Trip lines are written by the settlement service only."""
    model = TripLine
    extra = 0
    fields = [
        'kind',
        'display_number',
        'product_name',
        'category',
        'quantity',
        'unit_price',
        'receiving_driver_name',
        'transferred_from_driver_name',
    ]
    readonly_fields = fields
    ordering = ['kind', 'position']

    def has_add_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(DailyTrip)
class DailyTripAdmin(admin.ModelAdmin):
    list_display = [
        'code',
        'driver_name',
        'date',
        'previous_balance',
        'collection_amount',
        'purchase_amount',
        'profit',
        'balance_display',
    ]
    list_filter = ['date', 'is_product_transferred']
    search_fields = ['code', 'driver_name', 'driver__code']
    date_hierarchy = 'date'
    ordering = ['-date', '-chain_sequence']
    inlines = [TripLineInline]

    readonly_fields = [
        'code', 'driver', 'driver_name', 'date', 'chain_sequence', 'previous_trip',
        'is_product_transferred', 'previous_balance', 'collection_amount',
        'purchase_amount', 'expiry', 'discount', 'petrol', 'total_amount',
        'net_total', 'grand_total', 'expiry_after_tax', 'amount_to_be',
        'sales_difference', 'profit', 'balance', 'created_by', 'updated_by',
        'created_at', 'updated_at',
    ]

    def has_add_permission(self, request):
        """Trips are settled through the API so balances stay chained."""
        return False

    def balance_display(self, obj):
        color = '#B85C5C' if obj.balance < 0 else '#6B8E5E'
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color, obj.balance
        )
    balance_display.short_description = 'Balance'
    balance_display.admin_order_field = 'balance'
