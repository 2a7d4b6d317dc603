from django.contrib import admin
from django.utils.html import format_html
from .models import Product, PriceHistoryEntry, ProductCategory


class PriceHistoryInline(admin.TabularInline):
    """Read-only price history within a product."""
    model = PriceHistoryEntry
    extra = 0
    fields = ['version', 'price', 'updated_at', 'reason', 'updated_by']
    readonly_fields = fields
    ordering = ['version']

    def has_add_permission(self, request, obj=None):
        """Price history is written by the service layer only."""
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = [
        'display_number',
        'name',
        'category_badge',
        'price',
        'unit',
        'supplier',
        'is_active',
    ]
    list_filter = ['category', 'is_active', 'supplier']
    search_fields = ['name', 'code', 'sku', 'display_number']
    ordering = ['category', 'display_number']
    readonly_fields = ['code', 'price', 'created_by', 'updated_by', 'created_at', 'updated_at']
    inlines = [PriceHistoryInline]

    def category_badge(self, obj):
        bg = '#A47449' if obj.category == ProductCategory.BAKERY else '#6B8E5E'
        return format_html(
            '<span style="background: {}; color: white; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            bg, obj.get_category_display()
        )
    category_badge.short_description = 'Category'
    category_badge.admin_order_field = 'category'


@admin.register(PriceHistoryEntry)
class PriceHistoryEntryAdmin(admin.ModelAdmin):
    list_display = ['product', 'version', 'price', 'updated_at', 'updated_by']
    list_filter = ['product__category']
    search_fields = ['product__name', 'product__code']
    readonly_fields = ['product', 'version', 'price', 'updated_at', 'reason', 'updated_by']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
