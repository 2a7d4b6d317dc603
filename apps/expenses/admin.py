from django.contrib import admin
from django.utils.html import format_html
from .models import AdditionalExpense, ExpenseStatus

STATUS_COLORS = {
    ExpenseStatus.PENDING: '#C9A227',
    ExpenseStatus.APPROVED: '#6B8E5E',
    ExpenseStatus.REJECTED: '#B85C5C',
}


@admin.register(AdditionalExpense)
class AdditionalExpenseAdmin(admin.ModelAdmin):
    list_display = [
        'title',
        'category',
        'amount',
        'currency',
        'date',
        'driver_name',
        'status_badge',
    ]
    list_filter = ['status', 'category', 'is_reimbursable', 'date']
    search_fields = ['title', 'vendor', 'receipt_number', 'driver_name']
    date_hierarchy = 'date'
    readonly_fields = [
        'status', 'approved_by', 'approved_at', 'rejected_reason',
        'created_by', 'updated_by', 'created_at', 'updated_at',
    ]

    def status_badge(self, obj):
        return format_html(
            '<span style="background: {}; color: white; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            STATUS_COLORS.get(obj.status, '#999999'), obj.get_status_display()
        )
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'
