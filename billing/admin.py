from django.contrib import admin
from .models import Bill, BillSequence, SalesHistory


@admin.register(Bill)
class BillAdmin(admin.ModelAdmin):
    list_display = ['bill_number', 'restaurant', 'table_number', 'total_amount', 'payment_mode', 'is_final',
                    'generated_at']
    list_filter = ['is_final', 'payment_mode', 'generated_at']
    search_fields = ['bill_number', 'restaurant__admin_uid', 'session_id']

@admin.register(SalesHistory)
class SalesHistoryAdmin(admin.ModelAdmin):
    list_display = ['bill', 'restaurant', 'table_number', 'total_amount', 'payment_mode', 'created_at']
    list_filter = ['payment_mode', 'created_at']
    readonly_fields = ['bill', 'restaurant', 'table_number', 'total_amount', 'items_sold', 'payment_mode']

admin.site.register(BillSequence)
