from django.contrib import admin
from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ['position', 'menu_item_id', 'name', 'price', 'quantity', 'version']

@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['id', 'restaurant', 'table_number', 'session_id', 'order_status', 'created_at']
    list_filter = ['order_status', 'created_at']
    search_fields = ['restaurant__admin_uid', 'session_id']
    inlines = [OrderItemInline]
