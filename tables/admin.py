from django.contrib import admin
from .models import Table


@admin.register(Table)
class TableAdmin(admin.ModelAdmin):
    list_display = ['restaurant', 'table_number', 'status', 'active_session_id', 'otp', 'updated_at']
    list_filter = ['status']
    search_fields = ['restaurant__admin_uid', 'active_session_id']
    readonly_fields = ['created_at', 'updated_at']
