from django.contrib import admin
from .models import AuthToken, Restaurant, SuperAdmin


@admin.register(Restaurant)
class RestaurantAdmin(admin.ModelAdmin):
    list_display = ['admin_uid', 'restaurant_name', 'email', 'table_count', 'created_at']
    search_fields = ['admin_uid', 'restaurant_name', 'email']
    readonly_fields = ['password', 'created_at', 'updated_at']

@admin.register(SuperAdmin)
class SuperAdminAdmin(admin.ModelAdmin):
    list_display = ['super_admin_uid', 'name', 'email', 'created_at']
    readonly_fields = ['password', 'created_at', 'updated_at']

@admin.register(AuthToken)
class AuthTokenAdmin(admin.ModelAdmin):
    list_display = ['admin_uid', 'expires_at', 'created_at']
    list_filter = ['expires_at']
    search_fields = ['admin_uid']
