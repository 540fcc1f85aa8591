from django.contrib import admin
from .models import MenuItem


@admin.register(MenuItem)
class MenuItemAdmin(admin.ModelAdmin):
    list_display = ['id', 'restaurant', 'name', 'price', 'category', 'is_available']
    search_fields = ['name', 'restaurant__admin_uid']
    list_filter = ['category', 'is_available']
