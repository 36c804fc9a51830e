from django.contrib import admin
from .models import Service


@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = ['service_name', 'shop', 'duration_minutes', 'price', 'is_active']
    list_filter = ['is_active', 'category']
    search_fields = ['service_name', 'shop__shop_name']
