from django.contrib import admin
from .models import Shop


@admin.register(Shop)
class ShopAdmin(admin.ModelAdmin):
    list_display = ("shop_name", "owner", "city", "average_rating", "total_reviews", "is_verified", "is_active")
    search_fields = ("shop_name", "city", "address", "phone")
    list_filter = ("is_active", "is_verified", "city")
    readonly_fields = ("average_rating", "total_reviews", "total_appointments")
    ordering = ("shop_name",)
