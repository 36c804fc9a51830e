from django.contrib import admin
from .models import Review


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ('id', 'shop', 'customer', 'rating', 'is_verified_booking', 'created_at')
    list_filter = ('rating', 'is_verified_booking')
    search_fields = ('shop__shop_name', 'customer__full_name', 'review_text')
