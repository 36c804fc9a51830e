from django.contrib import admin
from .models import Barber


@admin.register(Barber)
class BarberAdmin(admin.ModelAdmin):
    list_display = ("id", "barber_name", "shop", "specialization", "is_active")
    list_filter = ("is_active",)
    search_fields = ("barber_name", "shop__shop_name", "user__email")
    autocomplete_fields = ("shop",)
