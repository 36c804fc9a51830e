from django.contrib import admin
from .models import Appointment


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = (
        'id',
        'customer_name',
        'shop',
        'service',
        'appointment_date',
        'start_time',
        'status',
        'payment_status',
        'total_amount',
    )
    list_filter = ('status', 'payment_status', 'appointment_date')
    search_fields = ('customer__full_name', 'customer__email', 'shop__shop_name')
    ordering = ('-appointment_date', 'start_time')
    readonly_fields = ('total_amount', 'payment_status', 'cancelled_at', 'created_at', 'updated_at')

    def customer_name(self, obj):
        return obj.customer.full_name
