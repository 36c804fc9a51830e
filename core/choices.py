from django.db import models


class UserType(models.TextChoices):
    CUSTOMER = "customer", "Customer"
    BARBER = "barber", "Barber"


class AppointmentStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    CONFIRMED = 'confirmed', 'Confirmed'
    COMPLETED = 'completed', 'Completed'
    CANCELLED = 'cancelled', 'Cancelled'
    NO_SHOW = 'no-show', 'No-show'


class PaymentStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    COMPLETED = 'completed', 'Completed'
    FAILED = 'failed', 'Failed'
    REFUNDED = 'refunded', 'Refunded'


class PaymentParty(models.TextChoices):
    CUSTOMER = 'customer', 'Customer'
    SHOP = 'shop', 'Shop'


class CancelledBy(models.TextChoices):
    CUSTOMER = 'customer', 'Customer'
    SHOP = 'shop', 'Shop'
    ADMIN = 'admin', 'Admin'
