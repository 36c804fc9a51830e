from decimal import Decimal

from django.conf import settings
from django.core.validators import RegexValidator
from django.db import models

hhmm_validator = RegexValidator(r'^([01]\d|2[0-3]):[0-5]\d$', 'Use the HH:MM 24-hour format.')


def default_opening_time():
    return settings.SHOP_DEFAULT_OPENING_TIME


def default_closing_time():
    return settings.SHOP_DEFAULT_CLOSING_TIME


class ShopQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)

    def in_city(self, city):
        return self.filter(city__icontains=city.strip())


class Shop(models.Model):
    owner = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='shop')
    shop_name = models.CharField(max_length=150)
    description = models.TextField(blank=True, null=True)
    logo_url = models.URLField(blank=True, null=True)
    cover_image_url = models.URLField(blank=True, null=True)

    address = models.CharField(max_length=255)
    city = models.CharField(max_length=100, db_index=True)
    state = models.CharField(max_length=100, blank=True, null=True)
    postal_code = models.CharField(max_length=20, blank=True, null=True)
    latitude = models.DecimalField(max_digits=9, decimal_places=6, blank=True, null=True)
    longitude = models.DecimalField(max_digits=9, decimal_places=6, blank=True, null=True)

    phone = models.CharField(max_length=20, blank=True, null=True)
    email = models.EmailField(blank=True, null=True)
    website = models.URLField(blank=True, null=True)

    opening_time = models.CharField(max_length=5, default=default_opening_time, validators=[hhmm_validator])
    closing_time = models.CharField(max_length=5, default=default_closing_time, validators=[hhmm_validator])
    weekend_opening_time = models.CharField(max_length=5, blank=True, null=True, validators=[hhmm_validator])
    weekend_closing_time = models.CharField(max_length=5, blank=True, null=True, validators=[hhmm_validator])

    average_rating = models.DecimalField(max_digits=2, decimal_places=1, default=Decimal('0.0'))
    total_reviews = models.PositiveIntegerField(default=0)
    total_appointments = models.PositiveIntegerField(default=0)
    is_verified = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ShopQuerySet.as_manager()

    class Meta:
        db_table = 'shops'
        ordering = ['-average_rating', 'shop_name']

    def __str__(self):
        return self.shop_name

    def hours_for(self, date=None):
        """Opening and closing time for ``date``, using weekend hours on Sat/Sun when set."""
        if date is not None and date.weekday() >= 5 and self.weekend_opening_time and self.weekend_closing_time:
            return self.weekend_opening_time, self.weekend_closing_time
        return (
            self.opening_time or settings.SHOP_DEFAULT_OPENING_TIME,
            self.closing_time or settings.SHOP_DEFAULT_CLOSING_TIME,
        )
