from decimal import Decimal

from django.conf import settings
from django.db import models


class Barber(models.Model):
    shop = models.ForeignKey('barbershops.Shop', on_delete=models.PROTECT, related_name='barbers')
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, blank=True, null=True, related_name='barber_profile')
    barber_name = models.CharField(max_length=120)
    specialization = models.CharField(max_length=120, blank=True, null=True)
    experience_years = models.PositiveIntegerField(blank=True, null=True)
    avatar_url = models.URLField(blank=True, null=True)
    average_rating = models.DecimalField(max_digits=2, decimal_places=1, default=Decimal('0.0'))
    total_appointments = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'barbers'
        ordering = ['barber_name']

    def __str__(self):
        return self.barber_name
