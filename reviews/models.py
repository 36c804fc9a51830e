from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class Review(models.Model):
    appointment = models.ForeignKey('appointments.Appointment', on_delete=models.PROTECT, related_name='reviews')
    customer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='reviews')
    shop = models.ForeignKey('barbershops.Shop', on_delete=models.PROTECT, related_name='reviews')
    barber = models.ForeignKey('barbers.Barber', on_delete=models.SET_NULL, blank=True, null=True, related_name='reviews')

    rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    review_text = models.TextField(blank=True, null=True)
    is_verified_booking = models.BooleanField(default=False)
    helpful_count = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'reviews'
        ordering = ['-created_at']

    def __str__(self):
        return f'{self.rating}/5 for {self.shop}'
