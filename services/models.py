from django.core.validators import MinValueValidator
from django.db import models


class ServiceQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)


class Service(models.Model):
    shop = models.ForeignKey('barbershops.Shop', on_delete=models.PROTECT, related_name='services')
    service_name = models.CharField(max_length=100)
    description = models.TextField(blank=True, null=True)
    duration_minutes = models.PositiveIntegerField(validators=[MinValueValidator(1)], help_text='Duration in minutes')
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    category = models.CharField(max_length=50, blank=True, null=True)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ServiceQuerySet.as_manager()

    class Meta:
        db_table = 'services'
        ordering = ['service_name']

    def __str__(self):
        return self.service_name

    def deactivate(self):
        self.is_active = False
        self.save(update_fields=['is_active', 'updated_at'])
