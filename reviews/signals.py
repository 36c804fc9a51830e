from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from barbershops.services import recompute_shop_rating
from .models import Review


@receiver(post_save, sender=Review)
def update_shop_rating_on_save(sender, instance, **kwargs):
    recompute_shop_rating(instance.shop_id)


@receiver(post_delete, sender=Review)
def update_shop_rating_on_delete(sender, instance, **kwargs):
    recompute_shop_rating(instance.shop_id)
