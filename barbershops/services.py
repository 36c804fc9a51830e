import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict

from django.contrib.auth import get_user_model
from django.db.models import Avg, Count, Q, Sum
from django.utils import timezone

from appointments.models import Appointment
from core.choices import AppointmentStatus, PaymentStatus
from reviews.models import Review
from .models import Shop

logger = logging.getLogger(__name__)


def compute_shop_statistics(shop_id, today=None) -> Dict:
    """
    Dashboard numbers for a shop, recomputed from its whole appointment
    history on every call. Revenue only counts completed appointments;
    pending payments are counted by ``payment_status``, not ``status``.
    """
    today = today or timezone.localdate()
    completed = Q(status=AppointmentStatus.COMPLETED)

    stats = Appointment.objects.filter(shop_id=shop_id).aggregate(
        total_appointments=Count('id'),
        today_appointments=Count('id', filter=Q(appointment_date=today)),
        completed_appointments=Count('id', filter=completed),
        total_revenue=Sum('total_amount', filter=completed),
        pending_payments=Count('id', filter=Q(payment_status=PaymentStatus.PENDING)),
    )
    stats['total_revenue'] = stats['total_revenue'] or Decimal('0')
    return stats


def round_rating(value) -> Decimal:
    return Decimal(str(value)).quantize(Decimal('0.1'), rounding=ROUND_HALF_UP)


def recompute_shop_rating(shop_id) -> None:
    """Rewrite the shop's average rating and review count from all of its reviews."""
    summary = Review.objects.filter(shop_id=shop_id).aggregate(
        average=Avg('rating'),
        total=Count('id'),
    )
    average = round_rating(summary['average']) if summary['total'] else Decimal('0.0')

    Shop.objects.filter(pk=shop_id).update(average_rating=average, total_reviews=summary['total'])
    logger.info('Shop %s rating recomputed: %s over %s reviews', shop_id, average, summary['total'])


def platform_statistics() -> Dict:
    revenue = Appointment.objects.filter(status=AppointmentStatus.COMPLETED).aggregate(total=Sum('total_amount'))['total']
    return {
        'total_users': get_user_model().objects.count(),
        'total_shops': Shop.objects.count(),
        'active_shops': Shop.objects.active().count(),
        'total_appointments': Appointment.objects.count(),
        'total_revenue': revenue or Decimal('0'),
    }
