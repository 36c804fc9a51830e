import logging

from celery import shared_task
from core.choices import PaymentStatus
from .models import Appointment

logger = logging.getLogger(__name__)


@shared_task
def reconcile_payment_status():
    updated = Appointment.objects.payment_out_of_sync().update(payment_status=PaymentStatus.COMPLETED)
    if updated:
        logger.warning('Reconciled payment status on %s appointments', updated)
    return f"{updated} appointments reconciled."
