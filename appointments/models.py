import logging

from django.conf import settings
from django.db import models, transaction
from django.utils import timezone

from core.choices import AppointmentStatus, CancelledBy, PaymentParty, PaymentStatus
from core.exceptions import IllegalTransition

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    AppointmentStatus.PENDING: {AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED},
    AppointmentStatus.CONFIRMED: {AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW},
    AppointmentStatus.COMPLETED: set(),
    AppointmentStatus.CANCELLED: set(),
    AppointmentStatus.NO_SHOW: set(),
}

TERMINAL_STATUSES = {AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW}

PAYMENT_FLAGS = {'payment_confirmed_by_customer', 'payment_confirmed_by_shop'}


def can_transition(current, requested):
    return requested in ALLOWED_TRANSITIONS.get(current, set())


class AppointmentQuerySet(models.QuerySet):
    def active(self):
        return self.exclude(status=AppointmentStatus.CANCELLED)

    def booked_on(self, shop_id, date, barber_id=None):
        return self.active().filter(shop_id=shop_id, appointment_date=date, barber_id=barber_id)

    def payment_out_of_sync(self):
        return self.filter(
            payment_confirmed_by_customer=True,
            payment_confirmed_by_shop=True,
        ).exclude(payment_status=PaymentStatus.COMPLETED)


class Appointment(models.Model):
    customer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='appointments')
    shop = models.ForeignKey('barbershops.Shop', on_delete=models.PROTECT, related_name='appointments')
    service = models.ForeignKey('services.Service', on_delete=models.PROTECT, related_name='appointments')
    barber = models.ForeignKey('barbers.Barber', on_delete=models.SET_NULL, blank=True, null=True, related_name='appointments')

    appointment_date = models.DateField()
    start_time = models.TimeField()
    end_time = models.TimeField(blank=True, null=True)

    status = models.CharField(
        max_length=20,
        choices=AppointmentStatus.choices,
        default=AppointmentStatus.PENDING
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING
    )
    payment_confirmed_by_customer = models.BooleanField(default=False)
    payment_confirmed_by_shop = models.BooleanField(default=False)

    # Copied from the service price at booking time.
    total_amount = models.DecimalField(max_digits=10, decimal_places=2)

    customer_notes = models.TextField(blank=True, null=True)
    admin_notes = models.TextField(blank=True, null=True)

    cancellation_reason = models.TextField(blank=True, null=True)
    cancelled_at = models.DateTimeField(blank=True, null=True)
    cancelled_by = models.CharField(max_length=20, choices=CancelledBy.choices, blank=True, null=True)

    reminder_sent = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = AppointmentQuerySet.as_manager()

    class Meta:
        db_table = 'appointments'
        ordering = ['-appointment_date', 'start_time']
        indexes = [
            models.Index(fields=['shop', 'appointment_date'], name='appt_shop_date_idx'),
            models.Index(fields=['customer', 'status'], name='appt_customer_status_idx'),
        ]

    def __str__(self):
        return f'{self.customer} @ {self.shop} {self.appointment_date} {self.start_time:%H:%M}'

    @property
    def is_payment_settled(self):
        return self.payment_confirmed_by_customer and self.payment_confirmed_by_shop

    def sync_payment_status(self):
        """Keep ``payment_status == completed`` exactly when both parties confirmed."""
        if self.is_payment_settled:
            self.payment_status = PaymentStatus.COMPLETED
        elif self.payment_status == PaymentStatus.COMPLETED:
            self.payment_status = PaymentStatus.PENDING

    def save(self, *args, **kwargs):
        update_fields = kwargs.get('update_fields')
        if update_fields is None:
            self.sync_payment_status()
        elif PAYMENT_FLAGS & set(update_fields):
            self.sync_payment_status()
            if 'payment_status' not in update_fields:
                kwargs['update_fields'] = [*update_fields, 'payment_status']
        super().save(*args, **kwargs)

    def _lock(self):
        return type(self).objects.select_for_update().get(pk=self.pk)

    def transition_to(self, new_status, cancelled_by=CancelledBy.SHOP):
        if new_status == AppointmentStatus.CANCELLED:
            return self.cancel(cancelled_by=cancelled_by)

        with transaction.atomic():
            locked = self._lock()
            previous = locked.status
            if not can_transition(previous, new_status):
                raise IllegalTransition(previous, new_status)

            locked.status = new_status
            locked.save(update_fields=['status', 'updated_at'])

        self.refresh_from_db()
        logger.info('Appointment %s moved %s -> %s', self.pk, previous, new_status)
        return self

    def cancel(self, reason=None, cancelled_by=CancelledBy.CUSTOMER, allowed_from=None):
        """
        Cancel against the current row. ``allowed_from`` narrows the statuses
        the caller may cancel from; completed and no-show are never cancellable.
        Re-cancelling only refreshes the reason.
        """
        with transaction.atomic():
            locked = self._lock()
            current = locked.status
            if current in TERMINAL_STATUSES and current != AppointmentStatus.CANCELLED:
                raise IllegalTransition(current, AppointmentStatus.CANCELLED)
            if allowed_from is not None and current not in allowed_from:
                raise IllegalTransition(current, AppointmentStatus.CANCELLED)

            locked.status = AppointmentStatus.CANCELLED
            locked.cancellation_reason = reason
            locked.cancelled_at = timezone.now()
            locked.cancelled_by = cancelled_by
            locked.save(update_fields=['status', 'cancellation_reason', 'cancelled_at', 'cancelled_by', 'updated_at'])

        self.refresh_from_db()
        logger.info('Appointment %s cancelled by %s', self.pk, cancelled_by)
        return self

    def confirm_payment(self, confirmed_by):
        """
        Record one party's payment confirmation. The flag and the derived
        payment status are written together, under a row lock, so the two
        can never disagree.
        """
        if confirmed_by == PaymentParty.CUSTOMER:
            flag = 'payment_confirmed_by_customer'
        elif confirmed_by == PaymentParty.SHOP:
            flag = 'payment_confirmed_by_shop'
        else:
            raise ValueError(f'Unknown payment party: {confirmed_by!r}')

        with transaction.atomic():
            locked = self._lock()
            setattr(locked, flag, True)
            locked.save(update_fields=[flag, 'updated_at'])

        self.refresh_from_db()
        if self.payment_status == PaymentStatus.COMPLETED:
            logger.info('Appointment %s payment settled', self.pk)
        return self
