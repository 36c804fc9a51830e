import logging
from datetime import datetime, timedelta

from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone
from rest_framework import serializers

from barbers.models import Barber
from barbershops.models import Shop
from core.choices import AppointmentStatus, CancelledBy, PaymentParty
from core.permissions import is_platform_admin, owns_shop
from core.utils import generate_slots, is_slot_available
from services.models import Service
from .models import Appointment

logger = logging.getLogger(__name__)

CUSTOMER_CANCELLABLE = (AppointmentStatus.PENDING, AppointmentStatus.CANCELLED)


class AppointmentSerializer(serializers.ModelSerializer):
    shop = serializers.SerializerMethodField()
    service = serializers.SerializerMethodField()
    customer = serializers.SerializerMethodField()
    barber = serializers.SerializerMethodField()
    start_time = serializers.TimeField(format='%H:%M')
    end_time = serializers.TimeField(format='%H:%M')

    class Meta:
        model = Appointment
        fields = [
            'id', 'status', 'appointment_date', 'start_time', 'end_time',
            'shop', 'service', 'customer', 'barber', 'total_amount',
            'payment_status', 'payment_confirmed_by_customer', 'payment_confirmed_by_shop',
            'customer_notes', 'cancellation_reason', 'cancelled_at', 'cancelled_by',
            'created_at', 'updated_at',
        ]

    def get_shop(self, obj):
        return {
            'id': obj.shop_id,
            'shop_name': obj.shop.shop_name,
            'address': obj.shop.address,
            'city': obj.shop.city,
        }

    def get_service(self, obj):
        return {
            'id': obj.service_id,
            'service_name': obj.service.service_name,
            'price': obj.service.price,
            'duration_minutes': obj.service.duration_minutes,
        }

    def get_customer(self, obj):
        return {
            'id': obj.customer_id,
            'full_name': obj.customer.full_name,
            'phone': obj.customer.phone,
        }

    def get_barber(self, obj):
        if not obj.barber_id:
            return None
        return {'id': obj.barber_id, 'barber_name': obj.barber.barber_name}


class AppointmentCreateSerializer(serializers.Serializer):
    shop_id = serializers.IntegerField()
    service_id = serializers.IntegerField()
    barber_id = serializers.IntegerField(required=False, allow_null=True)
    appointment_date = serializers.DateField()
    start_time = serializers.TimeField()
    customer_notes = serializers.CharField(required=False, allow_blank=True)

    def _validate_shop(self, attrs):
        shop = Shop.objects.filter(pk=attrs['shop_id'], is_active=True).first()
        if not shop:
            raise serializers.ValidationError({'shop_id': 'Shop not found or not accepting bookings.'})
        attrs['shop'] = shop
        return attrs

    def _validate_service(self, attrs):
        try:
            attrs['service'] = Service.objects.active().get(pk=attrs['service_id'], shop=attrs['shop'])
        except Service.DoesNotExist:
            raise serializers.ValidationError({'service_id': 'Invalid or unavailable service.'})
        return attrs

    def _validate_barber(self, attrs):
        barber_id = attrs.get('barber_id')
        attrs['barber'] = None
        if barber_id:
            barber = Barber.objects.filter(pk=barber_id, shop=attrs['shop'], is_active=True).first()
            if not barber:
                raise serializers.ValidationError({'barber_id': 'Barber does not work at this shop.'})
            attrs['barber'] = barber
        return attrs

    def _validate_date(self, attrs):
        if attrs['appointment_date'] < timezone.localdate():
            raise serializers.ValidationError({'appointment_date': 'Dates in the past are not allowed.'})
        return attrs

    def _validate_slot(self, attrs):
        shop = attrs['shop']
        opening, closing = shop.hours_for(attrs['appointment_date'])
        slots = generate_slots(opening, closing, settings.SLOT_INTERVAL_MINUTES)
        if attrs['start_time'].strftime('%H:%M') not in slots:
            raise serializers.ValidationError({'start_time': 'Time is outside the shop opening hours.'})

        start_dt = datetime.combine(attrs['appointment_date'], attrs['start_time'])
        attrs['end_time'] = (start_dt + timedelta(minutes=attrs['service'].duration_minutes)).time()
        return attrs

    def validate(self, attrs):
        attrs = self._validate_shop(attrs)
        attrs = self._validate_service(attrs)
        attrs = self._validate_barber(attrs)
        attrs = self._validate_date(attrs)
        attrs = self._validate_slot(attrs)
        return attrs

    def create(self, validated_data):
        request = self.context['request']
        service = validated_data['service']
        shop = validated_data['shop']
        barber = validated_data['barber']
        date = validated_data['appointment_date']
        start_time = validated_data['start_time']

        with transaction.atomic():
            # Serialize bookings per shop so the availability check and the insert cannot interleave.
            Shop.objects.select_for_update().get(pk=shop.pk)

            booked = Appointment.objects.booked_on(shop.pk, date, barber.pk if barber else None).values('start_time', 'end_time')
            if not is_slot_available(start_time, booked, service.duration_minutes):
                raise serializers.ValidationError({'start_time': 'This slot is no longer available.'})

            appointment = Appointment.objects.create(
                customer=request.user,
                shop=shop,
                service=service,
                barber=barber,
                appointment_date=date,
                start_time=start_time,
                end_time=validated_data['end_time'],
                total_amount=service.price,
                customer_notes=validated_data.get('customer_notes') or None,
            )
            Shop.objects.filter(pk=shop.pk).update(total_appointments=F('total_appointments') + 1)

        logger.info('Appointment %s booked by %s at shop %s', appointment.pk, request.user.pk, shop.pk)
        return appointment

    def to_representation(self, instance):
        return AppointmentSerializer(instance, context=self.context).data


class AppointmentStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=AppointmentStatus.choices)


class PaymentConfirmSerializer(serializers.Serializer):
    confirmed_by = serializers.ChoiceField(choices=PaymentParty.choices)

    def validate_confirmed_by(self, value):
        user = self.context['request'].user
        appointment = self.context['appointment']

        if value == PaymentParty.CUSTOMER and appointment.customer_id != user.pk:
            raise serializers.ValidationError('Only the customer can confirm payment as customer.')
        if value == PaymentParty.SHOP and not (owns_shop(user, appointment.shop) or is_platform_admin(user)):
            raise serializers.ValidationError('Only the shop can confirm payment as shop.')
        return value


class AppointmentCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate(self, attrs):
        user = self.context['request'].user
        appointment = self.context['appointment']

        if is_platform_admin(user):
            attrs['cancelled_by'] = CancelledBy.ADMIN
        elif owns_shop(user, appointment.shop):
            attrs['cancelled_by'] = CancelledBy.SHOP
        else:
            if appointment.status not in CUSTOMER_CANCELLABLE:
                raise serializers.ValidationError({'status': 'Only pending appointments can be cancelled.'})
            attrs['cancelled_by'] = CancelledBy.CUSTOMER
            attrs['allowed_from'] = CUSTOMER_CANCELLABLE

        attrs['reason'] = attrs.get('reason')
        attrs.setdefault('allowed_from', None)
        return attrs


class AppointmentFilterSerializer(serializers.Serializer):
    date = serializers.DateField(required=False)
    status = serializers.ChoiceField(choices=AppointmentStatus.choices, required=False)
