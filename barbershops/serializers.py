from django.conf import settings
from django.utils import timezone
from rest_framework import serializers

from appointments.models import Appointment
from core.utils import generate_slots, is_slot_available, time_to_minutes
from services.models import Service
from .models import Shop


class ShopSerializer(serializers.ModelSerializer):
    owner_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = Shop
        fields = "__all__"
        read_only_fields = [
            'owner', 'average_rating', 'total_reviews', 'total_appointments',
            'is_verified', 'is_active', 'created_at', 'updated_at',
        ]

    def validate(self, attrs):
        instance = self.instance
        opening = attrs.get('opening_time', instance.opening_time if instance else None)
        closing = attrs.get('closing_time', instance.closing_time if instance else None)
        if opening and closing and time_to_minutes(opening) >= time_to_minutes(closing):
            raise serializers.ValidationError({'closing_time': 'Closing time must be after opening time.'})
        return attrs


class ShopSlotsSerializer(serializers.Serializer):
    date = serializers.DateField()
    service_id = serializers.IntegerField(required=False)
    barber_id = serializers.IntegerField(required=False)

    def validate(self, attrs):
        shop = self.context['shop']

        if attrs['date'] < timezone.localdate():
            raise serializers.ValidationError({'date': 'Dates in the past are not allowed.'})

        duration = settings.SLOT_INTERVAL_MINUTES
        if attrs.get('service_id'):
            service = Service.objects.active().filter(pk=attrs['service_id'], shop=shop).first()
            if not service:
                raise serializers.ValidationError({'service_id': 'Invalid service.'})
            duration = service.duration_minutes

        opening, closing = shop.hours_for(attrs['date'])
        slots = generate_slots(opening, closing, settings.SLOT_INTERVAL_MINUTES)
        booked = list(
            Appointment.objects.booked_on(shop.pk, attrs['date'], attrs.get('barber_id')).values('start_time', 'end_time')
        )

        attrs.update({
            'duration': duration,
            'slots': slots,
            'available_slots': [slot for slot in slots if is_slot_available(slot, booked, duration)],
        })
        return attrs

    def to_representation(self, instance):
        data = self.validated_data
        return {
            'shop_id': self.context['shop'].pk,
            'date': data['date'].strftime('%Y-%m-%d'),
            'service_duration': data['duration'],
            'slots': data['slots'],
            'available_slots': data['available_slots'],
        }
