import logging

from rest_framework import serializers

from appointments.models import Appointment
from core.choices import AppointmentStatus
from .models import Review

logger = logging.getLogger(__name__)


class ReviewSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source='customer.full_name', read_only=True)
    avatar_url = serializers.CharField(source='customer.avatar_url', read_only=True)

    class Meta:
        model = Review
        fields = [
            'id', 'appointment', 'shop', 'barber', 'customer_name', 'avatar_url',
            'rating', 'review_text', 'is_verified_booking', 'helpful_count', 'created_at',
        ]


class ReviewCreateSerializer(serializers.Serializer):
    appointment_id = serializers.IntegerField()
    rating = serializers.IntegerField(min_value=1, max_value=5)
    review_text = serializers.CharField(required=False, allow_blank=True)

    def validate_appointment_id(self, value):
        user = self.context['request'].user
        appointment = Appointment.objects.filter(pk=value, customer=user).first()
        if not appointment:
            raise serializers.ValidationError('Appointment not found.')
        if appointment.status != AppointmentStatus.COMPLETED:
            raise serializers.ValidationError('Only completed appointments can be reviewed.')
        if appointment.reviews.exists():
            raise serializers.ValidationError('This appointment has already been reviewed.')

        self.context['appointment'] = appointment
        return value

    def create(self, validated_data):
        appointment = self.context['appointment']
        review = Review.objects.create(
            appointment=appointment,
            customer=appointment.customer,
            shop_id=appointment.shop_id,
            barber_id=appointment.barber_id,
            rating=validated_data['rating'],
            review_text=validated_data.get('review_text') or None,
            is_verified_booking=True,
        )
        logger.info('Review %s submitted for appointment %s', review.pk, appointment.pk)
        return review

    def to_representation(self, instance):
        return ReviewSerializer(instance).data
