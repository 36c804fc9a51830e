from rest_framework import serializers
from .models import Barber


class BarberSerializer(serializers.ModelSerializer):
    class Meta:
        model = Barber
        fields = ['id', 'shop', 'barber_name', 'specialization', 'experience_years', 'avatar_url', 'average_rating', 'total_appointments', 'is_active']
