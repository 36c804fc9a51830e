from rest_framework import serializers
from .models import Service


class ServiceSerializer(serializers.ModelSerializer):
    shop_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Service
        fields = ['id', 'shop_id', 'service_name', 'description', 'duration_minutes', 'price', 'category', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['id', 'shop_id', 'created_at', 'updated_at']
