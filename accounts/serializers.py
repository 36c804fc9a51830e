import logging

from django.contrib.auth import authenticate, user_logged_in
from django.db import transaction
from rest_framework import serializers
from rest_framework_simplejwt.tokens import RefreshToken

from barbershops.models import Shop, hhmm_validator
from core.choices import UserType
from core.utils import check_login_attempts, clear_login_attempts, register_failed_login, time_to_minutes
from .models import User

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def issue_tokens(user):
    refresh = RefreshToken.for_user(user)
    return {
        'access': str(refresh.access_token),
        'refresh': str(refresh),
    }


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'email', 'full_name', 'phone', 'avatar_url', 'bio', 'user_type', 'is_admin', 'is_active', 'date_joined']
        read_only_fields = ['id', 'email', 'user_type', 'is_admin', 'is_active', 'date_joined']


class RegisterSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)
    confirm_password = serializers.CharField(write_only=True)
    full_name = serializers.CharField(max_length=120)
    phone = serializers.CharField(required=False, allow_blank=True)

    def validate_email(self, value):
        email = value.strip().lower()
        if User.objects.filter(email=email).exists():
            raise serializers.ValidationError('An account with this email already exists.')
        return email

    def validate(self, attrs):
        if attrs['password'] != attrs['confirm_password']:
            raise serializers.ValidationError({'confirm_password': 'Passwords do not match.'})
        if len(attrs['password']) < MIN_PASSWORD_LENGTH:
            raise serializers.ValidationError({'password': f'Password must be at least {MIN_PASSWORD_LENGTH} characters.'})
        return attrs

    def _create_user(self, validated_data, user_type):
        return User.objects.create_user(
            email=validated_data['email'],
            full_name=validated_data['full_name'],
            password=validated_data['password'],
            phone=validated_data.get('phone') or None,
            user_type=user_type,
        )

    def create(self, validated_data):
        user = self._create_user(validated_data, UserType.CUSTOMER)
        logger.info('Registered customer %s', user.pk)
        return {**issue_tokens(user), 'user': UserSerializer(user).data}


class ShopOwnerRegisterSerializer(RegisterSerializer):
    """
    Registers a shop owner: the account, its profile and the shop are
    written in one transaction, so a failure at any step leaves no
    orphaned account behind.
    """
    shop_name = serializers.CharField(max_length=150)
    description = serializers.CharField(required=False, allow_blank=True)
    address = serializers.CharField(max_length=255)
    city = serializers.CharField(max_length=100)
    state = serializers.CharField(required=False, allow_blank=True)
    postal_code = serializers.CharField(required=False, allow_blank=True)
    shop_phone = serializers.CharField(required=False, allow_blank=True)
    shop_email = serializers.EmailField(required=False, allow_blank=True)
    opening_time = serializers.CharField(required=False, validators=[hhmm_validator])
    closing_time = serializers.CharField(required=False, validators=[hhmm_validator])

    def validate(self, attrs):
        attrs = super().validate(attrs)
        opening = attrs.get('opening_time')
        closing = attrs.get('closing_time')
        if opening and closing and time_to_minutes(opening) >= time_to_minutes(closing):
            raise serializers.ValidationError({'closing_time': 'Closing time must be after opening time.'})
        return attrs

    def create(self, validated_data):
        with transaction.atomic():
            user = self._create_user(validated_data, UserType.BARBER)
            shop_fields = {
                'shop_name': validated_data['shop_name'],
                'description': validated_data.get('description') or None,
                'address': validated_data['address'],
                'city': validated_data['city'],
                'state': validated_data.get('state') or None,
                'postal_code': validated_data.get('postal_code') or None,
                'phone': validated_data.get('shop_phone') or None,
                'email': validated_data.get('shop_email') or None,
            }
            if validated_data.get('opening_time'):
                shop_fields['opening_time'] = validated_data['opening_time']
            if validated_data.get('closing_time'):
                shop_fields['closing_time'] = validated_data['closing_time']
            shop = Shop.objects.create(owner=user, **shop_fields)

        logger.info('Registered shop owner %s with shop %s', user.pk, shop.pk)
        return {**issue_tokens(user), 'user': UserSerializer(user).data, 'shop_id': shop.pk}


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs):
        request = self.context.get('request')
        email = attrs['email'].strip().lower()

        check_login_attempts(email)

        user = authenticate(request, email=email, password=attrs['password'])
        if not user:
            register_failed_login(email)
            raise serializers.ValidationError('Invalid email or password.')

        clear_login_attempts(email)
        user_logged_in.send(sender=user.__class__, request=request, user=user)

        return {**issue_tokens(user), 'user': UserSerializer(user).data}
