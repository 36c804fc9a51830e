import logging
from datetime import time

import redis
from django.conf import settings
from rest_framework import serializers

logger = logging.getLogger(__name__)

redis_client = redis.Redis.from_url(settings.REDIS_URL)

DEFAULT_BOOKED_DURATION = 30


def time_to_minutes(value):
    """Minutes since midnight for an ``"HH:MM"`` string or a ``time``."""
    if isinstance(value, time):
        return value.hour * 60 + value.minute

    try:
        hours, minutes = str(value).strip().split(':')[:2]
        hours, minutes = int(hours), int(minutes)
    except (TypeError, ValueError):
        raise ValueError(f'Invalid time of day: {value!r}')

    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        raise ValueError(f'Invalid time of day: {value!r}')
    return hours * 60 + minutes


def minutes_to_time(minutes):
    return f'{minutes // 60:02d}:{minutes % 60:02d}'


def iter_slots(opening_time='09:00', closing_time='21:00', interval_minutes=30):
    """
    Yield bookable slots from ``opening_time`` (inclusive) up to but
    excluding ``closing_time``, one every ``interval_minutes``.
    Closing time is always same-day; nothing is yielded when the shop
    opens at or after it closes.
    """
    if isinstance(interval_minutes, bool) or not isinstance(interval_minutes, int) or interval_minutes <= 0:
        raise ValueError('interval_minutes must be a positive integer.')

    current = time_to_minutes(opening_time or '09:00')
    end = time_to_minutes(closing_time or '21:00')

    while current < end:
        yield minutes_to_time(current)
        current += interval_minutes


def generate_slots(opening_time='09:00', closing_time='21:00', interval_minutes=30):
    return list(iter_slots(opening_time, closing_time, interval_minutes))


def overlaps(a_start, a_end, b_start, b_end):
    return a_start < b_end and a_end > b_start


def is_slot_available(slot, booked_slots, service_duration_minutes=30):
    slot_start = time_to_minutes(slot)
    slot_end = slot_start + service_duration_minutes

    for booked in booked_slots:
        booked_start = time_to_minutes(booked['start_time'])
        booked_end = booked.get('end_time')
        if booked_end:
            booked_end = time_to_minutes(booked_end)
        else:
            booked_end = booked_start + DEFAULT_BOOKED_DURATION

        if overlaps(slot_start, slot_end, booked_start, booked_end):
            return False

    return True


def _attempts_key(email):
    return f'login_attempts:{email.strip().lower()}'


def check_login_attempts(email, r=None):
    r = r or redis_client
    attempts = r.get(_attempts_key(email))
    if attempts and int(attempts) >= settings.LOGIN_MAX_ATTEMPTS:
        logger.warning('Login locked for %s after %s failed attempts', email, int(attempts))
        raise serializers.ValidationError('Too many failed attempts. Try again in a few minutes.')


def register_failed_login(email, r=None):
    r = r or redis_client
    key = _attempts_key(email)
    r.incr(key)
    r.expire(key, settings.LOGIN_LOCKOUT_SECONDS)


def clear_login_attempts(email, r=None):
    r = r or redis_client
    r.delete(_attempts_key(email))
