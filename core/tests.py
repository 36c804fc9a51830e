from datetime import time

from django.test import SimpleTestCase, override_settings
from rest_framework import serializers

from core.utils import (
    check_login_attempts,
    clear_login_attempts,
    generate_slots,
    is_slot_available,
    iter_slots,
    register_failed_login,
    time_to_minutes,
)


class FakeRedis:
    """In-memory stand-in for the handful of redis calls the login throttle makes."""

    def __init__(self):
        self.store = {}
        self.ttls = {}

    def get(self, key):
        value = self.store.get(key)
        return None if value is None else str(value).encode()

    def incr(self, key):
        self.store[key] = int(self.store.get(key, 0)) + 1
        return self.store[key]

    def expire(self, key, seconds):
        self.ttls[key] = seconds

    def delete(self, key):
        self.store.pop(key, None)
        self.ttls.pop(key, None)


class SlotGenerationTests(SimpleTestCase):
    def test_default_day(self):
        slots = generate_slots("09:00", "21:00", 30)
        self.assertEqual(len(slots), 24)
        self.assertEqual(slots[0], "09:00")
        self.assertEqual(slots[-1], "20:30")

    def test_defaults_match_standard_hours(self):
        self.assertEqual(generate_slots(), generate_slots("09:00", "21:00", 30))

    def test_empty_when_opening_equals_closing(self):
        self.assertEqual(generate_slots("09:00", "09:00", 30), [])

    def test_empty_when_opening_after_closing(self):
        self.assertEqual(generate_slots("22:00", "02:00", 30), [])

    def test_count_and_ordering_for_even_windows(self):
        cases = [("08:00", "12:00", 15), ("10:30", "18:30", 60), ("00:00", "23:00", 20)]
        for opening, closing, interval in cases:
            slots = generate_slots(opening, closing, interval)
            expected = (time_to_minutes(closing) - time_to_minutes(opening)) // interval
            self.assertEqual(len(slots), expected)
            self.assertEqual(slots[0], opening)
            minutes = [time_to_minutes(s) for s in slots]
            self.assertEqual(minutes, sorted(set(minutes)))

    def test_last_slot_starts_before_closing_on_uneven_window(self):
        slots = generate_slots("09:00", "10:00", 45)
        self.assertEqual(slots, ["09:00", "09:45"])

    def test_slots_are_zero_padded(self):
        self.assertEqual(generate_slots("07:05", "07:20", 5), ["07:05", "07:10", "07:15"])

    def test_iter_slots_is_lazy_and_restartable(self):
        first = iter_slots("09:00", "10:00", 30)
        self.assertEqual(next(first), "09:00")
        self.assertEqual(list(iter_slots("09:00", "10:00", 30)), ["09:00", "09:30"])

    def test_invalid_interval(self):
        with self.assertRaises(ValueError):
            generate_slots("09:00", "10:00", 0)
        with self.assertRaises(ValueError):
            generate_slots("09:00", "10:00", -15)

    def test_invalid_time(self):
        with self.assertRaises(ValueError):
            generate_slots("9am", "10:00", 30)
        with self.assertRaises(ValueError):
            time_to_minutes("25:00")


class SlotAvailabilityTests(SimpleTestCase):
    booked = [{"start_time": "10:00", "end_time": "10:30"}]

    def test_exact_overlap_is_unavailable(self):
        self.assertFalse(is_slot_available("10:00", self.booked, 30))

    def test_back_to_back_is_available(self):
        self.assertTrue(is_slot_available("10:30", self.booked, 30))
        self.assertTrue(is_slot_available("09:30", self.booked, 30))

    def test_long_service_runs_into_booking(self):
        self.assertFalse(is_slot_available("09:30", self.booked, 45))

    def test_missing_end_time_counts_as_half_hour(self):
        booked = [{"start_time": "10:00", "end_time": None}]
        self.assertFalse(is_slot_available("10:15", booked, 10))
        self.assertTrue(is_slot_available("10:30", booked, 10))

    def test_accepts_time_objects(self):
        booked = [{"start_time": time(14, 0), "end_time": time(15, 0)}]
        self.assertFalse(is_slot_available(time(14, 30), booked, 30))
        self.assertTrue(is_slot_available(time(15, 0), booked, 30))

    def test_nothing_booked(self):
        self.assertTrue(is_slot_available("12:00", [], 60))

    def test_duration_by_keyword(self):
        self.assertFalse(is_slot_available("09:00", self.booked, service_duration_minutes=90))


@override_settings(LOGIN_MAX_ATTEMPTS=2, LOGIN_LOCKOUT_SECONDS=60)
class LoginThrottleTests(SimpleTestCase):
    def setUp(self):
        self.r = FakeRedis()

    def test_locks_after_max_attempts(self):
        check_login_attempts("a@test.com", r=self.r)
        register_failed_login("a@test.com", r=self.r)
        register_failed_login("A@test.com ", r=self.r)

        self.assertEqual(self.r.ttls["login_attempts:a@test.com"], 60)
        with self.assertRaises(serializers.ValidationError):
            check_login_attempts("a@test.com", r=self.r)

    def test_clear_resets_counter(self):
        register_failed_login("b@test.com", r=self.r)
        register_failed_login("b@test.com", r=self.r)
        clear_login_attempts("b@test.com", r=self.r)
        check_login_attempts("b@test.com", r=self.r)
