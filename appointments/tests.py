from datetime import time, timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APIClient

from appointments.models import Appointment, can_transition
from appointments.tasks import reconcile_payment_status
from barbers.models import Barber
from barbershops.models import Shop
from core.choices import AppointmentStatus, PaymentStatus, UserType
from core.exceptions import IllegalTransition
from services.models import Service


class BookingFixtures:
    def setUp(self):
        User = get_user_model()
        self.owner = User.objects.create_user("owner@test.com", "Shop Owner", "pass12345", user_type=UserType.BARBER)
        self.customer = User.objects.create_user("customer@test.com", "Customer One", "pass12345")
        self.other_customer = User.objects.create_user("other@test.com", "Customer Two", "pass12345")
        self.admin = User.objects.create_user("admin@test.com", "Admin", "pass12345", is_admin=True)

        self.shop = Shop.objects.create(
            owner=self.owner,
            shop_name="Fade Factory",
            address="12 MG Road",
            city="Pune",
            opening_time="09:00",
            closing_time="21:00",
        )
        self.haircut = Service.objects.create(shop=self.shop, service_name="Haircut", duration_minutes=30, price=Decimal("300.00"))
        self.shave = Service.objects.create(shop=self.shop, service_name="Beard", duration_minutes=60, price=Decimal("500.00"))
        self.day = timezone.localdate() + timedelta(days=7)

    def make_appointment(self, **kwargs):
        data = {
            "customer": self.customer,
            "shop": self.shop,
            "service": self.haircut,
            "appointment_date": self.day,
            "start_time": time(10, 0),
            "end_time": time(10, 30),
            "total_amount": self.haircut.price,
        }
        data.update(kwargs)
        return Appointment.objects.create(**data)


class TransitionTableTests(TestCase):
    def test_allowed_pairs(self):
        self.assertTrue(can_transition(AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED))
        self.assertTrue(can_transition(AppointmentStatus.PENDING, AppointmentStatus.CANCELLED))
        self.assertTrue(can_transition(AppointmentStatus.CONFIRMED, AppointmentStatus.COMPLETED))
        self.assertTrue(can_transition(AppointmentStatus.CONFIRMED, AppointmentStatus.NO_SHOW))
        self.assertTrue(can_transition(AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED))

    def test_disallowed_pairs(self):
        self.assertFalse(can_transition(AppointmentStatus.PENDING, AppointmentStatus.COMPLETED))
        self.assertFalse(can_transition(AppointmentStatus.PENDING, AppointmentStatus.NO_SHOW))
        for terminal in (AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW):
            for target in AppointmentStatus.values:
                self.assertFalse(can_transition(terminal, target))


class AppointmentLifecycleTests(BookingFixtures, TestCase):
    def test_new_appointment_defaults(self):
        appointment = self.make_appointment()
        self.assertEqual(appointment.status, AppointmentStatus.PENDING)
        self.assertEqual(appointment.payment_status, PaymentStatus.PENDING)
        self.assertFalse(appointment.payment_confirmed_by_customer)
        self.assertFalse(appointment.payment_confirmed_by_shop)

    def test_happy_path(self):
        appointment = self.make_appointment()
        appointment.transition_to(AppointmentStatus.CONFIRMED)
        appointment.transition_to(AppointmentStatus.COMPLETED)
        appointment.refresh_from_db()
        self.assertEqual(appointment.status, AppointmentStatus.COMPLETED)

    def test_illegal_transition_leaves_status(self):
        appointment = self.make_appointment()
        with self.assertRaises(IllegalTransition):
            appointment.transition_to(AppointmentStatus.COMPLETED)
        appointment.refresh_from_db()
        self.assertEqual(appointment.status, AppointmentStatus.PENDING)

    def test_no_show_only_from_confirmed(self):
        appointment = self.make_appointment()
        with self.assertRaises(IllegalTransition):
            appointment.transition_to(AppointmentStatus.NO_SHOW)
        appointment.transition_to(AppointmentStatus.CONFIRMED)
        appointment.transition_to(AppointmentStatus.NO_SHOW)
        self.assertEqual(appointment.status, AppointmentStatus.NO_SHOW)

    def test_cancel_stores_reason_and_timestamp(self):
        appointment = self.make_appointment()
        appointment.cancel("Running late, sorry")
        appointment.refresh_from_db()
        self.assertEqual(appointment.status, AppointmentStatus.CANCELLED)
        self.assertEqual(appointment.cancellation_reason, "Running late, sorry")
        self.assertIsNotNone(appointment.cancelled_at)

    def test_repeated_cancel_overwrites_reason(self):
        appointment = self.make_appointment()
        appointment.cancel("first")
        appointment.cancel("second")
        appointment.refresh_from_db()
        self.assertEqual(appointment.status, AppointmentStatus.CANCELLED)
        self.assertEqual(appointment.cancellation_reason, "second")

    def test_cannot_cancel_completed(self):
        appointment = self.make_appointment(status=AppointmentStatus.COMPLETED)
        with self.assertRaises(IllegalTransition):
            appointment.cancel("too late")

    def test_confirm_payment_is_idempotent(self):
        appointment = self.make_appointment()
        appointment.confirm_payment("customer")
        appointment.confirm_payment("customer")
        self.assertTrue(appointment.payment_confirmed_by_customer)
        self.assertFalse(appointment.payment_confirmed_by_shop)
        self.assertEqual(appointment.payment_status, PaymentStatus.PENDING)

    def test_payment_settles_in_either_order(self):
        for first, second in (("customer", "shop"), ("shop", "customer")):
            appointment = self.make_appointment(start_time=time(11, 0) if first == "customer" else time(12, 0))
            appointment.confirm_payment(first)
            self.assertEqual(appointment.payment_status, PaymentStatus.PENDING)
            appointment.confirm_payment(second)
            self.assertEqual(appointment.payment_status, PaymentStatus.COMPLETED)
            self.assertEqual(Appointment.objects.get(pk=appointment.pk).payment_status, PaymentStatus.COMPLETED)

    def test_unknown_payment_party(self):
        appointment = self.make_appointment()
        with self.assertRaises(ValueError):
            appointment.confirm_payment("bank")

    def test_save_keeps_payment_status_in_line_with_flags(self):
        appointment = self.make_appointment(payment_status=PaymentStatus.COMPLETED)
        self.assertEqual(appointment.payment_status, PaymentStatus.PENDING)

        appointment.payment_confirmed_by_customer = True
        appointment.payment_confirmed_by_shop = True
        appointment.save(update_fields=["payment_confirmed_by_customer", "payment_confirmed_by_shop"])
        self.assertEqual(Appointment.objects.get(pk=appointment.pk).payment_status, PaymentStatus.COMPLETED)

    def test_status_change_keeps_payment_settled_by_another_writer(self):
        appointment = self.make_appointment()
        appointment.confirm_payment("customer")
        stale = Appointment.objects.get(pk=appointment.pk)

        Appointment.objects.get(pk=appointment.pk).confirm_payment("shop")
        stale.transition_to(AppointmentStatus.CONFIRMED)

        row = Appointment.objects.get(pk=appointment.pk)
        self.assertEqual(row.status, AppointmentStatus.CONFIRMED)
        self.assertTrue(row.payment_confirmed_by_customer)
        self.assertTrue(row.payment_confirmed_by_shop)
        self.assertEqual(row.payment_status, PaymentStatus.COMPLETED)
        self.assertEqual(stale.payment_status, PaymentStatus.COMPLETED)

    def test_cancel_keeps_payment_settled_by_another_writer(self):
        appointment = self.make_appointment()
        stale = Appointment.objects.get(pk=appointment.pk)

        appointment.confirm_payment("customer")
        appointment.confirm_payment("shop")
        stale.cancel("closed early", cancelled_by="shop")

        row = Appointment.objects.get(pk=appointment.pk)
        self.assertEqual(row.status, AppointmentStatus.CANCELLED)
        self.assertEqual(row.payment_status, PaymentStatus.COMPLETED)

    def test_transition_is_checked_against_stored_status(self):
        appointment = self.make_appointment()
        stale = Appointment.objects.get(pk=appointment.pk)

        Appointment.objects.get(pk=appointment.pk).cancel("can't make it")
        with self.assertRaises(IllegalTransition):
            stale.transition_to(AppointmentStatus.CONFIRMED)

        self.assertEqual(Appointment.objects.get(pk=appointment.pk).status, AppointmentStatus.CANCELLED)

    def test_cancel_is_checked_against_stored_status(self):
        appointment = self.make_appointment()
        stale = Appointment.objects.get(pk=appointment.pk)

        appointment.transition_to(AppointmentStatus.CONFIRMED)
        appointment.transition_to(AppointmentStatus.COMPLETED)
        with self.assertRaises(IllegalTransition):
            stale.cancel("too late")

        self.assertEqual(Appointment.objects.get(pk=appointment.pk).status, AppointmentStatus.COMPLETED)

    def test_customer_cancel_limited_to_pending(self):
        appointment = self.make_appointment()
        stale = Appointment.objects.get(pk=appointment.pk)

        appointment.transition_to(AppointmentStatus.CONFIRMED)
        with self.assertRaises(IllegalTransition):
            stale.cancel("changed my mind", allowed_from=(AppointmentStatus.PENDING, AppointmentStatus.CANCELLED))

        self.assertEqual(Appointment.objects.get(pk=appointment.pk).status, AppointmentStatus.CONFIRMED)

    def test_plain_save_does_not_rewrite_payment_status(self):
        appointment = self.make_appointment()
        stale = Appointment.objects.get(pk=appointment.pk)
        appointment.confirm_payment("customer")
        appointment.confirm_payment("shop")

        stale.admin_notes = "VIP"
        stale.save(update_fields=["admin_notes", "updated_at"])

        self.assertEqual(Appointment.objects.get(pk=appointment.pk).payment_status, PaymentStatus.COMPLETED)

    def test_reconcile_repairs_rows_written_in_bulk(self):
        appointment = self.make_appointment()
        Appointment.objects.filter(pk=appointment.pk).update(
            payment_confirmed_by_customer=True,
            payment_confirmed_by_shop=True,
        )

        result = reconcile_payment_status()

        self.assertEqual(result, "1 appointments reconciled.")
        appointment.refresh_from_db()
        self.assertEqual(appointment.payment_status, PaymentStatus.COMPLETED)


class AppointmentCreateApiTests(BookingFixtures, TestCase):
    def setUp(self):
        super().setUp()
        self.client = APIClient()
        self.client.force_authenticate(user=self.customer)
        self.url = reverse("appointment-create")

    def payload(self, **kwargs):
        data = {
            "shop_id": self.shop.pk,
            "service_id": self.haircut.pk,
            "appointment_date": self.day.isoformat(),
            "start_time": "10:00",
            "customer_notes": "Short on the sides",
        }
        data.update(kwargs)
        return data

    def test_creates_pending_booking_with_price_snapshot(self):
        response = self.client.post(self.url, self.payload(), format="json")

        self.assertEqual(response.status_code, 201, response.data)
        appointment = Appointment.objects.get(pk=response.data["id"])
        self.assertEqual(appointment.customer, self.customer)
        self.assertEqual(appointment.status, AppointmentStatus.PENDING)
        self.assertEqual(appointment.payment_status, PaymentStatus.PENDING)
        self.assertEqual(appointment.total_amount, Decimal("300.00"))
        self.assertEqual(appointment.end_time, time(10, 30))
        self.assertEqual(response.data["start_time"], "10:00")

        self.shop.refresh_from_db()
        self.assertEqual(self.shop.total_appointments, 1)

    def test_later_price_change_does_not_touch_booking(self):
        response = self.client.post(self.url, self.payload(), format="json")
        self.haircut.price = Decimal("450.00")
        self.haircut.save()

        appointment = Appointment.objects.get(pk=response.data["id"])
        self.assertEqual(appointment.total_amount, Decimal("300.00"))

    def test_rejects_overlapping_booking(self):
        self.make_appointment(customer=self.other_customer, service=self.shave, start_time=time(10, 0), end_time=time(11, 0))

        response = self.client.post(self.url, self.payload(start_time="10:30"), format="json")

        self.assertEqual(response.status_code, 400)
        self.assertIn("start_time", response.data)
        self.assertEqual(Appointment.objects.count(), 1)

    def test_cancelled_booking_frees_slot(self):
        self.make_appointment(customer=self.other_customer, status=AppointmentStatus.CANCELLED)
        response = self.client.post(self.url, self.payload(), format="json")
        self.assertEqual(response.status_code, 201, response.data)

    def test_back_to_back_booking_allowed(self):
        self.make_appointment(customer=self.other_customer)
        response = self.client.post(self.url, self.payload(start_time="10:30"), format="json")
        self.assertEqual(response.status_code, 201, response.data)

    def test_different_barbers_do_not_conflict(self):
        barber = Barber.objects.create(shop=self.shop, barber_name="Ravi")
        self.make_appointment(customer=self.other_customer)
        response = self.client.post(self.url, self.payload(barber_id=barber.pk), format="json")
        self.assertEqual(response.status_code, 201, response.data)

    def test_rejects_time_outside_hours(self):
        response = self.client.post(self.url, self.payload(start_time="21:00"), format="json")
        self.assertEqual(response.status_code, 400)

    def test_rejects_past_date(self):
        past = timezone.localdate() - timedelta(days=1)
        response = self.client.post(self.url, self.payload(appointment_date=past.isoformat()), format="json")
        self.assertEqual(response.status_code, 400)
        self.assertIn("appointment_date", response.data)

    def test_rejects_inactive_service(self):
        self.haircut.deactivate()
        response = self.client.post(self.url, self.payload(), format="json")
        self.assertEqual(response.status_code, 400)
        self.assertIn("service_id", response.data)

    def test_rejects_suspended_shop(self):
        self.shop.is_active = False
        self.shop.save()
        response = self.client.post(self.url, self.payload(), format="json")
        self.assertEqual(response.status_code, 400)
        self.assertIn("shop_id", response.data)

    def test_missing_fields(self):
        response = self.client.post(self.url, {"shop_id": self.shop.pk}, format="json")
        self.assertEqual(response.status_code, 400)
        self.assertIn("service_id", response.data)

    def test_requires_authentication(self):
        response = APIClient().post(self.url, self.payload(), format="json")
        self.assertEqual(response.status_code, 401)


class AppointmentActionApiTests(BookingFixtures, TestCase):
    def setUp(self):
        super().setUp()
        self.appointment = self.make_appointment()
        self.client = APIClient()

    def post(self, user, name, data):
        self.client.force_authenticate(user=user)
        return self.client.post(reverse(name, args=[self.appointment.pk]), data, format="json")

    def test_owner_confirms_booking(self):
        response = self.post(self.owner, "appointment-status", {"status": "confirmed"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["status"], "confirmed")

    def test_illegal_status_is_conflict(self):
        response = self.post(self.owner, "appointment-status", {"status": "completed"})
        self.assertEqual(response.status_code, 409)
        self.appointment.refresh_from_db()
        self.assertEqual(self.appointment.status, AppointmentStatus.PENDING)

    def test_unknown_status_is_bad_request(self):
        response = self.post(self.owner, "appointment-status", {"status": "in-progress"})
        self.assertEqual(response.status_code, 400)

    def test_customer_cannot_change_status(self):
        response = self.post(self.customer, "appointment-status", {"status": "confirmed"})
        self.assertEqual(response.status_code, 403)

    def test_admin_can_change_status(self):
        response = self.post(self.admin, "appointment-status", {"status": "confirmed"})
        self.assertEqual(response.status_code, 200)

    def test_owner_cancel_through_status(self):
        response = self.post(self.owner, "appointment-status", {"status": "cancelled"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["cancelled_by"], "shop")

    def test_admin_cancel_through_status_is_recorded_as_admin(self):
        response = self.post(self.admin, "appointment-status", {"status": "cancelled"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["cancelled_by"], "admin")

    def test_dual_payment_confirmation(self):
        response = self.post(self.customer, "appointment-confirm-payment", {"confirmed_by": "customer"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["payment_status"], "pending")

        response = self.post(self.owner, "appointment-confirm-payment", {"confirmed_by": "shop"})
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data["payment_confirmed_by_customer"])
        self.assertTrue(response.data["payment_confirmed_by_shop"])
        self.assertEqual(response.data["payment_status"], "completed")

    def test_customer_cannot_confirm_for_shop(self):
        response = self.post(self.customer, "appointment-confirm-payment", {"confirmed_by": "shop"})
        self.assertEqual(response.status_code, 400)
        self.appointment.refresh_from_db()
        self.assertFalse(self.appointment.payment_confirmed_by_shop)

    def test_stranger_cannot_touch_appointment(self):
        response = self.post(self.other_customer, "appointment-confirm-payment", {"confirmed_by": "customer"})
        self.assertEqual(response.status_code, 403)

    def test_customer_cancels_pending(self):
        response = self.post(self.customer, "appointment-cancel", {"reason": "Cancelled by customer"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["status"], "cancelled")
        self.assertEqual(response.data["cancellation_reason"], "Cancelled by customer")
        self.assertEqual(response.data["cancelled_by"], "customer")

    def test_customer_cannot_cancel_confirmed(self):
        self.appointment.transition_to(AppointmentStatus.CONFIRMED)
        response = self.post(self.customer, "appointment-cancel", {"reason": "changed my mind"})
        self.assertEqual(response.status_code, 400)

    def test_owner_can_cancel_confirmed(self):
        self.appointment.transition_to(AppointmentStatus.CONFIRMED)
        response = self.post(self.owner, "appointment-cancel", {"reason": "Barber unwell"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["cancelled_by"], "shop")

    def test_missing_appointment(self):
        self.client.force_authenticate(user=self.owner)
        response = self.client.post(reverse("appointment-status", args=[9999]), {"status": "confirmed"}, format="json")
        self.assertEqual(response.status_code, 404)


class AppointmentListApiTests(BookingFixtures, TestCase):
    def setUp(self):
        super().setUp()
        self.client = APIClient()
        self.mine = self.make_appointment()
        self.theirs = self.make_appointment(customer=self.other_customer, start_time=time(12, 0), end_time=time(12, 30))
        self.url = reverse("my-appointments")

    def test_customer_sees_own_history(self):
        self.client.force_authenticate(user=self.customer)
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, 200)
        self.assertEqual([a["id"] for a in response.data], [self.mine.pk])

    def test_owner_sees_shop_bookings_by_start_time(self):
        self.client.force_authenticate(user=self.owner)
        response = self.client.get(self.url, {"date": self.day.isoformat()})
        self.assertEqual([a["id"] for a in response.data], [self.mine.pk, self.theirs.pk])

    def test_owner_filters_by_status(self):
        self.theirs.transition_to(AppointmentStatus.CONFIRMED)
        self.client.force_authenticate(user=self.owner)
        response = self.client.get(self.url, {"status": "confirmed"})
        self.assertEqual([a["id"] for a in response.data], [self.theirs.pk])

    def test_owner_malformed_date_is_bad_request(self):
        self.client.force_authenticate(user=self.owner)
        response = self.client.get(self.url, {"date": "tomorrow"})
        self.assertEqual(response.status_code, 400)
        self.assertIn("date", response.data)
