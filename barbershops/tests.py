from datetime import time, timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APIClient

from appointments.models import Appointment
from barbershops.models import Shop
from barbershops.services import compute_shop_statistics, platform_statistics, recompute_shop_rating, round_rating
from core.choices import AppointmentStatus, UserType
from reviews.models import Review
from services.models import Service


def make_user(email, **kwargs):
    return get_user_model().objects.create_user(email, email.split("@")[0].title(), "pass12345", **kwargs)


def make_shop(owner, **kwargs):
    data = {"shop_name": f"{owner.full_name} Cuts", "address": "1 Main Road", "city": "Mumbai"}
    data.update(kwargs)
    return Shop.objects.create(owner=owner, **data)


class ShopStatisticsTests(TestCase):
    def setUp(self):
        self.owner = make_user("owner@test.com", user_type=UserType.BARBER)
        self.customer = make_user("customer@test.com")
        self.shop = make_shop(self.owner)
        self.service = Service.objects.create(shop=self.shop, service_name="Haircut", duration_minutes=30, price=Decimal("300"))
        self.today = timezone.localdate()

    def book(self, **kwargs):
        data = {
            "customer": self.customer,
            "shop": self.shop,
            "service": self.service,
            "appointment_date": self.today,
            "start_time": time(10, 0),
            "total_amount": Decimal("300"),
        }
        data.update(kwargs)
        return Appointment.objects.create(**data)

    def test_revenue_counts_completed_only(self):
        self.book(status=AppointmentStatus.COMPLETED, total_amount=Decimal("500"))
        self.book(status=AppointmentStatus.PENDING, total_amount=Decimal("300"), start_time=time(11, 0))

        stats = compute_shop_statistics(self.shop.pk)

        self.assertEqual(stats["total_appointments"], 2)
        self.assertEqual(stats["completed_appointments"], 1)
        self.assertEqual(stats["total_revenue"], Decimal("500"))
        self.assertEqual(stats["today_appointments"], 2)
        self.assertEqual(stats["pending_payments"], 2)

    def test_pending_payments_follow_payment_status(self):
        completed = self.book(status=AppointmentStatus.COMPLETED)
        completed.confirm_payment("customer")
        completed.confirm_payment("shop")
        self.book(status=AppointmentStatus.CANCELLED, appointment_date=self.today + timedelta(days=2))

        stats = compute_shop_statistics(self.shop.pk)

        self.assertEqual(stats["pending_payments"], 1)
        self.assertEqual(stats["today_appointments"], 1)

    def test_empty_shop(self):
        stats = compute_shop_statistics(self.shop.pk)
        self.assertEqual(stats, {
            "total_appointments": 0,
            "today_appointments": 0,
            "completed_appointments": 0,
            "total_revenue": Decimal("0"),
            "pending_payments": 0,
        })

    def test_other_shops_are_ignored(self):
        other = make_shop(make_user("rival@test.com"))
        other_service = Service.objects.create(shop=other, service_name="Trim", duration_minutes=30, price=Decimal("100"))
        self.book(shop=other, service=other_service, status=AppointmentStatus.COMPLETED)
        self.assertEqual(compute_shop_statistics(self.shop.pk)["total_appointments"], 0)


class ShopRatingTests(TestCase):
    def setUp(self):
        self.owner = make_user("owner@test.com", user_type=UserType.BARBER)
        self.customer = make_user("customer@test.com")
        self.shop = make_shop(self.owner)
        self.service = Service.objects.create(shop=self.shop, service_name="Haircut", duration_minutes=30, price=Decimal("300"))

    def review(self, rating):
        appointment = Appointment.objects.create(
            customer=self.customer,
            shop=self.shop,
            service=self.service,
            appointment_date=timezone.localdate(),
            start_time=time(10, 0),
            total_amount=self.service.price,
            status=AppointmentStatus.COMPLETED,
        )
        return Review.objects.create(appointment=appointment, customer=self.customer, shop=self.shop, rating=rating, is_verified_booking=True)

    def test_average_of_all_reviews(self):
        for rating in (4, 5, 3):
            self.review(rating)

        recompute_shop_rating(self.shop.pk)

        self.shop.refresh_from_db()
        self.assertEqual(self.shop.average_rating, Decimal("4.0"))
        self.assertEqual(self.shop.total_reviews, 3)

    def test_rounds_half_up_to_one_decimal(self):
        self.assertEqual(round_rating(4.25), Decimal("4.3"))
        self.assertEqual(round_rating(4.333333), Decimal("4.3"))
        self.assertEqual(round_rating(4.666666), Decimal("4.7"))

    def test_deleting_last_review_resets_rating(self):
        review = self.review(5)
        review.delete()
        self.shop.refresh_from_db()
        self.assertEqual(self.shop.average_rating, Decimal("0.0"))
        self.assertEqual(self.shop.total_reviews, 0)


class ShopApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.owner = make_user("owner@test.com", user_type=UserType.BARBER)
        self.shop = make_shop(self.owner, city="Navi Mumbai", average_rating=Decimal("4.5"), opening_time="10:00", closing_time="12:00")
        self.second = make_shop(make_user("second@test.com"), city="Mumbai", average_rating=Decimal("4.8"))
        self.suspended = make_shop(make_user("third@test.com"), city="Mumbai", is_active=False)
        self.pune = make_shop(make_user("fourth@test.com"), city="Pune")
        self.service = Service.objects.create(shop=self.shop, service_name="Haircut", duration_minutes=60, price=Decimal("400"))
        Service.objects.create(shop=self.shop, service_name="Retired", duration_minutes=30, price=Decimal("100"), is_active=False)

    def test_search_by_city_is_case_insensitive_substring(self):
        response = self.client.get(reverse("shop-list"), {"city": "mumbai"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual([s["id"] for s in response.data], [self.second.pk, self.shop.pk])

    def test_list_hides_suspended_shops(self):
        response = self.client.get(reverse("shop-list"))
        self.assertNotIn(self.suspended.pk, [s["id"] for s in response.data])

    def test_services_lists_active_only(self):
        response = self.client.get(reverse("shop-services", args=[self.shop.pk]))
        self.assertEqual([s["service_name"] for s in response.data], ["Haircut"])

    def test_slots_mark_booked_times(self):
        day = timezone.localdate() + timedelta(days=3)
        Appointment.objects.create(
            customer=make_user("c@test.com"),
            shop=self.shop,
            service=self.service,
            appointment_date=day,
            start_time=time(11, 0),
            end_time=time(12, 0),
            total_amount=self.service.price,
        )

        response = self.client.get(reverse("shop-slots", args=[self.shop.pk]), {"date": day.isoformat(), "service_id": self.service.pk})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["slots"], ["10:00", "10:30", "11:00", "11:30"])
        self.assertEqual(response.data["available_slots"], ["10:00"])
        self.assertEqual(response.data["service_duration"], 60)

    def test_slots_reject_past_date(self):
        past = timezone.localdate() - timedelta(days=1)
        response = self.client.get(reverse("shop-slots", args=[self.shop.pk]), {"date": past.isoformat()})
        self.assertEqual(response.status_code, 400)

    def test_my_shop_not_found_for_customer(self):
        self.client.force_authenticate(user=make_user("nobody@test.com"))
        response = self.client.get(reverse("my-shop"))
        self.assertEqual(response.status_code, 404)

    def test_owner_updates_hours(self):
        self.client.force_authenticate(user=self.owner)
        response = self.client.patch(reverse("my-shop"), {"opening_time": "08:00", "average_rating": "5.0"}, format="json")
        self.assertEqual(response.status_code, 200)
        self.shop.refresh_from_db()
        self.assertEqual(self.shop.opening_time, "08:00")
        self.assertEqual(self.shop.average_rating, Decimal("4.5"))

    def test_owner_cannot_invert_hours(self):
        self.client.force_authenticate(user=self.owner)
        response = self.client.patch(reverse("my-shop"), {"opening_time": "13:00"}, format="json")
        self.assertEqual(response.status_code, 400)

    def test_stats_only_for_owner_or_admin(self):
        url = reverse("shop-stats", args=[self.shop.pk])

        self.client.force_authenticate(user=make_user("snoop@test.com"))
        self.assertEqual(self.client.get(url).status_code, 403)

        self.client.force_authenticate(user=self.owner)
        response = self.client.get(url)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["total_appointments"], 0)

        response = self.client.get(reverse("my-shop-stats"))
        self.assertEqual(response.status_code, 200)


class AdminApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = make_user("admin@test.com", is_admin=True)
        self.owner = make_user("owner@test.com", user_type=UserType.BARBER)
        self.shop = make_shop(self.owner)

    def test_toggle_suspends_and_restores(self):
        self.client.force_authenticate(user=self.admin)
        url = reverse("admin-shop-toggle-active", args=[self.shop.pk])

        response = self.client.post(url)
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.data["is_active"])
        self.assertTrue(Shop.objects.filter(pk=self.shop.pk).exists())

        response = self.client.post(url)
        self.assertTrue(response.data["is_active"])

    def test_verify_shop(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(reverse("admin-shop-verify", args=[self.shop.pk]))
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data["is_verified"])

    def test_admin_list_includes_suspended(self):
        self.shop.is_active = False
        self.shop.save()
        self.client.force_authenticate(user=self.admin)
        response = self.client.get(reverse("admin-shops"))
        self.assertEqual([s["id"] for s in response.data], [self.shop.pk])

    def test_non_admin_rejected(self):
        self.client.force_authenticate(user=self.owner)
        self.assertEqual(self.client.get(reverse("admin-stats")).status_code, 403)
        self.assertEqual(self.client.post(reverse("admin-shop-toggle-active", args=[self.shop.pk])).status_code, 403)

    def test_platform_statistics(self):
        stats = platform_statistics()
        self.assertEqual(stats["total_users"], 2)
        self.assertEqual(stats["total_shops"], 1)
        self.assertEqual(stats["active_shops"], 1)
        self.assertEqual(stats["total_revenue"], Decimal("0"))
