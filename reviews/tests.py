from datetime import time
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APIClient

from appointments.models import Appointment
from barbershops.models import Shop
from core.choices import AppointmentStatus, UserType
from reviews.models import Review
from services.models import Service


class ReviewApiTests(TestCase):
    def setUp(self):
        User = get_user_model()
        self.client = APIClient()
        self.owner = User.objects.create_user("owner@test.com", "Owner", "pass12345", user_type=UserType.BARBER)
        self.customer = User.objects.create_user("customer@test.com", "Customer", "pass12345")
        self.shop = Shop.objects.create(owner=self.owner, shop_name="Sharp Cuts", address="MG Road", city="Pune")
        self.service = Service.objects.create(shop=self.shop, service_name="Haircut", duration_minutes=30, price=Decimal("300"))
        self.client.force_authenticate(user=self.customer)

    def appointment(self, status=AppointmentStatus.COMPLETED, customer=None, hour=10):
        return Appointment.objects.create(
            customer=customer or self.customer,
            shop=self.shop,
            service=self.service,
            appointment_date=timezone.localdate(),
            start_time=time(hour, 0),
            total_amount=self.service.price,
            status=status,
        )

    def submit(self, appointment, rating, **extra):
        data = {"appointment_id": appointment.pk, "rating": rating, **extra}
        return self.client.post(reverse("review-create"), data, format="json")

    def test_review_updates_shop_rating(self):
        response = self.submit(self.appointment(hour=10), 4, review_text="Clean fade.")
        self.assertEqual(response.status_code, 201)
        self.assertTrue(response.data["is_verified_booking"])
        self.assertEqual(response.data["shop"], self.shop.pk)

        self.submit(self.appointment(hour=11), 5)

        self.shop.refresh_from_db()
        self.assertEqual(self.shop.average_rating, Decimal("4.5"))
        self.assertEqual(self.shop.total_reviews, 2)

    def test_pending_appointment_cannot_be_reviewed(self):
        response = self.submit(self.appointment(status=AppointmentStatus.PENDING), 5)
        self.assertEqual(response.status_code, 400)
        self.assertIn("appointment_id", response.data)

    def test_one_review_per_appointment(self):
        appointment = self.appointment()
        self.assertEqual(self.submit(appointment, 5).status_code, 201)
        response = self.submit(appointment, 1)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(Review.objects.count(), 1)

    def test_cannot_review_someone_elses_appointment(self):
        stranger = get_user_model().objects.create_user("other@test.com", "Other", "pass12345")
        response = self.submit(self.appointment(customer=stranger), 5)
        self.assertEqual(response.status_code, 400)

    def test_rating_bounds(self):
        appointment = self.appointment()
        self.assertEqual(self.submit(appointment, 0).status_code, 400)
        self.assertEqual(self.submit(appointment, 6).status_code, 400)

    def test_shop_reviews_are_public(self):
        self.submit(self.appointment(), 5, review_text="Great")
        self.client.force_authenticate(user=None)
        response = self.client.get(reverse("shop-reviews", args=[self.shop.pk]))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data[0]["customer_name"], "Customer")
