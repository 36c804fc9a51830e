from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from barbershops.models import Shop
from core.choices import UserType
from services.models import Service


class ServiceCatalogTests(TestCase):
    def setUp(self):
        User = get_user_model()
        self.client = APIClient()
        self.owner = User.objects.create_user("owner@test.com", "Owner", "pass12345", user_type=UserType.BARBER)
        self.rival = User.objects.create_user("rival@test.com", "Rival", "pass12345", user_type=UserType.BARBER)
        self.shop = Shop.objects.create(owner=self.owner, shop_name="Sharp Cuts", address="MG Road", city="Pune")
        self.rival_shop = Shop.objects.create(owner=self.rival, shop_name="Other Cuts", address="FC Road", city="Pune")
        self.service = Service.objects.create(shop=self.shop, service_name="Haircut", duration_minutes=30, price=Decimal("300"))
        Service.objects.create(shop=self.rival_shop, service_name="Shave", duration_minutes=20, price=Decimal("150"))

    def test_owner_creates_service_for_own_shop(self):
        self.client.force_authenticate(user=self.owner)
        data = {"service_name": "Beard Trim", "duration_minutes": 20, "price": "150.00", "shop_id": self.rival_shop.pk}

        response = self.client.post(reverse("service-list"), data, format="json")

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["shop_id"], self.shop.pk)

    def test_list_is_scoped_to_owner(self):
        self.client.force_authenticate(user=self.owner)
        response = self.client.get(reverse("service-list"))
        self.assertEqual([s["service_name"] for s in response.data], ["Haircut"])

    def test_delete_deactivates(self):
        self.client.force_authenticate(user=self.owner)
        response = self.client.delete(reverse("service-detail", args=[self.service.pk]))

        self.assertEqual(response.status_code, 204)
        self.service.refresh_from_db()
        self.assertFalse(self.service.is_active)
        self.assertFalse(Service.objects.active().filter(pk=self.service.pk).exists())

    def test_rival_cannot_edit(self):
        self.client.force_authenticate(user=self.rival)
        response = self.client.patch(reverse("service-detail", args=[self.service.pk]), {"price": "1.00"}, format="json")
        self.assertEqual(response.status_code, 404)

    def test_create_without_shop(self):
        customer = get_user_model().objects.create_user("c@test.com", "Customer", "pass12345")
        self.client.force_authenticate(user=customer)
        response = self.client.post(reverse("service-list"), {"service_name": "X", "duration_minutes": 10, "price": "1"}, format="json")
        self.assertEqual(response.status_code, 404)

    def test_duration_must_be_positive(self):
        self.client.force_authenticate(user=self.owner)
        response = self.client.post(reverse("service-list"), {"service_name": "X", "duration_minutes": 0, "price": "1"}, format="json")
        self.assertEqual(response.status_code, 400)
