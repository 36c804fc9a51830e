from unittest import mock

from django.db import DatabaseError
from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework.test import APIClient

from accounts.models import User
from barbershops.models import Shop
from core.choices import UserType
from core.tests import FakeRedis


class RegisterTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.payload = {
            "email": "Asha@Example.com",
            "password": "secret1",
            "confirm_password": "secret1",
            "full_name": "Asha Patil",
        }

    def test_register_customer(self):
        response = self.client.post(reverse("register"), self.payload, format="json")

        self.assertEqual(response.status_code, 201)
        self.assertIn("access", response.data)
        self.assertIn("refresh", response.data)
        user = User.objects.get(email="asha@example.com")
        self.assertEqual(user.user_type, UserType.CUSTOMER)
        self.assertFalse(user.is_admin)

    def test_duplicate_email(self):
        self.client.post(reverse("register"), self.payload, format="json")
        response = self.client.post(reverse("register"), self.payload, format="json")
        self.assertEqual(response.status_code, 400)
        self.assertIn("email", response.data)

    def test_password_mismatch(self):
        self.payload["confirm_password"] = "secret2"
        response = self.client.post(reverse("register"), self.payload, format="json")
        self.assertEqual(response.status_code, 400)
        self.assertIn("confirm_password", response.data)

    def test_short_password(self):
        self.payload.update(password="abc", confirm_password="abc")
        response = self.client.post(reverse("register"), self.payload, format="json")
        self.assertEqual(response.status_code, 400)
        self.assertIn("password", response.data)


class ShopOwnerRegisterTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.payload = {
            "email": "owner@example.com",
            "password": "secret1",
            "confirm_password": "secret1",
            "full_name": "Ravi Kumar",
            "shop_name": "Ravi's Salon",
            "address": "12 FC Road",
            "city": "Pune",
            "opening_time": "10:00",
            "closing_time": "20:00",
        }

    def test_creates_owner_and_shop(self):
        response = self.client.post(reverse("register-shop"), self.payload, format="json")

        self.assertEqual(response.status_code, 201)
        shop = Shop.objects.get(pk=response.data["shop_id"])
        self.assertEqual(shop.owner.email, "owner@example.com")
        self.assertEqual(shop.owner.user_type, UserType.BARBER)
        self.assertEqual(shop.opening_time, "10:00")
        self.assertTrue(shop.is_active)
        self.assertFalse(shop.is_verified)

    def test_default_hours(self):
        del self.payload["opening_time"]
        del self.payload["closing_time"]
        response = self.client.post(reverse("register-shop"), self.payload, format="json")
        shop = Shop.objects.get(pk=response.data["shop_id"])
        self.assertEqual((shop.opening_time, shop.closing_time), ("09:00", "21:00"))

    def test_rejects_inverted_hours(self):
        self.payload.update(opening_time="20:00", closing_time="10:00")
        response = self.client.post(reverse("register-shop"), self.payload, format="json")
        self.assertEqual(response.status_code, 400)
        self.assertFalse(User.objects.exists())

    def test_rejects_hours_not_in_hhmm_format(self):
        self.payload.update(opening_time="9:00", closing_time="21:00:00")
        response = self.client.post(reverse("register-shop"), self.payload, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertIn("opening_time", response.data)
        self.assertIn("closing_time", response.data)
        self.assertFalse(Shop.objects.exists())

    def test_shop_failure_leaves_no_account(self):
        with mock.patch.object(Shop.objects, "create", side_effect=DatabaseError("boom")):
            with self.assertRaises(DatabaseError):
                self.client.post(reverse("register-shop"), self.payload, format="json")

        self.assertFalse(User.objects.filter(email="owner@example.com").exists())
        self.assertFalse(Shop.objects.exists())


@override_settings(LOGIN_MAX_ATTEMPTS=3)
class LoginTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user("login@example.com", "Login User", "secret1")
        patcher = mock.patch("core.utils.redis_client", FakeRedis())
        self.redis = patcher.start()
        self.addCleanup(patcher.stop)

    def login(self, password):
        return self.client.post(reverse("login"), {"email": "login@example.com", "password": password}, format="json")

    def test_login_returns_tokens(self):
        response = self.login("secret1")
        self.assertEqual(response.status_code, 200)
        self.assertIn("access", response.data)
        self.assertEqual(response.data["user"]["email"], "login@example.com")

        self.user.refresh_from_db()
        self.assertIsNotNone(self.user.last_login)

    def test_wrong_password(self):
        response = self.login("wrong")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(int(self.redis.get("login_attempts:login@example.com")), 1)

    def test_lockout_after_repeated_failures(self):
        for _ in range(3):
            self.login("wrong")

        response = self.login("secret1")
        self.assertEqual(response.status_code, 400)
        self.assertIn("Too many failed attempts", str(response.data))

    def test_success_clears_attempts(self):
        self.login("wrong")
        self.login("secret1")
        self.assertIsNone(self.redis.get("login_attempts:login@example.com"))

    def test_deactivated_user_cannot_login(self):
        self.user.is_active = False
        self.user.save()
        self.assertEqual(self.login("secret1").status_code, 400)


class MeTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user("me@example.com", "Me", "secret1")

    def test_requires_authentication(self):
        self.assertEqual(self.client.get(reverse("me")).status_code, 401)

    def test_update_profile_keeps_role(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.patch(reverse("me"), {"full_name": "New Name", "is_admin": True}, format="json")

        self.assertEqual(response.status_code, 200)
        self.user.refresh_from_db()
        self.assertEqual(self.user.full_name, "New Name")
        self.assertFalse(self.user.is_admin)


class AdminUserTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user("admin@example.com", "Admin", "secret1", is_admin=True)
        self.user = User.objects.create_user("user@example.com", "User", "secret1")

    def test_list_users(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get(reverse("admin-users"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data), 2)

    def test_delete_deactivates(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.delete(reverse("admin-user-deactivate", args=[self.user.pk]))

        self.assertEqual(response.status_code, 204)
        self.user.refresh_from_db()
        self.assertFalse(self.user.is_active)

    def test_cannot_deactivate_self(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.delete(reverse("admin-user-deactivate", args=[self.admin.pk]))
        self.assertEqual(response.status_code, 400)

    def test_customer_forbidden(self):
        self.client.force_authenticate(user=self.user)
        self.assertEqual(self.client.get(reverse("admin-users")).status_code, 403)
