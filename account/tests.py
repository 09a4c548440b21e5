from django.test import TestCase
from rest_framework.test import APIClient

from account.models import User, UserRole


class UserModelTests(TestCase):
    def test_create_user_hashes_password(self):
        user = User.objects.create_user(
            email="user@example.com",
            password="Pass123!",
        )

        self.assertNotEqual(user.password, "Pass123!")
        self.assertTrue(user.check_password("Pass123!"))

    def test_create_user_requires_email(self):
        with self.assertRaisesMessage(ValueError, "Users must have an email"):
            User.objects.create_user(email="", password="Pass123!")

    def test_new_user_gets_viewer_role(self):
        user = User.objects.create_user(email="viewer@example.com", password="Pass123!")

        self.assertEqual(user.roles, ["viewer"])
        self.assertTrue(UserRole.objects.filter(user=user, role=UserRole.Role.VIEWER).exists())


class AccountAPITests(TestCase):
    def setUp(self):
        self.client = APIClient()

    def test_register_then_login_returns_token_pair(self):
        response = self.client.post(
            "/auth/register/",
            {"email": "new@example.com", "password": "Pass123!", "full_name": "New User"},
            format="json",
        )
        self.assertEqual(response.status_code, 201, response.data)
        self.assertNotIn("password", response.data)

        login = self.client.post(
            "/auth/login/",
            {"email": "new@example.com", "password": "Pass123!"},
            format="json",
        )
        self.assertEqual(login.status_code, 200, login.data)
        self.assertIn("access", login.data)
        self.assertIn("refresh", login.data)

    def test_profile_returns_roles_and_allows_name_update(self):
        user = User.objects.create_user(email="me@example.com", password="Pass123!", full_name="Me")
        UserRole.objects.create(user=user, role=UserRole.Role.MANAGER)
        self.client.force_authenticate(user)

        response = self.client.get("/auth/profile/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["roles"], ["manager", "viewer"])

        response = self.client.patch("/auth/profile/", {"full_name": "Renamed", "email": "x@example.com"}, format="json")
        self.assertEqual(response.status_code, 200, response.data)
        user.refresh_from_db()
        self.assertEqual(user.full_name, "Renamed")
        self.assertEqual(user.email, "me@example.com")

    def test_profile_requires_authentication(self):
        response = self.client.get("/auth/profile/")
        self.assertEqual(response.status_code, 401)
