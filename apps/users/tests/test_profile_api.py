"""API tests for the profile endpoints."""

from __future__ import annotations

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.users.models import User


class ProfileAPITests(APITestCase):
    def setUp(self) -> None:
        self.user = User.objects.create_user(
            email="profile@example.com",
            phone="+919811111111",
            name="Profile User",
            password="secret123",
        )
        self.other = User.objects.create_user(
            email="other@example.com",
            phone="+919822222222",
            name="Other User",
            password="secret123",
        )
        self.client.force_authenticate(self.user)

    def test_get_profile(self) -> None:
        response = self.client.get(reverse("user-profile"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["user"]["email"], "profile@example.com")

    def test_update_name_and_avatar(self) -> None:
        response = self.client.patch(
            reverse("user-profile"),
            {"name": "Renamed", "avatar": "https://cdn.example.com/a.png"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.user.refresh_from_db()
        self.assertEqual(self.user.name, "Renamed")
        self.assertEqual(self.user.avatar, "https://cdn.example.com/a.png")

    def test_cannot_change_role_or_email(self) -> None:
        response = self.client.put(
            reverse("user-profile"),
            {"name": "Renamed", "role": "admin", "email": "new@example.com"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("role", response.data["errors"])
        self.assertIn("email", response.data["errors"])
        self.user.refresh_from_db()
        self.assertEqual(self.user.role, User.RoleChoices.USER)
        self.assertEqual(self.user.name, "Profile User")

    def test_phone_must_be_unique(self) -> None:
        response = self.client.patch(reverse("user-profile"), {"phone": "+919822222222"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["message"], "User with this phone number already exists")

    def test_change_password(self) -> None:
        url = reverse("user-change-password")
        wrong = self.client.put(
            url, {"current_password": "nope", "new_password": "newsecret1"}, format="json"
        )
        self.assertEqual(wrong.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(wrong.data["message"], "Current password is incorrect")

        ok = self.client.put(
            url, {"current_password": "secret123", "new_password": "newsecret1"}, format="json"
        )
        self.assertEqual(ok.status_code, status.HTTP_200_OK, ok.data)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password("newsecret1"))

    def test_anonymous_cannot_read_profile(self) -> None:
        self.client.force_authenticate(None)
        response = self.client.get(reverse("user-profile"))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
