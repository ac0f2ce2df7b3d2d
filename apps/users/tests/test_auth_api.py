"""API tests for authentication endpoints."""

from __future__ import annotations

from datetime import timedelta
from unittest.mock import patch

from django.core import mail
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.users.models import PasswordResetToken, User


class AuthAPITests(APITestCase):
    def setUp(self) -> None:
        self.user = User.objects.create_user(
            email="guest@example.com",
            phone="+919800000001",
            name="Guest User",
            password="secret123",
        )

    def test_register_returns_tokens(self) -> None:
        payload = {
            "name": "New Owner",
            "email": "Owner@Example.com",
            "phone": "+919800000002",
            "password": "secret123",
            "role": "owner",
        }

        response = self.client.post(reverse("auth:register"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertIn("access", response.data["tokens"])
        self.assertIn("refresh", response.data["tokens"])
        self.assertEqual(response.data["user"]["email"], "owner@example.com")
        self.assertEqual(response.data["user"]["role"], "owner")
        self.assertNotIn("password", response.data["user"])
        created = User.objects.get(email="owner@example.com")
        self.assertEqual(created.phone, "+919800000002")

    def test_register_cannot_self_assign_admin(self) -> None:
        payload = {
            "name": "Sneaky",
            "email": "sneaky@example.com",
            "phone": "+919800000003",
            "password": "secret123",
            "role": "admin",
        }
        response = self.client.post(reverse("auth:register"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["status"], "fail")
        self.assertIn("role", response.data["errors"])

    def test_register_duplicate_email(self) -> None:
        payload = {
            "name": "Duplicate",
            "email": "GUEST@example.com",
            "phone": "+919800000009",
            "password": "secret123",
        }
        response = self.client.post(reverse("auth:register"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["message"], "User with this email already exists")

    def test_register_rejects_unknown_fields(self) -> None:
        payload = {
            "name": "Extra",
            "email": "extra@example.com",
            "phone": "+919800000010",
            "password": "secret123",
            "is_verified": True,
        }
        response = self.client.post(reverse("auth:register"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("is_verified", response.data["errors"])

    def test_login_success_and_me(self) -> None:
        response = self.client.post(
            reverse("auth:login"),
            {"email": "guest@example.com", "password": "secret123"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)

        access = response.data["tokens"]["access"]
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
        me = self.client.get(reverse("auth:me"))
        self.assertEqual(me.status_code, status.HTTP_200_OK)
        self.assertEqual(me.data["user"]["id"], self.user.id)

    def test_login_errors_do_not_reveal_account_existence(self) -> None:
        url = reverse("auth:login")
        wrong_password = self.client.post(
            url, {"email": "guest@example.com", "password": "nope"}, format="json"
        )
        unknown_email = self.client.post(
            url, {"email": "nobody@example.com", "password": "nope"}, format="json"
        )
        self.assertEqual(wrong_password.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(unknown_email.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(wrong_password.data, unknown_email.data)
        self.assertEqual(wrong_password.data["message"], "Invalid email or password")

    def test_deactivated_user_cannot_login(self) -> None:
        self.user.toggle_active()
        response = self.client.post(
            reverse("auth:login"),
            {"email": "guest@example.com", "password": "secret123"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["message"], "Your account has been deactivated")

    def test_me_requires_authentication(self) -> None:
        response = self.client.get(reverse("auth:me"))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data["status"], "fail")

    def test_token_refresh(self) -> None:
        login = self.client.post(
            reverse("auth:login"),
            {"email": "guest@example.com", "password": "secret123"},
            format="json",
        )
        response = self.client.post(
            reverse("auth:token_refresh"),
            {"refresh": login.data["tokens"]["refresh"]},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn("access", response.data)


class PasswordResetAPITests(APITestCase):
    def setUp(self) -> None:
        self.user = User.objects.create_user(
            email="reset@example.com",
            phone="+919800000020",
            name="Reset Me",
            password="OldPassword1",
        )

    def test_password_reset_flow(self) -> None:
        with self.captureOnCommitCallbacks(execute=True):
            request_resp = self.client.post(
                reverse("auth:forgot-password"),
                {"email": self.user.email},
                format="json",
            )
        self.assertEqual(request_resp.status_code, status.HTTP_200_OK, request_resp.data)
        self.assertEqual(len(mail.outbox), 1)

        token = PasswordResetToken.objects.get(user=self.user)
        self.assertIn(token.token, mail.outbox[0].body)

        confirm_resp = self.client.post(
            reverse("auth:reset-password"),
            {"token": token.token, "password": "NewPassword1"},
            format="json",
        )
        self.assertEqual(confirm_resp.status_code, status.HTTP_200_OK, confirm_resp.data)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password("NewPassword1"))

        reused = self.client.post(
            reverse("auth:reset-password"),
            {"token": token.token, "password": "Another1"},
            format="json",
        )
        self.assertEqual(reused.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(reused.data["message"], "Invalid or expired reset token")

    def test_unknown_email_gets_same_answer(self) -> None:
        known = self.client.post(reverse("auth:forgot-password"), {"email": self.user.email}, format="json")
        unknown = self.client.post(
            reverse("auth:forgot-password"), {"email": "ghost@example.com"}, format="json"
        )
        self.assertEqual(known.status_code, unknown.status_code)
        self.assertEqual(known.data, unknown.data)

    def test_new_request_invalidates_previous_token(self) -> None:
        self.client.post(reverse("auth:forgot-password"), {"email": self.user.email}, format="json")
        first = PasswordResetToken.objects.get(user=self.user)
        self.client.post(reverse("auth:forgot-password"), {"email": self.user.email}, format="json")
        first.refresh_from_db()
        self.assertTrue(first.is_used)
        self.assertEqual(PasswordResetToken.objects.filter(user=self.user, is_used=False).count(), 1)

    def test_expired_token_rejected(self) -> None:
        token = PasswordResetToken.issue(self.user)
        token.expires_at = timezone.now() - timedelta(minutes=1)
        token.save(update_fields=["expires_at"])

        response = self.client.post(
            reverse("auth:reset-password"),
            {"token": token.token, "password": "NewPassword1"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password("OldPassword1"))


class GoogleLoginAPITests(APITestCase):
    claims = {
        "sub": "google-123",
        "email": "gmail.user@example.com",
        "email_verified": True,
        "name": "Gmail User",
        "picture": "https://example.com/avatar.png",
    }

    @patch("apps.users.services.id_token.verify_oauth2_token")
    def test_google_login_creates_user(self, verify) -> None:
        verify.return_value = dict(self.claims)

        response = self.client.post(reverse("auth:google"), {"credential": "id-token"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        user = User.objects.get(email="gmail.user@example.com")
        self.assertEqual(user.google_id, "google-123")
        self.assertTrue(user.is_verified)
        self.assertFalse(user.has_usable_password())
        self.assertIn("access", response.data["tokens"])

        again = self.client.post(reverse("auth:google"), {"credential": "id-token"}, format="json")
        self.assertEqual(again.status_code, status.HTTP_200_OK)
        self.assertEqual(User.objects.filter(email="gmail.user@example.com").count(), 1)

    @patch("apps.users.services.id_token.verify_oauth2_token")
    def test_google_login_links_existing_account(self, verify) -> None:
        existing = User.objects.create_user(
            email="gmail.user@example.com", name="Existing", password="secret123"
        )
        verify.return_value = dict(self.claims)

        response = self.client.post(reverse("auth:google"), {"credential": "id-token"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        existing.refresh_from_db()
        self.assertEqual(existing.google_id, "google-123")
        self.assertEqual(response.data["user"]["id"], existing.id)

    @patch("apps.users.services.id_token.verify_oauth2_token", side_effect=ValueError("bad token"))
    def test_invalid_credential(self, verify) -> None:
        response = self.client.post(reverse("auth:google"), {"credential": "garbage"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data["message"], "Invalid Google credential")
