"""API tests for the admin backoffice endpoints."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.backoffice.services import first_day_months_back
from apps.bookings.models import Booking
from apps.listings.models import PG, RoomType
from apps.reviews.models import Review
from apps.users.models import User


class BackofficeAPITestCase(APITestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(
            email="admin@example.com", name="Admin", password="secret123", role=User.RoleChoices.ADMIN
        )
        self.owner = User.objects.create_user(
            email="owner@example.com", name="Owner", password="secret123", role=User.RoleChoices.OWNER
        )
        self.guest = User.objects.create_user(email="guest@example.com", name="Guest", password="secret123")
        self.approved = self._pg("Approved Place", is_approved=True)
        self.pending = self._pg("Pending Place")
        self.rejected = self._pg("Rejected Place", is_active=False, rejection_reason="Blurry photos")
        self.room = RoomType.objects.create(
            pg=self.approved, type=RoomType.Kind.SINGLE, price=Decimal("1000.00"), total_rooms=2, available_rooms=2
        )
        self.client.force_authenticate(self.admin)

    def _pg(self, name: str, **extra) -> PG:
        return PG.objects.create(
            owner=self.owner,
            name=name,
            description="A listing created for the backoffice moderation tests.",
            address="1 Admin Avenue",
            city="Lucknow",
            state="Uttar Pradesh",
            pincode="226001",
            **extra,
        )

    def _booking(self, start: int, end: int, **extra) -> Booking:
        today = timezone.localdate()
        booking = Booking.objects.create(
            user=self.guest,
            pg=self.approved,
            room_type=self.room,
            check_in=today + timedelta(days=start),
            check_out=today + timedelta(days=end),
            nightly_rate=self.room.price,
        )
        if extra:
            Booking.objects.filter(pk=booking.pk).update(**extra)
            booking.refresh_from_db()
        return booking


class DashboardTests(BackofficeAPITestCase):
    def test_dashboard_totals(self) -> None:
        self._booking(5, 7, payment_status=Booking.PaymentStatus.PAID)
        self._booking(10, 11, payment_status=Booking.PaymentStatus.PAID)
        self._booking(20, 21)
        Review.objects.create(user=self.guest, pg=self.approved, rating=5, comment="Lovely place to stay.")

        response = self.client.get(reverse("admin-dashboard"))
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        data = response.data
        self.assertEqual(data["total_users"], 1)
        self.assertEqual(data["total_owners"], 1)
        self.assertEqual(data["total_pgs"], 3)
        self.assertEqual(data["approved_pgs"], 1)
        self.assertEqual(data["pending_pgs"], 1)
        self.assertEqual(data["total_bookings"], 3)
        self.assertEqual(data["total_reviews"], 1)
        self.assertEqual(data["total_revenue"], "3000.00")
        self.assertEqual(data["average_booking_value"], "1500.00")
        self.assertEqual(len(data["recent_bookings"]), 3)

        this_month = f"{timezone.localdate():%Y-%m}"
        self.assertEqual(
            data["monthly_stats"],
            [{"month": this_month, "bookings": 3, "revenue": "3000.00"}],
        )

    def test_dashboard_requires_admin(self) -> None:
        self.client.force_authenticate(self.owner)
        response = self.client.get(reverse("admin-dashboard"))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["message"], "Admin access required")

    def test_month_arithmetic(self) -> None:
        self.assertEqual(first_day_months_back(date(2030, 3, 15), 11), date(2029, 4, 1))
        self.assertEqual(first_day_months_back(date(2030, 1, 31), 0), date(2030, 1, 1))
        self.assertEqual(first_day_months_back(date(2030, 1, 31), 1), date(2029, 12, 1))


class PGModerationTests(BackofficeAPITestCase):
    def test_status_filter(self) -> None:
        url = reverse("admin-pg-list")
        for status_name, expected in (
            ("pending", self.pending),
            ("approved", self.approved),
            ("rejected", self.rejected),
        ):
            response = self.client.get(url, {"status": status_name})
            self.assertEqual([item["id"] for item in response.data["results"]], [expected.id], status_name)
        self.assertEqual(self.client.get(url).data["pagination"]["total_items"], 3)

    def test_approve(self) -> None:
        response = self.client.put(reverse("admin-pg-approve", args=[self.rejected.id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.rejected.refresh_from_db()
        self.assertTrue(self.rejected.is_approved)
        self.assertTrue(self.rejected.is_active)
        self.assertEqual(self.rejected.approved_by, self.admin)
        self.assertEqual(self.rejected.rejection_reason, "")
        self.assertIsNotNone(self.rejected.approved_at)

    def test_reject_with_reason(self) -> None:
        response = self.client.put(
            reverse("admin-pg-reject", args=[self.pending.id]), {"reason": "Incomplete address"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.pending.refresh_from_db()
        self.assertFalse(self.pending.is_approved)
        self.assertFalse(self.pending.is_active)
        self.assertEqual(self.pending.rejection_reason, "Incomplete address")

    def test_owner_cannot_approve(self) -> None:
        self.client.force_authenticate(self.owner)
        response = self.client.put(reverse("admin-pg-approve", args=[self.pending.id]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.pending.refresh_from_db()
        self.assertFalse(self.pending.is_approved)


class UserManagementTests(BackofficeAPITestCase):
    def test_role_filter(self) -> None:
        url = reverse("admin-user-list")
        owners = self.client.get(url, {"role": "owner"})
        self.assertEqual([item["id"] for item in owners.data["results"]], [self.owner.id])
        everyone = self.client.get(url, {"role": "all"})
        self.assertEqual(everyone.data["pagination"]["total_items"], 3)

    def test_toggle_status(self) -> None:
        url = reverse("admin-user-toggle-status", args=[self.guest.id])
        response = self.client.put(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data["is_active"])
        again = self.client.put(url)
        self.assertTrue(again.data["is_active"])

    def test_cannot_toggle_self(self) -> None:
        response = self.client.put(reverse("admin-user-toggle-status", args=[self.admin.id]))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["message"], "Cannot modify your own account status")

    def test_change_role(self) -> None:
        url = reverse("admin-user-role", args=[self.guest.id])
        response = self.client.put(url, {"role": "owner"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.guest.refresh_from_db()
        self.assertEqual(self.guest.role, User.RoleChoices.OWNER)

        invalid = self.client.put(url, {"role": "superhero"}, format="json")
        self.assertEqual(invalid.status_code, status.HTTP_400_BAD_REQUEST)

        own = self.client.put(reverse("admin-user-role", args=[self.admin.id]), {"role": "user"}, format="json")
        self.assertEqual(own.status_code, status.HTTP_400_BAD_REQUEST)


class BookingOversightTests(BackofficeAPITestCase):
    def test_all_bookings_with_status_filter(self) -> None:
        self._booking(5, 6)
        cancelled = self._booking(7, 8, status=Booking.Status.CANCELLED)
        url = reverse("admin-booking-list")

        self.assertEqual(self.client.get(url).data["pagination"]["total_items"], 2)
        response = self.client.get(url, {"status": "cancelled"})
        self.assertEqual([item["id"] for item in response.data["results"]], [cancelled.id])
