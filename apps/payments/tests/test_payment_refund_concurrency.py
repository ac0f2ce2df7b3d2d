"""Concurrent refund tests.

Two admins refunding the same booking at once must reach the gateway
only once. Workers run in real threads against the file based test
database and close their own connections.
"""

from __future__ import annotations

import threading
import time
from datetime import timedelta
from decimal import Decimal
from unittest.mock import MagicMock, patch

from django.db import connection
from django.test import TransactionTestCase
from django.utils import timezone

from apps.bookings.models import Booking
from apps.listings.models import PG, RoomType
from apps.payments import services
from apps.payments.models import Payment
from apps.users.models import User
from shared.domain.errors import DomainError


class ConcurrentRefundTests(TransactionTestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(
            email="admin@example.com", name="Admin", password="secret123", role=User.RoleChoices.ADMIN
        )
        guest = User.objects.create_user(email="guest@example.com", name="Guest", password="secret123")
        owner = User.objects.create_user(
            email="owner@example.com", name="Owner", password="secret123", role=User.RoleChoices.OWNER
        )
        pg = PG.objects.create(
            owner=owner,
            name="Refund PG",
            description="Listing whose paid booking is refunded twice at once.",
            address="9 Ledger Road",
            city="Pune",
            state="Maharashtra",
            pincode="411001",
            is_approved=True,
        )
        room = RoomType.objects.create(
            pg=pg, type=RoomType.Kind.SINGLE, price=Decimal("1000.00"), total_rooms=1, available_rooms=1
        )
        today = timezone.localdate()
        self.booking = Booking.objects.create(
            user=guest,
            pg=pg,
            room_type=room,
            check_in=today + timedelta(days=10),
            check_out=today + timedelta(days=11),
            nightly_rate=room.price,
        )
        self.payment = Payment.objects.create(
            booking=self.booking, user=guest, intent_id="pi_paid", amount=self.booking.total_amount
        )
        self.payment.mark_completed("ch_paid")

    def _slow_gateway(self, calls: list[Decimal]) -> MagicMock:
        guard = threading.Lock()

        def refund(intent_id, amount=None, **kwargs):
            with guard:
                calls.append(amount)
            time.sleep(0.2)
            return {"id": f"re_{len(calls)}", "amount": amount, "status": "succeeded"}

        gateway = MagicMock()
        gateway.provider = "stripe"
        gateway.refund.side_effect = refund
        return gateway

    def test_two_admins_refund_once(self) -> None:
        calls: list[Decimal] = []
        refunded: list[int] = []
        rejected: list[DomainError] = []
        barrier = threading.Barrier(2)
        guard = threading.Lock()

        def worker() -> None:
            try:
                barrier.wait()
                payment = services.refund_booking(self.admin, self.booking.pk, Decimal("500.00"))
                with guard:
                    refunded.append(payment.pk)
            except DomainError as exc:
                with guard:
                    rejected.append(exc)
            finally:
                connection.close()

        with patch("apps.payments.services.get_gateway", return_value=self._slow_gateway(calls)):
            threads = [threading.Thread(target=worker) for _ in range(2)]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join(timeout=60)

        self.assertEqual(calls, [Decimal("500.00")])
        self.assertEqual(len(refunded), 1)
        self.assertEqual(len(rejected), 1)
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, Payment.Status.REFUNDED)
        self.assertEqual(self.payment.refund_amount, Decimal("500.00"))
        self.assertEqual(self.payment.transactions.filter(event="refund.created").count(), 1)
