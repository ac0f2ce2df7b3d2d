"""Concurrent reservation tests.

These run real threads against the file based test database, so they
use ``TransactionTestCase`` and every worker closes its own connection.
"""

from __future__ import annotations

import random
import threading
from datetime import timedelta
from decimal import Decimal

from django.db import connection
from django.test import TransactionTestCase
from django.utils import timezone

from apps.bookings import services
from apps.bookings.models import Booking
from apps.listings.models import PG, RoomType
from apps.users.models import User
from shared.domain.errors import RoomUnavailableError
from shared.domain.value_objects import DateRange


class ConcurrentReservationTests(TransactionTestCase):
    def setUp(self) -> None:
        self.owner = User.objects.create_user(
            email="owner@example.com", name="Owner", password="secret123", role=User.RoleChoices.OWNER
        )
        self.pg = PG.objects.create(
            owner=self.owner,
            name="Concurrency PG",
            description="Listing hammered by concurrent reservation attempts.",
            address="7 Thread Street",
            city="Jaipur",
            state="Rajasthan",
            pincode="302001",
            is_approved=True,
        )
        self.room = RoomType.objects.create(
            pg=self.pg, type=RoomType.Kind.DOUBLE, price=Decimal("1000.00"), total_rooms=2, available_rooms=2
        )
        self.today = timezone.localdate()

    def _make_users(self, count: int) -> list[User]:
        return [
            User.objects.create_user(email=f"racer{index}@example.com", name=f"Racer {index}", password="secret123")
            for index in range(count)
        ]

    def _run_concurrently(self, attempts: list[tuple[User, int, int]]) -> tuple[list[int], list[Exception]]:
        barrier = threading.Barrier(len(attempts))
        accepted: list[int] = []
        rejected: list[Exception] = []
        guard = threading.Lock()

        def worker(user: User, start: int, end: int) -> None:
            try:
                barrier.wait()
                booking = services.check_and_reserve(
                    user,
                    self.pg.id,
                    self.room.id,
                    self.today + timedelta(days=start),
                    self.today + timedelta(days=end),
                    guests=1,
                )
                with guard:
                    accepted.append(booking.pk)
            except RoomUnavailableError as exc:
                with guard:
                    rejected.append(exc)
            finally:
                connection.close()

        threads = [threading.Thread(target=worker, args=attempt) for attempt in attempts]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=60)
        return accepted, rejected

    def test_exactly_one_of_two_racers_wins_the_last_room(self) -> None:
        first, second, existing = self._make_users(3)
        services.check_and_reserve(
            existing,
            self.pg.id,
            self.room.id,
            self.today + timedelta(days=1),
            self.today + timedelta(days=5),
            guests=1,
        )

        accepted, rejected = self._run_concurrently([(first, 4, 6), (second, 4, 6)])

        self.assertEqual(len(accepted), 1)
        self.assertEqual(len(rejected), 1)
        self.assertEqual(Booking.objects.filter(room_type=self.room).count(), 2)

    def test_random_attempts_never_overbook(self) -> None:
        rng = random.Random(20240611)
        users = self._make_users(12)
        attempts = []
        for user in users:
            start = rng.randint(1, 10)
            attempts.append((user, start, start + rng.randint(1, 4)))

        accepted, rejected = self._run_concurrently(attempts)
        self.assertEqual(len(accepted) + len(rejected), len(attempts))

        # Replay in insertion order: every accepted booking must have found
        # fewer than total_rooms earlier active overlapping bookings.
        kept: list[DateRange] = []
        for booking in Booking.objects.filter(room_type=self.room).order_by("pk"):
            overlapping = sum(1 for stay in kept if stay.overlaps_with(booking.stay, inclusive=True))
            self.assertLess(overlapping, self.room.total_rooms)
            kept.append(booking.stay)
