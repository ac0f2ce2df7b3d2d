"""Admin moderation and dashboard aggregation."""

from __future__ import annotations

import logging
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any

from django.db import models  # type: ignore
from django.db.models.functions import TruncMonth  # type: ignore
from django.utils import timezone  # type: ignore

from apps.bookings.models import Booking
from apps.listings.models import PG
from apps.reviews.models import Review
from apps.users.models import User
from shared.domain.errors import ValidationError

logger = logging.getLogger(__name__)

RECENT_BOOKINGS = 10
MONTHS_IN_STATS = 12

PG_STATUS_FILTERS = {
    "pending": models.Q(is_approved=False, is_active=True),
    "approved": models.Q(is_approved=True),
    "rejected": models.Q(is_approved=False, is_active=False),
}


def first_day_months_back(today: date, months: int) -> date:
    index = today.year * 12 + (today.month - 1) - months
    return date(index // 12, index % 12 + 1, 1)


def monthly_booking_stats(today: date | None = None) -> list[dict[str, Any]]:
    today = today or timezone.localdate()
    start = first_day_months_back(today, MONTHS_IN_STATS - 1)
    since = timezone.make_aware(datetime.combine(start, time.min))
    rows = (
        Booking.objects.filter(created_at__gte=since)
        .annotate(month=TruncMonth("created_at"))
        .values("month")
        .annotate(
            bookings=models.Count("id"),
            revenue=models.Sum(
                "total_amount",
                filter=models.Q(payment_status=Booking.PaymentStatus.PAID),
            ),
        )
        .order_by("month")
    )
    return [
        {
            "month": f"{row['month']:%Y-%m}",
            "bookings": row["bookings"],
            "revenue": row["revenue"] or Decimal("0.00"),
        }
        for row in rows
    ]


def dashboard_summary() -> dict[str, Any]:
    paid = Booking.objects.filter(payment_status=Booking.PaymentStatus.PAID).aggregate(
        total=models.Sum("total_amount"),
        average=models.Avg("total_amount"),
    )
    average = paid["average"]
    return {
        "total_users": User.objects.filter(role=User.RoleChoices.USER).count(),
        "total_owners": User.objects.filter(role=User.RoleChoices.OWNER).count(),
        "total_pgs": PG.objects.count(),
        "approved_pgs": PG.objects.filter(PG_STATUS_FILTERS["approved"]).count(),
        "pending_pgs": PG.objects.filter(PG_STATUS_FILTERS["pending"]).count(),
        "total_bookings": Booking.objects.count(),
        "total_reviews": Review.objects.count(),
        "total_revenue": paid["total"] or Decimal("0.00"),
        "average_booking_value": Decimal(average).quantize(Decimal("0.01")) if average is not None else Decimal("0.00"),
    }


def recent_bookings():
    return Booking.objects.select_related("pg", "room_type", "user").order_by("-created_at")[:RECENT_BOOKINGS]


def approve_pg(pg: PG, admin) -> PG:
    pg.approve(admin)
    logger.info("PG %s approved by admin %s", pg.pk, admin.pk)
    return pg


def reject_pg(pg: PG, admin, reason: str = "") -> PG:
    pg.reject(reason)
    logger.info("PG %s rejected by admin %s", pg.pk, admin.pk)
    return pg


def toggle_user_status(user: User, admin) -> User:
    if user.pk == admin.pk:
        raise ValidationError("Cannot modify your own account status")
    is_active = user.toggle_active()
    logger.info("User %s %s by admin %s", user.pk, "activated" if is_active else "deactivated", admin.pk)
    return user


def change_user_role(user: User, admin, role: str) -> User:
    if user.pk == admin.pk:
        raise ValidationError("Cannot change your own role")
    previous = user.role
    user.role = role
    user.save(update_fields=["role", "updated_at"])
    logger.info("User %s role changed from %s to %s by admin %s", user.pk, previous, role, admin.pk)
    return user
