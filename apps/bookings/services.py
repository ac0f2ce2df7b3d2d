"""Domain services for booking workflows.

``check_and_reserve`` is the only way bookings are created. It runs the
availability check and the insert inside one transaction while holding
the reservation lock for the room type, so two requests can never both
take the last free room.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any

from django.conf import settings  # type: ignore
from django.db import DatabaseError, IntegrityError, transaction  # type: ignore
from django.db.models import Count, Q, Sum  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore
from django.utils import timezone  # type: ignore

from apps.listings.models import PG, RoomType
from apps.users.permissions import is_admin
from shared.domain.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    RoomUnavailableError,
    ValidationError,
)
from shared.domain.value_objects import DateRange

from .locks import reservation_lock
from .models import Booking

logger = logging.getLogger(__name__)

PG_NOT_BOOKABLE = "PG not found or not available for booking"

STATUS_TRANSITIONS: dict[str, tuple[str, ...]] = {
    Booking.Status.PENDING: (Booking.Status.CONFIRMED,),
    Booking.Status.CONFIRMED: (Booking.Status.COMPLETED,),
}


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def overlap_filter(check_in: date, check_out: date, *, inclusive: bool | None = None) -> Q:
    """Bookings whose stay overlaps ``[check_in, check_out]``.

    Inclusive mode treats a stay that ends on the requested check-in day
    (or starts on the requested check-out day) as overlapping.
    """
    if inclusive is None:
        inclusive = settings.BOOKING_OVERLAP_INCLUSIVE
    if inclusive:
        return Q(check_in__lte=check_out) & Q(check_out__gte=check_in)
    return Q(check_in__lt=check_out) & Q(check_out__gt=check_in)


def count_overlapping(
    room_type: RoomType,
    check_in: date,
    check_out: date,
    *,
    exclude_booking_id: int | None = None,
) -> int:
    bookings_qs = Booking.objects.filter(
        room_type=room_type,
        status__in=Booking.ACTIVE_STATUSES,
    ).filter(overlap_filter(check_in, check_out))
    if exclude_booking_id is not None:
        bookings_qs = bookings_qs.exclude(pk=exclude_booking_id)
    return bookings_qs.count()


def validate_stay(check_in: date, check_out: date, guests: int) -> DateRange:
    if check_in < timezone.localdate():
        raise ValidationError("Check-in date cannot be in the past")
    if check_out <= check_in:
        raise ValidationError("Check-out date must be after check-in date")
    if not 1 <= guests <= settings.BOOKING_MAX_GUESTS:
        raise ValidationError(f"Guests must be between 1 and {settings.BOOKING_MAX_GUESTS}")
    stay = DateRange(check_in, check_out)
    if stay.nights <= 0:
        raise ValidationError("A stay must be at least one night")
    return stay


def room_availability(room_type: RoomType, check_in: date, check_out: date) -> dict[str, Any]:
    """Derived availability of ``room_type`` for a stay (read only, no locks)."""

    booked = count_overlapping(room_type, check_in, check_out)
    free = max(room_type.total_rooms - booked, 0)
    return {
        "room_type": room_type.pk,
        "check_in": check_in,
        "check_out": check_out,
        "total_rooms": room_type.total_rooms,
        "booked_rooms": booked,
        "free_rooms": free,
        "available": free > 0 and room_type.available_rooms > 0,
    }


def check_and_reserve(
    user,
    pg_id: int,
    room_type_id: int,
    check_in: date,
    check_out: date,
    guests: int,
    special_requests: str = "",
) -> Booking:
    """Reserve one room of ``room_type_id`` for the stay or raise."""

    stay = validate_stay(check_in, check_out, guests)

    pg = PG.objects.filter(pk=pg_id, is_approved=True, is_active=True).first()
    if pg is None:
        raise NotFoundError(PG_NOT_BOOKABLE)
    if not RoomType.objects.filter(pk=room_type_id, pg=pg).exists():
        raise NotFoundError("Room type not found")

    try:
        with reservation_lock(pg.pk, room_type_id):
            with transaction.atomic():
                room_type = _lock_queryset_if_possible(
                    RoomType.objects.filter(pk=room_type_id, pg=pg)
                ).get()
                if room_type.available_rooms < 1:
                    raise RoomUnavailableError("No rooms available for this type")

                booked = count_overlapping(room_type, check_in, check_out)
                if booked >= room_type.total_rooms:
                    logger.info(
                        "Room type %s full for %s (%s of %s booked)",
                        room_type.pk,
                        stay,
                        booked,
                        room_type.total_rooms,
                    )
                    raise RoomUnavailableError()

                booking = Booking.objects.create(
                    user=user,
                    pg=pg,
                    room_type=room_type,
                    check_in=check_in,
                    check_out=check_out,
                    guests=guests,
                    nightly_rate=room_type.price,
                    special_requests=special_requests,
                )
    except (IntegrityError, DatabaseError) as exc:
        logger.warning("Reservation for room type %s lost a race: %s", room_type_id, exc)
        raise RoomUnavailableError() from exc

    logger.info(
        "Booking %s created for user %s (room type %s, %s, %s nights, total %s)",
        booking.booking_code,
        user.pk,
        room_type_id,
        stay,
        booking.total_nights,
        booking.total_amount,
    )
    return booking


def check_in_starts_at(booking: Booking) -> datetime:
    return timezone.make_aware(
        datetime.combine(booking.check_in, time.min),
        timezone.get_current_timezone(),
    )


def ensure_cancellation_window(booking: Booking, now: datetime | None = None) -> None:
    now = now or timezone.now()
    window = timedelta(hours=settings.BOOKING_CANCELLATION_WINDOW_HOURS)
    if check_in_starts_at(booking) - now < window:
        raise ValidationError(
            f"Cancellation not allowed within {settings.BOOKING_CANCELLATION_WINDOW_HOURS} hours of check-in"
        )


def cancel_booking(booking: Booking, actor, reason: str = "") -> Booking:
    if booking.user_id != actor.pk and not is_admin(actor):
        raise ForbiddenError("You can only cancel your own bookings")

    with reservation_lock(booking.pg_id, booking.room_type_id):
        with transaction.atomic():
            booking = _lock_queryset_if_possible(Booking.objects.filter(pk=booking.pk)).get()
            if booking.status == Booking.Status.CANCELLED:
                raise ConflictError("Booking is already cancelled")
            if booking.status == Booking.Status.COMPLETED:
                raise ConflictError("Cannot cancel a completed booking")
            ensure_cancellation_window(booking)
            booking.mark_cancelled(reason)

    logger.info("Booking %s cancelled by user %s", booking.booking_code, actor.pk)
    return booking


def update_booking_status(booking: Booking, actor, new_status: str) -> Booking:
    """Owner/admin driven transitions: pending -> confirmed -> completed."""

    if booking.pg.owner_id != actor.pk and not is_admin(actor):
        raise ForbiddenError("Only the PG owner or an admin can update this booking")
    if new_status == Booking.Status.CANCELLED:
        raise ConflictError("Use the cancel endpoint to cancel a booking")

    with transaction.atomic():
        booking = _lock_queryset_if_possible(Booking.objects.filter(pk=booking.pk)).get()
        if booking.status == Booking.Status.COMPLETED:
            raise ConflictError("Completed bookings cannot be modified")
        if new_status not in STATUS_TRANSITIONS.get(booking.status, ()):
            raise ConflictError(f"Cannot change booking status from {booking.status} to {new_status}")

        if new_status == Booking.Status.CONFIRMED:
            booking.mark_confirmed()
        else:
            booking.mark_completed()

    logger.info("Booking %s moved to %s by user %s", booking.booking_code, new_status, actor.pk)
    return booking


def owner_booking_stats(owner) -> list[dict[str, Any]]:
    rows = (
        Booking.objects.filter(pg__owner=owner)
        .values("status")
        .annotate(count=Count("id"), total_revenue=Sum("total_amount"))
        .order_by("status")
    )
    return [
        {
            "status": row["status"],
            "count": row["count"],
            "total_revenue": row["total_revenue"] or Decimal("0.00"),
        }
        for row in rows
    ]
