"""Booking domain models for PG Stay."""

from __future__ import annotations

import secrets
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.exceptions import ValidationError  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import DateRange


class Booking(models.Model):
    """A reservation of one room of a room type for a date range."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        CONFIRMED = "confirmed", _("Confirmed")
        CANCELLED = "cancelled", _("Cancelled")
        COMPLETED = "completed", _("Completed")

    class PaymentStatus(models.TextChoices):
        PENDING = "pending", _("Pending")
        PAID = "paid", _("Paid")
        FAILED = "failed", _("Failed")
        REFUNDED = "refunded", _("Refunded")

    # Bookings in these states occupy a room.
    ACTIVE_STATUSES = (Status.PENDING, Status.CONFIRMED)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    pg = models.ForeignKey(
        "listings.PG",
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    room_type = models.ForeignKey(
        "listings.RoomType",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    booking_code = models.CharField(max_length=12, unique=True, editable=False)
    check_in = models.DateField()
    check_out = models.DateField()
    guests = models.PositiveSmallIntegerField(default=1, validators=[MinValueValidator(1)])
    nightly_rate = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text=_("Room type price at the time of booking."),
    )
    total_nights = models.PositiveSmallIntegerField(default=1)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.PENDING,
    )
    payment_status = models.CharField(
        max_length=16,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )
    special_requests = models.TextField(blank=True, max_length=500)
    cancellation_reason = models.CharField(max_length=500, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("booking")
        verbose_name_plural = _("bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(check_out__gt=models.F("check_in")),
                name="booking_valid_dates",
            ),
        ]
        indexes = [
            models.Index(fields=["room_type", "status", "check_in", "check_out"]),
            models.Index(fields=["user", "status"]),
            models.Index(fields=["pg", "status"]),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.booking_code} for {self.pg_id}"

    @property
    def stay(self) -> DateRange:
        return DateRange(self.check_in, self.check_out)

    @property
    def is_active(self) -> bool:
        return self.status in self.ACTIVE_STATUSES

    def clean(self) -> None:
        if self.check_in >= self.check_out:
            raise ValidationError(_("Check-out date must be after check-in date."))

        self.total_nights = self.stay.nights
        if self.total_nights <= 0:
            raise ValidationError(_("A stay must be at least one night."))
        # Amount is always derived from the rate snapshot, never from client input.
        self.total_amount = self.nightly_rate * Decimal(self.total_nights)

    def save(self, *args, **kwargs):  # type: ignore
        if self._state.adding and not self.booking_code:
            self.booking_code = self.generate_booking_code()
        self.clean()
        super().save(*args, **kwargs)

    @classmethod
    def generate_booking_code(cls) -> str:
        while True:
            code = secrets.token_hex(4).upper()
            if not cls.objects.filter(booking_code=code).exists():
                return code

    def mark_cancelled(self, reason: str = "") -> None:
        self.status = self.Status.CANCELLED
        self.cancellation_reason = reason
        self.cancelled_at = timezone.now()
        self.save(update_fields=["status", "cancellation_reason", "cancelled_at", "updated_at"])

    def mark_confirmed(self) -> None:
        self.status = self.Status.CONFIRMED
        self.confirmed_at = timezone.now()
        self.save(update_fields=["status", "confirmed_at", "updated_at"])

    def mark_completed(self) -> None:
        self.status = self.Status.COMPLETED
        self.completed_at = timezone.now()
        self.save(update_fields=["status", "completed_at", "updated_at"])

    def mark_paid(self) -> None:
        self.payment_status = self.PaymentStatus.PAID
        update_fields = ["payment_status", "updated_at"]
        if self.status == self.Status.PENDING:
            self.status = self.Status.CONFIRMED
            self.confirmed_at = timezone.now()
            update_fields += ["status", "confirmed_at"]
        self.save(update_fields=update_fields)

    def mark_payment_failed(self) -> None:
        self.payment_status = self.PaymentStatus.FAILED
        self.save(update_fields=["payment_status", "updated_at"])

    def mark_refunded(self) -> None:
        self.payment_status = self.PaymentStatus.REFUNDED
        self.save(update_fields=["payment_status", "updated_at"])
