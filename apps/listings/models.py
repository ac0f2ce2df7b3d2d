"""Listing domain models for PG Stay."""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.exceptions import ValidationError  # type: ignore
from django.core.validators import (  # type: ignore
    MaxLengthValidator,
    MaxValueValidator,
    MinLengthValidator,
    MinValueValidator,
    RegexValidator,
)
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from apps.users.models import PHONE_VALIDATOR

PINCODE_VALIDATOR = RegexValidator(
    regex=r"^\d{6}$",
    message=_("Pincode must be exactly 6 digits."),
)

AMENITY_FIELDS = (
    "wifi",
    "food",
    "laundry",
    "parking",
    "gym",
    "ac",
    "power_backup",
    "security",
)


class PG(models.Model):
    """A paying-guest accommodation listed by an owner."""

    class CancellationPolicy(models.TextChoices):
        FLEXIBLE = "flexible", _("Flexible")
        MODERATE = "moderate", _("Moderate")
        STRICT = "strict", _("Strict")

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="pgs",
    )
    name = models.CharField(max_length=100, validators=[MinLengthValidator(3)])
    description = models.TextField(validators=[MinLengthValidator(20), MaxLengthValidator(2000)])
    address = models.CharField(max_length=255)
    city = models.CharField(max_length=100)
    state = models.CharField(max_length=100)
    pincode = models.CharField(max_length=6, validators=[PINCODE_VALIDATOR])
    latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)

    wifi = models.BooleanField(default=False)
    food = models.BooleanField(default=False)
    laundry = models.BooleanField(default=False)
    parking = models.BooleanField(default=False)
    gym = models.BooleanField(default=False)
    ac = models.BooleanField(default=False)
    power_backup = models.BooleanField(default=False)
    security = models.BooleanField(default=False)

    rules = models.JSONField(default=list, blank=True)
    images = models.JSONField(default=list, blank=True)
    owner_phone = models.CharField(max_length=17, blank=True, validators=[PHONE_VALIDATOR])
    cancellation_policy = models.CharField(
        max_length=10,
        choices=CancellationPolicy.choices,
        default=CancellationPolicy.MODERATE,
    )

    rating = models.DecimalField(
        max_digits=2,
        decimal_places=1,
        default=Decimal("0.0"),
        validators=[MinValueValidator(0), MaxValueValidator(5)],
    )
    review_count = models.PositiveIntegerField(default=0)

    is_approved = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    is_featured = models.BooleanField(default=False)
    approved_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    rejection_reason = models.CharField(max_length=500, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("PG listing")
        verbose_name_plural = _("PG listings")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["city"]),
            models.Index(fields=["is_approved", "is_active"]),
            models.Index(fields=["owner"]),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.city})"

    @property
    def is_bookable(self) -> bool:
        return self.is_approved and self.is_active

    def approve(self, admin_user) -> None:
        self.is_approved = True
        self.is_active = True
        self.approved_at = timezone.now()
        self.approved_by = admin_user
        self.rejection_reason = ""
        self.save(
            update_fields=[
                "is_approved",
                "is_active",
                "approved_at",
                "approved_by",
                "rejection_reason",
                "updated_at",
            ]
        )

    def reject(self, reason: str = "") -> None:
        self.is_approved = False
        self.is_active = False
        self.rejection_reason = reason
        self.save(update_fields=["is_approved", "is_active", "rejection_reason", "updated_at"])

    def deactivate(self) -> None:
        self.is_active = False
        self.save(update_fields=["is_active", "updated_at"])


class RoomType(models.Model):
    """A bookable room category inside a PG."""

    class Kind(models.TextChoices):
        SINGLE = "single", _("Single")
        DOUBLE = "double", _("Double")
        TRIPLE = "triple", _("Triple")
        DORMITORY = "dormitory", _("Dormitory")

    pg = models.ForeignKey(PG, on_delete=models.CASCADE, related_name="room_types")
    type = models.CharField(max_length=10, choices=Kind.choices)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text=_("Nightly price."),
    )
    deposit = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    total_rooms = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    available_rooms = models.PositiveIntegerField(
        help_text=_("Rooms the owner currently offers for sale; bookings do not change it."),
    )
    amenities = models.JSONField(default=list, blank=True)
    size_sqft = models.PositiveIntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("room type")
        verbose_name_plural = _("room types")
        ordering = ["pg_id", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(total_rooms__gte=1),
                name="room_type_has_rooms",
            ),
            models.CheckConstraint(
                condition=models.Q(available_rooms__lte=models.F("total_rooms")),
                name="room_type_available_le_total",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.get_type_display()} in {self.pg_id}"

    def clean(self) -> None:
        if self.available_rooms is not None and self.total_rooms is not None:
            if self.available_rooms > self.total_rooms:
                raise ValidationError(_("Available rooms cannot exceed total rooms."))
