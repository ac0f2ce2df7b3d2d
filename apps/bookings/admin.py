"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "booking_code",
        "pg",
        "room_type",
        "user",
        "status",
        "payment_status",
        "check_in",
        "check_out",
        "total_amount",
        "created_at",
    )
    list_filter = ("status", "payment_status", "check_in", "check_out")
    search_fields = ("booking_code", "pg__name", "user__email")
    readonly_fields = (
        "booking_code",
        "created_at",
        "updated_at",
        "total_amount",
        "total_nights",
        "nightly_rate",
    )
