"""Serializers for the booking domain."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from rest_framework import serializers  # type: ignore
from rest_framework.settings import api_settings  # type: ignore

from shared.api.serializers import StrictFieldsMixin

from . import services
from .models import Booking

# Clients may send full ISO timestamps; only the date part is used.
DATE_INPUT_FORMATS = [
    api_settings.DATE_INPUT_FORMATS[0],
    "%Y-%m-%dT%H:%M:%S.%fZ",
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%dT%H:%M:%S",
]


class BookingCreateSerializer(StrictFieldsMixin, serializers.Serializer):
    """Booking request. Dates and availability are checked by the service."""

    pg = serializers.IntegerField()
    room_type = serializers.IntegerField()
    check_in = serializers.DateField(input_formats=DATE_INPUT_FORMATS)
    check_out = serializers.DateField(input_formats=DATE_INPUT_FORMATS)
    guests = serializers.IntegerField(min_value=1, default=1)
    special_requests = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")

    def validate_guests(self, value: int) -> int:  # type: ignore
        if value > settings.BOOKING_MAX_GUESTS:
            raise serializers.ValidationError(f"Guests must be between 1 and {settings.BOOKING_MAX_GUESTS}")
        return value

    def create(self, validated_data):  # type: ignore
        return services.check_and_reserve(
            self.context["request"].user,
            pg_id=validated_data["pg"],
            room_type_id=validated_data["room_type"],
            check_in=validated_data["check_in"],
            check_out=validated_data["check_out"],
            guests=validated_data["guests"],
            special_requests=validated_data.get("special_requests", ""),
        )


class BookingCancelSerializer(StrictFieldsMixin, serializers.Serializer):
    reason = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")


class BookingStatusSerializer(StrictFieldsMixin, serializers.Serializer):
    status = serializers.ChoiceField(choices=Booking.Status.choices)


class BookingSerializer(serializers.ModelSerializer):
    """Detailed booking representation."""

    user = serializers.SerializerMethodField()
    pg = serializers.SerializerMethodField()
    room_type = serializers.SerializerMethodField()

    class Meta:
        model = Booking
        fields = [
            "id",
            "booking_code",
            "user",
            "pg",
            "room_type",
            "check_in",
            "check_out",
            "guests",
            "nightly_rate",
            "total_nights",
            "total_amount",
            "status",
            "payment_status",
            "special_requests",
            "cancellation_reason",
            "cancelled_at",
            "confirmed_at",
            "completed_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_user(self, obj: Booking) -> dict:
        return {"id": obj.user_id, "name": obj.user.name, "email": obj.user.email}

    def get_pg(self, obj: Booking) -> dict:
        return {
            "id": obj.pg_id,
            "name": obj.pg.name,
            "city": obj.pg.city,
            "address": obj.pg.address,
        }

    def get_room_type(self, obj: Booking) -> dict:
        return {"id": obj.room_type_id, "type": obj.room_type.type, "price": f"{obj.room_type.price:.2f}"}


class BookingStatsSerializer(serializers.Serializer):
    status = serializers.CharField()
    count = serializers.IntegerField()
    total_revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
