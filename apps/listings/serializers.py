"""Serializers for the listings domain."""

from __future__ import annotations

from django.db import transaction  # type: ignore
from rest_framework import serializers  # type: ignore

from shared.api.serializers import StrictFieldsMixin

from .models import PG, PINCODE_VALIDATOR, RoomType


class RoomTypeSerializer(StrictFieldsMixin, serializers.ModelSerializer):
    amenities = serializers.ListField(
        child=serializers.CharField(max_length=50),
        required=False,
    )
    available_rooms = serializers.IntegerField(min_value=0, required=False)
    total_rooms = serializers.IntegerField(min_value=1)

    class Meta:
        model = RoomType
        fields = [
            "id",
            "type",
            "price",
            "deposit",
            "total_rooms",
            "available_rooms",
            "amenities",
            "size_sqft",
        ]
        read_only_fields = ["id"]
        extra_kwargs = {
            "price": {"min_value": 0},
            "deposit": {"min_value": 0},
        }

    def validate(self, attrs):  # type: ignore
        total = attrs.get("total_rooms", getattr(self.instance, "total_rooms", None))
        if "available_rooms" not in attrs and self.instance is None:
            attrs["available_rooms"] = total
        available = attrs.get("available_rooms", getattr(self.instance, "available_rooms", None))
        if total is not None and available is not None and available > total:
            raise serializers.ValidationError({"available_rooms": "Available rooms cannot exceed total rooms."})
        return attrs


class OwnerSummarySerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField()
    email = serializers.EmailField()
    phone = serializers.CharField()


class PGSerializer(serializers.ModelSerializer):
    """Read serializer used for list and detail responses."""

    owner = OwnerSummarySerializer(read_only=True)
    room_types = RoomTypeSerializer(many=True, read_only=True)
    min_price = serializers.SerializerMethodField()

    class Meta:
        model = PG
        fields = [
            "id",
            "owner",
            "name",
            "description",
            "address",
            "city",
            "state",
            "pincode",
            "latitude",
            "longitude",
            "wifi",
            "food",
            "laundry",
            "parking",
            "gym",
            "ac",
            "power_backup",
            "security",
            "rules",
            "images",
            "owner_phone",
            "cancellation_policy",
            "room_types",
            "min_price",
            "rating",
            "review_count",
            "is_approved",
            "is_active",
            "is_featured",
            "approved_at",
            "rejection_reason",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_min_price(self, obj: PG) -> str | None:
        value = getattr(obj, "min_price", None)
        if value is None:
            prices = [room.price for room in obj.room_types.all()]
            value = min(prices) if prices else None
        return None if value is None else f"{value:.2f}"


class PGUpdateSerializer(StrictFieldsMixin, serializers.ModelSerializer):
    """Owner editable fields. Rating, approval and ownership stay server controlled."""

    name = serializers.CharField(min_length=3, max_length=100)
    description = serializers.CharField(min_length=20, max_length=2000)
    pincode = serializers.CharField(validators=[PINCODE_VALIDATOR])
    rules = serializers.ListField(child=serializers.CharField(max_length=200), required=False)
    images = serializers.ListField(child=serializers.URLField(), required=False)

    class Meta:
        model = PG
        fields = [
            "name",
            "description",
            "address",
            "city",
            "state",
            "pincode",
            "latitude",
            "longitude",
            "wifi",
            "food",
            "laundry",
            "parking",
            "gym",
            "ac",
            "power_backup",
            "security",
            "rules",
            "images",
            "owner_phone",
            "cancellation_policy",
        ]


class PGCreateSerializer(PGUpdateSerializer):
    room_types = RoomTypeSerializer(many=True)

    class Meta(PGUpdateSerializer.Meta):
        fields = PGUpdateSerializer.Meta.fields + ["room_types"]

    def validate_room_types(self, value):  # type: ignore
        if not value:
            raise serializers.ValidationError("At least one room type is required.")
        return value

    @transaction.atomic
    def create(self, validated_data):  # type: ignore
        room_types = validated_data.pop("room_types")
        pg = PG.objects.create(
            owner=self.context["request"].user,
            is_approved=False,
            **validated_data,
        )
        RoomType.objects.bulk_create(RoomType(pg=pg, **room) for room in room_types)
        return pg


class AvailabilityQuerySerializer(serializers.Serializer):
    room_type = serializers.IntegerField()
    check_in = serializers.DateField()
    check_out = serializers.DateField()

    def validate(self, attrs):  # type: ignore
        if attrs["check_out"] <= attrs["check_in"]:
            raise serializers.ValidationError({"check_out": "Check-out date must be after check-in date."})
        return attrs
