"""Serializers for admin moderation endpoints."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.bookings.serializers import BookingSerializer
from apps.users.models import User
from shared.api.serializers import StrictFieldsMixin


class RejectPGSerializer(StrictFieldsMixin, serializers.Serializer):
    reason = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")


class UserRoleSerializer(StrictFieldsMixin, serializers.Serializer):
    role = serializers.ChoiceField(choices=User.RoleChoices.choices)


class MonthlyStatsSerializer(serializers.Serializer):
    month = serializers.CharField()
    bookings = serializers.IntegerField()
    revenue = serializers.DecimalField(max_digits=14, decimal_places=2)


class DashboardSerializer(serializers.Serializer):
    total_users = serializers.IntegerField()
    total_owners = serializers.IntegerField()
    total_pgs = serializers.IntegerField()
    approved_pgs = serializers.IntegerField()
    pending_pgs = serializers.IntegerField()
    total_bookings = serializers.IntegerField()
    total_reviews = serializers.IntegerField()
    total_revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    average_booking_value = serializers.DecimalField(max_digits=14, decimal_places=2)
    recent_bookings = BookingSerializer(many=True)
    monthly_stats = MonthlyStatsSerializer(many=True)
