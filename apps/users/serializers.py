"""Serializers for user profile endpoints."""

from __future__ import annotations

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import serializers  # type: ignore

from shared.api.serializers import StrictFieldsMixin

from .models import PHONE_VALIDATOR

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    """Public representation of an account."""

    class Meta:
        model = User
        fields = [
            "id",
            "name",
            "email",
            "phone",
            "role",
            "avatar",
            "is_verified",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ProfileUpdateSerializer(StrictFieldsMixin, serializers.ModelSerializer):
    name = serializers.CharField(min_length=2, max_length=50, required=False)
    phone = serializers.CharField(validators=[PHONE_VALIDATOR], required=False)
    avatar = serializers.URLField(required=False, allow_blank=True)

    class Meta:
        model = User
        fields = ["name", "phone", "avatar"]

    def validate_phone(self, value: str) -> str:  # type: ignore
        value = User.objects.normalize_phone(value)
        taken = User.objects.filter(phone=value).exclude(pk=self.instance.pk).exists()
        if taken:
            raise serializers.ValidationError("User with this phone number already exists")
        return value


class ChangePasswordSerializer(StrictFieldsMixin, serializers.Serializer):
    current_password = serializers.CharField(write_only=True)
    new_password = serializers.CharField(write_only=True, min_length=6)

    def validate_current_password(self, value: str) -> str:  # type: ignore
        user = self.context["request"].user
        if not user.check_password(value):
            raise serializers.ValidationError("Current password is incorrect")
        return value

    def save(self, **kwargs):  # type: ignore
        user = self.context["request"].user
        user.set_password(self.validated_data["new_password"])
        user.save(update_fields=["password", "updated_at"])
        return user
