"""Serializers for authentication flows (register, login, password reset, Google)."""

from __future__ import annotations

from typing import Any

from django.contrib.auth import get_user_model  # type: ignore
from django.db import IntegrityError, transaction  # type: ignore
from rest_framework import serializers  # type: ignore

from shared.api.serializers import StrictFieldsMixin
from shared.domain.errors import ConflictError, UnauthorizedError

from . import services
from .models import PHONE_VALIDATOR

User = get_user_model()

INVALID_CREDENTIALS = "Invalid email or password"


class RegisterSerializer(StrictFieldsMixin, serializers.Serializer):
    name = serializers.CharField(min_length=2, max_length=50)
    email = serializers.EmailField()
    password = serializers.CharField(min_length=6, write_only=True)
    phone = serializers.CharField(validators=[PHONE_VALIDATOR])
    role = serializers.ChoiceField(
        choices=[User.RoleChoices.USER, User.RoleChoices.OWNER],
        default=User.RoleChoices.USER,
    )

    def validate_email(self, value: str) -> str:  # type: ignore
        value = value.lower()
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("User with this email already exists")
        return value

    def validate_phone(self, value: str) -> str:  # type: ignore
        value = User.objects.normalize_phone(value)
        if User.objects.filter(phone=value).exists():
            raise serializers.ValidationError("User with this phone number already exists")
        return value

    def create(self, validated_data: dict[str, Any]):  # type: ignore
        password = validated_data.pop("password")
        try:
            with transaction.atomic():
                return User.objects.create_user(password=password, **validated_data)
        except IntegrityError as exc:
            raise ConflictError("User with this email or phone already exists") from exc


class LoginSerializer(StrictFieldsMixin, serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:  # type: ignore
        user = User.objects.filter(email__iexact=attrs["email"]).first()
        # Unknown email and wrong password must be indistinguishable.
        if user is None or not user.check_password(attrs["password"]):
            raise UnauthorizedError(INVALID_CREDENTIALS)
        services.ensure_can_sign_in(user)
        attrs["user"] = user
        return attrs


class ForgotPasswordSerializer(StrictFieldsMixin, serializers.Serializer):
    email = serializers.EmailField()

    def save(self, **kwargs):  # type: ignore
        return services.request_password_reset(self.validated_data["email"])


class ResetPasswordSerializer(StrictFieldsMixin, serializers.Serializer):
    token = serializers.CharField(max_length=64)
    password = serializers.CharField(min_length=6, write_only=True)

    def save(self, **kwargs):  # type: ignore
        return services.reset_password(self.validated_data["token"], self.validated_data["password"])


class GoogleLoginSerializer(StrictFieldsMixin, serializers.Serializer):
    credential = serializers.CharField()

    def save(self, **kwargs):  # type: ignore
        claims = services.verify_google_credential(self.validated_data["credential"])
        return services.get_or_create_google_user(claims)
