"""User domain models for PG Stay.

The platform distinguishes three roles: regular users who book rooms,
owners who list PG accommodations and admins who moderate listings and
accounts. Accounts are never hard-deleted; admins deactivate them
instead.
"""

from __future__ import annotations

import secrets
from datetime import timedelta
from typing import Any

from django.conf import settings  # type: ignore
from django.contrib.auth.models import AbstractUser, BaseUserManager  # type: ignore
from django.core.validators import MinLengthValidator, RegexValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


PHONE_VALIDATOR = RegexValidator(
    regex=r"^\+?[1-9]\d{0,15}$",
    message=_("Please enter a valid phone number."),
)


class CustomUserManager(BaseUserManager):
    """User manager that uses the email address as the login."""

    use_in_migrations = True

    def _create_user(self, email: str, password: str | None, **extra_fields: Any):
        if not email:
            raise ValueError("Email is required to create a user.")
        email = self.normalize_email(email).lower()

        phone = extra_fields.get("phone")
        if phone:
            extra_fields["phone"] = self.normalize_phone(phone)

        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_user(self, email: str, password: str | None = None, **extra_fields: Any):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        extra_fields.setdefault("role", CustomUser.RoleChoices.USER)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email: str, password: str | None = None, **extra_fields: Any):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("role", CustomUser.RoleChoices.ADMIN)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self._create_user(email, password, **extra_fields)

    @staticmethod
    def normalize_phone(phone: str) -> str:
        """Strip spaces and dashes so phones are stored uniformly."""
        return phone.replace(" ", "").replace("-", "")


class CustomUser(AbstractUser):
    """Platform account with a role."""

    class RoleChoices(models.TextChoices):
        USER = "user", _("User")
        OWNER = "owner", _("PG owner")
        ADMIN = "admin", _("Admin")

    username = models.CharField(
        _("username"),
        max_length=150,
        blank=True,
        help_text=_("Optional, not used for login."),
    )
    name = models.CharField(
        _("name"),
        max_length=50,
        validators=[MinLengthValidator(2)],
    )
    email = models.EmailField(_("email"), unique=True)
    phone = models.CharField(
        _("phone"),
        max_length=17,
        unique=True,
        null=True,
        blank=True,
        validators=[PHONE_VALIDATOR],
    )
    role = models.CharField(
        _("role"),
        max_length=10,
        choices=RoleChoices.choices,
        default=RoleChoices.USER,
    )
    avatar = models.URLField(_("avatar"), blank=True)
    google_id = models.CharField(max_length=64, unique=True, null=True, blank=True)
    is_verified = models.BooleanField(_("verified"), default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CustomUserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["name"]

    class Meta:
        verbose_name = _("user")
        verbose_name_plural = _("users")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["role"]),
        ]

    def __str__(self) -> str:
        return f"{self.email} ({self.get_role_display()})"

    def is_owner(self) -> bool:
        return self.role == self.RoleChoices.OWNER

    def is_admin(self) -> bool:
        return self.role == self.RoleChoices.ADMIN or self.is_superuser

    def toggle_active(self) -> bool:
        self.is_active = not self.is_active
        self.save(update_fields=["is_active", "updated_at"])
        return self.is_active


class PasswordResetToken(models.Model):
    """Single-use password reset token with an expiry."""

    user = models.ForeignKey(
        CustomUser,
        on_delete=models.CASCADE,
        related_name="password_reset_tokens",
    )
    token = models.CharField(max_length=64, unique=True)
    expires_at = models.DateTimeField()
    is_used = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("password reset token")
        verbose_name_plural = _("password reset tokens")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["token", "expires_at"]),
        ]

    def __str__(self) -> str:
        return f"Reset token for {self.user_id}"

    @classmethod
    def issue(cls, user: CustomUser) -> "PasswordResetToken":
        ttl = timedelta(minutes=settings.PASSWORD_RESET_TOKEN_TTL_MINUTES)
        return cls.objects.create(
            user=user,
            token=secrets.token_hex(32),
            expires_at=timezone.now() + ttl,
        )

    @property
    def is_expired(self) -> bool:
        return timezone.now() >= self.expires_at

    def mark_used(self) -> None:
        self.is_used = True
        self.save(update_fields=["is_used"])


# Short alias used across the apps and tests
User = CustomUser
