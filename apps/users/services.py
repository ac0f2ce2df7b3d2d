"""Account services: JWT issuing, password reset and Google sign-in."""

from __future__ import annotations

import logging
from typing import Any

from django.conf import settings  # type: ignore
from django.core.mail import send_mail  # type: ignore
from django.db import IntegrityError, transaction  # type: ignore
from google.auth import exceptions as google_exceptions  # type: ignore
from google.auth.transport import requests as google_requests  # type: ignore
from google.oauth2 import id_token  # type: ignore
from rest_framework_simplejwt.tokens import RefreshToken  # type: ignore

from shared.domain.errors import (
    ConflictError,
    ForbiddenError,
    GatewayError,
    UnauthorizedError,
    ValidationError,
)

from .models import PasswordResetToken, User

logger = logging.getLogger(__name__)

INVALID_RESET_TOKEN = "Invalid or expired reset token"


def tokens_for_user(user) -> dict[str, str]:
    refresh = RefreshToken.for_user(user)
    return {"refresh": str(refresh), "access": str(refresh.access_token)}


def ensure_can_sign_in(user) -> None:
    if not user.is_active:
        raise ForbiddenError("Your account has been deactivated")


def send_password_reset_email(user, token: PasswordResetToken) -> bool:
    reset_url = f"{settings.FRONTEND_URL.rstrip('/')}/reset-password/{token.token}"
    message = (
        f"Hi {user.name},\n\n"
        "We received a request to reset your PG Stay password. "
        f"Open the link below within {settings.PASSWORD_RESET_TOKEN_TTL_MINUTES} minutes:\n\n"
        f"{reset_url}\n\n"
        "If you did not request this, you can ignore this email."
    )
    try:
        send_mail(
            subject="Reset your PG Stay password",
            message=message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[user.email],
            fail_silently=False,
        )
    except Exception:  # noqa: BLE001
        logger.exception("Failed to send password reset email to user %s", user.pk)
        return False
    logger.info("Password reset email sent to user %s", user.pk)
    return True


@transaction.atomic
def request_password_reset(email: str) -> PasswordResetToken | None:
    """Issue a reset token if the account exists.

    Callers must answer identically either way so the endpoint does not
    reveal which emails are registered.
    """
    user = User.objects.filter(email__iexact=email, is_active=True).first()
    if user is None:
        logger.info("Password reset requested for unknown email")
        return None

    PasswordResetToken.objects.filter(user=user, is_used=False).update(is_used=True)
    token = PasswordResetToken.issue(user)
    transaction.on_commit(lambda: send_password_reset_email(user, token))
    return token


@transaction.atomic
def reset_password(raw_token: str, password: str):
    token = (
        PasswordResetToken.objects.select_for_update()
        .select_related("user")
        .filter(token=raw_token)
        .first()
    )
    if token is None or token.is_used or token.is_expired:
        raise ValidationError(INVALID_RESET_TOKEN)

    user = token.user
    user.set_password(password)
    user.save(update_fields=["password", "updated_at"])
    token.mark_used()
    logger.info("Password reset completed for user %s", user.pk)
    return user


def verify_google_credential(credential: str) -> dict[str, Any]:
    """Validate a Google ID token and return its claims."""

    if not settings.GOOGLE_CLIENT_ID:
        raise GatewayError("Google sign-in is not configured")
    try:
        claims = id_token.verify_oauth2_token(
            credential,
            google_requests.Request(),
            settings.GOOGLE_CLIENT_ID,
        )
    except ValueError as exc:
        logger.info("Rejected Google credential: %s", exc)
        raise UnauthorizedError("Invalid Google credential") from exc
    except google_exceptions.TransportError as exc:
        logger.warning("Google token verification failed: %s", exc)
        raise GatewayError("Could not reach Google to verify the credential") from exc

    if not claims.get("email") or not claims.get("email_verified", False):
        raise UnauthorizedError("Google account email is not verified")
    return claims


@transaction.atomic
def get_or_create_google_user(claims: dict[str, Any]):
    google_id = claims["sub"]
    email = claims["email"].lower()

    user = User.objects.filter(google_id=google_id).first()
    if user is None:
        user = User.objects.filter(email__iexact=email).first()
        if user is not None:
            user.google_id = google_id
            user.is_verified = True
            if not user.avatar and claims.get("picture"):
                user.avatar = claims["picture"]
            user.save(update_fields=["google_id", "is_verified", "avatar", "updated_at"])
    if user is None:
        try:
            user = User.objects.create_user(
                email=email,
                password=None,
                name=(claims.get("name") or email.split("@")[0])[:50],
                avatar=claims.get("picture", ""),
                google_id=google_id,
                is_verified=True,
            )
        except IntegrityError as exc:
            raise ConflictError("User with this email already exists") from exc
        logger.info("Created user %s from Google sign-in", user.pk)

    ensure_can_sign_in(user)
    return user
