"""
Domain Errors

Every error the API reports to clients derives from ``DomainError``.
Each class carries the HTTP status code used by the API exception
handler, so services can raise them without knowing about HTTP.
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class for errors that are reported to API clients."""

    status_code = 500
    default_message = "Something went wrong!"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status_code < 500


class ValidationError(DomainError):
    """Malformed or out-of-range input."""

    status_code = 400
    default_message = "Invalid input"


class UnauthorizedError(DomainError):
    status_code = 401
    default_message = "Authentication required"


class ForbiddenError(DomainError):
    status_code = 403
    default_message = "You do not have permission to perform this action"


class NotFoundError(DomainError):
    status_code = 404
    default_message = "Not found"


class ConflictError(DomainError):
    """Duplicate resource or invalid state transition. Reported as 400."""

    status_code = 400
    default_message = "Conflict"


class RoomUnavailableError(ConflictError):
    """No room of the requested type is free for the requested dates."""

    default_message = "No rooms available for the selected dates"


class GatewayError(DomainError):
    """An external provider (payments, identity) failed."""

    status_code = 502
    default_message = "Payment provider error"


class InvalidSignatureError(ValidationError):
    default_message = "Invalid webhook signature"
