"""DRF exception handler producing the ``{status, message}`` error envelope.

Client errors are reported as ``status: "fail"``, server errors as
``status: "error"``. Validation errors also carry the field errors under
``errors``. Anything unexpected is logged and hidden behind a generic
message.
"""

from __future__ import annotations

import logging
from typing import Any

from django.conf import settings  # type: ignore
from rest_framework import exceptions, status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler as drf_exception_handler  # type: ignore

from shared.domain.errors import DomainError

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Something went wrong!"


def _first_message(detail: Any) -> str:
    if isinstance(detail, dict):
        for value in detail.values():
            return _first_message(value)
        return ""
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else ""
    return str(detail)


def _envelope(status_code: int, message: str, **extra: Any) -> dict[str, Any]:
    body = {"status": "fail" if status_code < 500 else "error", "message": message}
    body.update(extra)
    return body


def api_exception_handler(exc, context):  # type: ignore
    if isinstance(exc, DomainError):
        if not exc.is_client_error:
            logger.warning("%s: %s", type(exc).__name__, exc.message)
        return Response(_envelope(exc.status_code, exc.message), status=exc.status_code)

    response = drf_exception_handler(exc, context)
    if response is None:
        view = context.get("view")
        logger.error(
            "Unhandled exception in %s",
            type(view).__name__ if view is not None else "unknown view",
            exc_info=exc,
        )
        body = _envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_ERROR_MESSAGE)
        if settings.DEBUG:
            body["detail"] = str(exc)
        return Response(body, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    if isinstance(exc, exceptions.ValidationError):
        response.data = _envelope(
            response.status_code,
            _first_message(response.data) or "Invalid input",
            errors=response.data,
        )
    else:
        detail = response.data.get("detail") if isinstance(response.data, dict) else response.data
        response.data = _envelope(response.status_code, _first_message(detail))
    return response
