"""
Internal helper functions for route handlers.

Translate domain errors into the structured ``{"success": false, "error": ...}``
bodies clients expect, and validate query parameters shared by several routes.
"""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException, status
from fastapi.responses import JSONResponse

from rental_bookings.errors import BookingError
from rental_bookings.schemas.common import ErrorResponse

ROLES = ("guest", "host")


def error_response(status_code: int, message: str) -> JSONResponse:
    """
    Build a structured error response.

    Args:
        status_code: HTTP status
        message: Human-readable error

    Returns:
        JSONResponse: ``{"success": false, "error": message}``
    """
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )


def booking_error_response(error: BookingError) -> JSONResponse:
    """Render a domain error with the status code it carries."""
    return error_response(error.status_code, error.message)


def success_response(data: Any = None, status_code: int = status.HTTP_200_OK, **extra: Any) -> JSONResponse:
    """
    Build ``{"success": true, "data": ..., **extra}``.

    ``data`` is omitted when None so endpoints without a payload only carry
    their extra keys.
    """
    content: dict[str, Any] = {"success": True}
    if data is not None:
        content["data"] = data
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)


def validate_role_or_400(role: str) -> None:
    """
    Validate a ``role`` query parameter.

    Raises:
        HTTPException: 400 if role is neither "guest" nor "host"
    """
    if role not in ROLES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="role must be 'guest' or 'host'",
        )
