"""
Domain errors raised by the booking services.

Services raise these; route handlers translate them into structured
``{"success": false, "error": ...}`` responses using ``status_code``.
None of them is raised after a side effect has been committed.
"""

from __future__ import annotations


class BookingError(Exception):
    """Base class for expected, user-facing failures."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(BookingError):
    """Missing or malformed input."""

    status_code = 400


class NotAuthorizedError(BookingError):
    """The acting user has no rights over the target record."""

    status_code = 403


class NotFoundError(BookingError):
    status_code = 404


class ReservationNotFoundError(NotFoundError):
    def __init__(self, message: str = "Reservation not found") -> None:
        super().__init__(message)


class ListingNotFoundError(NotFoundError):
    def __init__(self, message: str = "Listing not found") -> None:
        super().__init__(message)


class NotificationNotFoundError(NotFoundError):
    def __init__(self, message: str = "Notification not found") -> None:
        super().__init__(message)


class ConversationNotFoundError(NotFoundError):
    def __init__(self, message: str = "Conversation not found") -> None:
        super().__init__(message)


class DatesUnavailableError(BookingError):
    """The requested range overlaps an existing non-failed reservation."""

    status_code = 409

    def __init__(self, message: str = "This property is already reserved for these dates.") -> None:
        super().__init__(message)


class ReviewNotFoundError(NotFoundError):
    def __init__(self, message: str = "Review not found") -> None:
        super().__init__(message)


class DuplicateReviewError(BookingError):
    """The user already reviewed this reservation."""

    status_code = 409

    def __init__(self, message: str = "You have already reviewed this reservation") -> None:
        super().__init__(message)
