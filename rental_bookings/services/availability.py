"""Availability checks for listing calendars."""

from datetime import date

from sqlalchemy.engine import Connection

from rental_bookings.db.readers.reservations import find_overlapping_reservations
from rental_bookings.errors import ValidationError


def validate_date_range(start_date: date, end_date: date) -> None:
    """
    Raise ValidationError unless both dates are given and start_date <= end_date.
    """
    if start_date is None or end_date is None:
        raise ValidationError("startDate and endDate are required")
    if start_date > end_date:
        raise ValidationError("startDate must not be after endDate")


def has_overlap(conn: Connection, listing_id: int, start_date: date, end_date: date) -> bool:
    """
    Check whether any non-failed reservation of the listing intersects the range.

    Ranges are inclusive at both ends, so a stay ending on the requested start
    date counts as an overlap (no same-day turnover).

    Args:
        conn: Active database connection (the creation transaction's, so the
            answer is consistent with the following insert)
        listing_id: Listing ID
        start_date: First requested day
        end_date: Last requested day

    Returns:
        bool: True if the dates are taken

    Raises:
        ValidationError: If the range is missing or inverted
    """
    validate_date_range(start_date, end_date)
    return len(find_overlapping_reservations(conn, listing_id, start_date, end_date)) > 0
