from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Optional

import structlog
from sqlalchemy import delete, insert
from sqlalchemy.engine import Connection

from rental_bookings.models.reservations import (
    STATUS_PENDING,
    CancelledReservation,
    Reservation,
    ReservedDate,
)
from rental_bookings.utils.datetime import utc_now

logger = structlog.get_logger(__name__)


def insert_reservation(
    conn: Connection,
    listing_id: int,
    user_id: int,
    start_date: date,
    end_date: date,
    total_price: Decimal,
    order_id: str,
    payment_id: Optional[str] = None,
    status: Optional[str] = None,
) -> int:
    """
    Insert a reservation row.

    Args:
        conn (Connection): Connection inside the creation transaction.
        listing_id (int): Listing being booked.
        user_id (int): Booking guest.
        start_date (date): First night (inclusive).
        end_date (date): Last day (inclusive).
        total_price (Decimal): Price computed by the caller.
        order_id (str): Payment gateway order id.
        payment_id (Optional[str]): Payment gateway payment id.
        status (Optional[str]): pending, success or failed (defaults to pending).

    Returns:
        int: New reservation id.
    """
    result = conn.execute(
        insert(Reservation).values(
            listing_id=listing_id,
            user_id=user_id,
            start_date=start_date,
            end_date=end_date,
            total_price=total_price,
            order_id=order_id,
            payment_id=payment_id,
            status=status or STATUS_PENDING,
            created_at=utc_now(),
        )
    )
    return int(result.inserted_primary_key[0])


def claim_reserved_dates(
    conn: Connection, listing_id: int, reservation_id: int, start_date: date, end_date: date
) -> int:
    """
    Insert one ReservedDate per day of [start_date, end_date].

    Raises sqlalchemy.exc.IntegrityError if any day is already held for the listing.

    Returns:
        int: Number of days claimed.
    """
    days = (end_date - start_date).days + 1
    rows: list[dict[str, Any]] = [
        {
            "listing_id": listing_id,
            "day": start_date + timedelta(days=offset),
            "reservation_id": reservation_id,
        }
        for offset in range(days)
    ]
    conn.execute(insert(ReservedDate), rows)
    return len(rows)


def delete_reservation(conn: Connection, reservation_id: int) -> int:
    """
    Delete a reservation and the calendar days it held.

    Returns:
        int: Number of reservation rows deleted (0 if already gone).
    """
    conn.execute(delete(ReservedDate).where(ReservedDate.reservation_id == reservation_id))
    result = conn.execute(delete(Reservation).where(Reservation.id == reservation_id))
    return result.rowcount


def delete_listing_reservations(conn: Connection, listing_id: int) -> int:
    """Delete every reservation (and held day) of a listing. Returns rows deleted."""
    conn.execute(delete(ReservedDate).where(ReservedDate.listing_id == listing_id))
    result = conn.execute(delete(Reservation).where(Reservation.listing_id == listing_id))
    return result.rowcount


def insert_cancelled_reservation(
    conn: Connection,
    reservation: dict[str, Any],
    cancelled_by: int,
    reason: str,
) -> int:
    """
    Append the audit record for a cancelled reservation.

    Args:
        conn (Connection): Connection inside the cancellation transaction.
        reservation (dict): Reservation as returned by
            get_reservation_for_cancellation (needs host_id and listing_title).
        cancelled_by (int): Acting user id.
        reason (str): Human-readable reason.

    Returns:
        int: Audit row id.
    """
    result = conn.execute(
        insert(CancelledReservation).values(
            reservation_id=reservation["id"],
            user_id=reservation["user_id"],
            listing_id=reservation["listing_id"],
            listing_title=reservation.get("listing_title"),
            host_id=reservation.get("host_id"),
            start_date=reservation["start_date"],
            end_date=reservation["end_date"],
            total_price=reservation["total_price"],
            cancelled_by=cancelled_by,
            reason=reason,
            cancelled_at=utc_now(),
        )
    )
    return int(result.inserted_primary_key[0])
