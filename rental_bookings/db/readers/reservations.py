from datetime import date
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from rental_bookings.models.listings import Listing
from rental_bookings.models.reservations import (
    STATUS_FAILED,
    CancelledReservation,
    Reservation,
)
from rental_bookings.models.users import User


def find_overlapping_reservations(
    conn: Connection, listing_id: int, start_date: date, end_date: date
) -> list[dict[str, Any]]:
    """
    Return non-failed reservations of a listing that intersect [start_date, end_date].

    Both ends are inclusive, so a reservation ending on start_date overlaps.

    Args:
        conn (Connection): Active database connection.
        listing_id (int): Listing ID.
        start_date (date): First requested day.
        end_date (date): Last requested day.

    Returns:
        list[dict[str, Any]]: Overlapping reservations (id, start_date, end_date, status).
    """
    result = conn.execute(
        select(
            Reservation.id, Reservation.start_date, Reservation.end_date, Reservation.status
        ).where(
            Reservation.listing_id == listing_id,
            Reservation.status != STATUS_FAILED,
            Reservation.start_date <= end_date,
            Reservation.end_date >= start_date,
        )
    )
    return [dict(row) for row in result.mappings()]


def get_reservation(conn: Connection, reservation_id: int) -> Optional[dict[str, Any]]:
    """Fetch a bare reservation row, or None."""
    row = (
        conn.execute(select(Reservation).where(Reservation.id == reservation_id))
        .mappings()
        .fetchone()
    )
    return dict(row) if row else None


def _reservation_with_parties():
    return (
        select(
            Reservation.id,
            Reservation.listing_id,
            Reservation.user_id,
            Reservation.start_date,
            Reservation.end_date,
            Reservation.total_price,
            Reservation.order_id,
            Reservation.status,
            Listing.user_id.label("host_id"),
            Listing.title.label("listing_title"),
            User.email.label("guest_email"),
            User.name.label("guest_name"),
        )
        .join(Listing, Listing.id == Reservation.listing_id)
        .join(User, User.id == Reservation.user_id)
    )


def get_reservation_for_cancellation(
    conn: Connection, reservation_id: int
) -> Optional[dict[str, Any]]:
    """
    Load a reservation with its listing owner and guest identity, row-locked.

    The lock makes a concurrent second cancellation wait for this transaction
    and then find nothing.

    Args:
        conn (Connection): Connection inside the cancellation transaction.
        reservation_id (int): Reservation ID.

    Returns:
        Optional[dict[str, Any]]: Reservation fields plus host_id, listing_title,
        guest_email and guest_name, or None if not found.
    """
    stmt = (
        _reservation_with_parties()
        .where(Reservation.id == reservation_id)
        .with_for_update(of=Reservation)
    )
    row = conn.execute(stmt).mappings().fetchone()
    return dict(row) if row else None


def list_listing_reservations_with_guests(
    conn: Connection, listing_id: int
) -> list[dict[str, Any]]:
    """All reservations of a listing (any status) with guest identity, row-locked."""
    stmt = (
        _reservation_with_parties()
        .where(Reservation.listing_id == listing_id)
        .order_by(Reservation.start_date)
        .with_for_update(of=Reservation)
    )
    return [dict(row) for row in conn.execute(stmt).mappings()]


def list_reservations(
    conn: Connection, guest_id: Optional[int] = None, host_id: Optional[int] = None
) -> list[dict[str, Any]]:
    """
    List reservations for a guest and/or for the listings of a host, newest first.

    Args:
        conn (Connection): Active database connection.
        guest_id (Optional[int]): Restrict to reservations made by this user.
        host_id (Optional[int]): Restrict to reservations on this user's listings.

    Returns:
        list[dict[str, Any]]: Reservation fields plus listing and guest details.
    """
    stmt = _reservation_with_parties().add_columns(
        Reservation.payment_id,
        Reservation.created_at,
        Listing.price.label("listing_price"),
        Listing.category.label("listing_category"),
    )
    if guest_id is not None:
        stmt = stmt.where(Reservation.user_id == guest_id)
    if host_id is not None:
        stmt = stmt.where(Listing.user_id == host_id)
    stmt = stmt.order_by(Reservation.created_at.desc(), Reservation.id.desc())
    return [dict(row) for row in conn.execute(stmt).mappings()]


def list_current_listing_reservations(
    conn: Connection, listing_id: int, today: date
) -> list[dict[str, Any]]:
    """Reservations of a listing that have not ended before today, by start date."""
    result = conn.execute(
        select(Reservation)
        .where(Reservation.listing_id == listing_id, Reservation.end_date >= today)
        .order_by(Reservation.start_date)
    )
    return [dict(row) for row in result.mappings()]


def list_cancelled_reservations(
    conn: Connection, guest_id: Optional[int] = None, host_id: Optional[int] = None
) -> list[dict[str, Any]]:
    """Audit rows for a guest and/or host, most recently cancelled first."""
    stmt = select(CancelledReservation)
    if guest_id is not None:
        stmt = stmt.where(CancelledReservation.user_id == guest_id)
    if host_id is not None:
        stmt = stmt.where(CancelledReservation.host_id == host_id)
    stmt = stmt.order_by(CancelledReservation.cancelled_at.desc(), CancelledReservation.id.desc())
    return [dict(row) for row in conn.execute(stmt).mappings()]
