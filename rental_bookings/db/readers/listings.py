from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from rental_bookings.models.listings import Listing


def get_listing(
    conn: Connection, listing_id: int, for_update: bool = False
) -> Optional[dict[str, Any]]:
    """
    Fetch a listing row.

    Args:
        conn (Connection): Active connection (inside a transaction when locking).
        listing_id (int): Listing ID.
        for_update (bool): Take a row lock so concurrent bookings of the same
            listing queue behind this transaction.

    Returns:
        Optional[dict[str, Any]]: Listing columns or None if not found.
    """
    stmt = select(Listing).where(Listing.id == listing_id)
    if for_update:
        stmt = stmt.with_for_update()
    row = conn.execute(stmt).mappings().fetchone()
    return dict(row) if row else None
