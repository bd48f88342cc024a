from decimal import Decimal
from typing import Optional

from sqlalchemy import delete, update
from sqlalchemy.engine import Connection

from rental_bookings.models.listings import Listing
from rental_bookings.utils.datetime import utc_now


def update_listing_price(
    conn: Connection, listing_id: int, owner_id: int, price: Decimal
) -> int:
    """
    Set a listing's nightly price, scoped to its owner.

    Returns:
        int: Rows updated (0 when missing or not owned).
    """
    result = conn.execute(
        update(Listing)
        .where(Listing.id == listing_id, Listing.user_id == owner_id)
        .values(price=price, updated_at=utc_now())
    )
    return result.rowcount


def update_listing_offer_price(
    conn: Connection, listing_id: int, owner_id: int, offer_price: Optional[Decimal]
) -> int:
    """Set or clear (None) a listing's discounted offer price, scoped to its owner."""
    result = conn.execute(
        update(Listing)
        .where(Listing.id == listing_id, Listing.user_id == owner_id)
        .values(offer_price=offer_price, updated_at=utc_now())
    )
    return result.rowcount


def delete_listing(conn: Connection, listing_id: int, owner_id: int) -> int:
    """Permanently delete a listing owned by owner_id. Returns rows deleted."""
    result = conn.execute(
        delete(Listing).where(Listing.id == listing_id, Listing.user_id == owner_id)
    )
    return result.rowcount
