"""
Owner-only listing pricing.

A listing's price is always positive and an offer price, when set, is
positive and strictly below the price.
"""

from decimal import Decimal
from typing import Any, Optional

import structlog
from sqlalchemy.engine import Engine

from rental_bookings.db.readers.listings import get_listing
from rental_bookings.db.writers.listings import (
    update_listing_offer_price,
    update_listing_price,
)
from rental_bookings.errors import ListingNotFoundError, ValidationError

logger = structlog.get_logger(__name__)


def _owned_listing_for_update(conn, listing_id: int, owner_id: int) -> dict[str, Any]:
    listing = get_listing(conn, listing_id, for_update=True)
    if listing is None or listing["user_id"] != owner_id:
        raise ListingNotFoundError("Listing not found or unauthorized")
    return listing


def set_listing_price(
    engine: Engine, owner_id: int, listing_id: int, price: Decimal
) -> dict[str, Any]:
    """
    Change the nightly price.

    Raises:
        ValidationError: Price not positive, or not above the current offer
        ListingNotFoundError: Missing listing or not owned by owner_id
    """
    price = Decimal(price)
    if price <= 0:
        raise ValidationError("Price must be positive")

    with engine.begin() as conn:
        listing = _owned_listing_for_update(conn, listing_id, owner_id)
        offer = listing.get("offer_price")
        if offer is not None and Decimal(offer) >= price:
            raise ValidationError("Price must stay above the current offer price")
        update_listing_price(conn, listing_id, owner_id, price)
        updated = get_listing(conn, listing_id)

    logger.info("listing_price_updated", listing_id=listing_id, price=str(price))
    return updated


def set_listing_offer(
    engine: Engine, owner_id: int, listing_id: int, offer_price: Optional[Decimal]
) -> dict[str, Any]:
    """
    Set or clear (None) the discounted offer price.

    Raises:
        ValidationError: Offer not positive or not below the price
        ListingNotFoundError: Missing listing or not owned by owner_id
    """
    if offer_price is not None:
        offer_price = Decimal(offer_price)
        if offer_price <= 0:
            raise ValidationError("Offer price must be positive")

    with engine.begin() as conn:
        listing = _owned_listing_for_update(conn, listing_id, owner_id)
        if offer_price is not None and offer_price >= Decimal(listing["price"]):
            raise ValidationError("Offer price must be lower than the price")
        update_listing_offer_price(conn, listing_id, owner_id, offer_price)
        updated = get_listing(conn, listing_id)

    logger.info(
        "listing_offer_updated",
        listing_id=listing_id,
        offer_price=str(offer_price) if offer_price is not None else None,
    )
    return updated
