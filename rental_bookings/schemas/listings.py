from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field

from rental_bookings.schemas.common import CamelModel
from rental_bookings.schemas.reservations import ReservationOut


class ListingPricePayload(CamelModel):
    price: Decimal = Field(..., gt=0, description="New nightly price")


class ListingOfferPayload(CamelModel):
    """offerPrice null clears the offer."""

    offer_price: Optional[Decimal] = Field(..., description="Discounted price or null")


class ListingOut(CamelModel):
    id: int
    user_id: int
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    price: float
    offer_price: Optional[float] = None
    created_at: Optional[datetime] = None
    reservations: list[ReservationOut] = Field(default_factory=list)
