from datetime import datetime
from typing import Optional

from pydantic import Field

from rental_bookings.models.reviews import MAX_RATING, MIN_RATING
from rental_bookings.schemas.common import CamelModel


class ReviewContentPayload(CamelModel):
    rating: int = Field(..., ge=MIN_RATING, le=MAX_RATING, description="Stars, 1 to 5")
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)


class ReviewCreatePayload(ReviewContentPayload):
    """Schema for reviewing one of the current user's reservations."""

    listing_id: int = Field(..., description="Reviewed listing")
    reservation_id: int = Field(..., description="Reservation the review is about")


class ReviewOut(CamelModel):
    id: int
    listing_id: int
    reservation_id: int
    user_id: int
    author: str
    rating: int
    title: str
    content: str
    helpful_count: int = 0
    verified: bool = False
    created_at: datetime
    updated_at: Optional[datetime] = None
