from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import Field, model_validator

from rental_bookings.schemas.common import CamelModel


class ReservationCreatePayload(CamelModel):
    """
    Schema for booking a listing.

    totalPrice is computed by the client checkout flow and trusted as given;
    orderId / paymentId come from the payment gateway.
    """

    listing_id: int = Field(..., description="Listing to book")
    start_date: date = Field(..., description="First day of the stay (inclusive)")
    end_date: date = Field(..., description="Last day of the stay (inclusive)")
    total_price: Decimal = Field(
        ..., gt=0, max_digits=12, decimal_places=2, description="Total price of the stay"
    )
    order_id: str = Field(..., min_length=1, description="Payment gateway order id")
    payment_id: Optional[str] = Field(None, description="Payment gateway payment id")
    status: Optional[Literal["pending", "success", "failed"]] = Field(
        None, description="Payment status reported by the gateway"
    )

    @model_validator(mode="after")
    def check_date_order(self) -> "ReservationCreatePayload":
        if self.start_date > self.end_date:
            raise ValueError("startDate must not be after endDate")
        return self


class ReservationOut(CamelModel):
    id: int
    listing_id: int
    user_id: int
    start_date: date
    end_date: date
    total_price: float
    order_id: str
    payment_id: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None


class ReservationListingOut(CamelModel):
    id: int
    title: Optional[str] = None
    price: Optional[float] = None
    category: Optional[str] = None
    user_id: Optional[int] = None


class ReservationGuestOut(CamelModel):
    id: int
    name: Optional[str] = None
    email: Optional[str] = None


class ReservationSummaryOut(ReservationOut):
    """Reservation as shown on trips / host reservation pages."""

    can_cancel: bool = False
    listing: ReservationListingOut
    user: ReservationGuestOut


class CancelledReservationOut(CamelModel):
    id: int
    reservation_id: int
    user_id: int
    listing_id: int
    listing_title: Optional[str] = None
    host_id: Optional[int] = None
    start_date: date
    end_date: date
    total_price: float
    cancelled_by: int
    reason: Optional[str] = None
    cancelled_at: datetime
