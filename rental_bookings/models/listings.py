from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.sql import func

from rental_bookings.config import SCHEMA
from rental_bookings.models.base import Base


class Listing(Base):
    """
    ORM model for rentable properties.

    Only the owner and pricing columns matter to the booking flow; title,
    description and category are carried for notification text and read views.
    A listing is referenced by reservations but never owned by them.
    """

    __tablename__ = "listings"
    __table_args__ = (
        CheckConstraint("price > 0", name="ck_listings_price_positive"),
        CheckConstraint(
            "offer_price IS NULL OR (offer_price > 0 AND offer_price < price)",
            name="ck_listings_offer_below_price",
        ),
        {"schema": SCHEMA},
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey(f"{SCHEMA}.users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String, nullable=True)
    price = Column(Numeric(12, 2), nullable=False)
    offer_price = Column(Numeric(12, 2), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
