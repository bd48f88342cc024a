from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    SmallInteger,
    String,
    Text,
    UniqueConstraint,
    false,
)
from sqlalchemy.sql import func

from rental_bookings.config import SCHEMA
from rental_bookings.models.base import Base

MIN_RATING = 1
MAX_RATING = 5


class Review(Base):
    """
    ORM model for a guest's review of a stay.

    A user reviews a reservation at most once. Reviews go away with their
    reservation, so cancelling a stay also withdraws its review.
    """

    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("user_id", "reservation_id", name="uq_reviews_user_reservation"),
        CheckConstraint(
            f"rating BETWEEN {MIN_RATING} AND {MAX_RATING}", name="ck_reviews_rating_range"
        ),
        {"schema": SCHEMA},
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer, ForeignKey(f"{SCHEMA}.users.id", ondelete="CASCADE"), nullable=False
    )
    listing_id = Column(
        Integer,
        ForeignKey(f"{SCHEMA}.listings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    reservation_id = Column(
        Integer, ForeignKey(f"{SCHEMA}.reservations.id", ondelete="CASCADE"), nullable=False
    )
    rating = Column(SmallInteger, nullable=False)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    helpful_count = Column(Integer, nullable=False, default=0, server_default="0")
    verified = Column(Boolean, nullable=False, default=False, server_default=false())
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
