# models/reservations.py

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.sql import func

from rental_bookings.config import SCHEMA
from rental_bookings.models.base import Base

STATUS_PENDING = "pending"
STATUS_SUCCESS = "success"
STATUS_FAILED = "failed"
RESERVATION_STATUSES = (STATUS_PENDING, STATUS_SUCCESS, STATUS_FAILED)


class Reservation(Base):
    """
    ORM model for a guest's booking of a listing.

    The date range is inclusive on both ends. Only reservations whose status
    is not "failed" occupy the listing's calendar. Rows are hard-deleted on
    cancellation after being copied into CancelledReservation.
    """

    __tablename__ = "reservations"
    __table_args__ = (
        CheckConstraint("start_date <= end_date", name="ck_reservations_date_order"),
        CheckConstraint("total_price > 0", name="ck_reservations_total_price_positive"),
        CheckConstraint(
            "status IN ('pending', 'success', 'failed')", name="ck_reservations_status"
        ),
        Index("ix_reservations_listing_dates", "listing_id", "start_date", "end_date"),
        {"schema": SCHEMA},
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    listing_id = Column(
        Integer, ForeignKey(f"{SCHEMA}.listings.id", ondelete="CASCADE"), nullable=False
    )
    user_id = Column(
        Integer, ForeignKey(f"{SCHEMA}.users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    total_price = Column(Numeric(12, 2), nullable=False)
    order_id = Column(String, nullable=False)
    payment_id = Column(String, nullable=True)
    status = Column(String(16), nullable=False, default=STATUS_PENDING)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class ReservedDate(Base):
    """
    One occupied calendar day of a non-failed reservation.

    The composite primary key on (listing_id, day) lets the store itself refuse
    a second reservation touching the same day, closing the window between the
    overlap query and the insert.
    """

    __tablename__ = "reserved_dates"
    __table_args__ = {"schema": SCHEMA}

    listing_id = Column(
        Integer,
        ForeignKey(f"{SCHEMA}.listings.id", ondelete="CASCADE"),
        primary_key=True,
    )
    day = Column(Date, primary_key=True)
    reservation_id = Column(
        Integer,
        ForeignKey(f"{SCHEMA}.reservations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )


class CancelledReservation(Base):
    """
    Append-only audit record of a cancelled reservation.

    listing_id and reservation_id are plain columns rather than foreign keys so
    the trail outlives both the reservation and a later listing deletion.
    """

    __tablename__ = "cancelled_reservations"
    __table_args__ = {"schema": SCHEMA}

    id = Column(Integer, primary_key=True, autoincrement=True)
    reservation_id = Column(Integer, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey(f"{SCHEMA}.users.id"), nullable=False, index=True)
    listing_id = Column(Integer, nullable=False, index=True)
    listing_title = Column(String, nullable=True)
    host_id = Column(Integer, nullable=True, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    total_price = Column(Numeric(12, 2), nullable=False)
    cancelled_by = Column(Integer, ForeignKey(f"{SCHEMA}.users.id"), nullable=False)
    reason = Column(Text, nullable=True)
    cancelled_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
