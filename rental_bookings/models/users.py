"""SQLAlchemy model for marketplace users."""

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.sql import func

from rental_bookings.config import SCHEMA
from rental_bookings.models.base import Base


class User(Base):
    """
    ORM model for marketplace users (guests and hosts alike).

    Accounts are provisioned by the external auth provider; this service only
    reads them for identity checks and to derive real-time channel names from
    the email address.
    """

    __tablename__ = "users"
    __table_args__ = {"schema": SCHEMA}

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=True)
    email = Column(String, nullable=False, unique=True, index=True)
    image = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
