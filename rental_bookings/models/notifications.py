from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, false
from sqlalchemy.sql import func

from rental_bookings.config import SCHEMA
from rental_bookings.models.base import Base

NOTIFICATION_TYPES = ("info", "success", "error")


class Notification(Base):
    """
    ORM model for in-app notifications.

    Rows are the durable record; the real-time push that accompanies their
    creation is only a hint for connected clients.
    """

    __tablename__ = "notifications"
    __table_args__ = {"schema": SCHEMA}

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey(f"{SCHEMA}.users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    message = Column(Text, nullable=False)
    type = Column(String(16), nullable=False, default="info")
    is_read = Column(Boolean, nullable=False, default=False, server_default=false())
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
