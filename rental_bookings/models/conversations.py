from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func

from rental_bookings.config import SCHEMA
from rental_bookings.models.base import Base


class Conversation(Base):
    """ORM model for a guest-host chat thread."""

    __tablename__ = "conversations"
    __table_args__ = {"schema": SCHEMA}

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    last_message_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class ConversationParticipant(Base):
    """
    Membership of a user in a conversation.

    last_seen_at backs the polled unseen-message count.
    """

    __tablename__ = "conversation_participants"
    __table_args__ = {"schema": SCHEMA}

    conversation_id = Column(
        Integer,
        ForeignKey(f"{SCHEMA}.conversations.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id = Column(
        Integer,
        ForeignKey(f"{SCHEMA}.users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    last_seen_at = Column(DateTime(timezone=True), nullable=True)


class Message(Base):
    """ORM model for a single chat message (text, image and/or voice note)."""

    __tablename__ = "messages"
    __table_args__ = {"schema": SCHEMA}

    id = Column(Integer, primary_key=True, autoincrement=True)
    conversation_id = Column(
        Integer,
        ForeignKey(f"{SCHEMA}.conversations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sender_id = Column(
        Integer, ForeignKey(f"{SCHEMA}.users.id", ondelete="CASCADE"), nullable=False
    )
    body = Column(Text, nullable=True)
    image = Column(String, nullable=True)
    voice = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
