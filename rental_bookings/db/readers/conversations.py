from typing import Any, Optional

from sqlalchemy import and_, func, or_, select
from sqlalchemy.engine import Connection

from rental_bookings.models.conversations import (
    Conversation,
    ConversationParticipant,
    Message,
)
from rental_bookings.models.users import User


def get_conversation(conn: Connection, conversation_id: int) -> Optional[dict[str, Any]]:
    row = (
        conn.execute(select(Conversation).where(Conversation.id == conversation_id))
        .mappings()
        .fetchone()
    )
    return dict(row) if row else None


def list_participants(conn: Connection, conversation_id: int) -> list[dict[str, Any]]:
    """Users taking part in a conversation (id, name, email, image)."""
    result = conn.execute(
        select(User.id, User.name, User.email, User.image)
        .join(ConversationParticipant, ConversationParticipant.user_id == User.id)
        .where(ConversationParticipant.conversation_id == conversation_id)
        .order_by(User.id)
    )
    return [dict(row) for row in result.mappings()]


def get_message_with_sender(conn: Connection, message_id: int) -> Optional[dict[str, Any]]:
    row = (
        conn.execute(
            select(
                Message.id,
                Message.conversation_id,
                Message.body,
                Message.image,
                Message.voice,
                Message.created_at,
                User.id.label("sender_id"),
                User.name.label("sender_name"),
                User.email.label("sender_email"),
                User.image.label("sender_image"),
            )
            .join(User, User.id == Message.sender_id)
            .where(Message.id == message_id)
        )
        .mappings()
        .fetchone()
    )
    return dict(row) if row else None


def count_unseen_messages(conn: Connection, user_id: int) -> int:
    """
    Count messages from other participants newer than the user's last_seen_at.

    A conversation the user has never marked as seen counts all of them.
    """
    stmt = (
        select(func.count(Message.id))
        .join(
            ConversationParticipant,
            and_(
                ConversationParticipant.conversation_id == Message.conversation_id,
                ConversationParticipant.user_id == user_id,
            ),
        )
        .where(
            Message.sender_id != user_id,
            or_(
                ConversationParticipant.last_seen_at.is_(None),
                Message.created_at > ConversationParticipant.last_seen_at,
            ),
        )
    )
    return int(conn.execute(stmt).scalar_one())
