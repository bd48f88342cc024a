from datetime import datetime
from typing import Optional

from sqlalchemy import insert, update
from sqlalchemy.engine import Connection

from rental_bookings.models.conversations import (
    Conversation,
    ConversationParticipant,
    Message,
)


def insert_message(
    conn: Connection,
    conversation_id: int,
    sender_id: int,
    body: Optional[str],
    image: Optional[str],
    voice: Optional[str],
    created_at: datetime,
) -> int:
    """Append a message to a conversation. Returns the message id."""
    result = conn.execute(
        insert(Message).values(
            conversation_id=conversation_id,
            sender_id=sender_id,
            body=body,
            image=image,
            voice=voice,
            created_at=created_at,
        )
    )
    return int(result.inserted_primary_key[0])


def touch_conversation(conn: Connection, conversation_id: int, last_message_at: datetime) -> None:
    conn.execute(
        update(Conversation)
        .where(Conversation.id == conversation_id)
        .values(last_message_at=last_message_at)
    )


def mark_conversation_seen(
    conn: Connection, conversation_id: int, user_id: int, seen_at: datetime
) -> int:
    """
    Record that user_id has read conversation_id up to seen_at.

    Returns:
        int: Rows updated (0 when the user is not a participant).
    """
    result = conn.execute(
        update(ConversationParticipant)
        .where(
            ConversationParticipant.conversation_id == conversation_id,
            ConversationParticipant.user_id == user_id,
        )
        .values(last_seen_at=seen_at)
    )
    return result.rowcount
