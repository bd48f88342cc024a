"""
Guest/host chat: message posting with real-time fan-out and unseen tracking.
"""

from typing import Any, Optional

import structlog
from sqlalchemy.engine import Engine

from rental_bookings.db.readers.conversations import (
    count_unseen_messages,
    get_conversation,
    get_message_with_sender,
    list_participants,
)
from rental_bookings.db.writers.conversations import (
    insert_message,
    mark_conversation_seen,
    touch_conversation,
)
from rental_bookings.errors import (
    ConversationNotFoundError,
    NotAuthorizedError,
    ValidationError,
)
from rental_bookings.realtime.channels import (
    CONVERSATION_UPDATE,
    MESSAGES_NEW,
    conversation_channel,
    conversation_updates_channel,
)
from rental_bookings.realtime.publisher import RealtimePublisher
from rental_bookings.schemas.messages import ConversationUpdateOut, MessageOut
from rental_bookings.services.notifications import publish_safely
from rental_bookings.utils.datetime import utc_now

logger = structlog.get_logger(__name__)


def message_payload(row: dict[str, Any]) -> dict[str, Any]:
    """Shape a message row (with sender columns) for clients."""
    return MessageOut.model_validate(
        {
            **row,
            "sender": {
                "id": row["sender_id"],
                "name": row.get("sender_name"),
                "email": row["sender_email"],
                "image": row.get("sender_image"),
            },
        }
    ).to_json_dict()


def post_message(
    engine: Engine,
    publisher: RealtimePublisher,
    sender_id: int,
    conversation_id: int,
    body: Optional[str] = None,
    image: Optional[str] = None,
    voice: Optional[str] = None,
) -> dict[str, Any]:
    """
    Append a message to a conversation and push it to every participant.

    messages:new goes to the conversation channel for open chat windows;
    conversation:update goes to each participant's own channel so inbox
    views and unseen badges refresh.

    Raises:
        ValidationError: Empty message
        ConversationNotFoundError: Unknown conversation
        NotAuthorizedError: Sender is not a participant
    """
    if not (body or image or voice):
        raise ValidationError("A message needs text, an image or a voice note")

    with engine.begin() as conn:
        if get_conversation(conn, conversation_id) is None:
            raise ConversationNotFoundError()

        participants = list_participants(conn, conversation_id)
        if sender_id not in {p["id"] for p in participants}:
            raise NotAuthorizedError("Not a participant of this conversation")

        sent_at = utc_now()
        message_id = insert_message(conn, conversation_id, sender_id, body, image, voice, sent_at)
        touch_conversation(conn, conversation_id, sent_at)
        # the sender has obviously seen their own message
        mark_conversation_seen(conn, conversation_id, sender_id, sent_at)
        row = get_message_with_sender(conn, message_id)

    message = message_payload(row)
    logger.info(
        "message_posted",
        message_id=message_id,
        conversation_id=conversation_id,
        sender_id=sender_id,
    )

    publish_safely(publisher, conversation_channel(conversation_id), MESSAGES_NEW, message)

    update = ConversationUpdateOut.model_validate(
        {"id": conversation_id, "last_message_at": sent_at, "messages": [message]}
    ).to_json_dict()
    publish_safely(
        publisher,
        [conversation_updates_channel(p["email"]) for p in participants if p.get("email")],
        CONVERSATION_UPDATE,
        update,
    )
    return message


def mark_seen(engine: Engine, user_id: int, conversation_id: int) -> None:
    """
    Mark everything in a conversation as seen by user_id.

    Raises:
        ConversationNotFoundError: Unknown conversation or user is not a participant
    """
    with engine.begin() as conn:
        if mark_conversation_seen(conn, conversation_id, user_id, utc_now()) == 0:
            raise ConversationNotFoundError()
    logger.debug("conversation_seen", conversation_id=conversation_id, user_id=user_id)


def unseen_count(engine: Engine, user_id: int) -> int:
    with engine.connect() as conn:
        return count_unseen_messages(conn, user_id)
