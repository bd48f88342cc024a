"""
Notification storage and real-time fan-out.

Rows are written inside the caller's transaction; pushes happen only after
commit and are best-effort. A push that fails is logged and forgotten: clients
catch up through their periodic refresh of /notifications.
"""

from typing import Any, Iterable

import structlog
from sqlalchemy.engine import Engine

from rental_bookings.db.readers.notifications import list_notifications
from rental_bookings.db.readers.users import get_user
from rental_bookings.db.writers.notifications import (
    delete_user_notification,
    insert_notification,
)
from rental_bookings.errors import NotificationNotFoundError, ValidationError
from rental_bookings.models.notifications import NOTIFICATION_TYPES
from rental_bookings.realtime.channels import (
    NOTIFICATION_NEW,
    NOTIFICATION_REMOVE,
    notification_channel,
)
from rental_bookings.realtime.publisher import RealtimePublisher
from rental_bookings.schemas.notifications import NotificationOut

logger = structlog.get_logger(__name__)


def publish_safely(
    publisher: RealtimePublisher, channels: str | Iterable[str], event: str, payload: Any
) -> bool:
    """
    Push an event without ever raising.

    Runs after the database commit, so nothing here may undo or fail the
    operation that produced the event.

    Returns:
        bool: Whether the transport accepted the event
    """
    try:
        return publisher.trigger(channels, event, payload)
    except Exception as e:
        logger.exception("realtime_publish_error", event=event, error=str(e))
        return False


def notification_payload(notification: dict[str, Any]) -> dict[str, Any]:
    """Full notification record as sent to clients."""
    return NotificationOut.model_validate(notification).to_json_dict()


def publish_new_notification(
    publisher: RealtimePublisher, recipient_email: str | None, notification: dict[str, Any]
) -> bool:
    """Push notification:new to the recipient's notification channel."""
    if not recipient_email:
        logger.warning(
            "notification_push_skipped",
            notification_id=notification.get("id"),
            reason="recipient_has_no_email",
        )
        return False
    return publish_safely(
        publisher,
        notification_channel(recipient_email),
        NOTIFICATION_NEW,
        notification_payload(notification),
    )


def create_user_notification(
    engine: Engine,
    publisher: RealtimePublisher,
    recipient_id: int,
    message: str,
    type_: str = "info",
) -> dict[str, Any]:
    """
    Store a notification for a user and push it.

    Args:
        engine: SQLAlchemy engine
        publisher: Real-time publisher
        recipient_id: Target user id
        message: Notification text
        type_: info, success or error

    Returns:
        dict[str, Any]: The stored notification

    Raises:
        ValidationError: Unknown type, or the recipient does not exist
    """
    if type_ not in NOTIFICATION_TYPES:
        raise ValidationError(f"Unknown notification type {type_!r}")

    with engine.begin() as conn:
        recipient = get_user(conn, recipient_id)
        if recipient is None:
            raise ValidationError(f"User {recipient_id} does not exist")
        notification = insert_notification(conn, recipient_id, message, type_)

    logger.info(
        "notification_created", notification_id=notification["id"], user_id=recipient_id
    )
    publish_new_notification(publisher, recipient["email"], notification)
    return notification


def get_user_notifications(engine: Engine, user_id: int) -> list[dict[str, Any]]:
    with engine.connect() as conn:
        return list_notifications(conn, user_id)


def remove_user_notification(
    engine: Engine, publisher: RealtimePublisher, user: dict[str, Any], notification_id: int
) -> None:
    """
    Delete one of the user's notifications and push notification:remove.

    Raises:
        NotificationNotFoundError: If it does not exist or belongs to someone else
    """
    with engine.begin() as conn:
        deleted = delete_user_notification(conn, notification_id, user["id"])
    if deleted == 0:
        raise NotificationNotFoundError()

    logger.info("notification_deleted", notification_id=notification_id, user_id=user["id"])
    publish_safely(
        publisher, notification_channel(user["email"]), NOTIFICATION_REMOVE, notification_id
    )
