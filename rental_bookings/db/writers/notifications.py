from typing import Any

from sqlalchemy import delete, insert
from sqlalchemy.engine import Connection

from rental_bookings.models.notifications import Notification
from rental_bookings.utils.datetime import utc_now


def insert_notification(
    conn: Connection, user_id: int, message: str, type_: str = "info"
) -> dict[str, Any]:
    """
    Create an unread notification.

    Args:
        conn (Connection): Active connection (within transaction).
        user_id (int): Recipient.
        message (str): Notification text.
        type_ (str): info, success or error.

    Returns:
        dict[str, Any]: The stored notification row.
    """
    row: dict[str, Any] = {
        "user_id": user_id,
        "message": message,
        "type": type_,
        "is_read": False,
        "created_at": utc_now(),
    }
    result = conn.execute(insert(Notification).values(**row))
    return {"id": int(result.inserted_primary_key[0]), **row}


def delete_user_notification(conn: Connection, notification_id: int, user_id: int) -> int:
    """
    Delete a notification only if it belongs to user_id.

    Returns:
        int: Rows deleted (0 when missing or owned by someone else).
    """
    result = conn.execute(
        delete(Notification).where(
            Notification.id == notification_id, Notification.user_id == user_id
        )
    )
    return result.rowcount
