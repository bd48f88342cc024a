from typing import Any

from sqlalchemy import select
from sqlalchemy.engine import Connection

from rental_bookings.models.notifications import Notification


def list_notifications(conn: Connection, user_id: int) -> list[dict[str, Any]]:
    """A user's notifications, newest first."""
    result = conn.execute(
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
    )
    return [dict(row) for row in result.mappings()]
