from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from rental_bookings.models.users import User


def get_user(conn: Connection, user_id: int) -> Optional[dict[str, Any]]:
    """
    Fetch a user by id.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        user_id (int): User ID.

    Returns:
        Optional[dict[str, Any]]: id, name, email and image, or None if not found.
    """
    row = (
        conn.execute(
            select(User.id, User.name, User.email, User.image).where(User.id == user_id)
        )
        .mappings()
        .fetchone()
    )
    return dict(row) if row else None
