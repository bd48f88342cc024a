"""
FastAPI dependency injection providers.

Routes receive the database engine, the real-time publisher and the acting
user through these providers so tests can swap any of them via
app.dependency_overrides.
"""

from __future__ import annotations

from typing import Any, Generator, Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.engine import Engine

from rental_bookings.db.engine import engine
from rental_bookings.db.readers.users import get_user
from rental_bookings.realtime.publisher import RealtimePublisher, publisher


def get_db_engine() -> Generator[Engine, None, None]:
    """
    Provide database engine for dependency injection.

    Yields:
        Engine: SQLAlchemy database engine

    Testing Example:
        >>> app.dependency_overrides[get_db_engine] = lambda: sqlite_engine
    """
    yield engine


def get_publisher() -> RealtimePublisher:
    """Provide the process-wide real-time publisher."""
    return publisher


def get_current_user(
    x_user_id: Optional[int] = Header(None, description="Authenticated user id"),
    db_engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Resolve the acting user.

    Authentication itself happens upstream; the gateway forwards the
    authenticated user's id in the X-User-Id header.

    Raises:
        HTTPException: 401 if the header is missing or names an unknown user
    """
    if x_user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    with db_engine.connect() as conn:
        user = get_user(conn, x_user_id)

    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return user
