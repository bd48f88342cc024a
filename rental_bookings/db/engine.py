"""
Database engine for the bookings store.

Bookings and cancellations hold row locks on listings and reservations for
the length of one transaction. On PostgreSQL every connection therefore gets
a ``lock_timeout`` so a request queued behind a stuck writer fails instead of
hanging a worker thread.
"""

from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url

from rental_bookings.config import DATABASE_URL, DB_LOCK_TIMEOUT_MS


def connect_args_for(url: str, lock_timeout_ms: int = DB_LOCK_TIMEOUT_MS) -> dict[str, Any]:
    """
    Driver connect arguments for a database URL.

    Returns:
        dict[str, Any]: ``options`` with lock_timeout for PostgreSQL, empty otherwise
    """
    if make_url(url).get_backend_name() != "postgresql":
        return {}
    return {"options": f"-c lock_timeout={lock_timeout_ms}"}


def build_engine(url: str) -> Engine:
    """Pooled engine for the API's sync request handlers."""
    return create_engine(
        url,
        connect_args=connect_args_for(url),
        pool_size=10,
        max_overflow=20,
        pool_pre_ping=True,
        pool_recycle=3600,
    )


engine: Engine = build_engine(DATABASE_URL)


def check_engine_health(db_engine: Engine = engine) -> bool:
    """
    Run ``SELECT 1``; used by /ready.

    Returns:
        bool: False if the store cannot be reached
    """
    try:
        with db_engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
