"""
Dialect-aware INSERT construction.

PostgreSQL and SQLite both support ``ON CONFLICT`` but through separate
SQLAlchemy insert constructs; this picks the one matching the live connection
so writers can use ``on_conflict_do_nothing`` / ``on_conflict_do_update``.
"""

from typing import Any

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Connection


def dialect_insert(conn: Connection, table: Any) -> Any:
    """
    Build an INSERT for ``table`` that supports ON CONFLICT on this connection.

    Args:
        conn: Active database connection
        table: SQLAlchemy ORM class or Table

    Returns:
        postgresql.Insert or sqlite.Insert

    Raises:
        NotImplementedError: For dialects without ON CONFLICT support
    """
    name = conn.dialect.name
    if name == "postgresql":
        return postgresql.insert(table)
    if name == "sqlite":
        return sqlite.insert(table)
    raise NotImplementedError(f"ON CONFLICT inserts are not supported on {name}")
