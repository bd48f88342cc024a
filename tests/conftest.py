"""
Shared fixtures: a throwaway SQLite store per test, seeded users and
listings, a mock real-time publisher and a TestClient wired to both.

SQLite runs every transaction as BEGIN IMMEDIATE so writers serialise the
way row locks serialise them on PostgreSQL.
"""

from __future__ import annotations

import os
import tempfile
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, Generator, Optional
from unittest.mock import Mock

os.environ.setdefault(
    "DATABASE_URL", f"sqlite:///{Path(tempfile.gettempdir()) / 'rental_bookings_app.db'}"
)
os.environ.setdefault("ALLOWED_ORIGINS", "http://localhost:3000")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine, event, insert  # noqa: E402
from sqlalchemy.engine import Engine  # noqa: E402

from rental_bookings.config import SCHEMA  # noqa: E402
from rental_bookings.dependencies import get_db_engine, get_publisher  # noqa: E402
from rental_bookings.main import app  # noqa: E402
from rental_bookings.models.base import Base  # noqa: E402
from rental_bookings.models.conversations import (  # noqa: E402
    Conversation,
    ConversationParticipant,
)
from rental_bookings.models.listings import Listing  # noqa: E402
from rental_bookings.models.notifications import Notification  # noqa: E402, F401
from rental_bookings.models.reservations import Reservation  # noqa: E402, F401
from rental_bookings.models.reviews import Review  # noqa: E402, F401
from rental_bookings.models.users import User  # noqa: E402
from rental_bookings.models.wallets import Wallet  # noqa: E402, F401
from rental_bookings.realtime.publisher import RealtimePublisher  # noqa: E402


@pytest.fixture
def db_engine(tmp_path: Path) -> Generator[Engine, None, None]:
    """File-backed SQLite engine with the full schema created."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'rentals.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
        execution_options={"schema_translate_map": {SCHEMA: None}},
    )

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection: Any, connection_record: Any) -> None:
        # let SQLAlchemy's "begin" event control transactions
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    Base.metadata.create_all(engine)

    yield engine

    engine.dispose()


@pytest.fixture
def make_user(db_engine: Engine) -> Callable[..., dict[str, Any]]:
    """Factory inserting a user and returning id, name and email."""

    def _make(name: str, email: Optional[str] = None) -> dict[str, Any]:
        email = email or f"{name.lower().replace(' ', '.')}@example.com"
        with db_engine.begin() as conn:
            result = conn.execute(
                insert(User).values(
                    name=name, email=email, created_at=datetime.now(timezone.utc)
                )
            )
        return {"id": int(result.inserted_primary_key[0]), "name": name, "email": email}

    return _make


@pytest.fixture
def make_listing(db_engine: Engine) -> Callable[..., dict[str, Any]]:
    """Factory inserting a listing owned by owner_id."""

    def _make(
        owner_id: int,
        title: str = "Seaside Cottage",
        price: Decimal = Decimal("1000"),
        offer_price: Optional[Decimal] = None,
    ) -> dict[str, Any]:
        now = datetime.now(timezone.utc)
        with db_engine.begin() as conn:
            result = conn.execute(
                insert(Listing).values(
                    user_id=owner_id,
                    title=title,
                    category="Beach",
                    price=price,
                    offer_price=offer_price,
                    created_at=now,
                    updated_at=now,
                )
            )
        return {
            "id": int(result.inserted_primary_key[0]),
            "user_id": owner_id,
            "title": title,
            "price": price,
        }

    return _make


@pytest.fixture
def host(make_user: Callable[..., dict[str, Any]]) -> dict[str, Any]:
    return make_user("Hannah Host", "host@example.com")


@pytest.fixture
def guest(make_user: Callable[..., dict[str, Any]]) -> dict[str, Any]:
    return make_user("Gary Guest", "guest@example.com")


@pytest.fixture
def stranger(make_user: Callable[..., dict[str, Any]]) -> dict[str, Any]:
    return make_user("Sam Stranger", "stranger@example.com")


@pytest.fixture
def listing(make_listing: Callable[..., dict[str, Any]], host: dict[str, Any]) -> dict[str, Any]:
    return make_listing(host["id"])


@pytest.fixture
def conversation(
    db_engine: Engine, host: dict[str, Any], guest: dict[str, Any]
) -> dict[str, Any]:
    """A conversation between host and guest."""
    now = datetime.now(timezone.utc)
    with db_engine.begin() as conn:
        result = conn.execute(
            insert(Conversation).values(name="Seaside Cottage", created_at=now, last_message_at=now)
        )
        conversation_id = int(result.inserted_primary_key[0])
        conn.execute(
            insert(ConversationParticipant),
            [
                {"conversation_id": conversation_id, "user_id": host["id"]},
                {"conversation_id": conversation_id, "user_id": guest["id"]},
            ],
        )
    return {"id": conversation_id, "participants": [host, guest]}


@pytest.fixture
def publisher() -> Mock:
    """Publisher double that accepts every push."""
    mock = Mock(spec=RealtimePublisher)
    mock.trigger.return_value = True
    mock.enabled = True
    return mock


@pytest.fixture
def client(db_engine: Engine, publisher: Mock) -> Generator[TestClient, None, None]:
    """FastAPI test client using the SQLite engine and the mock publisher."""
    app.dependency_overrides[get_db_engine] = lambda: db_engine
    app.dependency_overrides[get_publisher] = lambda: publisher

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def auth(user: dict[str, Any]) -> dict[str, str]:
    return {"X-User-Id": str(user["id"])}


@pytest.fixture
def as_user() -> Callable[[dict[str, Any]], dict[str, str]]:
    """Headers identifying a user to the API."""
    return auth
