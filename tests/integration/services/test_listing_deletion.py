"""
Integration tests for removing a listing that still has reservations.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from unittest.mock import Mock

import pytest
from sqlalchemy import func, select
from sqlalchemy.engine import Engine

from rental_bookings.config import (
    LISTING_DELETION_POLICY_NOTIFY_ONLY,
    LISTING_DELETION_POLICY_REFUND,
)
from rental_bookings.db.readers.listings import get_listing
from rental_bookings.db.readers.notifications import list_notifications
from rental_bookings.db.readers.reservations import list_cancelled_reservations
from rental_bookings.db.readers.wallets import get_wallet
from rental_bookings.errors import ListingNotFoundError
from rental_bookings.models.reservations import Reservation, ReservedDate
from rental_bookings.services.reservations import (
    create_reservation,
    delete_listing_with_reservations,
)


@pytest.fixture
def booked_listing(db_engine: Engine, guest: dict, stranger: dict, listing: dict) -> dict:
    """Listing with one reservation by guest and one by stranger."""
    for user, start, end in (
        (guest, date(2025, 3, 10), date(2025, 3, 15)),
        (stranger, date(2025, 4, 1), date(2025, 4, 3)),
    ):
        create_reservation(
            db_engine,
            user_id=user["id"],
            listing_id=listing["id"],
            start_date=start,
            end_date=end,
            total_price=Decimal("2000"),
            order_id=f"order_{user['id']}",
            status="success",
        )
    return listing


def _remaining(engine: Engine, model: type) -> int:
    with engine.connect() as conn:
        return conn.execute(select(func.count()).select_from(model)).scalar_one()


@pytest.mark.integration
def test_notify_only_policy_notifies_and_audits_without_refund(
    db_engine: Engine, publisher: Mock, host: dict, guest: dict, stranger: dict, booked_listing: dict
) -> None:
    result = delete_listing_with_reservations(
        db_engine,
        publisher,
        host["id"],
        booked_listing["id"],
        policy=LISTING_DELETION_POLICY_NOTIFY_ONLY,
    )

    assert result.cancelled_reservations == 2
    assert result.refunded_total == Decimal("0")
    assert _remaining(db_engine, Reservation) == 0
    assert _remaining(db_engine, ReservedDate) == 0

    with db_engine.connect() as conn:
        assert get_listing(conn, booked_listing["id"]) is None
        assert get_wallet(conn, guest["id"]) is None
        notifications = list_notifications(conn, guest["id"])
        audits = list_cancelled_reservations(conn, host_id=host["id"])

    assert len(notifications) == 1
    assert notifications[0]["type"] == "error"
    assert "no longer available" in notifications[0]["message"]
    assert len(audits) == 2
    assert {a["reason"] for a in audits} == {"Listing removed by host"}

    channels = sorted(call.args[0] for call in publisher.trigger.call_args_list)
    assert channels == [
        "user-guest@example.com-notifications",
        "user-stranger@example.com-notifications",
    ]


@pytest.mark.integration
def test_refund_policy_credits_every_guest(
    db_engine: Engine, publisher: Mock, host: dict, guest: dict, stranger: dict, booked_listing: dict
) -> None:
    result = delete_listing_with_reservations(
        db_engine,
        publisher,
        host["id"],
        booked_listing["id"],
        policy=LISTING_DELETION_POLICY_REFUND,
    )

    assert result.refunded_total == Decimal("4000")
    with db_engine.connect() as conn:
        assert Decimal(get_wallet(conn, guest["id"])["balance"]) == Decimal("2000")
        assert Decimal(get_wallet(conn, stranger["id"])["balance"]) == Decimal("2000")
        message = list_notifications(conn, guest["id"])[0]["message"]
    assert "refunded to your wallet" in message


@pytest.mark.integration
def test_foreign_listing_is_not_found_and_untouched(
    db_engine: Engine, publisher: Mock, guest: dict, booked_listing: dict
) -> None:
    with pytest.raises(ListingNotFoundError):
        delete_listing_with_reservations(db_engine, publisher, guest["id"], booked_listing["id"])

    assert _remaining(db_engine, Reservation) == 2
    publisher.trigger.assert_not_called()


@pytest.mark.integration
def test_listing_without_reservations(
    db_engine: Engine, publisher: Mock, host: dict, listing: dict
) -> None:
    result = delete_listing_with_reservations(db_engine, publisher, host["id"], listing["id"])

    assert result.cancelled_reservations == 0
    with db_engine.connect() as conn:
        assert get_listing(conn, listing["id"]) is None
