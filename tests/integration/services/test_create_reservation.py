"""
Integration tests for overlap-checked reservation creation.
"""

from __future__ import annotations

import threading
from datetime import date
from decimal import Decimal
from typing import Any

import pytest
from sqlalchemy import func, select
from sqlalchemy.engine import Engine

from rental_bookings.errors import (
    DatesUnavailableError,
    ListingNotFoundError,
    ValidationError,
)
from rental_bookings.models.reservations import Reservation, ReservedDate
from rental_bookings.services.availability import has_overlap
from rental_bookings.services.reservations import create_reservation


def _book(
    engine: Engine,
    user: dict[str, Any],
    listing: dict[str, Any],
    start: date,
    end: date,
    status: str | None = None,
) -> dict[str, Any]:
    return create_reservation(
        engine,
        user_id=user["id"],
        listing_id=listing["id"],
        start_date=start,
        end_date=end,
        total_price=Decimal("5000"),
        order_id="order_abc",
        status=status,
    )


def _count(engine: Engine, model: Any) -> int:
    with engine.connect() as conn:
        return conn.execute(select(func.count()).select_from(model)).scalar_one()


@pytest.mark.integration
def test_create_returns_listing_with_new_reservation(
    db_engine: Engine, guest: dict, listing: dict
) -> None:
    result = _book(db_engine, guest, listing, date(2025, 3, 10), date(2025, 3, 15))

    assert result["id"] == listing["id"]
    assert len(result["reservations"]) == 1
    reservation = result["reservations"][0]
    assert reservation["user_id"] == guest["id"]
    assert reservation["start_date"] == date(2025, 3, 10)
    assert reservation["end_date"] == date(2025, 3, 15)
    assert reservation["total_price"] == Decimal("5000")
    assert reservation["status"] == "pending"
    assert _count(db_engine, ReservedDate) == 6


@pytest.mark.integration
@pytest.mark.parametrize(
    "start,end",
    [
        (date(2025, 3, 15), date(2025, 3, 20)),  # shares the last day
        (date(2025, 3, 5), date(2025, 3, 10)),  # shares the first day
        (date(2025, 3, 12), date(2025, 3, 13)),  # inside
        (date(2025, 3, 1), date(2025, 3, 31)),  # covers
    ],
)
def test_overlapping_creation_is_rejected_and_writes_nothing(
    db_engine: Engine, guest: dict, stranger: dict, listing: dict, start: date, end: date
) -> None:
    _book(db_engine, guest, listing, date(2025, 3, 10), date(2025, 3, 15))

    with pytest.raises(DatesUnavailableError) as exc_info:
        _book(db_engine, stranger, listing, start, end)

    assert exc_info.value.message == "This property is already reserved for these dates."
    assert _count(db_engine, Reservation) == 1
    assert _count(db_engine, ReservedDate) == 6


@pytest.mark.integration
def test_adjacent_ranges_do_not_overlap(db_engine: Engine, guest: dict, listing: dict) -> None:
    _book(db_engine, guest, listing, date(2025, 3, 10), date(2025, 3, 15))
    _book(db_engine, guest, listing, date(2025, 3, 16), date(2025, 3, 18))

    assert _count(db_engine, Reservation) == 2


@pytest.mark.integration
def test_failed_reservations_do_not_block_dates(
    db_engine: Engine, guest: dict, listing: dict
) -> None:
    _book(db_engine, guest, listing, date(2025, 3, 10), date(2025, 3, 15), status="failed")

    with db_engine.connect() as conn:
        assert has_overlap(conn, listing["id"], date(2025, 3, 12), date(2025, 3, 12)) is False

    _book(db_engine, guest, listing, date(2025, 3, 10), date(2025, 3, 15), status="success")
    assert _count(db_engine, Reservation) == 2


@pytest.mark.integration
def test_has_overlap_is_scoped_to_listing(
    db_engine: Engine, guest: dict, host: dict, listing: dict, make_listing: Any
) -> None:
    other = make_listing(host["id"], title="Mountain Cabin")
    _book(db_engine, guest, listing, date(2025, 3, 10), date(2025, 3, 15))

    with db_engine.connect() as conn:
        assert has_overlap(conn, listing["id"], date(2025, 3, 15), date(2025, 3, 16)) is True
        assert has_overlap(conn, other["id"], date(2025, 3, 10), date(2025, 3, 15)) is False


@pytest.mark.integration
def test_unique_day_violation_maps_to_conflict(
    db_engine: Engine, guest: dict, listing: dict, monkeypatch: pytest.MonkeyPatch
) -> None:
    """A racing writer that slipped past the overlap query still gets a conflict."""
    _book(db_engine, guest, listing, date(2025, 3, 10), date(2025, 3, 15))
    monkeypatch.setattr(
        "rental_bookings.services.reservations.has_overlap", lambda *args: False
    )

    with pytest.raises(DatesUnavailableError):
        _book(db_engine, guest, listing, date(2025, 3, 14), date(2025, 3, 20))

    assert _count(db_engine, Reservation) == 1


@pytest.mark.integration
def test_concurrent_creation_yields_exactly_one_reservation(
    db_engine: Engine, guest: dict, stranger: dict, listing: dict
) -> None:
    barrier = threading.Barrier(4)
    outcomes: list[str] = []
    lock = threading.Lock()

    def attempt(user: dict) -> None:
        barrier.wait()
        try:
            _book(db_engine, user, listing, date(2025, 6, 1), date(2025, 6, 7))
            outcome = "created"
        except DatesUnavailableError:
            outcome = "conflict"
        with lock:
            outcomes.append(outcome)

    threads = [threading.Thread(target=attempt, args=(u,)) for u in (guest, stranger) * 2]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)

    assert sorted(outcomes) == ["conflict", "conflict", "conflict", "created"]
    assert _count(db_engine, Reservation) == 1


@pytest.mark.integration
def test_unknown_listing(db_engine: Engine, guest: dict) -> None:
    with pytest.raises(ListingNotFoundError):
        create_reservation(
            db_engine,
            user_id=guest["id"],
            listing_id=999,
            start_date=date(2025, 3, 10),
            end_date=date(2025, 3, 15),
            total_price=Decimal("100"),
            order_id="order_x",
        )


@pytest.mark.integration
@pytest.mark.parametrize(
    "kwargs",
    [
        {"start_date": date(2025, 3, 16)},
        {"total_price": Decimal("0")},
        {"total_price": Decimal("0.004")},
        {"total_price": Decimal("99.995")},
        {"total_price": Decimal("10000000000")},
        {"order_id": ""},
        {"end_date": date(2026, 3, 10)},
    ],
)
def test_invalid_input_is_rejected_before_writing(
    db_engine: Engine, guest: dict, listing: dict, kwargs: dict
) -> None:
    params = {
        "user_id": guest["id"],
        "listing_id": listing["id"],
        "start_date": date(2025, 3, 10),
        "end_date": date(2025, 3, 15),
        "total_price": Decimal("100"),
        "order_id": "order_x",
        **kwargs,
    }

    with pytest.raises(ValidationError):
        create_reservation(db_engine, **params)

    assert _count(db_engine, Reservation) == 0
