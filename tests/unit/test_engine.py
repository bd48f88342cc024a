"""
Unit tests for engine construction.
"""

from unittest.mock import Mock

import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError

from rental_bookings.db.engine import check_engine_health, connect_args_for


@pytest.mark.unit
def test_postgres_connections_get_lock_timeout() -> None:
    args = connect_args_for("postgresql+psycopg2://app:pw@db:5432/rentals", lock_timeout_ms=2500)

    assert args == {"options": "-c lock_timeout=2500"}


@pytest.mark.unit
def test_sqlite_connections_get_no_options() -> None:
    assert connect_args_for("sqlite:///rentals.db") == {}


@pytest.mark.unit
def test_health_check_reports_unreachable_store() -> None:
    broken = Mock(spec=Engine)
    broken.connect.side_effect = OperationalError("SELECT 1", {}, Exception("down"))

    assert check_engine_health(broken) is False

