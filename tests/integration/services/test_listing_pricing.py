"""
Integration tests for owner-only price and offer updates.
"""

from __future__ import annotations

from decimal import Decimal

import pytest
from sqlalchemy.engine import Engine

from rental_bookings.errors import ListingNotFoundError, ValidationError
from rental_bookings.services.listings import set_listing_offer, set_listing_price


@pytest.mark.integration
def test_owner_sets_offer_below_price(db_engine: Engine, host: dict, listing: dict) -> None:
    updated = set_listing_offer(db_engine, host["id"], listing["id"], Decimal("800"))

    assert Decimal(updated["offer_price"]) == Decimal("800")


@pytest.mark.integration
@pytest.mark.parametrize("offer", [Decimal("1000"), Decimal("1500"), Decimal("0")])
def test_offer_must_be_positive_and_below_price(
    db_engine: Engine, host: dict, listing: dict, offer: Decimal
) -> None:
    with pytest.raises(ValidationError):
        set_listing_offer(db_engine, host["id"], listing["id"], offer)


@pytest.mark.integration
def test_offer_can_be_cleared(db_engine: Engine, host: dict, make_listing) -> None:
    discounted = make_listing(host["id"], offer_price=Decimal("900"))

    updated = set_listing_offer(db_engine, host["id"], discounted["id"], None)

    assert updated["offer_price"] is None


@pytest.mark.integration
def test_price_must_stay_above_offer(db_engine: Engine, host: dict, make_listing) -> None:
    discounted = make_listing(host["id"], offer_price=Decimal("900"))

    with pytest.raises(ValidationError):
        set_listing_price(db_engine, host["id"], discounted["id"], Decimal("900"))

    updated = set_listing_price(db_engine, host["id"], discounted["id"], Decimal("950"))
    assert Decimal(updated["price"]) == Decimal("950")


@pytest.mark.integration
def test_only_owner_can_change_pricing(db_engine: Engine, guest: dict, listing: dict) -> None:
    with pytest.raises(ListingNotFoundError):
        set_listing_price(db_engine, guest["id"], listing["id"], Decimal("1200"))
    with pytest.raises(ListingNotFoundError):
        set_listing_offer(db_engine, guest["id"], listing["id"], Decimal("500"))
