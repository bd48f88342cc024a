"""
Integration tests for /reviews endpoints.
"""

from __future__ import annotations

from typing import Any, Callable

import pytest
from fastapi.testclient import TestClient

Headers = Callable[[dict[str, Any]], dict[str, str]]


@pytest.fixture
def booked(client: TestClient, as_user: Headers, guest: dict, listing: dict) -> dict[str, Any]:
    response = client.post(
        "/reservations",
        json={
            "listingId": listing["id"],
            "startDate": "2025-07-01",
            "endDate": "2025-07-03",
            "totalPrice": 3000,
            "orderId": "order_rev",
            "status": "success",
        },
        headers=as_user(guest),
    )
    assert response.status_code == 201
    return response.json()["data"]["reservations"][0]


def _review_body(listing: dict, booked: dict, **overrides: Any) -> dict[str, Any]:
    return {
        "listingId": listing["id"],
        "reservationId": booked["id"],
        "rating": 4,
        "title": "Great view",
        "content": "Sunsets every evening.",
        **overrides,
    }


@pytest.mark.integration
def test_post_and_list_reviews(
    client: TestClient, as_user: Headers, guest: dict, listing: dict, booked: dict
) -> None:
    created = client.post("/reviews", json=_review_body(listing, booked), headers=as_user(guest))

    assert created.status_code == 201
    review = created.json()["data"]
    assert review["author"] == "Gary Guest"
    assert review["rating"] == 4
    assert review["verified"] is True
    assert review["helpfulCount"] == 0

    listed = client.get("/reviews", params={"listingId": listing["id"]})
    assert listed.status_code == 200
    assert [r["id"] for r in listed.json()["data"]] == [review["id"]]


@pytest.mark.integration
def test_duplicate_review_is_409(
    client: TestClient, as_user: Headers, guest: dict, listing: dict, booked: dict
) -> None:
    client.post("/reviews", json=_review_body(listing, booked), headers=as_user(guest))

    again = client.post(
        "/reviews", json=_review_body(listing, booked, rating=2), headers=as_user(guest)
    )

    assert again.status_code == 409
    assert again.json() == {
        "success": False,
        "error": "You have already reviewed this reservation",
    }


@pytest.mark.integration
@pytest.mark.parametrize(
    "overrides", [{"rating": 0}, {"rating": 6}, {"title": ""}, {"content": None}]
)
def test_invalid_review_body_is_422(
    client: TestClient,
    as_user: Headers,
    guest: dict,
    listing: dict,
    booked: dict,
    overrides: dict,
) -> None:
    response = client.post(
        "/reviews", json=_review_body(listing, booked, **overrides), headers=as_user(guest)
    )

    assert response.status_code == 422
    assert response.json()["success"] is False


@pytest.mark.integration
def test_list_requires_listing_id(client: TestClient) -> None:
    assert client.get("/reviews").status_code == 422


@pytest.mark.integration
def test_post_requires_user(client: TestClient, listing: dict, booked: dict) -> None:
    assert client.post("/reviews", json=_review_body(listing, booked)).status_code == 401


@pytest.mark.integration
def test_only_author_can_edit_or_delete(
    client: TestClient,
    as_user: Headers,
    guest: dict,
    stranger: dict,
    listing: dict,
    booked: dict,
) -> None:
    review_id = client.post(
        "/reviews", json=_review_body(listing, booked), headers=as_user(guest)
    ).json()["data"]["id"]
    edit = {"rating": 1, "title": "Meh", "content": "Meh"}

    forbidden_edit = client.put(f"/reviews/{review_id}", json=edit, headers=as_user(stranger))
    forbidden_delete = client.delete(f"/reviews/{review_id}", headers=as_user(stranger))

    assert forbidden_edit.status_code == 403
    assert forbidden_edit.json()["error"] == "You can only edit your own reviews"
    assert forbidden_delete.status_code == 403

    edited = client.put(f"/reviews/{review_id}", json=edit, headers=as_user(guest))
    assert edited.status_code == 200
    assert edited.json()["data"]["rating"] == 1

    deleted = client.delete(f"/reviews/{review_id}", headers=as_user(guest))
    assert deleted.json() == {"success": True, "message": "Review deleted successfully"}
    assert client.delete(f"/reviews/{review_id}", headers=as_user(guest)).status_code == 404
