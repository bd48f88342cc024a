"""
Integration tests for /reservations endpoints.
"""

from __future__ import annotations

from typing import Any, Callable
from unittest.mock import Mock, patch

import pytest
from fastapi.testclient import TestClient

Headers = Callable[[dict[str, Any]], dict[str, str]]


def _payload(listing: dict, **overrides: Any) -> dict[str, Any]:
    return {
        "listingId": listing["id"],
        "startDate": "2025-03-10",
        "endDate": "2025-03-15",
        "totalPrice": 5000,
        "orderId": "order_abc",
        "paymentId": "pay_123",
        "status": "success",
        **overrides,
    }


@pytest.fixture
def booked(client: TestClient, as_user: Headers, guest: dict, listing: dict) -> dict[str, Any]:
    response = client.post("/reservations", json=_payload(listing), headers=as_user(guest))
    assert response.status_code == 201
    return response.json()["data"]["reservations"][0]


@pytest.mark.integration
def test_create_reservation(
    client: TestClient, as_user: Headers, guest: dict, listing: dict
) -> None:
    response = client.post("/reservations", json=_payload(listing), headers=as_user(guest))

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["data"]["id"] == listing["id"]
    reservation = body["data"]["reservations"][0]
    assert reservation["startDate"] == "2025-03-10"
    assert reservation["endDate"] == "2025-03-15"
    assert reservation["totalPrice"] == 5000
    assert reservation["userId"] == guest["id"]
    assert reservation["status"] == "success"
    assert "X-Request-ID" in response.headers


@pytest.mark.integration
def test_overlapping_reservation_conflicts(
    client: TestClient, as_user: Headers, stranger: dict, listing: dict, booked: dict
) -> None:
    response = client.post(
        "/reservations",
        json=_payload(listing, startDate="2025-03-15", endDate="2025-03-20"),
        headers=as_user(stranger),
    )

    assert response.status_code == 409
    assert response.json() == {
        "success": False,
        "error": "This property is already reserved for these dates.",
    }


@pytest.mark.integration
@pytest.mark.parametrize(
    "overrides",
    [
        {"orderId": None},
        {"totalPrice": -1},
        {"totalPrice": 0.004},
        {"startDate": "2025-03-16"},
        {"startDate": "not-a-date"},
    ],
)
def test_invalid_body_is_422(
    client: TestClient, as_user: Headers, guest: dict, listing: dict, overrides: dict
) -> None:
    response = client.post(
        "/reservations", json=_payload(listing, **overrides), headers=as_user(guest)
    )

    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Invalid request"
    assert body["detail"]


@pytest.mark.integration
def test_unknown_listing_is_404(client: TestClient, as_user: Headers, guest: dict) -> None:
    response = client.post(
        "/reservations", json=_payload({"id": 999}), headers=as_user(guest)
    )

    assert response.status_code == 404
    assert response.json()["error"] == "Listing not found"


@pytest.mark.integration
def test_missing_user_header_is_401(client: TestClient, listing: dict) -> None:
    response = client.post("/reservations", json=_payload(listing))

    assert response.status_code == 401
    assert response.json()["success"] is False


@pytest.mark.integration
def test_guest_cancels_and_is_refunded(
    client: TestClient, as_user: Headers, guest: dict, booked: dict
) -> None:
    response = client.delete(f"/reservations/{booked['id']}", headers=as_user(guest))

    assert response.status_code == 200
    assert response.json() == {"success": True, "refundedAmount": 5000.0, "newBalance": 5000.0}

    wallet = client.get("/wallet", headers=as_user(guest)).json()["data"]
    assert wallet["balance"] == 5000.0
    assert wallet["transactions"][0]["type"] == "credit"


@pytest.mark.integration
def test_second_cancel_is_404_without_second_refund(
    client: TestClient, as_user: Headers, guest: dict, booked: dict
) -> None:
    client.delete(f"/reservations/{booked['id']}", headers=as_user(guest))

    response = client.delete(f"/reservations/{booked['id']}", headers=as_user(guest))

    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Reservation not found"}
    wallet = client.get("/wallet", headers=as_user(guest)).json()["data"]
    assert wallet["balance"] == 5000.0


@pytest.mark.integration
def test_stranger_cancel_is_403(
    client: TestClient, as_user: Headers, stranger: dict, guest: dict, booked: dict
) -> None:
    response = client.delete(f"/reservations/{booked['id']}", headers=as_user(stranger))

    assert response.status_code == 403
    assert response.json() == {"success": False, "error": "Unauthorized"}
    trips = client.get("/reservations?role=guest", headers=as_user(guest)).json()["data"]
    assert [t["id"] for t in trips] == [booked["id"]]


@pytest.mark.integration
def test_host_cancel_pushes_notification(
    client: TestClient,
    as_user: Headers,
    publisher: Mock,
    host: dict,
    guest: dict,
    booked: dict,
) -> None:
    response = client.delete(f"/reservations/{booked['id']}", headers=as_user(host))

    assert response.status_code == 200
    notifications = client.get("/notifications", headers=as_user(guest)).json()["data"]
    assert len(notifications) == 1
    publisher.trigger.assert_called_once()
    assert publisher.trigger.call_args.args[1] == "notification:new"


@pytest.mark.integration
def test_transaction_failure_is_500_with_message(
    client: TestClient, as_user: Headers, guest: dict, booked: dict
) -> None:
    with patch(
        "rental_bookings.services.reservations.insert_cancelled_reservation",
        side_effect=RuntimeError("audit table unavailable"),
    ):
        response = client.delete(f"/reservations/{booked['id']}", headers=as_user(guest))

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "audit table unavailable"}
    trips = client.get("/reservations?role=guest", headers=as_user(guest)).json()["data"]
    assert len(trips) == 1


@pytest.mark.integration
def test_list_reservations_by_role(
    client: TestClient, as_user: Headers, host: dict, guest: dict, booked: dict
) -> None:
    trips = client.get("/reservations?role=guest", headers=as_user(guest)).json()["data"]
    hosted = client.get("/reservations?role=host", headers=as_user(host)).json()["data"]

    assert trips[0]["canCancel"] is True
    assert trips[0]["listing"]["title"] == "Seaside Cottage"
    assert hosted[0]["user"]["name"] == "Gary Guest"

    response = client.get("/reservations?role=admin", headers=as_user(host))
    assert response.status_code == 400
    assert response.json()["success"] is False


@pytest.mark.integration
def test_list_cancelled_reservations(
    client: TestClient, as_user: Headers, host: dict, guest: dict, booked: dict
) -> None:
    client.delete(f"/reservations/{booked['id']}", headers=as_user(host))

    cancelled = client.get("/reservations/cancelled?role=guest", headers=as_user(guest)).json()

    assert cancelled["success"] is True
    assert cancelled["data"][0]["reservationId"] == booked["id"]
    assert cancelled["data"][0]["reason"] == "Cancelled by host"
    assert cancelled["data"][0]["cancelledBy"] == host["id"]
