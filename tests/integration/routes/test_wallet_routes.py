"""
Integration tests for /wallet.
"""

from __future__ import annotations

from typing import Any, Callable

import pytest
from fastapi.testclient import TestClient

Headers = Callable[[dict[str, Any]], dict[str, str]]


@pytest.mark.integration
def test_wallet_is_created_empty_on_first_read(
    client: TestClient, as_user: Headers, guest: dict
) -> None:
    response = client.get("/wallet", headers=as_user(guest))

    assert response.status_code == 200
    wallet = response.json()["data"]
    assert wallet["userId"] == guest["id"]
    assert wallet["balance"] == 0
    assert wallet["transactions"] == []


@pytest.mark.integration
def test_wallet_requires_user(client: TestClient) -> None:
    assert client.get("/wallet").status_code == 401
