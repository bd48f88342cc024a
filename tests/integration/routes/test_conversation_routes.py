"""
Integration tests for /messages and /conversations endpoints.
"""

from __future__ import annotations

from typing import Any, Callable

import pytest
from fastapi.testclient import TestClient

Headers = Callable[[dict[str, Any]], dict[str, str]]


@pytest.mark.integration
def test_message_flow_updates_unseen_count(
    client: TestClient, as_user: Headers, host: dict, guest: dict, conversation: dict
) -> None:
    posted = client.post(
        "/messages",
        json={"conversationId": conversation["id"], "message": "Is parking included?"},
        headers=as_user(guest),
    )

    assert posted.status_code == 201
    assert posted.json()["data"]["body"] == "Is parking included?"

    unseen = client.get("/conversations/unseen-count", headers=as_user(host)).json()
    assert unseen == {"success": True, "count": 1, "hasUnseen": True}

    seen = client.post(f"/conversations/{conversation['id']}/seen", headers=as_user(host))
    assert seen.status_code == 200

    unseen = client.get("/conversations/unseen-count", headers=as_user(host)).json()
    assert unseen["count"] == 0
    assert unseen["hasUnseen"] is False


@pytest.mark.integration
def test_stranger_cannot_post(
    client: TestClient, as_user: Headers, stranger: dict, conversation: dict
) -> None:
    response = client.post(
        "/messages",
        json={"conversationId": conversation["id"], "message": "hi"},
        headers=as_user(stranger),
    )

    assert response.status_code == 403


@pytest.mark.integration
def test_empty_message_is_422(
    client: TestClient, as_user: Headers, guest: dict, conversation: dict
) -> None:
    response = client.post(
        "/messages", json={"conversationId": conversation["id"]}, headers=as_user(guest)
    )

    assert response.status_code == 422
