# tests/v1/test_buddies.py
"""Tests for tech-buddy endpoints."""

from fastapi import status


def _send(client, to_id, headers):
    return client.post(f"/api/v1/buddies/requests/{to_id}", headers=headers)


def test_request_accept_remove_flow(client, alice, bob, alice_headers, bob_headers) -> None:
    """Request, accept, then remove: the relation disappears for both sides."""
    sent = _send(client, bob.id, alice_headers)
    assert sent.status_code == status.HTTP_201_CREATED
    relation_id = sent.json()["id"]

    view = client.get(f"/api/v1/buddies/relation/{alice.id}", headers=bob_headers).json()
    assert view["state"] == "PENDING_INCOMING"
    assert client.get("/api/v1/buddies/incoming/count", headers=bob_headers).json() == {"count": 1}

    accepted = client.post(f"/api/v1/buddies/{relation_id}/accept", headers=bob_headers)
    assert accepted.status_code == status.HTTP_200_OK
    assert accepted.json()["status"] == "ACCEPTED"
    assert client.get("/api/v1/buddies", headers=alice_headers).json()[0]["id"] == relation_id

    removed = client.delete(f"/api/v1/buddies/{bob.id}", headers=alice_headers)
    assert removed.status_code == status.HTTP_204_NO_CONTENT
    view = client.get(f"/api/v1/buddies/relation/{bob.id}", headers=alice_headers).json()
    assert view == {"other_id": bob.id, "state": "NONE", "relation": None}


def test_self_request(client, alice, alice_headers) -> None:
    response = _send(client, alice.id, alice_headers)
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert response.json()["reason"] == "self_relation"


def test_crossing_requests_conflict(client, alice, bob, alice_headers, bob_headers) -> None:
    _send(client, bob.id, alice_headers)
    response = _send(client, alice.id, bob_headers)
    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["reason"] == "relation_exists"


def test_double_accept_is_harmless(client, alice, bob, alice_headers, bob_headers) -> None:
    relation_id = _send(client, bob.id, alice_headers).json()["id"]
    first = client.post(f"/api/v1/buddies/{relation_id}/accept", headers=bob_headers)
    second = client.post(f"/api/v1/buddies/{relation_id}/accept", headers=bob_headers)
    assert first.status_code == second.status_code == status.HTTP_200_OK
    assert second.json()["status"] == "ACCEPTED"


def test_recipient_cannot_cancel(client, alice, bob, alice_headers, bob_headers) -> None:
    _send(client, bob.id, alice_headers)
    response = client.delete(f"/api/v1/buddies/requests/{alice.id}", headers=bob_headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN

    cancelled = client.delete(f"/api/v1/buddies/requests/{bob.id}", headers=alice_headers)
    assert cancelled.status_code == status.HTTP_204_NO_CONTENT
    assert client.get("/api/v1/buddies/outgoing", headers=alice_headers).json() == []


def test_reject_then_request_again(client, alice, bob, alice_headers, bob_headers) -> None:
    relation_id = _send(client, bob.id, alice_headers).json()["id"]
    rejected = client.post(f"/api/v1/buddies/{relation_id}/reject", headers=bob_headers)
    assert rejected.json()["status"] == "REJECTED"

    view = client.get(f"/api/v1/buddies/relation/{bob.id}", headers=alice_headers).json()
    assert view["state"] == "REJECTED"

    again = _send(client, bob.id, alice_headers)
    assert again.status_code == status.HTTP_201_CREATED
    assert again.json()["id"] == relation_id
    assert again.json()["status"] == "PENDING"
