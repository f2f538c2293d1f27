# tests/test_app.py
"""Tests for application wiring: health, root and error rendering."""

from fastapi import status

from techcircle.services.exceptions import StoreUnavailable


def test_health(client) -> None:
    response = client.get("/health")
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "ok"}


def test_root_describes_api(client) -> None:
    response = client.get("/")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["docs"] == "/docs"


def test_store_failure_is_retryable(client, alice_headers, monkeypatch) -> None:
    """Transient store failures surface as 503 with a retry hint."""
    from techcircle.services.buddies import BuddyService

    def unavailable(db, user_id):
        raise StoreUnavailable()

    monkeypatch.setattr(BuddyService, "list_accepted", staticmethod(unavailable))
    response = client.get("/api/v1/buddies", headers=alice_headers)

    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    body = response.json()
    assert body["reason"] == "store_unavailable"
    assert body["retryable"] is True
