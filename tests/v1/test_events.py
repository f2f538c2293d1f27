# tests/v1/test_events.py
"""Tests for event endpoints."""

from datetime import UTC, datetime, timedelta

from fastapi import status

from techcircle.models import AppRole


def _future(days: int = 2) -> str:
    return (datetime.now(UTC) + timedelta(days=days)).isoformat()


def test_host_creates_and_members_rsvp(client, make_profile, headers_for, alice_headers) -> None:
    secretary = make_profile("Sec", roles=(AppRole.SECRETARY,))
    created = client.post(
        "/api/v1/events",
        json={"title": "Hack Night", "start_at": _future()},
        headers=headers_for(secretary.id),
    )
    assert created.status_code == status.HTTP_201_CREATED
    event_id = created.json()["id"]
    assert created.json()["status"] == "UPCOMING"

    rsvp = client.post(f"/api/v1/events/{event_id}/rsvp", headers=alice_headers)
    assert rsvp.status_code == status.HTTP_201_CREATED

    detail = client.get(f"/api/v1/events/{event_id}", headers=alice_headers).json()
    assert detail["rsvp_count"] == 1
    assert detail["attendee_count"] == 1
    assert detail["rsvped"] is True

    withdrawn = client.delete(f"/api/v1/events/{event_id}/rsvp", headers=alice_headers)
    assert withdrawn.status_code == status.HTTP_204_NO_CONTENT


def test_member_without_host_role_cannot_create(client, alice_headers) -> None:
    response = client.post("/api/v1/events", json={"title": "Mine", "tba": True}, headers=alice_headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_admin_roster(client, admin_headers, alice, bob_headers) -> None:
    event_id = client.post(
        "/api/v1/events", json={"title": "Demo Day", "tba": True}, headers=admin_headers
    ).json()["id"]
    url = f"/api/v1/events/{event_id}/participants/{alice.id}"

    assert client.post(url, headers=bob_headers).status_code == status.HTTP_403_FORBIDDEN

    added = client.post(url, headers=admin_headers)
    assert added.status_code == status.HTTP_201_CREATED
    detail = client.get(f"/api/v1/events/{event_id}", headers=bob_headers).json()
    assert detail["attendee_count"] == 1
    assert detail["rsvp_count"] == 0

    assert client.delete(url, headers=admin_headers).status_code == status.HTTP_204_NO_CONTENT


def test_unknown_community_is_not_retryable(client, make_profile, headers_for) -> None:
    secretary = make_profile("Sec", roles=(AppRole.SECRETARY,))
    response = client.post(
        "/api/v1/events",
        json={"title": "Meetup", "tba": True, "community_slug": "nope"},
        headers=headers_for(secretary.id),
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["retryable"] is False
