# tests/v1/test_moderation.py
"""Tests for admin moderation endpoints."""

from fastapi import status


def _project(client, headers, title="Study Buddy"):
    return client.post("/api/v1/projects", json={"title": title}, headers=headers).json()["id"]


def test_non_admin_cannot_delete_project(client, alice_headers, bob_headers) -> None:
    project_id = _project(client, alice_headers)
    response = client.delete(f"/api/v1/moderation/projects/{project_id}", headers=bob_headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert client.get(f"/api/v1/projects/{project_id}", headers=alice_headers).status_code == status.HTTP_200_OK


def test_flag_requires_note(client, alice_headers, admin_headers) -> None:
    project_id = _project(client, alice_headers)
    url = f"/api/v1/moderation/projects/{project_id}"

    empty = client.patch(url, json={"flagged": True, "flagged_note": ""}, headers=admin_headers)
    assert empty.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert empty.json()["reason"] == "flag_note_required"

    flagged = client.patch(url, json={"flagged": True, "flagged_note": "spam"}, headers=admin_headers)
    assert flagged.status_code == status.HTTP_200_OK
    assert flagged.json()["flagged"] is True
    assert flagged.json()["flagged_note"] == "spam"


def test_admin_deletes_project(client, alice_headers, admin_headers) -> None:
    project_id = _project(client, alice_headers)
    response = client.delete(f"/api/v1/moderation/projects/{project_id}", headers=admin_headers)
    assert response.status_code == status.HTTP_204_NO_CONTENT
    assert client.get(f"/api/v1/projects/{project_id}", headers=alice_headers).status_code == status.HTTP_404_NOT_FOUND


def test_bulk_moderation(client, alice_headers, admin_headers) -> None:
    ids = [_project(client, alice_headers, "One"), _project(client, alice_headers, "Two")]

    featured = client.patch(
        "/api/v1/moderation/projects",
        json={"ids": ids, "featured": True},
        headers=admin_headers,
    )
    assert featured.status_code == status.HTTP_200_OK
    assert all(p["featured"] for p in featured.json())

    deleted = client.request(
        "DELETE", "/api/v1/moderation/projects", json={"ids": ids}, headers=admin_headers
    )
    assert deleted.json() == {"deleted": 2}


def test_event_moderation(client, admin_headers, alice_headers) -> None:
    event_id = client.post(
        "/api/v1/events", json={"title": "Meetup", "tba": True}, headers=admin_headers
    ).json()["id"]

    closed = client.patch(
        f"/api/v1/moderation/events/{event_id}", json={"allow_rsvp": False}, headers=admin_headers
    )
    assert closed.json()["allow_rsvp"] is False
    rsvp = client.post(f"/api/v1/events/{event_id}/rsvp", headers=alice_headers)
    assert rsvp.json()["reason"] == "rsvp_closed"

    deleted = client.delete(f"/api/v1/moderation/events/{event_id}", headers=admin_headers)
    assert deleted.status_code == status.HTTP_204_NO_CONTENT


def test_approval_queue(client, pending_user, admin_headers, headers_for) -> None:
    queue = client.get("/api/v1/moderation/approvals", headers=admin_headers).json()
    assert [p["id"] for p in queue] == [pending_user.id]

    user_headers = headers_for(pending_user.id)
    assert client.get("/api/v1/buddies", headers=user_headers).status_code == status.HTTP_403_FORBIDDEN

    decided = client.post(
        f"/api/v1/moderation/approvals/{pending_user.id}",
        json={"status": "APPROVED"},
        headers=admin_headers,
    )
    assert decided.json()["status"] == "APPROVED"
    assert client.get("/api/v1/buddies", headers=user_headers).status_code == status.HTTP_200_OK

    revoked = client.post(
        f"/api/v1/moderation/approvals/{pending_user.id}",
        json={"status": "REJECTED"},
        headers=admin_headers,
    )
    assert revoked.status_code == status.HTTP_200_OK
    assert client.get("/api/v1/buddies", headers=user_headers).status_code == status.HTTP_403_FORBIDDEN
