# tests/v1/test_auth_dependencies.py
"""Tests for bearer-token authentication and the gate dependency."""

from datetime import UTC, datetime, timedelta

from fastapi import status
from jose import jwt

from techcircle.core.security import create_access_token, decode_subject
from techcircle.core.settings import settings


class TestTokens:
    def test_round_trip_subject(self) -> None:
        token = create_access_token("user-123")
        assert decode_subject(token) == "user-123"

    def test_expired_token_rejected(self, client) -> None:
        token = create_access_token("user-123", expires_minutes=-1)
        response = client.get("/api/v1/profiles/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_wrong_secret_rejected(self, client) -> None:
        token = jwt.encode(
            {"sub": "user-123", "exp": datetime.now(UTC) + timedelta(minutes=5)},
            "not-the-secret",
            algorithm=settings.jwt_algorithm,
        )
        response = client.get("/api/v1/profiles/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_missing_header_rejected(self, client) -> None:
        response = client.get("/api/v1/buddies")
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestGate:
    def test_pending_member_gets_pending_reason(self, client, pending_user, headers_for) -> None:
        response = client.get("/api/v1/buddies", headers=headers_for(pending_user.id))
        assert response.status_code == status.HTTP_403_FORBIDDEN
        body = response.json()
        assert body["reason"] == "pending_approval"
        assert body["retryable"] is False

    def test_identity_without_profile_is_pending(self, client, headers_for) -> None:
        response = client.get("/api/v1/buddies", headers=headers_for("fresh-account"))
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["reason"] == "pending_approval"

    def test_member_route_open_to_approved(self, client, alice_headers) -> None:
        response = client.get("/api/v1/buddies", headers=alice_headers)
        assert response.status_code == status.HTTP_200_OK
        assert response.json() == []

    def test_admin_route_closed_to_members(self, client, alice_headers) -> None:
        response = client.get("/api/v1/moderation/approvals", headers=alice_headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["reason"] == "forbidden"
