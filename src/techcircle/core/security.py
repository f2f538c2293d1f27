"""Access-token helpers shared with the external identity provider.

Sign-up, login and password flows live with the identity provider. This
service only verifies the bearer tokens it issues (HS256 over a shared
secret, ``sub`` = account id) and can mint equivalent tokens for local
development and tests.
"""
from __future__ import annotations

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from techcircle.core.settings import settings


class InvalidToken(ValueError):
    """Raised when a bearer token cannot be trusted."""


def create_access_token(
    subject: str,
    extra_claims: dict[str, object] | None = None,
    expires_minutes: int | None = None,
) -> str:
    """Create a JWT access token for ``subject``."""
    to_encode: dict[str, object] = {"sub": subject}
    if extra_claims:
        to_encode.update(extra_claims)
    if settings.jwt_audience and "aud" not in to_encode:
        to_encode["aud"] = settings.jwt_audience
    lifetime = settings.access_token_expire_minutes if expires_minutes is None else expires_minutes
    to_encode["exp"] = datetime.now(UTC) + timedelta(minutes=lifetime)
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


def decode_subject(token: str) -> str:
    """Return the account id carried by ``token``.

    Raises:
        InvalidToken: If the signature, expiry or audience check fails, or
            the token carries no subject.
    """
    options = {"verify_aud": settings.jwt_audience is not None}
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            options=options,
        )
    except JWTError as err:
        raise InvalidToken("Could not validate credentials") from err

    subject = payload.get("sub")
    if not subject or not isinstance(subject, str):
        raise InvalidToken("Could not validate credentials")
    return subject
