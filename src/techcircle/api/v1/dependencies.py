"""Shared API dependencies for authentication and the approval gate."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from techcircle.core.security import InvalidToken, decode_subject
from techcircle.db.session import get_db
from techcircle.services.access import AccessContext
from techcircle.services.session_context import session_hub

# HTTP Bearer scheme; a missing header is reported as 401 below rather than 403.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> str:
    """Return the account id carried by the bearer token.

    Raises:
        HTTPException: If the token is missing or cannot be validated
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return decode_subject(credentials.credentials)
    except InvalidToken as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        ) from err


CurrentUserIdDep = Annotated[str, Depends(get_current_user_id)]


def get_access_context(user_id: CurrentUserIdDep, db: SessionDep) -> AccessContext:
    """Evaluate the approval gate for the caller on every request."""
    return session_hub.current(db, user_id)


# Type alias for the caller's access context
AccessDep = Annotated[AccessContext, Depends(get_access_context)]
