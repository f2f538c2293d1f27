"""Identity and approval gate.

Every member-facing operation is allowed for ``is_admin or is_approved``;
admin-only operations require ``is_admin`` alone. The context is recomputed
from the store for each request, so an approval revoked by an admin takes
effect on the caller's very next call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from techcircle.models import ApprovalStatus, Profile
from techcircle.services.exceptions import (
    ApprovalRequired,
    AuthenticationRequired,
    Forbidden,
    StoreUnavailable,
)
from techcircle.services.roles import RoleResolver, role_resolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccessContext:
    """Who the caller is and which gates they pass."""

    user_id: str | None
    has_identity: bool
    is_approved: bool
    is_admin: bool

    @property
    def allowed(self) -> bool:
        return self.is_admin or self.is_approved

    def require_identity(self) -> str:
        if not self.has_identity or self.user_id is None:
            raise AuthenticationRequired()
        return self.user_id

    def require_member(self) -> str:
        """Return the caller id if they are past the approval gate."""
        user_id = self.require_identity()
        if not self.allowed:
            raise ApprovalRequired()
        return user_id

    def require_admin(self) -> str:
        user_id = self.require_identity()
        if not self.is_admin:
            raise Forbidden("Only admins can do that.")
        return user_id


ANONYMOUS = AccessContext(user_id=None, has_identity=False, is_approved=False, is_admin=False)


def resolve_access(
    db: Session,
    user_id: str | None,
    resolver: RoleResolver | None = None,
) -> AccessContext:
    """Evaluate the gate predicate for ``user_id`` (``None`` = no session).

    A missing profile row counts as not approved.
    """
    if not user_id:
        return ANONYMOUS

    resolver = resolver or role_resolver
    try:
        status = db.execute(
            select(Profile.status).where(Profile.id == user_id)
        ).scalar_one_or_none()
        is_admin = resolver.is_admin(db, user_id)
    except SQLAlchemyError as err:
        logger.error("Access lookup failed for user %s", user_id, exc_info=True)
        raise StoreUnavailable() from err

    return AccessContext(
        user_id=user_id,
        has_identity=True,
        is_approved=status == ApprovalStatus.APPROVED,
        is_admin=is_admin,
    )
