"""Role resolution over explicit assignments and the legacy profile field.

Roles come from two places: the ``role_assignments`` table (authoritative,
many rows per user, optionally community-scoped) and the older single
``profiles.role`` text column. The resolver consults assignments first and
only falls back to the legacy column when ``settings.legacy_role_fallback``
is on, so the column can be retired by flipping the flag.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from techcircle.core.settings import settings
from techcircle.models import Profile, RoleAssignment
from techcircle.models.enums import HOST_ROLES, AppRole

logger = logging.getLogger(__name__)


class RoleSource(Protocol):
    """A backend able to report the roles held by a user."""

    name: str

    def roles_for(
        self,
        db: Session,
        user_id: str,
        community_slug: str | None = None,
    ) -> set[AppRole]:
        ...


class AssignmentRoleSource:
    """Roles granted through ``role_assignments`` rows.

    An unscoped assignment applies to every community; a scoped one only
    to its own community.
    """

    name = "assignments"

    def roles_for(
        self,
        db: Session,
        user_id: str,
        community_slug: str | None = None,
    ) -> set[AppRole]:
        stmt = select(RoleAssignment.role, RoleAssignment.community_slug).where(
            RoleAssignment.user_id == user_id
        )
        roles: set[AppRole] = set()
        for role, scope in db.execute(stmt):
            if community_slug is None or scope is None or scope == community_slug:
                roles.add(AppRole(role))
        return roles


class LegacyProfileRoleSource:
    """The single free-text ``profiles.role`` column."""

    name = "legacy_profile"

    def roles_for(
        self,
        db: Session,
        user_id: str,
        community_slug: str | None = None,
    ) -> set[AppRole]:
        raw = db.execute(select(Profile.role).where(Profile.id == user_id)).scalar_one_or_none()
        if not raw:
            return set()
        try:
            return {AppRole(raw.strip().lower())}
        except ValueError:
            logger.debug("Ignoring unknown legacy role %r for user %s", raw, user_id)
            return set()


class RoleResolver:
    """Merge role sources into effective capabilities."""

    def __init__(
        self,
        primary: RoleSource | None = None,
        legacy: RoleSource | None = None,
        legacy_fallback: bool | None = None,
    ) -> None:
        self.primary = primary or AssignmentRoleSource()
        self.legacy = legacy or LegacyProfileRoleSource()
        self._legacy_fallback = legacy_fallback

    @property
    def legacy_fallback(self) -> bool:
        if self._legacy_fallback is None:
            return settings.legacy_role_fallback
        return self._legacy_fallback

    def _sources(self) -> Sequence[RoleSource]:
        if self.legacy_fallback:
            return (self.primary, self.legacy)
        return (self.primary,)

    def roles_for(
        self,
        db: Session,
        user_id: str,
        community_slug: str | None = None,
    ) -> set[AppRole]:
        """Return the union of roles across every enabled source."""
        roles: set[AppRole] = set()
        for source in self._sources():
            roles |= source.roles_for(db, user_id, community_slug)
        return roles

    def is_admin(self, db: Session, user_id: str) -> bool:
        """Admin status comes from assignments only."""
        return AppRole.ADMIN in self.primary.roles_for(db, user_id)

    def has_role(
        self,
        db: Session,
        user_id: str,
        role: AppRole,
        community_slug: str | None = None,
    ) -> bool:
        return role in self.primary.roles_for(db, user_id, community_slug)

    def can_host_events(self, db: Session, user_id: str) -> bool:
        """True when the user holds a hosting role in any enabled source.

        Read failures fail closed.
        """
        for source in self._sources():
            try:
                roles = source.roles_for(db, user_id)
            except SQLAlchemyError:
                logger.warning(
                    "Role lookup via %s failed for user %s; denying host capability",
                    source.name,
                    user_id,
                    exc_info=True,
                )
                return False
            if _intersects(roles, HOST_ROLES):
                return True
        return False


def _intersects(roles: Iterable[AppRole], wanted: frozenset[AppRole]) -> bool:
    return any(role in wanted for role in roles)


role_resolver = RoleResolver()
