"""Self-service helpers for a member's own profile."""
from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from techcircle.models import ApprovalStatus, Community, Profile
from techcircle.services.exceptions import Conflict, InvalidRequest, NotFound, StoreUnavailable

__all__ = [
    "SELF_EDITABLE_FIELDS",
    "get_profile",
    "register_profile",
    "update_profile",
]

logger = logging.getLogger(__name__)

# Status and legacy role are never writable by the profile owner.
SELF_EDITABLE_FIELDS = frozenset(
    {
        "name",
        "degree",
        "specialization",
        "community_slug",
        "phone",
        "linkedin_url",
        "github_url",
    }
)


def get_profile(db: Session, user_id: str) -> Profile:
    """Return a profile by account id."""
    profile = db.get(Profile, user_id)
    if profile is None:
        raise NotFound("Profile not found.")
    return profile


def register_profile(db: Session, user_id: str, fields: dict[str, Any]) -> Profile:
    """Create the caller's profile in the PENDING approval state."""
    if db.get(Profile, user_id) is not None:
        raise Conflict("Your profile already exists.")
    values = _editable(db, fields)
    profile = Profile(id=user_id, status=ApprovalStatus.PENDING, **values)
    db.add(profile)
    try:
        db.commit()
    except IntegrityError as err:
        db.rollback()
        raise Conflict("Your profile already exists.") from err
    except SQLAlchemyError as err:
        db.rollback()
        logger.error("Failed to register profile %s", user_id, exc_info=True)
        raise StoreUnavailable() from err
    db.refresh(profile)
    logger.info("Profile %s registered, awaiting approval", user_id)
    return profile


def update_profile(db: Session, user_id: str, fields: dict[str, Any]) -> Profile:
    """Apply partial self-edits to an existing profile."""
    profile = get_profile(db, user_id)
    if fields.get("must_change_password"):
        raise InvalidRequest("The password-change reminder can only be cleared.")
    for key, value in _editable(db, fields).items():
        setattr(profile, key, value)
    if fields.get("must_change_password") is False:
        profile.must_change_password = False
    try:
        db.commit()
    except SQLAlchemyError as err:
        db.rollback()
        logger.error("Failed to update profile %s", user_id, exc_info=True)
        raise StoreUnavailable() from err
    db.refresh(profile)
    return profile


def _editable(db: Session, fields: dict[str, Any]) -> dict[str, Any]:
    values = {key: value for key, value in fields.items() if key in SELF_EDITABLE_FIELDS}
    slug = values.get("community_slug")
    if slug is not None and db.get(Community, slug) is None:
        raise NotFound("Community not found.")
    return values
