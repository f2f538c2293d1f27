"""Profile endpoints: registration, self-edit and the caller's gate state."""

from __future__ import annotations

from fastapi import APIRouter, status

from techcircle.models import Profile
from techcircle.schemas.profile import (
    AccessContextResponse,
    BuddyCountResponse,
    MeResponse,
    ProfileCreate,
    ProfileResponse,
    ProfileUpdate,
    SessionEventRequest,
)
from techcircle.services import profiles
from techcircle.services.buddies import buddy_service
from techcircle.services.exceptions import InvalidRequest
from techcircle.services.roles import role_resolver
from techcircle.services.session_context import IdentityEvent, session_hub

from ..dependencies import AccessDep, CurrentUserIdDep, SessionDep

router = APIRouter(prefix="/profiles", tags=["profiles"])

# Events a client may report; PROFILE_CHANGED is only raised by admin actions.
CLIENT_EVENTS = {
    IdentityEvent.SIGNED_IN,
    IdentityEvent.SIGNED_OUT,
    IdentityEvent.TOKEN_REFRESHED,
}


@router.post("/me", response_model=ProfileResponse, status_code=status.HTTP_201_CREATED)
async def register_me(
    profile_data: ProfileCreate,
    user_id: CurrentUserIdDep,
    db: SessionDep,
) -> Profile:
    """Register the caller's profile; it starts out pending approval."""
    return profiles.register_profile(db, user_id, profile_data.model_dump(exclude_unset=True))


@router.get("/me", response_model=MeResponse)
async def read_me(access: AccessDep, db: SessionDep) -> MeResponse:
    """Return the caller's profile (if any) and their current gate state."""
    user_id = access.require_identity()
    profile = db.get(Profile, user_id)
    return MeResponse(
        profile=ProfileResponse.model_validate(profile) if profile else None,
        access=AccessContextResponse(
            has_identity=access.has_identity,
            is_approved=access.is_approved,
            is_admin=access.is_admin,
            can_host_events=access.allowed and role_resolver.can_host_events(db, user_id),
        ),
    )


@router.patch("/me", response_model=ProfileResponse)
async def update_me(
    update_data: ProfileUpdate,
    user_id: CurrentUserIdDep,
    db: SessionDep,
) -> Profile:
    """Apply partial edits to the caller's own profile."""
    return profiles.update_profile(db, user_id, update_data.model_dump(exclude_unset=True))


@router.post("/me/session", response_model=AccessContextResponse)
async def report_session_event(
    body: SessionEventRequest,
    user_id: CurrentUserIdDep,
    db: SessionDep,
) -> AccessContextResponse:
    """Publish an identity change and return the recomputed context."""
    try:
        event = IdentityEvent(body.event)
    except ValueError as err:
        raise InvalidRequest("Unknown session event.") from err
    if event not in CLIENT_EVENTS:
        raise InvalidRequest("Unknown session event.")
    context = session_hub.publish(db, event, user_id)
    return AccessContextResponse(
        has_identity=context.has_identity,
        is_approved=context.is_approved,
        is_admin=context.is_admin,
        can_host_events=context.allowed and role_resolver.can_host_events(db, user_id),
    )


@router.get("/{user_id}/buddy-count", response_model=BuddyCountResponse)
async def buddy_count(user_id: str, access: AccessDep, db: SessionDep) -> BuddyCountResponse:
    """Number of accepted buddies for a member."""
    access.require_member()
    profiles.get_profile(db, user_id)
    return BuddyCountResponse(user_id=user_id, accepted=buddy_service.count_accepted(db, user_id))
