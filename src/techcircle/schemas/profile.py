"""Profile-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from techcircle.models import ApprovalStatus


class ProfileFields(BaseModel):
    """Fields a member may set on their own profile."""

    name: str | None = Field(None, min_length=1, max_length=120)
    degree: str | None = Field(None, max_length=120)
    specialization: str | None = Field(None, max_length=120)
    community_slug: str | None = Field(None, description="Affiliated community, if any")
    phone: str | None = Field(None, max_length=32)
    linkedin_url: str | None = None
    github_url: str | None = None


class ProfileCreate(ProfileFields):
    """Schema for registering the caller's profile."""

    name: str = Field(..., min_length=1, max_length=120)


class ProfileUpdate(ProfileFields):
    """Partial self-edit; unset fields are left unchanged."""

    must_change_password: bool | None = Field(
        None, description="Send false once the temporary password has been replaced"
    )


class ProfileResponse(BaseModel):
    """Profile information returned by the API."""

    id: str
    name: str | None
    degree: str | None
    specialization: str | None
    community_slug: str | None
    phone: str | None
    linkedin_url: str | None
    github_url: str | None
    status: ApprovalStatus
    must_change_password: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AccessContextResponse(BaseModel):
    """The caller's gate state as evaluated for this request."""

    has_identity: bool
    is_approved: bool
    is_admin: bool
    can_host_events: bool


class MeResponse(BaseModel):
    profile: ProfileResponse | None
    access: AccessContextResponse


class SessionEventRequest(BaseModel):
    """Identity-change notification forwarded by the client."""

    event: str = Field(..., description="SIGNED_IN, SIGNED_OUT or TOKEN_REFRESHED")


class BuddyCountResponse(BaseModel):
    user_id: str
    accepted: int
