"""Role assignment Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from techcircle.models import AppRole


class RoleAssignmentCreate(BaseModel):
    user_id: str
    role: AppRole
    community_slug: str | None = None


class RoleAssignmentResponse(BaseModel):
    id: str
    user_id: str
    role: AppRole
    community_slug: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserRolesResponse(BaseModel):
    """Explicit grants plus what they resolve to."""

    user_id: str
    assignments: list[RoleAssignmentResponse]
    roles: list[AppRole]
    is_admin: bool
    can_host_events: bool
