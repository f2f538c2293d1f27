"""Project and join-request Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from techcircle.models import JoinStatus, ProjectStatus


class ProjectCreate(BaseModel):
    """Schema for creating a new project."""

    title: str = Field(..., min_length=1, max_length=200)
    summary: str | None = Field(None, max_length=5000)
    status: ProjectStatus = ProjectStatus.INCUBATION
    community_slug: str | None = None
    tech_stack: list[str] = Field(default_factory=list)
    github_url: str | None = None
    drive_url: str | None = None
    recruiting: bool = Field(False, description="Open the project to join requests")
    looking_for: str | None = Field(None, description="Qualifications sought while recruiting")


class ProjectResponse(BaseModel):
    """Project information returned by the API."""

    id: str
    title: str
    summary: str | None
    status: ProjectStatus
    owner_id: str
    community_slug: str | None
    tech_stack: list[str]
    github_url: str | None
    drive_url: str | None
    looking_for: str | None
    featured: bool
    flagged: bool
    flagged_note: str | None
    archived: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class StatusUpdate(BaseModel):
    status: ProjectStatus


class LookingForUpdate(BaseModel):
    """``null`` closes recruiting; text opens it."""

    looking_for: str | None = Field(None, max_length=1000)


class MemberResponse(BaseModel):
    id: str
    project_id: str
    user_id: str
    role: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class JoinRequestCreate(BaseModel):
    message: str = Field(..., min_length=1, max_length=2000)


class JoinRequestResponse(BaseModel):
    id: str
    project_id: str
    requester_id: str
    message: str
    status: JoinStatus
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
