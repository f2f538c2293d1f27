"""Moderation-related Pydantic schemas."""

from pydantic import BaseModel, Field

from techcircle.models import ApprovalStatus


class ProjectModeration(BaseModel):
    """Admin toggles for a project; omitted fields are left unchanged."""

    featured: bool | None = None
    archived: bool | None = None
    flagged: bool | None = None
    flagged_note: str | None = Field(None, description="Required when flagging")


class BulkProjectModeration(ProjectModeration):
    ids: list[str] = Field(..., min_length=1)


class EventModeration(BaseModel):
    is_featured: bool | None = None
    archived: bool | None = None
    allow_rsvp: bool | None = None


class ApprovalDecision(BaseModel):
    status: ApprovalStatus = Field(..., description="APPROVED or REJECTED")


class BulkDeleteResponse(BaseModel):
    deleted: int
