"""Event-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from techcircle.models import EventStatus


class EventCreate(BaseModel):
    """Schema for creating an event."""

    title: str = Field(..., min_length=1, max_length=200)
    summary: str | None = None
    host: str | None = None
    community_slug: str | None = None
    start_at: datetime | None = None
    end_at: datetime | None = None
    tba: bool = False
    location: str | None = None
    capacity: int | None = Field(None, ge=1)
    allow_rsvp: bool = True


class EventResponse(BaseModel):
    id: str
    title: str
    summary: str | None
    host: str | None
    community_slug: str | None
    start_at: datetime | None
    end_at: datetime | None
    tba: bool
    location: str | None
    capacity: int | None
    status: EventStatus
    allow_rsvp: bool
    archived: bool
    is_featured: bool
    created_by: str | None

    model_config = ConfigDict(from_attributes=True)


class EventDetailResponse(BaseModel):
    """Event plus attendance derived from RSVPs and the curated roster."""

    event: EventResponse
    rsvp_count: int
    attendee_count: int
    rsvped: bool


class RSVPResponse(BaseModel):
    id: str
    event_id: str
    user_id: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ParticipantResponse(BaseModel):
    id: str
    event_id: str
    user_id: str
    added_by: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
