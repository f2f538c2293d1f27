"""Buddy relation Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from techcircle.models import BuddyStatus
from techcircle.services.buddies import RelationState


class BuddyRelationResponse(BaseModel):
    """A stored relation row."""

    id: str
    requester_id: str
    recipient_id: str
    status: BuddyStatus
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RelationView(BaseModel):
    """The relation between the caller and another member, from the caller's side."""

    other_id: str
    state: RelationState
    relation: BuddyRelationResponse | None = None
