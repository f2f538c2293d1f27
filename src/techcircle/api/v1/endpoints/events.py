"""Event endpoints: hosting, RSVPs and the admin roster."""

from __future__ import annotations

from fastapi import APIRouter, Response, status

from techcircle.models import Event, EventParticipant, EventRSVP
from techcircle.schemas.event import (
    EventCreate,
    EventDetailResponse,
    EventResponse,
    ParticipantResponse,
    RSVPResponse,
)
from techcircle.services.events import event_service

from ..dependencies import AccessDep, SessionDep

router = APIRouter(prefix="/events", tags=["events"])


@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(event_data: EventCreate, access: AccessDep, db: SessionDep) -> Event:
    """Create an event; requires a hosting role or admin."""
    return event_service.create_event(db, access, **event_data.model_dump())


@router.get("/{event_id}", response_model=EventDetailResponse)
async def get_event(event_id: str, access: AccessDep, db: SessionDep) -> EventDetailResponse:
    summary = event_service.summarize(db, access, event_id)
    return EventDetailResponse(
        event=EventResponse.model_validate(summary.event),
        rsvp_count=summary.rsvp_count,
        attendee_count=summary.attendee_count,
        rsvped=summary.rsvped,
    )


@router.post("/{event_id}/rsvp", response_model=RSVPResponse, status_code=status.HTTP_201_CREATED)
async def rsvp(event_id: str, access: AccessDep, db: SessionDep) -> EventRSVP:
    return event_service.rsvp(db, access, event_id)


@router.delete("/{event_id}/rsvp", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_rsvp(event_id: str, access: AccessDep, db: SessionDep) -> Response:
    event_service.cancel_rsvp(db, access, event_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{event_id}/participants/{user_id}",
    response_model=ParticipantResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_participant(
    event_id: str,
    user_id: str,
    access: AccessDep,
    db: SessionDep,
) -> EventParticipant:
    """Admin: tag a member as attending."""
    return event_service.add_participant(db, access, event_id, user_id)


@router.delete("/{event_id}/participants/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_participant(
    event_id: str,
    user_id: str,
    access: AccessDep,
    db: SessionDep,
) -> Response:
    event_service.remove_participant(db, access, event_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
