"""Event hosting, self-service RSVPs and the admin participant roster."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import delete, func, select, union
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from techcircle.models import Community, Event, EventParticipant, EventRSVP, Profile
from techcircle.services.access import AccessContext
from techcircle.services.exceptions import (
    Conflict,
    Forbidden,
    InvalidRequest,
    NotFound,
    StoreUnavailable,
)
from techcircle.services.roles import RoleResolver, role_resolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EventSummary:
    event: Event
    rsvp_count: int
    attendee_count: int
    rsvped: bool


class EventService:
    def __init__(self, resolver: RoleResolver | None = None) -> None:
        self._resolver = resolver

    @property
    def resolver(self) -> RoleResolver:
        return self._resolver or role_resolver

    def create_event(
        self,
        db: Session,
        actor: AccessContext,
        *,
        title: str,
        summary: str | None = None,
        host: str | None = None,
        community_slug: str | None = None,
        start_at: datetime | None = None,
        end_at: datetime | None = None,
        tba: bool = False,
        location: str | None = None,
        capacity: int | None = None,
        allow_rsvp: bool = True,
    ) -> Event:
        """Create an event; the caller must be an admin or hold a hosting role."""
        me = actor.require_member()
        if not actor.is_admin and not self.resolver.can_host_events(db, me):
            logger.warning("User %s tried to create an event without hosting rights", me)
            raise Forbidden("Only secretaries and admins can host events.")

        title = (title or "").strip()
        if not title:
            raise InvalidRequest("An event needs a title.")
        if not tba and start_at is None:
            raise InvalidRequest("Set a start time or mark the event as TBA.")
        if start_at is not None and end_at is not None and end_at < start_at:
            raise InvalidRequest("An event cannot end before it starts.")
        if community_slug is not None and db.get(Community, community_slug) is None:
            raise NotFound("Community not found.")

        event = Event(
            title=title,
            summary=summary,
            host=host,
            community_slug=community_slug,
            start_at=start_at,
            end_at=end_at,
            tba=tba,
            location=location,
            capacity=capacity,
            allow_rsvp=allow_rsvp,
            created_by=me,
        )
        event.refresh_status()
        db.add(event)
        try:
            db.commit()
        except SQLAlchemyError as err:
            db.rollback()
            logger.error("Failed to create event %r", title, exc_info=True)
            raise StoreUnavailable() from err
        db.refresh(event)
        logger.info("Event %s created by %s", event.id, me)
        return event

    @staticmethod
    def get_event(db: Session, event_id: str) -> Event:
        event = db.get(Event, event_id)
        if event is None:
            raise NotFound("Event not found.")
        return event

    def summarize(self, db: Session, actor: AccessContext, event_id: str) -> EventSummary:
        """Event detail with derived status and attendance counts."""
        me = actor.require_member()
        event = self.get_event(db, event_id)
        event.refresh_status()

        rsvp_count = db.execute(
            select(func.count()).select_from(EventRSVP).where(EventRSVP.event_id == event.id)
        ).scalar_one()
        attendees = union(
            select(EventRSVP.user_id).where(EventRSVP.event_id == event.id),
            select(EventParticipant.user_id).where(EventParticipant.event_id == event.id),
        ).subquery()
        attendee_count = db.execute(select(func.count()).select_from(attendees)).scalar_one()

        return EventSummary(
            event=event,
            rsvp_count=int(rsvp_count),
            attendee_count=int(attendee_count),
            rsvped=self._has_rsvp(db, event.id, me),
        )

    def rsvp(self, db: Session, actor: AccessContext, event_id: str) -> EventRSVP:
        me = actor.require_member()
        event = self.get_event(db, event_id)
        if event.archived or not event.allow_rsvp:
            raise InvalidRequest("RSVPs are closed for this event.", reason="rsvp_closed")
        if self._has_rsvp(db, event.id, me):
            raise Conflict("You already RSVPed to this event.")

        record = EventRSVP(event_id=event.id, user_id=me)
        db.add(record)
        try:
            db.commit()
        except IntegrityError as err:
            db.rollback()
            raise Conflict("You already RSVPed to this event.") from err
        except SQLAlchemyError as err:
            db.rollback()
            logger.error("Failed to store RSVP for event %s", event.id, exc_info=True)
            raise StoreUnavailable() from err
        db.refresh(record)
        logger.info("User %s RSVPed to event %s", me, event.id)
        return record

    def cancel_rsvp(self, db: Session, actor: AccessContext, event_id: str) -> None:
        me = actor.require_member()
        event = self.get_event(db, event_id)
        if event.archived or not event.allow_rsvp:
            raise InvalidRequest("RSVPs are closed for this event.", reason="rsvp_closed")
        stmt = delete(EventRSVP).where(EventRSVP.event_id == event.id, EventRSVP.user_id == me)
        if self._delete(db, stmt, "RSVP for event %s", event.id) == 0:
            raise NotFound("You have not RSVPed to this event.")
        logger.info("User %s withdrew RSVP from event %s", me, event.id)

    def add_participant(
        self,
        db: Session,
        actor: AccessContext,
        event_id: str,
        user_id: str,
    ) -> EventParticipant:
        """Tag ``user_id`` as an attendee regardless of their own RSVP."""
        admin_id = actor.require_admin()
        event = self.get_event(db, event_id)
        if db.get(Profile, user_id) is None:
            raise NotFound("That member does not exist.")

        participant = EventParticipant(event_id=event.id, user_id=user_id, added_by=admin_id)
        db.add(participant)
        try:
            db.commit()
        except IntegrityError as err:
            db.rollback()
            raise Conflict("That member is already on the roster.") from err
        except SQLAlchemyError as err:
            db.rollback()
            logger.error("Failed to add participant to event %s", event.id, exc_info=True)
            raise StoreUnavailable() from err
        db.refresh(participant)
        logger.info("Admin %s added %s to event %s", admin_id, user_id, event.id)
        return participant

    def remove_participant(
        self,
        db: Session,
        actor: AccessContext,
        event_id: str,
        user_id: str,
    ) -> None:
        admin_id = actor.require_admin()
        event = self.get_event(db, event_id)
        stmt = delete(EventParticipant).where(
            EventParticipant.event_id == event.id,
            EventParticipant.user_id == user_id,
        )
        if self._delete(db, stmt, "participant for event %s", event.id) == 0:
            raise NotFound("That member is not on the roster.")
        logger.info("Admin %s removed %s from event %s", admin_id, user_id, event.id)

    @staticmethod
    def _has_rsvp(db: Session, event_id: str, user_id: str) -> bool:
        return (
            db.execute(
                select(EventRSVP.id).where(
                    EventRSVP.event_id == event_id,
                    EventRSVP.user_id == user_id,
                )
            ).first()
            is not None
        )

    @staticmethod
    def _delete(db: Session, stmt, what: str, *args: object) -> int:
        try:
            result = db.execute(stmt)
            db.commit()
        except SQLAlchemyError as err:
            db.rollback()
            logger.error("Failed to delete " + what, *args, exc_info=True)
            raise StoreUnavailable() from err
        return result.rowcount


event_service = EventService()
