"""Events and their two independent attendance records."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from techcircle.db.session import Base
from techcircle.db.time import utcnow
from techcircle.models.enums import EventStatus, text_enum


def _uuid() -> str:
    return str(uuid.uuid4())


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    return value if value.tzinfo else value.replace(tzinfo=UTC)


def compute_event_status(
    start_at: datetime | None,
    end_at: datetime | None,
    tba: bool,
    now: datetime | None = None,
) -> EventStatus:
    """Derive an event's status from its schedule.

    A TBA or unscheduled event is always upcoming. Without an explicit end
    the event is treated as finishing at its start time.
    """
    if tba or start_at is None:
        return EventStatus.UPCOMING
    now = _as_utc(now or utcnow())
    start = _as_utc(start_at)
    end = _as_utc(end_at) if end_at is not None else start
    if now < start:
        return EventStatus.UPCOMING
    if now <= end:
        return EventStatus.LIVE
    return EventStatus.PAST


class Event(Base):
    """A scheduled community event."""

    __tablename__ = "events"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    host: Mapped[str | None] = mapped_column(Text, nullable=True)
    community_slug: Mapped[str | None] = mapped_column(
        Text,
        ForeignKey("communities.slug", ondelete="SET NULL"),
        nullable=True,
    )
    start_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    end_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    tba: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    location: Mapped[str | None] = mapped_column(Text, nullable=True)
    capacity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[EventStatus] = mapped_column(
        text_enum(EventStatus, "event_status"),
        nullable=False,
        default=EventStatus.UPCOMING,
        index=True,
    )
    allow_rsvp: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_by: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )

    rsvps = relationship(
        "EventRSVP",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    participants = relationship(
        "EventParticipant",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def refresh_status(self, now: datetime | None = None) -> EventStatus:
        self.status = compute_event_status(self.start_at, self.end_at, self.tba, now)
        return self.status


class EventRSVP(Base):
    """Self-service attendance opt-in."""

    __tablename__ = "event_rsvps"
    __table_args__ = (UniqueConstraint("event_id", "user_id", name="uq_event_rsvps_user"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    event_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class EventParticipant(Base):
    """Moderator-curated roster tag, independent of the user's RSVP."""

    __tablename__ = "event_participants"
    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="uq_event_participants_user"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    event_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    added_by: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
