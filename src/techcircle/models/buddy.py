"""Tech-buddy peer connections between two profiles."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
    event,
)
from sqlalchemy.orm import Mapped, mapped_column

from techcircle.db.session import Base
from techcircle.db.time import utcnow
from techcircle.models.enums import BuddyStatus, text_enum


def normalized_pair(user_a: str, user_b: str) -> tuple[str, str]:
    """Return the two ids ordered so that (A, B) and (B, A) share a key."""
    return (user_a, user_b) if user_a <= user_b else (user_b, user_a)


class BuddyRelation(Base):
    """One row per unordered pair; direction matters only while PENDING.

    ``pair_low``/``pair_high`` are derived from the requester and recipient
    on every write and carry the uniqueness constraint, so two simultaneous
    opposite-direction requests cannot both land.
    """

    __tablename__ = "tech_buddies"
    __table_args__ = (
        UniqueConstraint("pair_low", "pair_high", name="uq_tech_buddies_pair"),
        CheckConstraint("pair_low < pair_high", name="ck_tech_buddies_distinct_pair"),
        CheckConstraint("requester_id <> recipient_id", name="ck_tech_buddies_not_self"),
        Index("ix_tech_buddies_requester_status", "requester_id", "status"),
        Index("ix_tech_buddies_recipient_status", "recipient_id", "status"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    requester_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    recipient_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    status: Mapped[BuddyStatus] = mapped_column(
        text_enum(BuddyStatus, "tech_buddy_status"),
        nullable=False,
        default=BuddyStatus.PENDING,
    )
    pair_low: Mapped[str] = mapped_column(String(36), nullable=False)
    pair_high: Mapped[str] = mapped_column(String(36), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )

    def involves(self, user_id: str) -> bool:
        return user_id in (self.requester_id, self.recipient_id)

    def other_party(self, user_id: str) -> str:
        return self.recipient_id if user_id == self.requester_id else self.requester_id


@event.listens_for(BuddyRelation, "before_insert")
@event.listens_for(BuddyRelation, "before_update")
def _stamp_pair(_mapper, _connection, target: BuddyRelation) -> None:
    target.pair_low, target.pair_high = normalized_pair(target.requester_id, target.recipient_id)
