"""Member profiles keyed by the identity provider's account id."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from techcircle.db.session import Base
from techcircle.db.time import utcnow
from techcircle.models.enums import ApprovalStatus, text_enum


class Profile(Base):
    """One row per account; ``status`` drives the approval gate."""

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str | None] = mapped_column(Text, nullable=True)
    degree: Mapped[str | None] = mapped_column(Text, nullable=True)
    specialization: Mapped[str | None] = mapped_column(Text, nullable=True)
    community_slug: Mapped[str | None] = mapped_column(
        Text,
        ForeignKey("communities.slug", ondelete="SET NULL"),
        nullable=True,
    )
    phone: Mapped[str | None] = mapped_column(Text, nullable=True)
    linkedin_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    github_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[ApprovalStatus] = mapped_column(
        text_enum(ApprovalStatus, "user_status"),
        nullable=False,
        default=ApprovalStatus.PENDING,
        index=True,
    )
    # Legacy single-role field predating role_assignments.
    role: Mapped[str | None] = mapped_column(Text, nullable=True)
    must_change_password: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )

    role_assignments = relationship(
        "RoleAssignment",
        back_populates="profile",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def is_approved(self) -> bool:
        return self.status == ApprovalStatus.APPROVED
