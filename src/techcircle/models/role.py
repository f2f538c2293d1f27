"""Explicit role grants, optionally scoped to a community."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from techcircle.db.session import Base
from techcircle.db.time import utcnow
from techcircle.models.enums import AppRole, text_enum


class RoleAssignment(Base):
    """A user holds the union of all their assignment rows."""

    __tablename__ = "role_assignments"
    __table_args__ = (
        UniqueConstraint("user_id", "role", "community_slug", name="uq_role_assignment"),
        # NULL scopes compare distinct, so unscoped grants need their own index.
        Index(
            "uq_role_assignment_global",
            "user_id",
            "role",
            unique=True,
            sqlite_where=text("community_slug IS NULL"),
            postgresql_where=text("community_slug IS NULL"),
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role: Mapped[AppRole] = mapped_column(text_enum(AppRole, "app_role"), nullable=False)
    community_slug: Mapped[str | None] = mapped_column(
        Text,
        ForeignKey("communities.slug", ondelete="CASCADE"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    profile = relationship("Profile", back_populates="role_assignments")
