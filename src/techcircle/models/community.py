"""Community reference table used for grouping profiles, projects and events."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column

from techcircle.db.session import Base
from techcircle.db.time import utcnow


class Community(Base):
    """A chapter or interest group identified by a stable slug."""

    __tablename__ = "communities"

    slug: Mapped[str] = mapped_column(Text, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
