"""Enumerated status and role values persisted as upper/lower-case text."""

from __future__ import annotations

import enum

from sqlalchemy import Enum as SAEnum


class ApprovalStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class AppRole(str, enum.Enum):
    ADMIN = "admin"
    COORDINATOR = "coordinator"
    ASSISTANT_COORDINATOR = "assistant_coordinator"
    SECRETARY = "secretary"
    JOINT_SECRETARY = "joint_secretary"
    MEMBER = "member"


class BuddyStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    # Reserved; no operation transitions into it.
    BLOCKED = "BLOCKED"


class JoinStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class ProjectStatus(str, enum.Enum):
    INCUBATION = "INCUBATION"
    PRODUCTION = "PRODUCTION"
    STARTUP = "STARTUP"
    RESEARCH = "RESEARCH"


class EventStatus(str, enum.Enum):
    UPCOMING = "UPCOMING"
    LIVE = "LIVE"
    PAST = "PAST"


HOST_ROLES: frozenset[AppRole] = frozenset(
    {AppRole.SECRETARY, AppRole.JOINT_SECRETARY, AppRole.ADMIN}
)


def text_enum(enum_cls: type[enum.Enum], name: str) -> SAEnum:
    """Store an enum by value as plain text so read sites can compare literals."""
    return SAEnum(
        enum_cls,
        name=name,
        native_enum=False,
        create_constraint=True,
        validate_strings=True,
        length=32,
        values_callable=lambda members: [member.value for member in members],
    )
