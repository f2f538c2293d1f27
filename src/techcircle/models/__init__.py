"""SQLAlchemy models for the TechCircle service."""

from .buddy import BuddyRelation
from .community import Community
from .enums import (
    AppRole,
    ApprovalStatus,
    BuddyStatus,
    EventStatus,
    JoinStatus,
    ProjectStatus,
)
from .event import Event, EventParticipant, EventRSVP
from .profile import Profile
from .project import JoinRequest, Project, ProjectMember
from .role import RoleAssignment

__all__ = [
    "AppRole", "ApprovalStatus", "BuddyStatus", "EventStatus", "JoinStatus", "ProjectStatus",
    "BuddyRelation",
    "Community",
    "Event", "EventParticipant", "EventRSVP",
    "Profile",
    "JoinRequest", "Project", "ProjectMember",
    "RoleAssignment",
]
