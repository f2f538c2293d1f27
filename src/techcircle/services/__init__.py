"""Business logic services for the TechCircle application."""

from .access import AccessContext, resolve_access
from .buddies import BuddyService, RelationState, relation_state
from .events import EventService, EventSummary
from .moderation import ModerationService
from .projects import ProjectService
from .roles import RoleResolver
from .session_context import IdentityEvent, SessionContextHub

__all__ = [
    "AccessContext", "resolve_access",
    "BuddyService", "RelationState", "relation_state",
    "EventService", "EventSummary",
    "ModerationService",
    "ProjectService",
    "RoleResolver",
    "IdentityEvent", "SessionContextHub",
]
