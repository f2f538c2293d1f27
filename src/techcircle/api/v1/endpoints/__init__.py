"""API endpoint modules for version 1."""

from .buddies import router as buddies_router
from .events import router as events_router
from .moderation import router as moderation_router
from .profiles import router as profiles_router
from .projects import router as projects_router
from .roles import router as roles_router

__all__ = [
    "buddies_router",
    "events_router",
    "moderation_router",
    "profiles_router",
    "projects_router",
    "roles_router",
]
