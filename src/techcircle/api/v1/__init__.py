"""Version 1 API endpoints."""

from .endpoints import (
    buddies_router,
    events_router,
    moderation_router,
    profiles_router,
    projects_router,
    roles_router,
)

__all__ = [
    "buddies_router",
    "events_router",
    "moderation_router",
    "profiles_router",
    "projects_router",
    "roles_router",
]
