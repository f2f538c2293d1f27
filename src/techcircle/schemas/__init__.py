"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .buddy import BuddyRelationResponse, RelationView
from .common import BulkIds, CountResponse, ErrorResponse
from .event import EventCreate, EventDetailResponse, EventResponse
from .moderation import ApprovalDecision, EventModeration, ProjectModeration
from .profile import AccessContextResponse, ProfileCreate, ProfileResponse, ProfileUpdate
from .project import JoinRequestCreate, JoinRequestResponse, ProjectCreate, ProjectResponse
from .role import RoleAssignmentCreate, RoleAssignmentResponse

__all__ = [
    "BuddyRelationResponse", "RelationView",
    "BulkIds", "CountResponse", "ErrorResponse",
    "EventCreate", "EventDetailResponse", "EventResponse",
    "ApprovalDecision", "EventModeration", "ProjectModeration",
    "AccessContextResponse", "ProfileCreate", "ProfileResponse", "ProfileUpdate",
    "JoinRequestCreate", "JoinRequestResponse", "ProjectCreate", "ProjectResponse",
    "RoleAssignmentCreate", "RoleAssignmentResponse",
]
