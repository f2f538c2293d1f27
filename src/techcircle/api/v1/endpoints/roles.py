"""Admin role assignment endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Response, status

from techcircle.models import RoleAssignment
from techcircle.schemas.role import (
    RoleAssignmentCreate,
    RoleAssignmentResponse,
    UserRolesResponse,
)
from techcircle.services.moderation import moderation_service
from techcircle.services.roles import role_resolver

from ..dependencies import AccessDep, SessionDep

router = APIRouter(prefix="/roles", tags=["roles"])


@router.post("", response_model=RoleAssignmentResponse, status_code=status.HTTP_201_CREATED)
async def assign_role(
    body: RoleAssignmentCreate,
    access: AccessDep,
    db: SessionDep,
) -> RoleAssignment:
    return moderation_service.assign_role(db, access, body.user_id, body.role, body.community_slug)


@router.delete("/{assignment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def revoke_role(assignment_id: str, access: AccessDep, db: SessionDep) -> Response:
    moderation_service.revoke_role(db, access, assignment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/users/{user_id}", response_model=UserRolesResponse)
async def user_roles(user_id: str, access: AccessDep, db: SessionDep) -> UserRolesResponse:
    """Explicit assignments for a user and the capabilities they resolve to."""
    assignments = moderation_service.list_assignments(db, access, user_id)
    return UserRolesResponse(
        user_id=user_id,
        assignments=[RoleAssignmentResponse.model_validate(a) for a in assignments],
        roles=sorted(role_resolver.roles_for(db, user_id), key=lambda role: role.value),
        is_admin=role_resolver.is_admin(db, user_id),
        can_host_events=role_resolver.can_host_events(db, user_id),
    )
