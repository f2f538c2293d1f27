"""Admin moderation endpoints for projects, events and approvals."""

from __future__ import annotations

from collections.abc import Sequence

from fastapi import APIRouter, Response, status

from techcircle.models import Event, Profile, Project
from techcircle.schemas.common import BulkIds
from techcircle.schemas.event import EventResponse
from techcircle.schemas.moderation import (
    ApprovalDecision,
    BulkDeleteResponse,
    BulkProjectModeration,
    EventModeration,
    ProjectModeration,
)
from techcircle.schemas.profile import ProfileResponse
from techcircle.schemas.project import ProjectResponse
from techcircle.services.moderation import moderation_service

from ..dependencies import AccessDep, SessionDep

router = APIRouter(prefix="/moderation", tags=["moderation"])


@router.patch("/projects", response_model=list[ProjectResponse])
async def bulk_moderate_projects(
    body: BulkProjectModeration,
    access: AccessDep,
    db: SessionDep,
) -> list[Project]:
    """Apply the same toggles to several projects."""
    changes = body.model_dump(exclude={"ids"})
    return moderation_service.bulk_update_projects(db, access, body.ids, **changes)


@router.delete("/projects", response_model=BulkDeleteResponse)
async def bulk_delete_projects(body: BulkIds, access: AccessDep, db: SessionDep) -> BulkDeleteResponse:
    deleted = moderation_service.bulk_delete_projects(db, access, body.ids)
    return BulkDeleteResponse(deleted=deleted)


@router.patch("/projects/{project_id}", response_model=ProjectResponse)
async def moderate_project(
    project_id: str,
    body: ProjectModeration,
    access: AccessDep,
    db: SessionDep,
) -> Project:
    """Toggle featured, archived or flagged on a project."""
    return moderation_service.update_project_flags(db, access, project_id, **body.model_dump())


@router.delete("/projects/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(project_id: str, access: AccessDep, db: SessionDep) -> Response:
    """Hard-delete a project together with its roster and requests."""
    moderation_service.delete_project(db, access, project_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/events/{event_id}", response_model=EventResponse)
async def moderate_event(
    event_id: str,
    body: EventModeration,
    access: AccessDep,
    db: SessionDep,
) -> Event:
    return moderation_service.update_event_flags(db, access, event_id, **body.model_dump())


@router.delete("/events/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event(event_id: str, access: AccessDep, db: SessionDep) -> Response:
    moderation_service.delete_event(db, access, event_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/approvals", response_model=list[ProfileResponse])
async def list_pending_approvals(access: AccessDep, db: SessionDep) -> Sequence[Profile]:
    return moderation_service.list_pending_profiles(db, access)


@router.post("/approvals/{profile_id}", response_model=ProfileResponse)
async def decide_approval(
    profile_id: str,
    body: ApprovalDecision,
    access: AccessDep,
    db: SessionDep,
) -> Profile:
    """Approve or reject a pending (or previously rejected) profile."""
    return moderation_service.set_approval_status(db, access, profile_id, body.status)
