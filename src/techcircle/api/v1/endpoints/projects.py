"""Project collaboration endpoints."""

from __future__ import annotations

from collections.abc import Sequence

from fastapi import APIRouter, status

from techcircle.models import JoinRequest, Project, ProjectMember
from techcircle.schemas.project import (
    JoinRequestCreate,
    JoinRequestResponse,
    LookingForUpdate,
    MemberResponse,
    ProjectCreate,
    ProjectResponse,
    StatusUpdate,
)
from techcircle.services.projects import project_service

from ..dependencies import AccessDep, SessionDep

router = APIRouter(prefix="/projects", tags=["projects"])


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    project_data: ProjectCreate,
    access: AccessDep,
    db: SessionDep,
) -> Project:
    """Create a project owned by the caller."""
    return project_service.create_project(db, access, **project_data.model_dump())


@router.post("/join-requests/{request_id}/approve", response_model=JoinRequestResponse)
async def approve_join_request(request_id: str, access: AccessDep, db: SessionDep) -> JoinRequest:
    """Approve a request and add the requester to the roster."""
    return project_service.approve(db, access, request_id)


@router.post("/join-requests/{request_id}/reject", response_model=JoinRequestResponse)
async def reject_join_request(request_id: str, access: AccessDep, db: SessionDep) -> JoinRequest:
    return project_service.reject(db, access, request_id)


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(project_id: str, access: AccessDep, db: SessionDep) -> Project:
    access.require_member()
    return project_service.get_project(db, project_id)


@router.get("/{project_id}/members", response_model=list[MemberResponse])
async def list_members(
    project_id: str,
    access: AccessDep,
    db: SessionDep,
) -> Sequence[ProjectMember]:
    access.require_member()
    return project_service.list_members(db, project_id)


@router.patch("/{project_id}/status", response_model=ProjectResponse)
async def update_status(
    project_id: str,
    body: StatusUpdate,
    access: AccessDep,
    db: SessionDep,
) -> Project:
    return project_service.update_status(db, access, project_id, body.status)


@router.put("/{project_id}/looking-for", response_model=ProjectResponse)
async def set_looking_for(
    project_id: str,
    body: LookingForUpdate,
    access: AccessDep,
    db: SessionDep,
) -> Project:
    """Open recruiting with the given text, or close it with null."""
    return project_service.set_looking_for(db, access, project_id, body.looking_for)


@router.post(
    "/{project_id}/join-requests",
    response_model=JoinRequestResponse,
    status_code=status.HTTP_201_CREATED,
)
async def open_join_request(
    project_id: str,
    body: JoinRequestCreate,
    access: AccessDep,
    db: SessionDep,
) -> JoinRequest:
    return project_service.open_request(db, access, project_id, body.message)


@router.get("/{project_id}/join-requests", response_model=list[JoinRequestResponse])
async def list_join_requests(
    project_id: str,
    access: AccessDep,
    db: SessionDep,
) -> Sequence[JoinRequest]:
    """Pending requests for a project; visible to its owner."""
    return project_service.list_pending_requests(db, access, project_id)
