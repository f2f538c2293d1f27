"""Tech-buddy endpoints."""

from __future__ import annotations

from collections.abc import Sequence

from fastapi import APIRouter, Response, status

from techcircle.models import BuddyRelation
from techcircle.schemas.buddy import BuddyRelationResponse, RelationView
from techcircle.schemas.common import CountResponse
from techcircle.services.buddies import buddy_service, relation_state

from ..dependencies import AccessDep, SessionDep

router = APIRouter(prefix="/buddies", tags=["buddies"])


@router.get("", response_model=list[BuddyRelationResponse])
async def list_buddies(access: AccessDep, db: SessionDep) -> Sequence[BuddyRelation]:
    """List the caller's accepted buddy relations."""
    me = access.require_member()
    return buddy_service.list_accepted(db, me)


@router.get("/incoming", response_model=list[BuddyRelationResponse])
async def list_incoming(access: AccessDep, db: SessionDep) -> Sequence[BuddyRelation]:
    me = access.require_member()
    return buddy_service.list_incoming(db, me)


@router.get("/incoming/count", response_model=CountResponse)
async def count_incoming(access: AccessDep, db: SessionDep) -> CountResponse:
    """Pending requests addressed to the caller, recomputed on every call."""
    me = access.require_member()
    return CountResponse(count=buddy_service.count_incoming(db, me))


@router.get("/outgoing", response_model=list[BuddyRelationResponse])
async def list_outgoing(access: AccessDep, db: SessionDep) -> Sequence[BuddyRelation]:
    me = access.require_member()
    return buddy_service.list_outgoing(db, me)


@router.get("/relation/{other_id}", response_model=RelationView)
async def get_relation(other_id: str, access: AccessDep, db: SessionDep) -> RelationView:
    """Return the relation with another member as seen from the caller's side."""
    me = access.require_member()
    relation = buddy_service.lookup(db, me, other_id)
    return RelationView(
        other_id=other_id,
        state=relation_state(relation, me),
        relation=BuddyRelationResponse.model_validate(relation) if relation else None,
    )


@router.post(
    "/requests/{other_id}",
    response_model=BuddyRelationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def send_request(other_id: str, access: AccessDep, db: SessionDep) -> BuddyRelation:
    return buddy_service.send_request(db, access, other_id)


@router.delete("/requests/{other_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_request(other_id: str, access: AccessDep, db: SessionDep) -> Response:
    """Withdraw the caller's pending request."""
    buddy_service.cancel(db, access, other_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{relation_id}/accept", response_model=BuddyRelationResponse)
async def accept_request(relation_id: str, access: AccessDep, db: SessionDep) -> BuddyRelation:
    return buddy_service.accept(db, access, relation_id)


@router.post("/{relation_id}/reject", response_model=BuddyRelationResponse)
async def reject_request(relation_id: str, access: AccessDep, db: SessionDep) -> BuddyRelation:
    return buddy_service.reject(db, access, relation_id)


@router.delete("/{other_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_buddy(other_id: str, access: AccessDep, db: SessionDep) -> Response:
    """End an accepted relation with another member."""
    buddy_service.remove(db, access, other_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
