"""Project collaboration engine: roster, recruiting flag and join requests."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from techcircle.db.time import utcnow
from techcircle.models import (
    Community,
    JoinRequest,
    JoinStatus,
    Project,
    ProjectMember,
    ProjectStatus,
)
from techcircle.models.project import PROJECT_ROLE_MEMBER, PROJECT_ROLE_OWNER
from techcircle.services.access import AccessContext
from techcircle.services.exceptions import (
    AlreadyHandled,
    AlreadyMember,
    DuplicateJoinRequest,
    Forbidden,
    InvalidRequest,
    NotFound,
    NotRecruiting,
    StoreUnavailable,
)

logger = logging.getLogger(__name__)

DEFAULT_LOOKING_FOR = "Open to collaborators"


def _clean(text: str | None) -> str | None:
    if text is None:
        return None
    text = text.strip()
    return text or None


class ProjectService:
    """Owner-driven project workflows."""

    def create_project(
        self,
        db: Session,
        actor: AccessContext,
        *,
        title: str,
        summary: str | None = None,
        status: ProjectStatus = ProjectStatus.INCUBATION,
        community_slug: str | None = None,
        tech_stack: Sequence[str] = (),
        github_url: str | None = None,
        drive_url: str | None = None,
        recruiting: bool = False,
        looking_for: str | None = None,
    ) -> Project:
        """Create a project and its owner roster row in one transaction."""
        me = actor.require_member()
        title = _clean(title)
        if not title:
            raise InvalidRequest("A project needs a title.")
        if community_slug is not None and db.get(Community, community_slug) is None:
            raise NotFound("Community not found.")

        project = Project(
            title=title,
            summary=summary,
            status=status,
            owner_id=me,
            community_slug=community_slug,
            tech_stack=[item.strip() for item in tech_stack if item and item.strip()],
            github_url=github_url,
            drive_url=drive_url,
            looking_for=(_clean(looking_for) or DEFAULT_LOOKING_FOR) if recruiting else None,
        )
        db.add(project)
        try:
            db.flush()
            self._add_member(db, project.id, me, PROJECT_ROLE_OWNER)
            db.commit()
        except SQLAlchemyError as err:
            db.rollback()
            logger.error("Failed to create project %r for %s", title, me, exc_info=True)
            raise StoreUnavailable() from err
        db.refresh(project)
        logger.info("Project %s created by %s", project.id, me)
        return project

    @staticmethod
    def get_project(db: Session, project_id: str) -> Project:
        project = db.get(Project, project_id)
        if project is None:
            raise NotFound("Project not found.")
        return project

    @staticmethod
    def _require_owner(project: Project, user_id: str, action: str) -> None:
        if project.owner_id != user_id:
            logger.warning("User %s tried to %s project %s without owning it", user_id, action, project.id)
            raise Forbidden("Only the project owner can do that.")

    def update_status(
        self,
        db: Session,
        actor: AccessContext,
        project_id: str,
        status: ProjectStatus,
    ) -> Project:
        me = actor.require_member()
        project = self.get_project(db, project_id)
        self._require_owner(project, me, "change the status of")
        project.status = ProjectStatus(status)
        self._commit(db, "update status of project %s", project.id)
        db.refresh(project)
        return project

    def set_looking_for(
        self,
        db: Session,
        actor: AccessContext,
        project_id: str,
        looking_for: str | None,
    ) -> Project:
        """Open recruiting with stated qualifications, or close it with ``None``."""
        me = actor.require_member()
        project = self.get_project(db, project_id)
        self._require_owner(project, me, "change recruiting on")
        if looking_for is not None and not _clean(looking_for):
            raise InvalidRequest("Please add the qualifications you are looking for.")
        project.looking_for = _clean(looking_for)
        self._commit(db, "update recruiting on project %s", project.id)
        db.refresh(project)
        logger.info(
            "Project %s recruiting %s",
            project.id,
            "opened" if project.is_recruiting else "closed",
        )
        return project

    def open_request(
        self,
        db: Session,
        actor: AccessContext,
        project_id: str,
        message: str,
    ) -> JoinRequest:
        """File a PENDING join request for the caller."""
        me = actor.require_member()
        project = self.get_project(db, project_id)
        if not project.is_recruiting:
            raise NotRecruiting()
        if project.owner_id == me:
            raise InvalidRequest("You already own this project.")
        message = _clean(message)
        if not message:
            raise InvalidRequest("Please include a short message.")
        if self.is_member(db, project.id, me):
            raise AlreadyMember()
        if self._pending_request(db, project.id, me) is not None:
            raise DuplicateJoinRequest()

        request = JoinRequest(project_id=project.id, requester_id=me, message=message)
        db.add(request)
        try:
            db.commit()
        except IntegrityError as err:
            db.rollback()
            raise DuplicateJoinRequest() from err
        except SQLAlchemyError as err:
            db.rollback()
            logger.error("Failed to store join request for project %s", project.id, exc_info=True)
            raise StoreUnavailable() from err
        db.refresh(request)
        logger.info("Join request %s opened by %s for project %s", request.id, me, project.id)
        return request

    def approve(self, db: Session, actor: AccessContext, request_id: str) -> JoinRequest:
        """Approve a request and add the requester to the roster atomically."""
        me = actor.require_member()
        request, project = self._load_for_owner(db, request_id, me, "approve requests for")
        if request.status != JoinStatus.PENDING:
            raise AlreadyHandled("This request was already answered.")

        try:
            result = db.execute(
                update(JoinRequest)
                .where(JoinRequest.id == request.id, JoinRequest.status == JoinStatus.PENDING)
                .values(status=JoinStatus.APPROVED, updated_at=utcnow())
            )
            if result.rowcount == 0:
                db.rollback()
                raise AlreadyHandled("This request was already answered.")
            if not self.is_member(db, project.id, request.requester_id):
                self._add_member(db, project.id, request.requester_id, PROJECT_ROLE_MEMBER)
            db.commit()
        except SQLAlchemyError as err:
            db.rollback()
            logger.error("Approving join request %s failed; rolled back", request_id, exc_info=True)
            raise StoreUnavailable() from err

        db.refresh(request)
        logger.info("Join request %s approved by %s", request.id, me)
        return request

    def reject(self, db: Session, actor: AccessContext, request_id: str) -> JoinRequest:
        me = actor.require_member()
        request, _project = self._load_for_owner(db, request_id, me, "reject requests for")
        if request.status != JoinStatus.PENDING:
            raise AlreadyHandled("This request was already answered.")
        try:
            result = db.execute(
                update(JoinRequest)
                .where(JoinRequest.id == request.id, JoinRequest.status == JoinStatus.PENDING)
                .values(status=JoinStatus.REJECTED, updated_at=utcnow())
            )
            if result.rowcount == 0:
                db.rollback()
                raise AlreadyHandled("This request was already answered.")
            db.commit()
        except SQLAlchemyError as err:
            db.rollback()
            logger.error("Rejecting join request %s failed", request_id, exc_info=True)
            raise StoreUnavailable() from err
        db.refresh(request)
        logger.info("Join request %s rejected by %s", request.id, me)
        return request

    def list_members(self, db: Session, project_id: str) -> Sequence[ProjectMember]:
        self.get_project(db, project_id)
        return db.execute(
            select(ProjectMember)
            .where(ProjectMember.project_id == project_id)
            .order_by(ProjectMember.created_at)
        ).scalars().all()

    def list_pending_requests(
        self,
        db: Session,
        actor: AccessContext,
        project_id: str,
    ) -> Sequence[JoinRequest]:
        me = actor.require_member()
        project = self.get_project(db, project_id)
        if not actor.is_admin:
            self._require_owner(project, me, "view requests for")
        return db.execute(
            select(JoinRequest)
            .where(JoinRequest.project_id == project_id, JoinRequest.status == JoinStatus.PENDING)
            .order_by(JoinRequest.created_at)
        ).scalars().all()

    @staticmethod
    def is_member(db: Session, project_id: str, user_id: str) -> bool:
        return (
            db.execute(
                select(ProjectMember.id).where(
                    ProjectMember.project_id == project_id,
                    ProjectMember.user_id == user_id,
                )
            ).first()
            is not None
        )

    @staticmethod
    def _pending_request(db: Session, project_id: str, user_id: str) -> JoinRequest | None:
        return db.execute(
            select(JoinRequest).where(
                JoinRequest.project_id == project_id,
                JoinRequest.requester_id == user_id,
                JoinRequest.status == JoinStatus.PENDING,
            )
        ).scalars().first()

    @staticmethod
    def _add_member(db: Session, project_id: str, user_id: str, role: str) -> ProjectMember:
        member = ProjectMember(project_id=project_id, user_id=user_id, role=role)
        db.add(member)
        db.flush()
        return member

    def _load_for_owner(
        self,
        db: Session,
        request_id: str,
        me: str,
        action: str,
    ) -> tuple[JoinRequest, Project]:
        request = db.get(JoinRequest, request_id)
        if request is None:
            raise NotFound("Join request not found.")
        project = self.get_project(db, request.project_id)
        self._require_owner(project, me, action)
        return request, project

    @staticmethod
    def _commit(db: Session, what: str, *args: object) -> None:
        try:
            db.commit()
        except SQLAlchemyError as err:
            db.rollback()
            logger.error("Failed to " + what, *args, exc_info=True)
            raise StoreUnavailable() from err


project_service = ProjectService()
