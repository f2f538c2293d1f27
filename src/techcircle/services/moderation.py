"""Admin-only moderation: entity flags, hard deletes, approvals and roles."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from techcircle.models import (
    AppRole,
    ApprovalStatus,
    Community,
    Event,
    Profile,
    Project,
    RoleAssignment,
)
from techcircle.services.access import AccessContext
from techcircle.services.exceptions import (
    Conflict,
    FlagNoteRequired,
    InvalidRequest,
    NotFound,
    StoreUnavailable,
)
from techcircle.services.session_context import IdentityEvent, SessionContextHub, session_hub

logger = logging.getLogger(__name__)

_UNSET = object()


class ModerationService:
    """Service handling admin toggles and irreversible deletes."""

    def __init__(self, hub: SessionContextHub | None = None) -> None:
        self._hub = hub

    @property
    def hub(self) -> SessionContextHub:
        return self._hub or session_hub

    # Projects

    def update_project_flags(
        self,
        db: Session,
        actor: AccessContext,
        project_id: str,
        *,
        featured: bool | None = None,
        archived: bool | None = None,
        flagged: bool | None = None,
        flagged_note: str | None = None,
    ) -> Project:
        """Apply the given toggles to one project; ``None`` leaves a field alone.

        Raises:
            FlagNoteRequired: When flagging without a non-blank note.
        """
        return self.bulk_update_projects(
            db,
            actor,
            [project_id],
            featured=featured,
            archived=archived,
            flagged=flagged,
            flagged_note=flagged_note,
        )[0]

    def bulk_update_projects(
        self,
        db: Session,
        actor: AccessContext,
        project_ids: Iterable[str],
        *,
        featured: bool | None = None,
        archived: bool | None = None,
        flagged: bool | None = None,
        flagged_note: str | None = None,
    ) -> list[Project]:
        """Apply the same toggles to every project in one transaction."""
        admin_id = actor.require_admin()
        note = _flag_note(flagged, flagged_note)
        projects = self._load_projects(db, project_ids)
        if flagged is None and note is not _UNSET and not all(p.flagged for p in projects):
            raise InvalidRequest("Only flagged projects carry a note.")

        for project in projects:
            if featured is not None:
                project.featured = featured
            if archived is not None:
                project.archived = archived
            if flagged is True:
                project.flagged = True
                project.flagged_note = note
            elif flagged is False:
                project.flagged = False
                project.flagged_note = None
            elif note is not _UNSET:
                project.flagged_note = note

        self._commit(db, "update %d project(s)", len(projects))
        for project in projects:
            db.refresh(project)
        logger.info(
            "Admin %s updated projects %s (featured=%s archived=%s flagged=%s)",
            admin_id,
            [project.id for project in projects],
            featured,
            archived,
            flagged,
        )
        return projects

    def delete_project(self, db: Session, actor: AccessContext, project_id: str) -> None:
        """Hard-delete a project; members and join requests cascade."""
        self.bulk_delete_projects(db, actor, [project_id])

    def bulk_delete_projects(
        self,
        db: Session,
        actor: AccessContext,
        project_ids: Iterable[str],
    ) -> int:
        admin_id = actor.require_admin()
        projects = self._load_projects(db, project_ids)
        ids = [project.id for project in projects]
        try:
            db.execute(delete(Project).where(Project.id.in_(ids)))
            db.commit()
        except SQLAlchemyError as err:
            db.rollback()
            logger.error("Failed to delete projects %s", ids, exc_info=True)
            raise StoreUnavailable() from err
        logger.info("Admin %s deleted projects %s", admin_id, ids)
        return len(ids)

    # Events

    def update_event_flags(
        self,
        db: Session,
        actor: AccessContext,
        event_id: str,
        *,
        is_featured: bool | None = None,
        archived: bool | None = None,
        allow_rsvp: bool | None = None,
    ) -> Event:
        admin_id = actor.require_admin()
        event = self._load_event(db, event_id)
        if is_featured is not None:
            event.is_featured = is_featured
        if archived is not None:
            event.archived = archived
        if allow_rsvp is not None:
            event.allow_rsvp = allow_rsvp
        self._commit(db, "update event %s", event.id)
        db.refresh(event)
        logger.info(
            "Admin %s updated event %s (featured=%s archived=%s allow_rsvp=%s)",
            admin_id,
            event.id,
            is_featured,
            archived,
            allow_rsvp,
        )
        return event

    def delete_event(self, db: Session, actor: AccessContext, event_id: str) -> None:
        """Hard-delete an event; RSVPs and participants cascade."""
        admin_id = actor.require_admin()
        event = self._load_event(db, event_id)
        try:
            db.execute(delete(Event).where(Event.id == event.id))
            db.commit()
        except SQLAlchemyError as err:
            db.rollback()
            logger.error("Failed to delete event %s", event_id, exc_info=True)
            raise StoreUnavailable() from err
        logger.info("Admin %s deleted event %s", admin_id, event_id)

    # Approvals

    @staticmethod
    def list_pending_profiles(db: Session, actor: AccessContext) -> Sequence[Profile]:
        actor.require_admin()
        return db.execute(
            select(Profile)
            .where(Profile.status == ApprovalStatus.PENDING)
            .order_by(Profile.created_at)
        ).scalars().all()

    def set_approval_status(
        self,
        db: Session,
        actor: AccessContext,
        profile_id: str,
        status: ApprovalStatus,
    ) -> Profile:
        """Approve or reject a profile and push the new context to live sessions."""
        admin_id = actor.require_admin()
        status = ApprovalStatus(status)
        if status == ApprovalStatus.PENDING:
            raise InvalidRequest("Choose APPROVED or REJECTED.")
        profile = db.get(Profile, profile_id)
        if profile is None:
            raise NotFound("Profile not found.")

        profile.status = status
        self._commit(db, "set approval for profile %s", profile_id)
        db.refresh(profile)
        logger.info("Admin %s set profile %s to %s", admin_id, profile_id, status.value)
        self.hub.publish(db, IdentityEvent.PROFILE_CHANGED, profile_id)
        return profile

    # Roles

    def assign_role(
        self,
        db: Session,
        actor: AccessContext,
        user_id: str,
        role: AppRole,
        community_slug: str | None = None,
    ) -> RoleAssignment:
        admin_id = actor.require_admin()
        role = AppRole(role)
        if db.get(Profile, user_id) is None:
            raise NotFound("Profile not found.")
        if community_slug is not None and db.get(Community, community_slug) is None:
            raise NotFound("Community not found.")
        if self._find_assignment(db, user_id, role, community_slug) is not None:
            raise Conflict("That role is already assigned.")

        assignment = RoleAssignment(user_id=user_id, role=role, community_slug=community_slug)
        db.add(assignment)
        try:
            db.commit()
        except IntegrityError as err:
            db.rollback()
            raise Conflict("That role is already assigned.") from err
        except SQLAlchemyError as err:
            db.rollback()
            logger.error("Failed to assign %s to %s", role.value, user_id, exc_info=True)
            raise StoreUnavailable() from err
        db.refresh(assignment)
        logger.info(
            "Admin %s assigned %s to %s (community=%s)",
            admin_id,
            role.value,
            user_id,
            community_slug,
        )
        self.hub.publish(db, IdentityEvent.PROFILE_CHANGED, user_id)
        return assignment

    def revoke_role(self, db: Session, actor: AccessContext, assignment_id: str) -> None:
        admin_id = actor.require_admin()
        assignment = db.get(RoleAssignment, assignment_id)
        if assignment is None:
            raise NotFound("Role assignment not found.")
        user_id, role = assignment.user_id, assignment.role
        try:
            db.execute(delete(RoleAssignment).where(RoleAssignment.id == assignment_id))
            db.commit()
        except SQLAlchemyError as err:
            db.rollback()
            logger.error("Failed to revoke assignment %s", assignment_id, exc_info=True)
            raise StoreUnavailable() from err
        logger.info("Admin %s revoked %s from %s", admin_id, role.value, user_id)
        self.hub.publish(db, IdentityEvent.PROFILE_CHANGED, user_id)

    @staticmethod
    def list_assignments(db: Session, actor: AccessContext, user_id: str) -> Sequence[RoleAssignment]:
        actor.require_admin()
        return db.execute(
            select(RoleAssignment)
            .where(RoleAssignment.user_id == user_id)
            .order_by(RoleAssignment.created_at)
        ).scalars().all()

    # Helpers

    @staticmethod
    def _find_assignment(
        db: Session,
        user_id: str,
        role: AppRole,
        community_slug: str | None,
    ) -> RoleAssignment | None:
        scope = (
            RoleAssignment.community_slug.is_(None)
            if community_slug is None
            else RoleAssignment.community_slug == community_slug
        )
        return db.execute(
            select(RoleAssignment).where(
                RoleAssignment.user_id == user_id,
                RoleAssignment.role == role,
                scope,
            )
        ).scalars().first()

    @staticmethod
    def _load_projects(db: Session, project_ids: Iterable[str]) -> list[Project]:
        ids = list(dict.fromkeys(project_ids))
        if not ids:
            raise InvalidRequest("Select at least one project.")
        found = {
            project.id: project
            for project in db.execute(select(Project).where(Project.id.in_(ids))).scalars()
        }
        missing = [project_id for project_id in ids if project_id not in found]
        if missing:
            raise NotFound(f"Project not found: {', '.join(missing)}")
        return [found[project_id] for project_id in ids]

    @staticmethod
    def _load_event(db: Session, event_id: str) -> Event:
        event = db.get(Event, event_id)
        if event is None:
            raise NotFound("Event not found.")
        return event

    @staticmethod
    def _commit(db: Session, what: str, *args: object) -> None:
        try:
            db.commit()
        except SQLAlchemyError as err:
            db.rollback()
            logger.error("Failed to " + what, *args, exc_info=True)
            raise StoreUnavailable() from err


def _flag_note(flagged: bool | None, note: str | None):
    """Validate the note that accompanies a flag change.

    Returns the cleaned note, or ``_UNSET`` when no note change is requested.
    """
    cleaned = note.strip() if note is not None else None
    if flagged is True and not cleaned:
        raise FlagNoteRequired()
    if flagged is None and note is not None and not cleaned:
        raise FlagNoteRequired()
    if flagged is None and note is None:
        return _UNSET
    return cleaned


moderation_service = ModerationService()
