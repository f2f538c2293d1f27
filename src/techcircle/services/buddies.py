"""Tech-buddy relationship engine.

State per unordered pair of members::

    NONE --send--> PENDING --accept--> ACCEPTED --remove--> NONE
                      |  \\--cancel (requester)--> NONE
                      \\--reject--> REJECTED --send (either side)--> PENDING

A pair never has more than one row. Re-requesting after a rejection
reopens the existing row in place with the new caller as requester.
Transitions are issued as conditional UPDATE/DELETE statements so that a
concurrent accept and cancel cannot both succeed.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Sequence

from sqlalchemy import and_, delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from techcircle.db.time import utcnow
from techcircle.models import BuddyRelation, BuddyStatus, Profile
from techcircle.services.access import AccessContext
from techcircle.services.exceptions import (
    AlreadyHandled,
    Forbidden,
    NotFound,
    RelationExists,
    SelfRelation,
    StoreUnavailable,
)

logger = logging.getLogger(__name__)


class RelationState(str, enum.Enum):
    """A relation as seen from one side of the pair."""

    NONE = "NONE"
    PENDING_OUTGOING = "PENDING_OUTGOING"
    PENDING_INCOMING = "PENDING_INCOMING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    BLOCKED = "BLOCKED"


def relation_state(relation: BuddyRelation | None, viewer_id: str) -> RelationState:
    if relation is None:
        return RelationState.NONE
    if relation.status == BuddyStatus.PENDING:
        if relation.requester_id == viewer_id:
            return RelationState.PENDING_OUTGOING
        return RelationState.PENDING_INCOMING
    return RelationState(relation.status.value)


def _pair_clause(user_a: str, user_b: str):
    return or_(
        and_(BuddyRelation.requester_id == user_a, BuddyRelation.recipient_id == user_b),
        and_(BuddyRelation.requester_id == user_b, BuddyRelation.recipient_id == user_a),
    )


class BuddyService:
    """Request, accept, reject, cancel and remove buddy relations."""

    @staticmethod
    def lookup(db: Session, user_a: str, user_b: str) -> BuddyRelation | None:
        """Return the relation between two users regardless of direction."""
        return db.execute(
            select(BuddyRelation).where(_pair_clause(user_a, user_b))
        ).scalar_one_or_none()

    def send_request(self, db: Session, actor: AccessContext, to_user_id: str) -> BuddyRelation:
        """Create a PENDING relation from the caller to ``to_user_id``.

        Raises:
            SelfRelation: If the caller targets themselves.
            NotFound: If the counterpart has no profile.
            RelationExists: If the pair already has a non-rejected relation,
                including when a concurrent request wins the race.
        """
        me = actor.require_member()
        if to_user_id == me:
            raise SelfRelation()
        if db.get(Profile, to_user_id) is None:
            raise NotFound("That member does not exist.")

        existing = self.lookup(db, me, to_user_id)
        if existing is not None:
            if existing.status != BuddyStatus.REJECTED:
                logger.warning(
                    "Buddy request %s -> %s refused: relation %s is %s",
                    me,
                    to_user_id,
                    existing.id,
                    existing.status.value,
                )
                raise RelationExists()
            return self._reopen(db, existing, me, to_user_id)

        relation = BuddyRelation(
            requester_id=me,
            recipient_id=to_user_id,
            status=BuddyStatus.PENDING,
        )
        db.add(relation)
        try:
            db.commit()
        except IntegrityError as err:
            db.rollback()
            logger.warning("Concurrent buddy request between %s and %s", me, to_user_id)
            raise RelationExists() from err
        except SQLAlchemyError as err:
            db.rollback()
            logger.error("Failed to store buddy request %s -> %s", me, to_user_id, exc_info=True)
            raise StoreUnavailable() from err
        db.refresh(relation)
        logger.info("Buddy request %s sent %s -> %s", relation.id, me, to_user_id)
        return relation

    def _reopen(
        self,
        db: Session,
        relation: BuddyRelation,
        requester_id: str,
        recipient_id: str,
    ) -> BuddyRelation:
        stmt = (
            update(BuddyRelation)
            .where(BuddyRelation.id == relation.id, BuddyRelation.status == BuddyStatus.REJECTED)
            .values(
                requester_id=requester_id,
                recipient_id=recipient_id,
                status=BuddyStatus.PENDING,
                updated_at=utcnow(),
            )
        )
        self._apply(db, stmt, relation.id)
        db.refresh(relation)
        logger.info("Buddy relation %s reopened by %s", relation.id, requester_id)
        return relation

    def accept(self, db: Session, actor: AccessContext, relation_id: str) -> BuddyRelation:
        """Accept an incoming request. Accepting twice is a no-op."""
        me = actor.require_member()
        relation = self._load_as_recipient(db, relation_id, me, "accept")
        if relation.status == BuddyStatus.ACCEPTED:
            return relation
        self._transition(db, relation, me, BuddyStatus.ACCEPTED)
        logger.info("Buddy relation %s accepted by %s", relation.id, me)
        return relation

    def reject(self, db: Session, actor: AccessContext, relation_id: str) -> BuddyRelation:
        """Reject an incoming request; the row is kept. Rejecting twice is a no-op."""
        me = actor.require_member()
        relation = self._load_as_recipient(db, relation_id, me, "reject")
        if relation.status == BuddyStatus.REJECTED:
            return relation
        self._transition(db, relation, me, BuddyStatus.REJECTED)
        logger.info("Buddy relation %s rejected by %s", relation.id, me)
        return relation

    def cancel(self, db: Session, actor: AccessContext, to_user_id: str) -> None:
        """Withdraw the caller's pending request to ``to_user_id``."""
        me = actor.require_member()
        relation = self.lookup(db, me, to_user_id)
        if relation is None:
            raise NotFound("There is no request to cancel.")
        self._cancel(db, relation, me)

    def cancel_relation(self, db: Session, actor: AccessContext, relation_id: str) -> None:
        me = actor.require_member()
        relation = db.get(BuddyRelation, relation_id)
        if relation is None or not relation.involves(me):
            raise NotFound("There is no request to cancel.")
        self._cancel(db, relation, me)

    def _cancel(self, db: Session, relation: BuddyRelation, me: str) -> None:
        if relation.requester_id != me:
            logger.warning("User %s tried to cancel relation %s they did not send", me, relation.id)
            raise Forbidden("Only the member who sent the request can cancel it.")
        if relation.status != BuddyStatus.PENDING:
            raise AlreadyHandled("This request is no longer pending.")
        stmt = delete(BuddyRelation).where(
            BuddyRelation.id == relation.id,
            BuddyRelation.requester_id == me,
            BuddyRelation.status == BuddyStatus.PENDING,
        )
        self._apply(db, stmt, relation.id)
        logger.info("Buddy request %s cancelled by %s", relation.id, me)

    def remove(self, db: Session, actor: AccessContext, other_user_id: str) -> None:
        """End an accepted relation; either side may call this."""
        me = actor.require_member()
        relation = self.lookup(db, me, other_user_id)
        if relation is None:
            raise NotFound("You are not buddies with this member.")
        if relation.status != BuddyStatus.ACCEPTED:
            raise AlreadyHandled("You are not buddies with this member.")
        stmt = delete(BuddyRelation).where(
            BuddyRelation.id == relation.id,
            BuddyRelation.status == BuddyStatus.ACCEPTED,
        )
        self._apply(db, stmt, relation.id)
        logger.info("Buddy relation %s removed by %s", relation.id, me)

    @staticmethod
    def count_accepted(db: Session, user_id: str) -> int:
        """Number of accepted relations containing ``user_id``.

        Two index-backed counts; a pair never contains the same user twice
        so the sum has no overlap.
        """
        as_requester = db.execute(
            select(func.count())
            .select_from(BuddyRelation)
            .where(
                BuddyRelation.requester_id == user_id,
                BuddyRelation.status == BuddyStatus.ACCEPTED,
            )
        ).scalar_one()
        as_recipient = db.execute(
            select(func.count())
            .select_from(BuddyRelation)
            .where(
                BuddyRelation.recipient_id == user_id,
                BuddyRelation.status == BuddyStatus.ACCEPTED,
            )
        ).scalar_one()
        return int(as_requester) + int(as_recipient)

    @staticmethod
    def count_incoming(db: Session, user_id: str) -> int:
        return int(
            db.execute(
                select(func.count())
                .select_from(BuddyRelation)
                .where(
                    BuddyRelation.recipient_id == user_id,
                    BuddyRelation.status == BuddyStatus.PENDING,
                )
            ).scalar_one()
        )

    @staticmethod
    def list_accepted(db: Session, user_id: str) -> Sequence[BuddyRelation]:
        return db.execute(
            select(BuddyRelation)
            .where(
                or_(BuddyRelation.requester_id == user_id, BuddyRelation.recipient_id == user_id),
                BuddyRelation.status == BuddyStatus.ACCEPTED,
            )
            .order_by(BuddyRelation.updated_at.desc())
        ).scalars().all()

    @staticmethod
    def list_incoming(db: Session, user_id: str) -> Sequence[BuddyRelation]:
        return db.execute(
            select(BuddyRelation)
            .where(
                BuddyRelation.recipient_id == user_id,
                BuddyRelation.status == BuddyStatus.PENDING,
            )
            .order_by(BuddyRelation.created_at.desc())
        ).scalars().all()

    @staticmethod
    def list_outgoing(db: Session, user_id: str) -> Sequence[BuddyRelation]:
        return db.execute(
            select(BuddyRelation)
            .where(
                BuddyRelation.requester_id == user_id,
                BuddyRelation.status == BuddyStatus.PENDING,
            )
            .order_by(BuddyRelation.created_at.desc())
        ).scalars().all()

    @staticmethod
    def _load_as_recipient(db: Session, relation_id: str, me: str, verb: str) -> BuddyRelation:
        relation = db.get(BuddyRelation, relation_id)
        if relation is None or not relation.involves(me):
            raise NotFound("That request no longer exists.")
        if relation.recipient_id != me:
            logger.warning("User %s tried to %s relation %s as requester", me, verb, relation.id)
            raise Forbidden(f"Only the member who received the request can {verb} it.")
        if relation.status == BuddyStatus.BLOCKED:
            raise AlreadyHandled()
        return relation

    def _transition(
        self,
        db: Session,
        relation: BuddyRelation,
        me: str,
        target: BuddyStatus,
    ) -> None:
        if relation.status != BuddyStatus.PENDING:
            raise AlreadyHandled("This request was already answered.")
        stmt = (
            update(BuddyRelation)
            .where(
                BuddyRelation.id == relation.id,
                BuddyRelation.recipient_id == me,
                BuddyRelation.status == BuddyStatus.PENDING,
            )
            .values(status=target, updated_at=utcnow())
        )
        self._apply(db, stmt, relation.id)
        db.refresh(relation)

    @staticmethod
    def _apply(db: Session, stmt, relation_id: str) -> None:
        """Run a guarded UPDATE/DELETE; zero rows means someone got there first."""
        try:
            result = db.execute(stmt)
            if result.rowcount == 0:
                db.rollback()
                raise AlreadyHandled()
            db.commit()
        except SQLAlchemyError as err:
            db.rollback()
            logger.error("Buddy relation %s write failed", relation_id, exc_info=True)
            raise StoreUnavailable() from err


buddy_service = BuddyService()
