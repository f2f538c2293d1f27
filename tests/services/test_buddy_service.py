"""Tests for the tech-buddy relationship engine."""

import random

import pytest
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError

from techcircle.models import ApprovalStatus, BuddyRelation, BuddyStatus
from techcircle.models.buddy import normalized_pair
from techcircle.services.buddies import BuddyService, RelationState, relation_state
from techcircle.services.exceptions import (
    AlreadyHandled,
    ApprovalRequired,
    CircleError,
    Forbidden,
    NotFound,
    RelationExists,
    SelfRelation,
)

service = BuddyService()


def _rows_between(db, a, b) -> int:
    low, high = normalized_pair(a, b)
    return db.execute(
        select(func.count())
        .select_from(BuddyRelation)
        .where(BuddyRelation.pair_low == low, BuddyRelation.pair_high == high)
    ).scalar_one()


def _accepted_rows(db, user_id) -> int:
    return db.execute(
        select(func.count())
        .select_from(BuddyRelation)
        .where(
            or_(BuddyRelation.requester_id == user_id, BuddyRelation.recipient_id == user_id),
            BuddyRelation.status == BuddyStatus.ACCEPTED,
        )
    ).scalar_one()


class TestSendRequest:
    def test_creates_pending_relation(self, db_session, alice, bob, context_for) -> None:
        relation = service.send_request(db_session, context_for(alice), bob.id)
        assert relation.status == BuddyStatus.PENDING
        assert relation.requester_id == alice.id
        assert relation.recipient_id == bob.id
        assert (relation.pair_low, relation.pair_high) == normalized_pair(alice.id, bob.id)

    def test_lookup_is_symmetric(self, db_session, alice, bob, context_for) -> None:
        relation = service.send_request(db_session, context_for(alice), bob.id)
        assert service.lookup(db_session, alice.id, bob.id).id == relation.id
        assert service.lookup(db_session, bob.id, alice.id).id == relation.id

    def test_view_state_depends_on_side(self, db_session, alice, bob, context_for) -> None:
        relation = service.send_request(db_session, context_for(alice), bob.id)
        assert relation_state(relation, alice.id) is RelationState.PENDING_OUTGOING
        assert relation_state(relation, bob.id) is RelationState.PENDING_INCOMING
        assert relation_state(None, alice.id) is RelationState.NONE

    def test_self_request_fails(self, db_session, alice, context_for) -> None:
        with pytest.raises(SelfRelation):
            service.send_request(db_session, context_for(alice), alice.id)

    def test_unknown_counterpart(self, db_session, alice, context_for) -> None:
        with pytest.raises(NotFound):
            service.send_request(db_session, context_for(alice), "does-not-exist")

    def test_pending_member_cannot_send(self, db_session, pending_user, bob, context_for) -> None:
        with pytest.raises(ApprovalRequired):
            service.send_request(db_session, context_for(pending_user), bob.id)
        assert _rows_between(db_session, pending_user.id, bob.id) == 0

    def test_duplicate_in_either_direction_is_refused(self, db_session, alice, bob, context_for) -> None:
        service.send_request(db_session, context_for(alice), bob.id)
        with pytest.raises(RelationExists):
            service.send_request(db_session, context_for(alice), bob.id)
        with pytest.raises(RelationExists):
            service.send_request(db_session, context_for(bob), alice.id)
        assert _rows_between(db_session, alice.id, bob.id) == 1

    def test_blocked_relation_refuses_new_request(self, db_session, alice, bob, context_for) -> None:
        db_session.add(
            BuddyRelation(requester_id=alice.id, recipient_id=bob.id, status=BuddyStatus.BLOCKED)
        )
        db_session.commit()
        with pytest.raises(RelationExists):
            service.send_request(db_session, context_for(bob), alice.id)


class TestPairUniqueness:
    def test_store_rejects_opposite_direction_row(self, db_session, alice, bob) -> None:
        db_session.add(BuddyRelation(requester_id=alice.id, recipient_id=bob.id))
        db_session.commit()

        db_session.add(BuddyRelation(requester_id=bob.id, recipient_id=alice.id))
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()
        assert _rows_between(db_session, alice.id, bob.id) == 1

    def test_store_rejects_self_row(self, db_session, alice) -> None:
        db_session.add(BuddyRelation(requester_id=alice.id, recipient_id=alice.id))
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_lost_race_reports_relation_exists(self, db_session, alice, bob, context_for, monkeypatch) -> None:
        """Two simultaneous requests: the loser's pre-check saw nothing."""
        service.send_request(db_session, context_for(alice), bob.id)
        monkeypatch.setattr(BuddyService, "lookup", staticmethod(lambda db, a, b: None))

        with pytest.raises(RelationExists):
            service.send_request(db_session, context_for(bob), alice.id)
        assert _rows_between(db_session, alice.id, bob.id) == 1


class TestAcceptReject:
    def test_recipient_accepts(self, db_session, alice, bob, context_for) -> None:
        relation = service.send_request(db_session, context_for(alice), bob.id)
        accepted = service.accept(db_session, context_for(bob), relation.id)
        assert accepted.status == BuddyStatus.ACCEPTED

    def test_accept_twice_is_a_noop(self, db_session, alice, bob, context_for) -> None:
        relation = service.send_request(db_session, context_for(alice), bob.id)
        service.accept(db_session, context_for(bob), relation.id)
        again = service.accept(db_session, context_for(bob), relation.id)
        assert again.status == BuddyStatus.ACCEPTED
        assert _rows_between(db_session, alice.id, bob.id) == 1

    def test_requester_cannot_accept(self, db_session, alice, bob, context_for) -> None:
        relation = service.send_request(db_session, context_for(alice), bob.id)
        with pytest.raises(Forbidden):
            service.accept(db_session, context_for(alice), relation.id)

    def test_outsider_sees_not_found(self, db_session, alice, bob, make_profile, context_for) -> None:
        carol = make_profile("Carol")
        relation = service.send_request(db_session, context_for(alice), bob.id)
        with pytest.raises(NotFound):
            service.accept(db_session, context_for(carol), relation.id)

    def test_reject_keeps_row(self, db_session, alice, bob, context_for) -> None:
        relation = service.send_request(db_session, context_for(alice), bob.id)
        rejected = service.reject(db_session, context_for(bob), relation.id)
        assert rejected.status == BuddyStatus.REJECTED
        assert service.lookup(db_session, alice.id, bob.id) is not None
        assert service.reject(db_session, context_for(bob), relation.id).status == BuddyStatus.REJECTED

    def test_accept_after_reject_is_already_handled(self, db_session, alice, bob, context_for) -> None:
        relation = service.send_request(db_session, context_for(alice), bob.id)
        service.reject(db_session, context_for(bob), relation.id)
        with pytest.raises(AlreadyHandled):
            service.accept(db_session, context_for(bob), relation.id)

    def test_accept_after_cancel_is_not_found(self, db_session, alice, bob, context_for) -> None:
        relation = service.send_request(db_session, context_for(alice), bob.id)
        relation_id = relation.id
        service.cancel(db_session, context_for(alice), bob.id)
        with pytest.raises(NotFound):
            service.accept(db_session, context_for(bob), relation_id)


class TestRequestAgain:
    def test_rejected_requester_reopens_in_place(self, db_session, alice, bob, context_for) -> None:
        relation = service.send_request(db_session, context_for(alice), bob.id)
        service.reject(db_session, context_for(bob), relation.id)

        reopened = service.send_request(db_session, context_for(alice), bob.id)

        assert reopened.id == relation.id
        assert reopened.status == BuddyStatus.PENDING
        assert reopened.requester_id == alice.id
        assert _rows_between(db_session, alice.id, bob.id) == 1

    def test_rejecting_side_may_request_back(self, db_session, alice, bob, context_for) -> None:
        relation = service.send_request(db_session, context_for(alice), bob.id)
        service.reject(db_session, context_for(bob), relation.id)

        reopened = service.send_request(db_session, context_for(bob), alice.id)

        assert reopened.id == relation.id
        assert reopened.requester_id == bob.id
        assert reopened.recipient_id == alice.id
        assert service.accept(db_session, context_for(alice), relation.id).status == BuddyStatus.ACCEPTED


class TestCancelRemove:
    def test_requester_cancels(self, db_session, alice, bob, context_for) -> None:
        service.send_request(db_session, context_for(alice), bob.id)
        service.cancel(db_session, context_for(alice), bob.id)
        assert service.lookup(db_session, alice.id, bob.id) is None

    def test_recipient_cannot_cancel(self, db_session, alice, bob, context_for) -> None:
        relation = service.send_request(db_session, context_for(alice), bob.id)
        with pytest.raises(Forbidden):
            service.cancel(db_session, context_for(bob), alice.id)
        with pytest.raises(Forbidden):
            service.cancel_relation(db_session, context_for(bob), relation.id)
        assert service.lookup(db_session, alice.id, bob.id) is not None

    def test_cancel_after_accept_is_already_handled(self, db_session, alice, bob, context_for) -> None:
        relation = service.send_request(db_session, context_for(alice), bob.id)
        service.accept(db_session, context_for(bob), relation.id)
        with pytest.raises(AlreadyHandled):
            service.cancel(db_session, context_for(alice), bob.id)
        assert service.lookup(db_session, alice.id, bob.id).status == BuddyStatus.ACCEPTED

    @pytest.mark.parametrize("remover", ["alice", "bob"])
    def test_either_side_removes(self, request, db_session, alice, bob, context_for, remover) -> None:
        relation = service.send_request(db_session, context_for(alice), bob.id)
        service.accept(db_session, context_for(bob), relation.id)
        before = (service.count_accepted(db_session, alice.id), service.count_accepted(db_session, bob.id))

        actor = request.getfixturevalue(remover)
        other = bob if actor is alice else alice
        service.remove(db_session, context_for(actor), other.id)

        assert service.lookup(db_session, alice.id, bob.id) is None
        assert service.count_accepted(db_session, alice.id) == before[0] - 1
        assert service.count_accepted(db_session, bob.id) == before[1] - 1

    def test_remove_requires_accepted(self, db_session, alice, bob, context_for) -> None:
        service.send_request(db_session, context_for(alice), bob.id)
        with pytest.raises(AlreadyHandled):
            service.remove(db_session, context_for(bob), alice.id)
        with pytest.raises(NotFound):
            service.remove(db_session, context_for(alice), "nobody")


class TestCountsAndLists:
    def test_counts_match_rows(self, db_session, alice, bob, make_profile, context_for) -> None:
        carol = make_profile("Carol")
        ab = service.send_request(db_session, context_for(alice), bob.id)
        service.accept(db_session, context_for(bob), ab.id)
        ca = service.send_request(db_session, context_for(carol), alice.id)
        service.accept(db_session, context_for(alice), ca.id)
        service.send_request(db_session, context_for(bob), carol.id)

        for user in (alice, bob, carol):
            assert service.count_accepted(db_session, user.id) == _accepted_rows(db_session, user.id)
        assert service.count_accepted(db_session, alice.id) == 2
        assert service.count_incoming(db_session, carol.id) == 1

        service.remove(db_session, context_for(bob), alice.id)
        assert service.count_accepted(db_session, alice.id) == 1
        assert service.count_accepted(db_session, bob.id) == 0

    def test_lists(self, db_session, alice, bob, make_profile, context_for) -> None:
        carol = make_profile("Carol")
        ab = service.send_request(db_session, context_for(alice), bob.id)
        service.send_request(db_session, context_for(carol), alice.id)
        service.accept(db_session, context_for(bob), ab.id)

        assert [r.id for r in service.list_accepted(db_session, alice.id)] == [ab.id]
        assert [r.requester_id for r in service.list_incoming(db_session, alice.id)] == [carol.id]
        assert [r.recipient_id for r in service.list_outgoing(db_session, carol.id)] == [alice.id]


def test_random_operation_sequences_keep_one_row_per_pair(db_session, make_profile, context_for) -> None:
    """Whatever order the operations arrive in, a pair never has two rows."""
    users = [make_profile(f"User {i}") for i in range(3)]
    rng = random.Random(1234)

    for _ in range(200):
        actor, other = rng.sample(users, 2)
        actor_ctx = context_for(actor)
        op = rng.choice(["send", "accept", "reject", "cancel", "remove"])
        try:
            if op == "send":
                service.send_request(db_session, actor_ctx, other.id)
            elif op == "cancel":
                service.cancel(db_session, actor_ctx, other.id)
            elif op == "remove":
                service.remove(db_session, actor_ctx, other.id)
            else:
                relation = service.lookup(db_session, actor.id, other.id)
                if relation is not None:
                    getattr(service, op)(db_session, actor_ctx, relation.id)
        except CircleError:
            pass

        for i, a in enumerate(users):
            for b in users[i + 1:]:
                assert _rows_between(db_session, a.id, b.id) <= 1
            assert service.count_accepted(db_session, a.id) == _accepted_rows(db_session, a.id)


def test_revoked_member_loses_access(db_session, alice, bob, context_for) -> None:
    alice.status = ApprovalStatus.REJECTED
    db_session.commit()
    with pytest.raises(ApprovalRequired):
        service.send_request(db_session, context_for(alice), bob.id)
