"""Process-wide session context publisher.

Instead of each screen re-querying approval and role state on its own, the
access context is recomputed once per identity change and pushed to every
subscriber interested in that user.
"""

from __future__ import annotations

import enum
import logging
import threading
from collections.abc import Callable

from sqlalchemy.orm import Session

from techcircle.services.access import ANONYMOUS, AccessContext, resolve_access
from techcircle.services.roles import RoleResolver

logger = logging.getLogger(__name__)


class IdentityEvent(str, enum.Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    # Approval status or role assignments changed by an admin.
    PROFILE_CHANGED = "PROFILE_CHANGED"


Subscriber = Callable[[IdentityEvent, str, AccessContext], None]


class SessionContextHub:
    """Compute access contexts on identity events and fan them out."""

    def __init__(self, resolver: RoleResolver | None = None) -> None:
        self._resolver = resolver
        self._lock = threading.Lock()
        self._subscribers: list[tuple[str | None, Subscriber]] = []

    def subscribe(self, callback: Subscriber, user_id: str | None = None) -> Callable[[], None]:
        """Register ``callback``; ``user_id=None`` receives every user's events.

        Returns a function that removes the subscription.
        """
        entry = (user_id, callback)
        with self._lock:
            self._subscribers.append(entry)

        def unsubscribe() -> None:
            with self._lock:
                if entry in self._subscribers:
                    self._subscribers.remove(entry)

        return unsubscribe

    def current(self, db: Session, user_id: str | None) -> AccessContext:
        """Return a freshly computed context; never served from a cache."""
        return resolve_access(db, user_id, self._resolver)

    def publish(self, db: Session, event: IdentityEvent, user_id: str) -> AccessContext:
        """Recompute the context for ``user_id`` and notify subscribers."""
        if event is IdentityEvent.SIGNED_OUT:
            context = ANONYMOUS
        else:
            context = self.current(db, user_id)

        with self._lock:
            targets = [cb for scope, cb in self._subscribers if scope in (None, user_id)]

        for callback in targets:
            try:
                callback(event, user_id, context)
            except Exception:
                logger.exception("Session subscriber failed handling %s for %s", event.value, user_id)
        return context

    def clear(self) -> None:
        with self._lock:
            self._subscribers.clear()


def log_context_change(event: IdentityEvent, user_id: str, context: AccessContext) -> None:
    logger.info(
        "Session %s for %s: approved=%s admin=%s",
        event.value,
        user_id,
        context.is_approved,
        context.is_admin,
    )


session_hub = SessionContextHub()
