"""Domain-level exceptions raised by the TechCircle engines.

Each class carries a machine-readable ``reason``, the HTTP status the API
renders it with, and whether the caller may simply retry.
"""

from __future__ import annotations


class CircleError(Exception):
    """Base class for domain errors."""

    reason: str = "unknown"
    status_code: int = 400
    retryable: bool = False
    message: str = "The request could not be completed."

    def __init__(self, message: str | None = None, *, reason: str | None = None) -> None:
        super().__init__(message or self.message)
        if message:
            self.message = message
        if reason:
            self.reason = reason


class AuthenticationRequired(CircleError):
    reason = "unauthenticated"
    status_code = 401
    message = "Please sign in to continue."


class Forbidden(CircleError):
    reason = "forbidden"
    status_code = 403
    message = "You are not allowed to do that."


class ApprovalRequired(Forbidden):
    reason = "pending_approval"
    message = "Your account is pending approval."


class NotFound(CircleError):
    reason = "not_found"
    status_code = 404
    message = "Not found."


class Conflict(CircleError):
    reason = "conflict"
    status_code = 409
    message = "That was already handled. Refresh and try again."


class RelationExists(Conflict):
    reason = "relation_exists"
    message = "A buddy relation with this member already exists."


class AlreadyHandled(Conflict):
    reason = "already_handled"


class AlreadyMember(Conflict):
    reason = "already_member"
    message = "You are already a member of this project."


class DuplicateJoinRequest(Conflict):
    reason = "duplicate_request"
    message = "You already have a pending request for this project."


class InvalidRequest(CircleError):
    reason = "invalid"
    status_code = 422
    message = "The request is not valid."


class SelfRelation(InvalidRequest):
    reason = "self_relation"
    message = "You cannot send a buddy request to yourself."


class FlagNoteRequired(InvalidRequest):
    reason = "flag_note_required"
    message = "Flagging requires a note."


class NotRecruiting(InvalidRequest):
    reason = "not_recruiting"
    message = "This project is not looking for collaborators."


class StoreUnavailable(CircleError):
    reason = "store_unavailable"
    status_code = 503
    retryable = True
    message = "Something went wrong saving your change. Please try again."
