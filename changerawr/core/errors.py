"""Error taxonomy for Changerawr.

Every error the service raises on purpose derives from ``ChangerawrError``
and carries the HTTP status it maps to. The API layer converts them to the
uniform ``{"error": ..., "details": [...]}`` body.
"""

from typing import Any, Optional


class ChangerawrError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, *, details: Optional[list[Any]] = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.details = details


class AuthenticationError(ChangerawrError):
    """No session, or the session is invalid."""

    status_code = 401
    default_message = "Could not validate credentials"


class AuthorizationError(ChangerawrError):
    """Authenticated, but the caller's role forbids the action."""

    status_code = 403
    default_message = "Unauthorized"


class NotFoundError(ChangerawrError):
    status_code = 404
    default_message = "Not found"


class DuplicateRequestError(ChangerawrError):
    """A pending request already exists for the target entry."""

    status_code = 400
    default_message = "A request for this entry is already pending"

    def __init__(self, message: Optional[str] = None, *, existing_request_id=None):
        super().__init__(message)
        self.existing_request_id = existing_request_id


class ValidationError(ChangerawrError):
    status_code = 400
    default_message = "Validation failed"


class ConflictError(ChangerawrError):
    """The target is in a state that does not allow the operation."""

    status_code = 409
    default_message = "Conflict"


class UnexpectedError(ChangerawrError):
    """Anything else. The message returned to callers is always generic."""

    status_code = 500
    default_message = "Internal server error"
