"""Error taxonomy shared by the moderation services and the HTTP layer."""

from __future__ import annotations

HTTP_BAD_REQUEST = 400
HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403
HTTP_NOT_FOUND = 404
HTTP_CONFLICT = 409
HTTP_INTERNAL_SERVER_ERROR = 500


class ModerationError(RuntimeError):
    """Base exception for moderation failures.

    Each subclass carries the HTTP status code the API surfaces it with.
    """

    status_code: int = HTTP_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ModerationError):
    """Raised for malformed or missing input. Never retried."""

    status_code = HTTP_BAD_REQUEST


class AuthError(ModerationError):
    """Raised when the caller has no valid credential."""

    status_code = HTTP_UNAUTHORIZED


class PermissionDeniedError(AuthError):
    """Raised when an authenticated caller lacks the required role."""

    status_code = HTTP_FORBIDDEN


class NotFoundError(ModerationError):
    """Raised when a referenced report does not exist."""

    status_code = HTTP_NOT_FOUND


class InvalidStateError(ModerationError):
    """Raised on a transition out of a terminal state or a lost conditional update.

    The escalation sweep treats this as "another actor already handled it".
    """

    status_code = HTTP_CONFLICT


class DependencyError(ModerationError):
    """Raised when the backing store or a downstream call fails."""

    status_code = HTTP_INTERNAL_SERVER_ERROR
