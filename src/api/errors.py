"""Error types for the Owl & Lion Access client.

Every error carries a ``user_message`` that is safe to show in the UI; the
exception text itself is for the developer log.
"""

from typing import Any, Optional

GENERIC_FAILURE_MESSAGE = "Something went wrong. Please try again."
NETWORK_FAILURE_MESSAGE = "We couldn't reach the server. Check your connection and try again."


class AccessError(Exception):
    """Base class for client errors with a user-facing message."""

    def __init__(self, message: str, user_message: str = GENERIC_FAILURE_MESSAGE):
        super().__init__(message)
        self.user_message = user_message


class ValidationError(AccessError):
    """Local, field-scoped validation failure. The user edits and resubmits."""

    def __init__(self, field_errors: dict[str, str], user_message: Optional[str] = None):
        super().__init__(
            message=f"Validation failed for: {', '.join(sorted(field_errors))}",
            user_message=user_message or "Please fix the highlighted fields.",
        )
        self.field_errors = dict(field_errors)


class BackendValidationError(ValidationError):
    """422 response with structured per-field detail."""

    def __init__(self, field_errors: dict[str, str], detail: Any = None):
        super().__init__(field_errors, user_message="The server rejected some of the fields.")
        self.detail = detail


class AuthExchangeError(AccessError):
    """Code exchange or session verification failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(
            message=message,
            user_message="Sign-in failed. Please start the sign-in again.",
        )
        self.status_code = status_code


class NetworkError(AccessError):
    """The request never produced a response."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message=message, user_message=NETWORK_FAILURE_MESSAGE)
        self.original_error = original_error


class ApiStatusError(AccessError):
    """The backend answered with a non-2xx status we have no special handling for."""

    def __init__(self, status_code: int, url: str):
        super().__init__(message=f"Unexpected status={status_code} from {url}")
        self.status_code = status_code
        self.url = url


class ProfileFinalizedError(AccessError):
    """The profile was already submitted and can no longer be edited."""

    def __init__(self):
        super().__init__(
            message="Profile is finalized",
            user_message="Your registration has already been submitted.",
        )


def parse_validation_detail(payload: Any) -> dict[str, str]:
    """Map a 422 body ``{"detail": [{"loc": [...], "msg": ...}]}`` to field errors.

    The field is the last string element of ``loc``. Entries that do not fit
    the shape are skipped; the first message per field wins.

    Returns:
        Field name to message, empty when nothing matched the shape
    """
    if not isinstance(payload, dict):
        return {}
    detail = payload.get("detail")
    if not isinstance(detail, list):
        return {}

    field_errors: dict[str, str] = {}
    for entry in detail:
        if not isinstance(entry, dict):
            continue
        loc = entry.get("loc")
        msg = entry.get("msg")
        if not isinstance(loc, (list, tuple)) or not isinstance(msg, str):
            continue
        names = [part for part in loc if isinstance(part, str)]
        if not names:
            continue
        field_errors.setdefault(names[-1], msg)
    return field_errors
