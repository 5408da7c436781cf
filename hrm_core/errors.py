# hrm_core/errors.py
from fastapi import HTTPException, status
from typing import Optional, Dict


class HRMError(HTTPException):
    """Base class for domain errors that render as a stable error kind plus a message.

    Every error raised by the core carries a ``kind`` that clients can switch on.
    The detail body never contains internal identifiers or stack traces.
    """

    kind: str = "Error"
    default_message: str = "Request failed."
    status_code_for_kind: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: Optional[str] = None, headers: Optional[Dict[str, str]] = None):
        self.message = message or self.default_message
        super().__init__(
            status_code=self.status_code_for_kind,
            detail={"error": self.kind, "message": self.message},
            headers=headers,
        )


class InvalidCredentialsError(HRMError):
    """Raised when an email/password pair or a session token cannot be verified.

    Unknown emails and wrong passwords both surface as this error so that
    callers cannot tell which emails are registered.
    """

    kind = "InvalidCredentials"
    default_message = "Invalid email or password."
    status_code_for_kind = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class AccountInactiveError(HRMError):
    """Raised when the account is deactivated or not approved."""

    kind = "AccountInactive"
    default_message = "Account is inactive."
    status_code_for_kind = status.HTTP_403_FORBIDDEN


class TenantInactiveError(HRMError):
    """Raised when the caller's organization is missing or not active."""

    kind = "TenantInactive"
    default_message = "Organization is not active."
    status_code_for_kind = status.HTTP_403_FORBIDDEN


class NotFoundError(HRMError):
    kind = "NotFound"
    default_message = "Resource not found."
    status_code_for_kind = status.HTTP_404_NOT_FOUND


class DuplicateEmailError(HRMError):
    kind = "DuplicateEmail"
    default_message = "An account with this email already exists."
    status_code_for_kind = status.HTTP_409_CONFLICT


class ForbiddenError(HRMError):
    """Authorization denial. The message is deliberately generic."""

    kind = "Forbidden"
    default_message = "You do not have permission to perform this action."
    status_code_for_kind = status.HTTP_403_FORBIDDEN


class InvariantViolationError(HRMError):
    """Raised when an operation would break a data-model invariant,
    e.g. approving an account that is already approved."""

    kind = "InvariantViolation"
    default_message = "The operation conflicts with the current state."
    status_code_for_kind = status.HTTP_409_CONFLICT


class RequestTimeoutError(HRMError):
    """Raised when a bounded operation exceeds request_timeout_seconds.

    Lifecycle operations are idempotent, so the caller retries by
    re-invoking the same operation.
    """

    kind = "Timeout"
    default_message = "The operation timed out. It is safe to retry."
    status_code_for_kind = status.HTTP_504_GATEWAY_TIMEOUT
