"""Error taxonomy shared by the account workflows and the persistence layer."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class AuthErrorKind(str, Enum):
    MISSING_FIELDS = "MissingFields"
    MISSING_EMAIL = "MissingEmail"
    INVALID_EMAIL = "InvalidEmail"
    WEAK_PASSWORD = "WeakPassword"
    DUPLICATE_EMAIL = "DuplicateEmail"
    NOT_FOUND = "NotFound"
    ALREADY_VERIFIED = "AlreadyVerified"
    CODE_EXPIRED = "CodeExpired"
    INVALID_CODE = "InvalidCode"
    INVALID_OR_EXPIRED_CODE = "InvalidOrExpiredCode"
    INVALID_CODE_LENGTH = "InvalidCodeLength"
    PASSWORD_MISMATCH = "PasswordMismatch"
    NOTIFICATION_FAILED = "NotificationFailed"
    PERSISTENCE_FAILURE = "PersistenceFailure"
    LOGIN_FAILED = "LoginFailed"
    INTERNAL_ERROR = "InternalError"


# Infrastructure kinds never expose their detail to the caller.
INFRASTRUCTURE_KINDS = frozenset(
    {
        AuthErrorKind.NOTIFICATION_FAILED,
        AuthErrorKind.PERSISTENCE_FAILURE,
        AuthErrorKind.LOGIN_FAILED,
        AuthErrorKind.INTERNAL_ERROR,
    }
)

DEFAULT_MESSAGES = {
    AuthErrorKind.MISSING_FIELDS: "Missing required fields.",
    AuthErrorKind.MISSING_EMAIL: "Email is required.",
    AuthErrorKind.INVALID_EMAIL: "Invalid email format.",
    AuthErrorKind.WEAK_PASSWORD: "Password must be at least 6 characters long.",
    AuthErrorKind.DUPLICATE_EMAIL: "Email already registered.",
    AuthErrorKind.NOT_FOUND: "User not found.",
    AuthErrorKind.ALREADY_VERIFIED: "User is already verified.",
    AuthErrorKind.CODE_EXPIRED: "Verification code has expired. Please request a new one.",
    AuthErrorKind.INVALID_CODE: "Invalid verification code.",
    AuthErrorKind.INVALID_OR_EXPIRED_CODE: "Invalid or expired code.",
    AuthErrorKind.INVALID_CODE_LENGTH: "The code must be 6 digits long.",
    AuthErrorKind.PASSWORD_MISMATCH: "Password doesn't match.",
    AuthErrorKind.NOTIFICATION_FAILED: "Failed to send the verification code. Please try again later.",
    AuthErrorKind.PERSISTENCE_FAILURE: "The request could not be completed.",
    AuthErrorKind.LOGIN_FAILED: "Login failed.",
    AuthErrorKind.INTERNAL_ERROR: "Internal server error.",
}


class AuthError(Exception):
    """Failure of an account workflow step.

    ``message`` is safe to show to the caller. ``detail`` carries the
    underlying cause for logs and is only exposed for validation kinds.
    """

    def __init__(
        self,
        kind: AuthErrorKind,
        message: Optional[str] = None,
        detail: Optional[str] = None,
    ) -> None:
        self.kind = kind
        self.message = message or DEFAULT_MESSAGES[kind]
        self.detail = detail
        super().__init__(self.message)

    @property
    def is_infrastructure(self) -> bool:
        return self.kind in INFRASTRUCTURE_KINDS

    def __repr__(self) -> str:
        return f"AuthError(kind={self.kind.value!r}, message={self.message!r})"


class StoreError(Exception):
    """Raised by a credential store when a read or write fails."""


class UniquenessViolation(StoreError):
    """Raised by a credential store when a unique column would be duplicated."""
