from __future__ import annotations

"""Structured exception hierarchy for the admin account security service.

Every error carries a machine-readable ``code`` and a human-readable
``message``. The codes are the ones clients see in the ``error.code`` field
of a response; the API layer maps each class to an HTTP status in
:mod:`radio_auth.core.handlers`.
"""

from typing import Final, List, Optional

__all__: Final = [
    "RadioAuthError",
    "AuthenticationError",
    "InvalidCurrentPasswordError",
    "ValidationError",
    "PasswordPolicyError",
    "InvalidTokenError",
    "RateLimitExceededError",
    "EmailServiceError",
    "DatabaseError",
]


class RadioAuthError(Exception):
    """Base exception class for all custom errors in the service.

    Attributes:
        message (str): A human-readable error message, safe to return to clients.
        code (str): A unique, machine-readable error code.
    """

    message: str
    code: str = "SERVER_ERROR"

    def __init__(self, message: str, code: str = "SERVER_ERROR"):
        self.message = message
        self.code = code
        Exception.__init__(self, self.message)

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Auth-related errors (401)
# ---------------------------------------------------------------------------


class AuthenticationError(RadioAuthError):
    """Raised when a request has no valid admin session.

    Codes in use: ``UNAUTHORIZED`` (account missing), ``AUTH_REQUIRED``
    (no or malformed bearer token) and ``SESSION_EXPIRED``.
    """

    def __init__(self, message: str = "Unauthorized", code: str = "UNAUTHORIZED"):
        super().__init__(message, code)


class InvalidCurrentPasswordError(AuthenticationError):
    """Raised when the current password given to a password change is wrong.

    The caller already proved identity with a session, so confirming the
    mismatch leaks nothing.
    """

    def __init__(
        self,
        message: str = "Current password is incorrect",
        code: str = "INVALID_CURRENT_PASSWORD",
    ):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Validation errors (400)
# ---------------------------------------------------------------------------


class ValidationError(RadioAuthError):
    """Raised for general data validation failures."""

    def __init__(self, message: str, code: str = "VALIDATION_ERROR"):
        super().__init__(message, code)


class PasswordPolicyError(ValidationError):
    """Raised when a new password violates the password policy.

    Attributes:
        errors (List[str]): One message per violated rule.
    """

    def __init__(
        self,
        errors: List[str],
        message: str = "Password does not meet security requirements",
        code: str = "VALIDATION_ERROR",
    ):
        self.errors = list(errors)
        super().__init__(message, code)


class InvalidTokenError(RadioAuthError):
    """Raised for any reset token that cannot be redeemed.

    Unknown, expired, already used, and valid-but-orphaned tokens all map to
    this one error so clients cannot tell which case occurred.
    """

    def __init__(
        self,
        message: str = "Invalid or expired reset token",
        code: str = "INVALID_TOKEN",
    ):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Flow control (429)
# ---------------------------------------------------------------------------


class RateLimitExceededError(RadioAuthError):
    """Raised when an identifier has used up its reset requests for the window.

    Attributes:
        retry_after_seconds (int): Seconds until the current window closes.
    """

    def __init__(
        self,
        retry_after_seconds: int,
        message: Optional[str] = None,
        code: str = "RATE_LIMIT_EXCEEDED",
    ):
        self.retry_after_seconds = retry_after_seconds
        super().__init__(
            message or "Too many password reset requests. Please try again later.",
            code,
        )


# ---------------------------------------------------------------------------
# Infrastructure errors
# ---------------------------------------------------------------------------


class EmailServiceError(RadioAuthError):
    """Raised when an email cannot be rendered or delivered."""

    def __init__(self, message: str, code: str = "EMAIL_SERVICE_ERROR"):
        super().__init__(message, code)


class DatabaseError(RadioAuthError):
    """Wraps low-level database driver errors.

    The message is logged but never returned to clients.
    """

    def __init__(self, message: str, code: str = "SERVER_ERROR"):
        super().__init__(message, code)
