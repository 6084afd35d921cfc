"""Immutable value objects used by the password workflow."""

from .password_validation import PasswordValidationResult
from .rate_limit import RateLimitDecision
from .reset_token import GeneratedResetToken

__all__ = ["PasswordValidationResult", "RateLimitDecision", "GeneratedResetToken"]
