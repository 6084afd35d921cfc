"""Persistent entities of the password workflow.

``Account`` belongs to the shared credential store; reset tokens and
rate-limit records are owned by the password workflow.
"""

from .account import Account, Role
from .password_reset_token import PasswordResetToken
from .rate_limit_record import RateLimitRecord

__all__ = ["Account", "Role", "PasswordResetToken", "RateLimitRecord"]
