"""Domain interfaces (ports) for the password workflow."""

from .repositories import IAccountRepository, IRateLimitRepository, IResetTokenRepository
from .services import (
    IPasswordEmailService,
    IPasswordService,
    IRateLimitingService,
    IResetTokenService,
)

__all__ = [
    "IAccountRepository",
    "IRateLimitRepository",
    "IResetTokenRepository",
    "IPasswordEmailService",
    "IPasswordService",
    "IRateLimitingService",
    "IResetTokenService",
]
