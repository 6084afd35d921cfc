from .account_repository import AccountRepository
from .rate_limit_repository import RateLimitRepository
from .reset_token_repository import ResetTokenRepository

__all__ = ["AccountRepository", "RateLimitRepository", "ResetTokenRepository"]
