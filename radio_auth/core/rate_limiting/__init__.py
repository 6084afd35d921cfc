from .password_reset_service import RateLimitingService

__all__ = ["RateLimitingService"]
