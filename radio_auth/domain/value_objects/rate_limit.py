"""Rate limiting value objects."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RateLimitDecision:
    """Answer to "may this identifier request another reset right now?".

    Attributes:
        allowed: Whether the request may proceed.
        retry_after_seconds: Seconds until the window closes, only set when blocked.
    """

    allowed: bool
    retry_after_seconds: Optional[int] = None

    def __post_init__(self) -> None:
        if self.allowed and self.retry_after_seconds is not None:
            raise ValueError("An allowed decision cannot carry a retry delay")
        if not self.allowed and (self.retry_after_seconds is None or self.retry_after_seconds <= 0):
            raise ValueError("A blocked decision needs a positive retry delay")

    @classmethod
    def allow(cls) -> "RateLimitDecision":
        return cls(allowed=True)

    @classmethod
    def block(cls, retry_after_seconds: int) -> "RateLimitDecision":
        return cls(allowed=False, retry_after_seconds=retry_after_seconds)
