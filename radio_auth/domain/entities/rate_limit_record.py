from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import DateTime, String
from sqlmodel import Column, Field, SQLModel

from radio_auth.utils.time import ensure_utc, utc_now


class RateLimitRecord(SQLModel, table=True):
    """Reset-request counter for one normalized email address.

    ``attempt_count`` only means something while the window that started at
    ``window_start`` is still open.
    """

    __tablename__ = "password_reset_rate_limits"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(
        sa_column=Column(String(255), unique=True, index=True, nullable=False),
    )
    attempt_count: int = Field(default=0, nullable=False)
    window_start: datetime = Field(
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True),
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )

    def window_ends_at(self, window: timedelta) -> datetime:
        return ensure_utc(self.window_start) + window

    def window_expired(self, now: datetime, window: timedelta) -> bool:
        return now >= self.window_ends_at(window)
