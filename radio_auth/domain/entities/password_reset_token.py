from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Column, Field, SQLModel

from radio_auth.utils.time import ensure_utc, utc_now


class PasswordResetToken(SQLModel, table=True):
    """A single-use password reset token record.

    Only the bcrypt hash of the secret is stored. A token is redeemable while
    ``used_at`` is null and ``expires_at`` lies in the future; issuing a new
    token for an account marks every earlier unused one as used.
    """

    __tablename__ = "password_reset_tokens"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", ondelete="CASCADE", index=True, nullable=False)
    token_hash: str = Field(max_length=255, nullable=False)
    expires_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True),
    )
    used_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True),
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )

    def is_active(self, now: datetime) -> bool:
        """Unused and not yet expired at ``now``."""
        return self.used_at is None and ensure_utc(self.expires_at) > now
