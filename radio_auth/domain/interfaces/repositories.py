"""Repository interfaces for abstracting data persistence in the domain layer.

The domain services depend only on these ports. The SQL implementations live
in ``radio_auth.infrastructure.repositories``; tests use in-memory fakes.
Every method that compares or writes a timestamp takes ``now`` explicitly so
that callers own the clock.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Sequence

from radio_auth.domain.entities import Account, PasswordResetToken, RateLimitRecord


class IAccountRepository(ABC):
    """Read access to the shared credential store, plus password updates."""

    @abstractmethod
    async def get_by_id(self, account_id: int) -> Optional[Account]:
        """Retrieves an account by id, or None."""
        raise NotImplementedError

    @abstractmethod
    async def get_by_email(
        self, email: str, roles: Optional[Sequence[str]] = None
    ) -> Optional[Account]:
        """Retrieves an account by email (case-insensitively).

        Args:
            email: The email address to search for.
            roles: When given, only accounts holding one of these roles match.

        Returns:
            An optional `Account` entity.
        """
        raise NotImplementedError

    @abstractmethod
    async def update_password_hash(
        self, account_id: int, password_hash: str, now: datetime
    ) -> None:
        """Replaces the account's password hash and bumps ``updated_at``."""
        raise NotImplementedError


class IResetTokenRepository(ABC):
    """Storage for hashed password reset tokens."""

    @abstractmethod
    async def create(
        self, account_id: int, token_hash: str, expires_at: datetime, now: datetime
    ) -> PasswordResetToken:
        raise NotImplementedError

    @abstractmethod
    async def find_active(self, now: datetime) -> List[PasswordResetToken]:
        """Returns every token with ``used_at`` null and ``expires_at`` after ``now``."""
        raise NotImplementedError

    @abstractmethod
    async def mark_used(self, token_id: int, now: datetime) -> bool:
        """Sets ``used_at`` on an unused token.

        Returns:
            True if this call transitioned the token, False if it was already used
            or does not exist.
        """
        raise NotImplementedError

    @abstractmethod
    async def redeem(
        self, token_id: int, account_id: int, password_hash: str, now: datetime
    ) -> bool:
        """Claims an active token and writes the new password hash in one transaction.

        The token is claimed with a conditional update on ``used_at``; the
        password hash is written only if that update changed exactly one row.

        Returns:
            True if this call redeemed the token, False if it was already used,
            expired, missing or owned by another account. Nothing is written
            when False is returned.
        """
        raise NotImplementedError

    @abstractmethod
    async def invalidate_for_account(self, account_id: int, now: datetime) -> int:
        """Marks every unused token of the account as used; returns how many."""
        raise NotImplementedError

    @abstractmethod
    async def delete_expired(self, now: datetime) -> int:
        """Deletes tokens whose expiry has passed; returns how many."""
        raise NotImplementedError


class IRateLimitRepository(ABC):
    """Storage for per-identifier reset request counters."""

    @abstractmethod
    async def get(self, identifier: str) -> Optional[RateLimitRecord]:
        raise NotImplementedError

    @abstractmethod
    async def create(self, identifier: str, now: datetime) -> RateLimitRecord:
        """Creates a record with no attempts and a window starting at ``now``."""
        raise NotImplementedError

    @abstractmethod
    async def increment(self, identifier: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def reset(self, identifier: str, now: datetime) -> None:
        """Starts a new window at ``now`` with one attempt counted."""
        raise NotImplementedError

    @abstractmethod
    async def delete_stale(self, before: datetime) -> int:
        """Deletes records whose window started before ``before``; returns how many."""
        raise NotImplementedError
