"""Service interfaces for domain services.

These interfaces define contracts for domain services,
enabling dependency inversion and better testability.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from radio_auth.domain.entities import Account, PasswordResetToken
from radio_auth.domain.value_objects import GeneratedResetToken, RateLimitDecision


class IRateLimitingService(ABC):
    """Interface for the reset request rate limit ledger."""

    @abstractmethod
    async def check_rate_limit(self, identifier: str) -> RateLimitDecision:
        """Check whether another reset request is allowed for the identifier.

        Only lazily creates a missing record; never counts an attempt.
        """
        raise NotImplementedError

    @abstractmethod
    async def record_attempt(self, identifier: str) -> None:
        """Count one attempt. Never raises."""
        raise NotImplementedError

    @abstractmethod
    async def cleanup_expired_records(self) -> int:
        """Delete records idle for longer than one window. Never raises."""
        raise NotImplementedError


class IResetTokenService(ABC):
    """Interface for the reset token lifecycle."""

    @abstractmethod
    def generate(self) -> GeneratedResetToken:
        raise NotImplementedError

    @abstractmethod
    async def issue_for_account(self, account_id: int) -> GeneratedResetToken:
        """Invalidate the account's outstanding tokens, then persist a new one."""
        raise NotImplementedError

    @abstractmethod
    async def verify(self, plaintext: str) -> Optional[int]:
        """Return the owning account id of a redeemable token, or None."""
        raise NotImplementedError

    @abstractmethod
    async def find_matching_token(self, plaintext: str) -> Optional[PasswordResetToken]:
        raise NotImplementedError

    @abstractmethod
    async def mark_used(self, token_id: int) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def redeem(self, token_id: int, account_id: int, password_hash: str) -> bool:
        """Atomically mark the token used and store the account's new password hash."""
        raise NotImplementedError

    @abstractmethod
    async def invalidate_for_account(self, account_id: int) -> int:
        raise NotImplementedError

    @abstractmethod
    async def cleanup_expired(self) -> int:
        raise NotImplementedError


class IPasswordEmailService(ABC):
    """Interface for password workflow notifications."""

    @abstractmethod
    async def send_password_reset_email(self, account: Account, token: str) -> bool:
        """Send the reset link carrying the plaintext token.

        Raises:
            EmailServiceError: If the email cannot be rendered or delivered.
        """
        raise NotImplementedError

    @abstractmethod
    async def send_password_changed_email(self, account: Account) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def send_password_reset_confirmation_email(self, account: Account) -> bool:
        raise NotImplementedError


class IPasswordService(ABC):
    """Interface for the password workflow orchestrator."""

    @abstractmethod
    async def change_password(
        self, account_id: int, current_password: str, new_password: str
    ) -> Account:
        raise NotImplementedError

    @abstractmethod
    async def initiate_password_reset(self, email: str) -> Dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    async def complete_password_reset(self, token: str, new_password: str) -> Account:
        raise NotImplementedError
