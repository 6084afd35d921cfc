"""Reset token value object.

Holds a freshly generated reset secret together with its hash. The plaintext
exists only in memory on its way into the reset email.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import ClassVar


@dataclass(frozen=True)
class GeneratedResetToken:
    """A newly generated password reset token.

    Attributes:
        plaintext: Hex-encoded secret sent to the account holder, never stored
        token_hash: Bcrypt hash of ``plaintext``, the only form persisted
        expires_at: Fixed expiry computed at generation time
    """

    plaintext: str = field(repr=False)
    token_hash: str = field(repr=False)
    expires_at: datetime

    MIN_LENGTH: ClassVar[int] = 64
    _HEX: ClassVar["re.Pattern[str]"] = re.compile(r"^[0-9a-f]+$")

    def __post_init__(self) -> None:
        if len(self.plaintext) < self.MIN_LENGTH or not self._HEX.match(self.plaintext):
            raise ValueError("Reset token must be at least 64 lowercase hex characters")
        if self.expires_at.tzinfo is None:
            raise ValueError("Token expiry must be timezone-aware")

    def mask_for_logging(self) -> str:
        """First 8 characters followed by an ellipsis."""
        return f"{self.plaintext[:8]}..."
