"""Security utilities for password hashing and admin session tokens.

Passwords and reset-token secrets share one bcrypt context so that both use
the configured work factor. Session tokens are HS256 JWTs whose ``sub`` claim
is the account id.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from radio_auth.core.config.settings import settings
from radio_auth.core.exceptions import AuthenticationError

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_WORK_FACTOR,
)


def hash_password(password: str) -> str:
    """Hash a password (or reset-token secret) using bcrypt.

    Args:
        password: Plain text value to hash

    Returns:
        str: Bcrypt hash with a fresh random salt, so two calls never match
    """
    return pwd_context.hash(password)


def verify_password(password: str, hashed_password: Optional[str]) -> bool:
    """Verify a password against its hash.

    Args:
        password: Plain text password to verify
        hashed_password: Bcrypt hash to verify against

    Returns:
        bool: True if password matches hash. A missing or malformed hash is
        reported as a mismatch.
    """
    if not password or not hashed_password:
        return False
    try:
        return pwd_context.verify(password, hashed_password)
    except (ValueError, TypeError):
        return False


def create_session_token(
    account_id: int,
    role: str,
    now: Optional[datetime] = None,
    expires_in: Optional[timedelta] = None,
) -> str:
    """Issue a signed admin session token.

    Args:
        account_id: Id of the authenticated account, stored in ``sub``
        role: Account role, informational only
        now: Issue time, defaults to the current UTC time
        expires_in: Lifetime, defaults to ``SESSION_DURATION_HOURS``

    Returns:
        str: Encoded JWT
    """
    issued_at = now or datetime.now(timezone.utc)
    lifetime = expires_in or timedelta(hours=settings.SESSION_DURATION_HOURS)
    claims: Dict[str, Any] = {
        "sub": str(account_id),
        "role": role,
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + lifetime).timestamp()),
    }
    return jwt.encode(
        claims,
        settings.JWT_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_session_token(token: str) -> int:
    """Validate a session token and return the account id it names.

    Raises:
        AuthenticationError: ``SESSION_EXPIRED`` for expired tokens,
            ``AUTH_REQUIRED`` for anything malformed or wrongly signed.
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET.get_secret_value(),
            algorithms=[settings.JWT_ALGORITHM],
        )
    except ExpiredSignatureError:
        raise AuthenticationError("Session expired", code="SESSION_EXPIRED")
    except JWTError:
        raise AuthenticationError("Invalid authentication token", code="AUTH_REQUIRED")

    subject = payload.get("sub")
    try:
        return int(subject)
    except (TypeError, ValueError):
        raise AuthenticationError("Invalid authentication token", code="AUTH_REQUIRED")
