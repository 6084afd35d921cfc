from datetime import datetime  # For timestamp fields
from enum import Enum  # For type-safe role enumeration
from typing import Optional

from sqlalchemy import DateTime, String, text
from sqlmodel import Column, Field, Index, SQLModel

from radio_auth.utils.time import utc_now


class Role(str, Enum):
    """Roles an admin-backend account can hold.

    Attributes:
        USER: Ordinary account with no admin panel access.
        CONTENT_MANAGER: Edits shows, episodes, articles and events.
        ADMINISTRATOR: Full admin panel access.
    """

    USER = "user"
    CONTENT_MANAGER = "content_manager"
    ADMINISTRATOR = "administrator"


class Account(SQLModel, table=True):
    """An account in the shared credential store.

    Accounts are created and maintained by the account-management side of the
    backend. The password workflow only reads them (by id or email) and
    replaces ``password_hash``.

    Attributes:
        id: Primary key.
        email: Unique address; lookups are case-insensitive.
        password_hash: Bcrypt hash, never plaintext.
        full_name: Display name used in emails.
        role: One of :class:`Role`.
        created_at: Creation timestamp (UTC).
        updated_at: Last modification timestamp (UTC).
    """

    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(
        sa_column=Column(String(255), unique=True, index=True, nullable=False),
    )
    password_hash: str = Field(max_length=255)
    full_name: Optional[str] = Field(default=None, max_length=255)
    role: str = Field(
        default=Role.USER.value,
        sa_column=Column(String(32), nullable=False, server_default=Role.USER.value),
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(
            DateTime(timezone=True),
            server_default=text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    )
    updated_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True),
    )

    __table_args__ = (
        Index("ix_users_email_lower", text("lower(email)")),
        {"extend_existing": True},
    )
