from __future__ import annotations

"""Request and response models for the admin password endpoints.

Clients send camelCase field names; the models accept snake_case too.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ChangePasswordRequest(_CamelModel):
    """Payload expected by ``POST /admin/password/change``."""

    current_password: str = Field(
        ..., alias="currentPassword", min_length=1, examples=["OldPass123!"]
    )
    new_password: str = Field(
        ...,
        alias="newPassword",
        min_length=1,
        examples=["NewPass456!"],
        description="New password that meets security policy requirements",
    )


class PasswordResetRequest(_CamelModel):
    """Payload expected by ``POST /admin/password/reset/request``."""

    email: EmailStr = Field(..., examples=["editor@resistanceradio.org"])


class CompletePasswordResetRequest(_CamelModel):
    """Payload expected by ``POST /admin/password/reset/complete``."""

    token: str = Field(..., min_length=1, max_length=512, description="Token from the reset email")
    new_password: str = Field(..., alias="newPassword", min_length=1, examples=["NewPass456!"])


class MessageResponse(BaseModel):
    message: str
