"""Admin password endpoints.

A thin layer over :class:`~radio_auth.domain.interfaces.IPasswordService`.
Confirmation emails are sent here after the password operation has already
succeeded, so a delivery failure is logged and never changes the response.
"""

import uuid

import structlog
from fastapi import APIRouter, status

from radio_auth.adapters.api.v1.password.schemas import (
    ChangePasswordRequest,
    CompletePasswordResetRequest,
    MessageResponse,
    PasswordResetRequest,
)
from radio_auth.core.dependencies.auth import CurrentAccount
from radio_auth.core.exceptions import RateLimitExceededError
from radio_auth.domain.services.password.password_service import (
    PASSWORD_CHANGED_MESSAGE,
    PASSWORD_RESET_MESSAGE,
    RESET_REQUESTED_MESSAGE,
)
from radio_auth.infrastructure.dependency_injection.auth_dependencies import (
    EmailServiceDep,
    PasswordServiceDep,
)

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/admin/password", tags=["admin-password"])


@router.post(
    "/change",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Change password",
    responses={
        400: {"description": "New password violates the password policy"},
        401: {"description": "Not authenticated, or current password is incorrect"},
    },
)
async def change_password(
    payload: ChangePasswordRequest,
    current_account: CurrentAccount,
    password_service: PasswordServiceDep,
    email_service: EmailServiceDep,
) -> MessageResponse:
    """Change the password of the signed-in admin account."""
    request_logger = logger.bind(
        correlation_id=str(uuid.uuid4()),
        endpoint="change_password",
        user_id=current_account.id,
    )

    account = await password_service.change_password(
        current_account.id, payload.current_password, payload.new_password
    )

    try:
        await email_service.send_password_changed_email(account)
    except Exception as e:
        request_logger.error(
            "Failed to send password change confirmation email",
            error_type=type(e).__name__,
            error_message=str(e),
        )

    return MessageResponse(message=PASSWORD_CHANGED_MESSAGE)


@router.post(
    "/reset/request",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Request password reset",
    description=(
        "Sends a reset link if the email belongs to an admin account. Always answers "
        "with the same message to prevent email enumeration."
    ),
    responses={429: {"description": "Too many reset requests for this email"}},
)
async def request_password_reset(
    payload: PasswordResetRequest,
    password_service: PasswordServiceDep,
) -> MessageResponse:
    """Start a password reset. Only rate limiting is reported as a failure."""
    request_logger = logger.bind(
        correlation_id=str(uuid.uuid4()),
        endpoint="request_password_reset",
    )

    try:
        result = await password_service.initiate_password_reset(payload.email)
    except RateLimitExceededError:
        raise
    except Exception as e:
        request_logger.error(
            "Password reset request failed - unexpected error",
            error_type=type(e).__name__,
            error_message=str(e),
        )
        return MessageResponse(message=RESET_REQUESTED_MESSAGE)

    return MessageResponse(message=result["message"])


@router.post(
    "/reset/complete",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Complete password reset",
    responses={
        400: {"description": "Invalid or expired token, or password policy violation"},
    },
)
async def complete_password_reset(
    payload: CompletePasswordResetRequest,
    password_service: PasswordServiceDep,
    email_service: EmailServiceDep,
) -> MessageResponse:
    """Redeem a reset token and set a new password."""
    request_logger = logger.bind(
        correlation_id=str(uuid.uuid4()),
        endpoint="complete_password_reset",
    )

    account = await password_service.complete_password_reset(payload.token, payload.new_password)

    try:
        await email_service.send_password_reset_confirmation_email(account)
    except Exception as e:
        request_logger.error(
            "Failed to send password reset confirmation email",
            user_id=account.id,
            error_type=type(e).__name__,
            error_message=str(e),
        )

    return MessageResponse(message=PASSWORD_RESET_MESSAGE)
