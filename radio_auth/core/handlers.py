from __future__ import annotations

"""
Global exception handlers for the FastAPI application.

This module contains centralized handlers for the service's exceptions,
translating them into ``{"error": {"message", "code", ...}}`` responses.
Starlette resolves handlers by walking the exception's MRO, so subclasses
registered here always win over their bases.
"""

from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status
from structlog import get_logger

from radio_auth.core.exceptions import (
    AuthenticationError,
    DatabaseError,
    EmailServiceError,
    InvalidTokenError,
    PasswordPolicyError,
    RadioAuthError,
    RateLimitExceededError,
    ValidationError,
)

__all__ = [
    "error_body",
    "authentication_error_handler",
    "password_policy_error_handler",
    "validation_error_handler",
    "invalid_token_error_handler",
    "rate_limit_exceeded_error_handler",
    "email_service_error_handler",
    "database_error_handler",
    "radio_auth_error_handler",
    "request_validation_error_handler",
    "unhandled_exception_handler",
    "register_exception_handlers",
]

logger = get_logger(__name__)


def error_body(message: str, code: str, **extra: Any) -> Dict[str, Any]:
    """Builds the standard error envelope."""
    return {"error": {"message": message, "code": code, **extra}}


def _client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


async def authentication_error_handler(request: Request, exc: AuthenticationError) -> JSONResponse:
    """Handles `AuthenticationError` and `InvalidCurrentPasswordError`, returning a `401`.

    Args:
        request: The incoming `Request` object.
        exc: The `AuthenticationError` instance.

    Returns:
        A `JSONResponse` with a 401 status code and error body.
    """
    logger.warning(
        "Authentication failure",
        error=exc.code,
        client_ip=_client_ip(request),
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content=error_body(exc.message, exc.code),
    )


async def password_policy_error_handler(request: Request, exc: PasswordPolicyError) -> JSONResponse:
    """Handles `PasswordPolicyError`, returning a `400` with the violated rules."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(exc.message, exc.code, details=exc.errors),
    )


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(exc.message, exc.code),
    )


async def invalid_token_error_handler(request: Request, exc: InvalidTokenError) -> JSONResponse:
    """Handles `InvalidTokenError`, returning a `400 Bad Request`.

    The body is identical for every underlying cause (unknown, expired, used,
    orphaned token).
    """
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(exc.message, exc.code),
    )


async def rate_limit_exceeded_error_handler(
    request: Request, exc: RateLimitExceededError
) -> JSONResponse:
    """Handles `RateLimitExceededError`, returning a `429` with the retry delay.

    The delay is sent both in the body (``retryAfter``) and in the standard
    ``Retry-After`` header.

    Args:
        request: The incoming `Request` object.
        exc: The `RateLimitExceededError` instance.

    Returns:
        A `JSONResponse` with a 429 status code and error body.
    """
    logger.warning(
        "domain_rate_limit_exceeded",
        client_ip=_client_ip(request),
        path=request.url.path,
        retry_after_seconds=exc.retry_after_seconds,
    )
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content=error_body(exc.message, exc.code, retryAfter=exc.retry_after_seconds),
        headers={"Retry-After": str(exc.retry_after_seconds)},
    )


async def email_service_error_handler(request: Request, exc: EmailServiceError) -> JSONResponse:
    """Handles `EmailServiceError`, returning a `503 Service Unavailable`."""
    logger.error(
        "Email service interaction failed",
        error_message=str(exc),
        client_ip=_client_ip(request),
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=error_body("Email service is temporarily unavailable", exc.code),
    )


async def database_error_handler(request: Request, exc: DatabaseError) -> JSONResponse:
    """Handles `DatabaseError`, returning an opaque `500`."""
    logger.error(
        "Database error",
        error_message=str(exc),
        client_ip=_client_ip(request),
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("An unexpected error occurred", "SERVER_ERROR"),
    )


async def radio_auth_error_handler(request: Request, exc: RadioAuthError) -> JSONResponse:
    """Fallback for service errors without a dedicated handler."""
    logger.error(
        "Unhandled service error",
        error=exc.code,
        error_message=str(exc),
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("An unexpected error occurred", "SERVER_ERROR"),
    )


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Renders malformed request bodies as `400 INVALID_REQUEST`."""
    details = [
        {"field": ".".join(str(p) for p in err.get("loc", ()) if p != "body"), "message": err.get("msg")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("Invalid request", "INVALID_REQUEST", details=details),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Logs unexpected exceptions with context and returns an opaque `500`."""
    logger.error(
        "Unexpected error",
        error_type=type(exc).__name__,
        error_message=str(exc),
        path=request.url.path,
        method=request.method,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("An unexpected error occurred", "SERVER_ERROR"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Registers all exception handlers with the FastAPI application.

    Args:
        app: The `FastAPI` application instance.
    """
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(AuthenticationError, authentication_error_handler)
    app.add_exception_handler(PasswordPolicyError, password_policy_error_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(InvalidTokenError, invalid_token_error_handler)
    app.add_exception_handler(RateLimitExceededError, rate_limit_exceeded_error_handler)
    app.add_exception_handler(EmailServiceError, email_service_error_handler)
    app.add_exception_handler(DatabaseError, database_error_handler)
    app.add_exception_handler(RadioAuthError, radio_auth_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
