"""Middleware configuration for the FastAPI application.

Registers CORS for the admin frontend and a request-id middleware that binds
the id into structlog's context variables so every log line of a request
carries it.
"""

import uuid

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from radio_auth.core.config.settings import settings

REQUEST_ID_HEADER = "X-Request-ID"


def configure_middleware(app: FastAPI) -> None:
    """Configure all middleware for the FastAPI application.

    Args:
        app (FastAPI): The FastAPI application instance
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", REQUEST_ID_HEADER],
    )
    app.middleware("http")(request_id_middleware)


async def request_id_middleware(request: Request, call_next):
    """Bind a request id for logging and echo it in the response headers."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id, path=request.url.path)
    try:
        response = await call_next(request)
    finally:
        structlog.contextvars.clear_contextvars()
    response.headers[REQUEST_ID_HEADER] = request_id
    return response
