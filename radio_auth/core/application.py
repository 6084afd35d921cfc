"""Application factory for creating and configuring the FastAPI application.

This module provides a factory function to create a properly configured FastAPI application
with all necessary middleware, exception handlers, and routers registered.
"""

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from radio_auth.adapters.api.v1 import api_router
from radio_auth.core.config.settings import settings
from radio_auth.core.handlers import register_exception_handlers
from radio_auth.core.lifecycle import create_lifespan_manager
from radio_auth.core.middleware import configure_middleware


def create_application(with_lifespan: bool = True) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        with_lifespan: Run the startup database check. Tests that drive the
            app in-process with overridden dependencies turn it off.

    Returns:
        FastAPI: The configured FastAPI application instance
    """
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description="Admin password change and reset service for the Resistance Radio backend.",
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        lifespan=create_lifespan_manager() if with_lifespan else None,
        default_response_class=JSONResponse,
    )

    configure_middleware(app)
    register_exception_handlers(app)
    app.include_router(api_router, prefix=settings.API_PREFIX)

    return app
