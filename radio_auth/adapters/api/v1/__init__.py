"""Version 1 of the HTTP API."""

from fastapi import APIRouter

from radio_auth.adapters.api.v1.health import router as health_router
from radio_auth.adapters.api.v1.password import router as password_router

api_router = APIRouter()
api_router.include_router(password_router)
api_router.include_router(health_router)

__all__ = ["api_router"]
