"""
Health check endpoints.

Provides endpoints for monitoring application health and readiness.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from shared.config import Settings, get_settings

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    status: str
    store: str
    mail: str


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_settings)) -> HealthResponse:
    """
    Basic health check endpoint.

    Returns 200 if the API is running.
    """
    return HealthResponse(status="healthy", version=settings.app_version)


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(settings: Settings = Depends(get_settings)) -> ReadinessResponse:
    """
    Readiness check endpoint.

    Reports which account store backend is in use and whether it is
    configured, and whether outbound mail goes over SMTP or only to the log.
    """
    if settings.account_store_backend == "memory":
        store = "memory"
    elif settings.supabase_url and settings.supabase_service_role_key:
        store = "supabase"
    else:
        store = "unconfigured"

    return ReadinessResponse(
        status="ready" if store != "unconfigured" else "not_ready",
        store=store,
        mail="smtp" if settings.smtp_host else "log",
    )
