"""
Interior Tracker - Health Check Router
"""
import logging
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from interior_tracker.backends.base import Backend
from interior_tracker.services.auth import get_backend

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str
    backend: str


class DetailedHealthResponse(BaseModel):
    """Detailed health check response."""
    status: str
    services: dict


@router.get("/health", response_model=HealthResponse)
async def health_check(backend: Backend = Depends(get_backend)):
    """Liveness check; reports which provider set is active."""
    return HealthResponse(status="healthy", backend=backend.name)


@router.get("/health/detailed", response_model=DetailedHealthResponse)
async def detailed_health_check(backend: Backend = Depends(get_backend)):
    """
    Detailed health check.
    Asks the active provider for its status: its database (local) or the hosted auth endpoint (supabase).
    """
    services = {"api": "healthy"}

    if backend.health is not None:
        services.update(await backend.health())

    overall = "healthy" if all(v == "healthy" for v in services.values()) else "degraded"
    if overall != "healthy":
        logger.warning(f"Detailed health check degraded: {services}")
    return DetailedHealthResponse(status=overall, services=services)
