# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Provides health check endpoints for monitoring and load balancers.
# =============================================================================

import asyncio
from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel

from app.config import settings
from app.dependencies import ProfileServiceDep, SessionManagerDep

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================

class HealthResponse(BaseModel):
    """Basic health check response."""
    status: str
    timestamp: str
    environment: str
    version: str


class ChecksResponse(BaseModel):
    """Individual service checks."""
    profiles: str
    session: str


class ReadinessResponse(BaseModel):
    """Readiness check response."""
    status: str
    checks: ChecksResponse
    timestamp: str


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint.

    Returns basic health status for load balancers and monitoring.
    """
    return HealthResponse(
        status="healthy",
        timestamp=_now(),
        environment=settings.ENVIRONMENT,
        version="1.0.0",
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(profiles: ProfileServiceDep, manager: SessionManagerDep):
    """
    Readiness check endpoint.

    Ready once the profile table answers and the first identity
    notification has been applied.
    """
    checks = ChecksResponse(profiles="unknown", session="unknown")

    try:
        await asyncio.to_thread(profiles.count_admins)
        checks.profiles = "healthy"
    except Exception as e:
        checks.profiles = f"unhealthy: {str(e)[:50]}"

    checks.session = "loading" if manager.session.state.loading else "healthy"

    all_healthy = checks.profiles == "healthy" and checks.session == "healthy"

    return ReadinessResponse(
        status="ready" if all_healthy else "degraded",
        checks=checks,
        timestamp=_now(),
    )


@router.get("/health/live")
async def liveness_check():
    """
    Liveness check endpoint.

    Returns whether the service process is alive.
    """
    return {"status": "alive", "timestamp": _now()}
