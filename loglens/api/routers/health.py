"""Health check router for LogLens API.

This module provides health check endpoints for monitoring
and load balancer integration.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, status
from pydantic import BaseModel

from loglens import __version__
from loglens.api.dependencies import AppSettings

router = APIRouter(prefix="/health", tags=["health"])


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    timestamp: datetime
    version: str
    transport: str


def _health(status_text: str, settings: AppSettings) -> HealthResponse:
    return HealthResponse(
        status=status_text,
        timestamp=datetime.now(timezone.utc),
        version=__version__,
        transport="mock" if settings.mock_mode else "cloudwatch",
    )


@router.get(
    "",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
)
async def health_check(settings: AppSettings) -> HealthResponse:
    """Basic health check endpoint.

    Example:
        GET /health
        {
            "status": "healthy",
            "version": "0.1.0",
            "transport": "cloudwatch"
        }
    """
    return _health("healthy", settings)


@router.get(
    "/ready",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Readiness check",
)
async def readiness_check(settings: AppSettings) -> HealthResponse:
    """Readiness check for load balancers."""
    return _health("ready", settings)


@router.get(
    "/live",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Liveness check",
)
async def liveness_check(settings: AppSettings) -> HealthResponse:
    """Liveness check."""
    return _health("alive", settings)
