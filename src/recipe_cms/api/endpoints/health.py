"""Health check endpoints.

Liveness and readiness probes for load balancers.
"""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from recipe_cms.api.dependencies import RuntimeDep
from recipe_cms.engine import check_database_health


router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str = Field(..., description="Health status", examples=["healthy"])
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="Current server timestamp",
    )
    version: str = Field(..., description="Application version")
    environment: str = Field(..., description="Deployment environment")


class ReadinessResponse(HealthResponse):
    """Readiness check response with dependency status."""

    dependencies: dict[str, str] = Field(
        default_factory=dict,
        description="Status of external dependencies",
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness probe",
)
def health_check(request: Request) -> HealthResponse:
    """Check if the service is alive. Does not touch the database."""
    settings = request.app.state.settings
    return HealthResponse(
        status="healthy",
        version=settings.app.version,
        environment=settings.APP_ENV,
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe",
)
def readiness_check(request: Request, runtime: RuntimeDep) -> ReadinessResponse:
    """Check that the database answers."""
    settings = request.app.state.settings
    database_ok = check_database_health(runtime.engine)
    return ReadinessResponse(
        status="ready" if database_ok else "degraded",
        version=settings.app.version,
        environment=settings.APP_ENV,
        dependencies={"database": "healthy" if database_ok else "unhealthy"},
    )
