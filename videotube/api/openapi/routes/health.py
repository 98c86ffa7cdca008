"""Health check endpoints."""

from enum import Enum

from fastapi import APIRouter
from pydantic import BaseModel, Field

from videotube.api.dependencies import FactoryDep, SettingsDep

router = APIRouter()


class HealthStatus(str, Enum):
    """Health check status."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class ComponentHealth(BaseModel):
    """Health status of a single component."""

    name: str = Field(description="Component name")
    status: HealthStatus = Field(description="Component health status")
    latency_ms: float | None = Field(default=None, description="Check latency")
    message: str | None = Field(default=None, description="Additional details")


class HealthResponse(BaseModel):
    """Health check response."""

    status: HealthStatus = Field(description="Overall health status")
    version: str = Field(description="Application version")
    environment: str = Field(description="Deployment environment")
    components: list[ComponentHealth] = Field(
        default_factory=list,
        description="Individual component health",
    )


class LivenessResponse(BaseModel):
    """Simple liveness response."""

    status: str = Field(default="ok")


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Connectivity of the record store and the object store.",
)
async def health_check(
    settings: SettingsDep,
    factory: FactoryDep,
) -> HealthResponse:
    """Ping both stores; one failing is degraded, both failing is unhealthy."""
    checks = {
        "document_db": factory.get_document_db(),
        "blob_storage": factory.get_blob_storage(),
    }

    components: list[ComponentHealth] = []
    for name, client in checks.items():
        result = await client.health_check()
        components.append(
            ComponentHealth(
                name=name,
                status=(
                    HealthStatus.HEALTHY if result.healthy else HealthStatus.UNHEALTHY
                ),
                latency_ms=round(result.latency_ms, 2),
                message=result.message,
            )
        )

    unhealthy_count = sum(1 for c in components if c.status == HealthStatus.UNHEALTHY)
    if unhealthy_count == 0:
        overall_status = HealthStatus.HEALTHY
    elif unhealthy_count < len(components):
        overall_status = HealthStatus.DEGRADED
    else:
        overall_status = HealthStatus.UNHEALTHY

    return HealthResponse(
        status=overall_status,
        version=settings.app.version,
        environment=settings.app.environment,
        components=components,
    )


@router.get(
    "/health/live",
    response_model=LivenessResponse,
    summary="Liveness probe",
    description="Simple liveness check for container probes.",
)
async def liveness() -> LivenessResponse:
    """Simple liveness check - just verifies the app is running."""
    return LivenessResponse(status="ok")
