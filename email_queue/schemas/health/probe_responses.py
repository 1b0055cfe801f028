"""Health probe response schemas."""

from pydantic import BaseModel, Field

from email_queue.schemas.health.dependency_health import DependencyHealth


class LivenessResponse(BaseModel):
    """Response model for liveness checks."""

    status: str = Field(..., description="Liveness status")


class ReadinessResponse(BaseModel):
    """Response model for readiness checks."""

    ready: bool = Field(..., description="Service is ready to serve requests")
    status: str = Field(
        ..., description="Overall status: 'ready', 'degraded' or 'not ready'"
    )
    degraded: bool = Field(
        False, description="Whether an optional dependency is down"
    )
    dependencies: dict[str, DependencyHealth] = Field(
        ..., description="Status of each dependency"
    )


class QueueHealthResponse(BaseModel):
    """Response model for the queue health check."""

    status: str = Field(..., description="healthy, unhealthy or disabled")
    timestamp: str
    queue_accessible: bool
    worker_id: str | None = None
    error: str | None = None
