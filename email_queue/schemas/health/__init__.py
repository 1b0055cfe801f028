"""Health check schemas."""

from email_queue.schemas.health.dependency_health import DependencyHealth
from email_queue.schemas.health.probe_responses import (
    LivenessResponse,
    QueueHealthResponse,
    ReadinessResponse,
)

__all__ = [
    "DependencyHealth",
    "LivenessResponse",
    "QueueHealthResponse",
    "ReadinessResponse",
]
