"""Health status enumeration for service dependencies."""

from enum import Enum


class HealthStatus(str, Enum):
    """Health status enumeration for service dependencies."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    DISABLED = "disabled"
    ERROR = "error"
