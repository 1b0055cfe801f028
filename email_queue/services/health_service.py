"""Health checks for the queue and its dependencies."""

import time
from collections.abc import Callable
from datetime import datetime

from django.core.cache import cache
from django.db import connection
from django.db.utils import OperationalError
from django.utils import timezone

import structlog

from email_queue.enums import HealthStatus
from email_queue.repositories import JobRepository
from email_queue.schemas import (
    DependencyHealth,
    LivenessResponse,
    QueueHealthResponse,
    ReadinessResponse,
)
from email_queue.services.worker_registry import WorkerRegistry, worker_registry

logger = structlog.get_logger(__name__)


class HealthService:
    """Queue health plus cached dependency probes."""

    def __init__(
        self,
        cache_ttl_seconds: float = 5.0,
        registry: WorkerRegistry | None = None,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        """Initialize the health service.

        Args:
            cache_ttl_seconds: Time to live for cached dependency results
            registry: Supplies the worker id reported by the queue check
            clock: Returns the current aware datetime
        """
        self.cache_ttl_seconds = cache_ttl_seconds
        self.registry = registry or worker_registry
        self.clock = clock
        self._db_health_cache: DependencyHealth | None = None
        self._db_health_cache_time: float = 0.0
        self._redis_health_cache: DependencyHealth | None = None
        self._redis_health_cache_time: float = 0.0

    def check_queue(self) -> QueueHealthResponse:
        """Report ``healthy`` iff the job table answers a count with an integer."""
        timestamp = self.clock().isoformat()
        try:
            count = JobRepository.count_all()
        except Exception as e:
            logger.error("queue_health_check_failed", error=str(e))
            return QueueHealthResponse(
                status=HealthStatus.UNHEALTHY.value,
                timestamp=timestamp,
                queue_accessible=False,
                worker_id=self.registry.worker_id,
                error=str(e),
            )

        healthy = isinstance(count, int)
        return QueueHealthResponse(
            status=(HealthStatus.HEALTHY if healthy else HealthStatus.UNHEALTHY).value,
            timestamp=timestamp,
            queue_accessible=healthy,
            worker_id=self.registry.worker_id,
            error=None if healthy else f"Unexpected count result: {count!r}",
        )

    def get_liveness_status(self) -> LivenessResponse:
        return LivenessResponse(status="alive")

    def get_readiness_status(self) -> ReadinessResponse:
        """Readiness with database and Redis checks.

        The database is required. Redis only backs the stats cache and the
        admin trigger queue, so losing it degrades the service instead of
        taking it out of rotation.
        """
        db_health = self.check_database_health()
        redis_health = self.check_redis_health()

        if not db_health.healthy:
            ready, degraded, status = False, False, "not ready"
        elif not redis_health.healthy:
            ready, degraded, status = True, True, "degraded"
        else:
            ready, degraded, status = True, False, "ready"

        return ReadinessResponse(
            ready=ready,
            status=status,
            degraded=degraded,
            dependencies={"database": db_health, "redis": redis_health},
        )

    def check_database_health(self) -> DependencyHealth:
        """Check database connectivity, caching the result briefly."""
        current_time = time.time()
        if (
            self._db_health_cache is not None
            and (current_time - self._db_health_cache_time) < self.cache_ttl_seconds
        ):
            return self._db_health_cache

        start_time = time.perf_counter()
        try:
            connection.ensure_connection()
            new_health = DependencyHealth(
                healthy=True,
                status=HealthStatus.HEALTHY,
                message="Database connection successful",
                response_time_ms=(time.perf_counter() - start_time) * 1000,
            )
        except OperationalError as e:
            new_health = DependencyHealth(
                healthy=False,
                status=HealthStatus.UNHEALTHY,
                message=f"Database connection failed: {e!s}",
                response_time_ms=(time.perf_counter() - start_time) * 1000,
            )
            logger.warning("database_health_check_failed", error=str(e))

        self._db_health_cache = new_health
        self._db_health_cache_time = current_time
        return new_health

    def check_redis_health(self) -> DependencyHealth:
        """Check Redis through the Django cache, caching the result briefly."""
        current_time = time.time()
        if (
            self._redis_health_cache is not None
            and (current_time - self._redis_health_cache_time) < self.cache_ttl_seconds
        ):
            return self._redis_health_cache

        start_time = time.perf_counter()
        try:
            test_key = "__health_check__"
            cache.set(test_key, "ok", timeout=1)
            if cache.get(test_key) == "ok":
                new_health = DependencyHealth(
                    healthy=True,
                    status=HealthStatus.HEALTHY,
                    message="Redis connection successful",
                    response_time_ms=(time.perf_counter() - start_time) * 1000,
                )
            else:
                new_health = DependencyHealth(
                    healthy=False,
                    status=HealthStatus.UNHEALTHY,
                    message="Redis health check failed: unexpected result",
                    response_time_ms=(time.perf_counter() - start_time) * 1000,
                )
        except Exception as e:
            new_health = DependencyHealth(
                healthy=False,
                status=HealthStatus.ERROR,
                message=f"Redis connection failed: {e!s}",
                response_time_ms=(time.perf_counter() - start_time) * 1000,
            )
            logger.warning("redis_health_check_failed", error=str(e))

        self._redis_health_cache = new_health
        self._redis_health_cache_time = current_time
        return new_health


health_service = HealthService()
