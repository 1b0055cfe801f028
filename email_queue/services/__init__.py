"""Services for the email queue app."""

from email_queue.services.health_service import HealthService, health_service
from email_queue.services.stats_service import StatsService, stats_service
from email_queue.services.worker_registry import WorkerRegistry, worker_registry

# Import the dispatcher, scheduler and admin service from their own modules.

__all__ = [
    "HealthService",
    "StatsService",
    "WorkerRegistry",
    "health_service",
    "stats_service",
    "worker_registry",
]
