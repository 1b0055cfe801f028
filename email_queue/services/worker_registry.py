"""Worker identity and heartbeat bookkeeping."""

import os
import socket
from collections.abc import Callable
from datetime import datetime

from django.db import DatabaseError
from django.utils import timezone

import structlog

from email_queue.enums import WorkerStatus
from email_queue.repositories import WorkerRepository
from email_queue.schemas import WorkerInfo, WorkerStats

logger = structlog.get_logger(__name__)


def default_worker_id() -> str:
    """Identify this process as ``worker-<host>-<pid>``."""
    return f"worker-{socket.gethostname()}-{os.getpid()}"


class WorkerRegistry:
    """Writes this process's heartbeat and reports live workers.

    Heartbeat failures are logged and swallowed: liveness reporting must not
    stop a dispatcher pass.
    """

    def __init__(
        self,
        worker_id: str | None = None,
        clock: Callable[[], datetime] = timezone.now,
    ):
        self.worker_id = worker_id or default_worker_id()
        self.clock = clock

    def heartbeat(
        self,
        status: WorkerStatus = WorkerStatus.ACTIVE,
        jobs_processed: int = 0,
        errors: int = 0,
    ) -> None:
        try:
            WorkerRepository.upsert(
                self.worker_id,
                status.value,
                self.clock(),
                jobs_processed=jobs_processed,
                errors=errors,
            )
        except DatabaseError as e:
            logger.warning(
                "worker_heartbeat_failed",
                worker_id=self.worker_id,
                status=status.value,
                error=str(e),
            )

    def mark_stopped(self) -> None:
        self.heartbeat(WorkerStatus.STOPPED)

    def active_workers(self) -> WorkerStats:
        """Workers with a heartbeat inside the active window."""
        rows = WorkerRepository.active(self.clock())
        workers = [
            WorkerInfo(
                worker_id=row.worker_id,
                status=row.status,
                last_heartbeat=row.last_heartbeat.isoformat(),
                jobs_processed_today=row.jobs_processed_today,
                error_count=row.error_count,
            )
            for row in rows
        ]
        return WorkerStats(active_workers=len(workers), workers=workers)


worker_registry = WorkerRegistry()
