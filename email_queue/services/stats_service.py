"""Operational statistics for the admin API."""

import os
import time
from collections.abc import Callable
from datetime import datetime

from django.conf import settings
from django.core.cache import cache
from django.utils import timezone

from email_queue.config import QueueConfig, get_queue_config
from email_queue.constants import (
    PROCESSING_HISTORY_CACHE_KEY,
    PROCESSING_HISTORY_CACHE_TTL,
    PROCESSING_HISTORY_DAYS,
)
from email_queue.enums import JobStatus
from email_queue.repositories import DailyStatsRepository, JobRepository
from email_queue.schemas import (
    DailyStatsEntry,
    ProcessingStats,
    QueueOverview,
    QueueStats,
    SystemStats,
)
from email_queue.services.worker_registry import WorkerRegistry, worker_registry
from email_queue.timeutils import local_day, local_day_bounds

PROCESS_STARTED = time.monotonic()


class StatsService:
    """Read-only views over the queue tables."""

    def __init__(
        self,
        config: QueueConfig | None = None,
        registry: WorkerRegistry | None = None,
        clock: Callable[[], datetime] = timezone.now,
    ):
        self._config = config
        self.registry = registry or worker_registry
        self.clock = clock

    @property
    def config(self) -> QueueConfig:
        return self._config or get_queue_config()

    def queue_stats(self) -> QueueStats:
        now = self.clock()
        counts = JobRepository.status_counts()
        oldest = JobRepository.oldest_pending_created_at()
        today = self._today_summary(now)
        return QueueStats(
            pending=counts[JobStatus.PENDING.value],
            processing=counts[JobStatus.PROCESSING.value],
            completed=counts[JobStatus.COMPLETED.value],
            failed=counts[JobStatus.FAILED.value],
            total=sum(counts.values()),
            oldest_pending_age_seconds=(
                round((now - oldest).total_seconds(), 1) if oldest else None
            ),
            completed_today=today["succeeded"],
            failed_today=today["failed"],
            worker_id=self.registry.worker_id,
        )

    def processing_stats(self) -> ProcessingStats:
        today = self._today_summary(self.clock())
        history = cache.get(PROCESSING_HISTORY_CACHE_KEY)
        if history is None:
            history = [
                DailyStatsEntry.model_validate(row, from_attributes=True).model_dump(
                    mode="json"
                )
                for row in DailyStatsRepository.recent(PROCESSING_HISTORY_DAYS)
            ]
            cache.set(
                PROCESSING_HISTORY_CACHE_KEY, history, timeout=PROCESSING_HISTORY_CACHE_TTL
            )
        return ProcessingStats(
            processed_today=today["processed"],
            succeeded_today=today["succeeded"],
            failed_today=today["failed"],
            avg_processing_time_ms=today["avg_processing_time_ms"],
            history=history,
        )

    def system_stats(self) -> SystemStats:
        config = self.config
        return SystemStats(
            uptime_seconds=round(time.monotonic() - PROCESS_STARTED, 1),
            environment=settings.ENVIRONMENT,
            timezone=config.timezone,
            process_id=os.getpid(),
            worker_id=self.registry.worker_id,
            dev_mode=config.dev_mode,
        )

    def overview(self) -> QueueOverview:
        return QueueOverview(
            queue=self.queue_stats(),
            processing=self.processing_stats(),
            workers=self.registry.active_workers(),
            system=self.system_stats(),
        )

    def _today_summary(self, now: datetime) -> dict[str, float | int]:
        start, end = local_day_bounds(local_day(now, self.config.tzinfo), self.config.tzinfo)
        return JobRepository.summarize_finished(start, end)


stats_service = StatsService()
