"""Retention cleanup and daily statistics rollup."""

from collections.abc import Callable
from datetime import date, datetime, timedelta

from django.core.cache import cache
from django.utils import timezone

import structlog

from email_queue.config import QueueConfig, get_queue_config
from email_queue.constants import PROCESSING_HISTORY_CACHE_KEY, STALE_WORKER_ROW_HOURS
from email_queue.models import BatchRecord, DailyStats
from email_queue.repositories import (
    DailyStatsRepository,
    DeliveryLedger,
    JobRepository,
    WorkerRepository,
)
from email_queue.timeutils import local_day, local_day_bounds

logger = structlog.get_logger(__name__)


class MaintenanceService:
    """Housekeeping run by the scheduler once a day."""

    def __init__(
        self,
        config: QueueConfig | None = None,
        clock: Callable[[], datetime] = timezone.now,
    ):
        self.config = config or get_queue_config()
        self.clock = clock

    def cleanup(self, now: datetime | None = None) -> dict[str, int]:
        """Delete rows older than the retention window.

        Removes finished jobs, finalized claims and batch records older than
        the retention window, and worker rows silent for a day.

        Returns:
            Number of rows deleted per table.
        """
        now = now or self.clock()
        cutoff = now - self.config.retention
        deleted = {
            "jobs": JobRepository.delete_finished_before(cutoff),
            "claims": DeliveryLedger.delete_finalized_before(
                local_day(cutoff, self.config.tzinfo)
            ),
            "batches": BatchRecord.objects.filter(created_at__lt=cutoff).delete()[0],
            "workers": WorkerRepository.delete_silent_since(
                now - timedelta(hours=STALE_WORKER_ROW_HOURS)
            ),
        }
        logger.info(
            "retention_cleanup_finished",
            retention_days=self.config.retention_days,
            **{f"deleted_{table}": count for table, count in deleted.items()},
        )
        return deleted

    def rollup_daily_stats(self, day: date | None = None) -> DailyStats:
        """Summarize jobs finished on ``day`` (default: yesterday, local time)."""
        tz = self.config.tzinfo
        if day is None:
            day = local_day(self.clock(), tz) - timedelta(days=1)

        start, end = local_day_bounds(day, tz)
        summary = JobRepository.summarize_finished(start, end)
        stats = DailyStatsRepository.save_rollup(
            day,
            processed=summary["processed"],
            succeeded=summary["succeeded"],
            failed=summary["failed"],
            avg_processing_time_ms=summary["avg_processing_time_ms"],
        )
        cache.delete(PROCESSING_HISTORY_CACHE_KEY)
        logger.info("daily_stats_generated", date=day.isoformat(), **summary)
        return stats
