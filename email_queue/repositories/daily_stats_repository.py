"""Repository for per-day processing statistics."""

from datetime import date

from django.db import IntegrityError, transaction

from email_queue.models import DailyStats


class DailyStatsRepository:
    """Upserts and reads ``DailyStats`` rows."""

    @staticmethod
    def record_peak_queue_size(day: date, queue_size: int) -> None:
        """Raise the day's peak queue size if ``queue_size`` exceeds it."""
        stats = DailyStatsRepository._get_or_create(day)
        DailyStats.objects.filter(pk=stats.pk, peak_queue_size__lt=queue_size).update(
            peak_queue_size=queue_size
        )

    @staticmethod
    def save_rollup(
        day: date,
        processed: int,
        succeeded: int,
        failed: int,
        avg_processing_time_ms: float,
    ) -> DailyStats:
        """Store the rollup for ``day``; the recorded peak queue size is kept."""
        stats = DailyStatsRepository._get_or_create(day)
        stats.jobs_processed = processed
        stats.succeeded = succeeded
        stats.failed = failed
        stats.avg_processing_time_ms = avg_processing_time_ms
        stats.save(
            update_fields=[
                "jobs_processed",
                "succeeded",
                "failed",
                "avg_processing_time_ms",
                "updated_at",
            ]
        )
        return stats

    @staticmethod
    def recent(days: int) -> list[DailyStats]:
        return list(DailyStats.objects.order_by("-date")[:days])

    @staticmethod
    def _get_or_create(day: date) -> DailyStats:
        try:
            with transaction.atomic():
                stats, _ = DailyStats.objects.get_or_create(date=day)
        except IntegrityError:
            stats = DailyStats.objects.get(date=day)
        return stats
