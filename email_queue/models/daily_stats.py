"""DailyStats model: per-day processing rollup."""

from typing import ClassVar

from django.db import models


class DailyStats(models.Model):
    """Throughput figures for one calendar day in the queue timezone."""

    date = models.DateField(unique=True)
    jobs_processed = models.PositiveIntegerField(default=0)
    succeeded = models.PositiveIntegerField(default=0)
    failed = models.PositiveIntegerField(default=0)
    avg_processing_time_ms = models.FloatField(default=0.0)
    peak_queue_size = models.PositiveIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Django model metadata."""

        db_table = "email_processing_stats"
        ordering: ClassVar[list[str]] = ["-date"]
        verbose_name_plural = "daily stats"

    def __str__(self) -> str:
        """Return string representation of the day's stats."""
        return f"{self.date}: {self.succeeded}/{self.jobs_processed} succeeded"
