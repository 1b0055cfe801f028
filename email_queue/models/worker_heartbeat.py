"""WorkerHeartbeat model: liveness signal for dispatcher workers."""

from datetime import datetime, timedelta
from typing import ClassVar

from django.db import models

from email_queue.constants import ACTIVE_WORKER_WINDOW_SECONDS
from email_queue.enums import WorkerStatus


class WorkerHeartbeat(models.Model):
    """Heartbeat row written periodically by each worker process.

    A worker counts as active while its last heartbeat is younger than five
    minutes.
    """

    worker_id = models.CharField(max_length=100, primary_key=True)
    status = models.CharField(
        max_length=20,
        choices=WorkerStatus.choices(),
        default=WorkerStatus.ACTIVE.value,
    )
    last_heartbeat = models.DateTimeField()
    jobs_processed_today = models.PositiveIntegerField(default=0)
    error_count = models.PositiveIntegerField(default=0)
    started_at = models.DateTimeField()

    class Meta:
        """Django model metadata."""

        db_table = "email_worker_status"
        ordering: ClassVar[list[str]] = ["-last_heartbeat"]
        indexes: ClassVar[list] = [
            models.Index(fields=["last_heartbeat"], name="email_worker_beat_idx"),
        ]

    def __str__(self) -> str:
        """Return string representation of the worker."""
        return f"{self.worker_id} ({self.status})"

    def is_active(self, now: datetime) -> bool:
        """Whether the heartbeat is recent enough to count the worker as alive."""
        return now - self.last_heartbeat < timedelta(seconds=ACTIVE_WORKER_WINDOW_SECONDS)
