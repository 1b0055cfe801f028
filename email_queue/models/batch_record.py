"""BatchRecord model: one row per batch creation run, for analytics."""

import uuid
from typing import ClassVar

from django.db import models


class BatchRecord(models.Model):
    """Record of a batch of jobs created together.

    Used to join jobs back to the run that produced them; it plays no part in
    control flow.
    """

    batch_id = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    hour_slot = models.CharField(max_length=5, blank=True, default="")
    trigger = models.CharField(max_length=20, default="hourly")
    total_users = models.PositiveIntegerField(default=0)
    queued_jobs = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        """Django model metadata."""

        db_table = "email_batch_records"
        ordering: ClassVar[list[str]] = ["-created_at"]

    def __str__(self) -> str:
        """Return string representation of the batch."""
        return f"{self.trigger} batch {self.hour_slot} ({self.queued_jobs}/{self.total_users})"
