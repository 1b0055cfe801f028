"""NotificationJob model: one durable unit of notification work.

Jobs are created by the hourly batch creator or by admin triggers and are
mutated only by the dispatcher. They are removed by retention cleanup.
"""

import uuid
from typing import ClassVar

from django.db import models

from email_queue.enums import JobStatus, JobType


class NotificationJob(models.Model):
    """A notification to be attempted for one user.

    The auto-increment ``id`` preserves insertion order and is the final
    tie-break when priority and schedule time are equal.

    Attributes:
        job_id: Public identifier exposed through the admin API.
        job_type: Kind of notification (daily_digest, goal_reminder, ...).
        user_id: Recipient's user identifier.
        destination_address: Address resolved when the job was created.
        priority: Dispatch priority, higher is more urgent (1-10).
        scheduled_for: Earliest time the job may be dispatched.
        status: pending, processing, completed or failed.
        retry_count: Delivery retries performed so far.
        max_retries: Retry budget for this job.
        payload: Producer-specific data (batch id, settings snapshot, ...).
        error_message: Last delivery error, kept for operators.
        worker_id: Worker that claimed the job.
        processing_duration_ms: Wall time spent processing, in milliseconds.
    """

    job_id = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    job_type = models.CharField(
        max_length=50,
        choices=JobType.choices(),
        default=JobType.DAILY_DIGEST.value,
    )
    user_id = models.CharField(max_length=64, db_index=True)
    destination_address = models.CharField(max_length=255)
    priority = models.PositiveSmallIntegerField(default=5)
    scheduled_for = models.DateTimeField()
    status = models.CharField(
        max_length=20,
        choices=JobStatus.choices(),
        default=JobStatus.PENDING.value,
    )
    retry_count = models.PositiveSmallIntegerField(default=0)
    max_retries = models.PositiveSmallIntegerField(default=3)
    payload = models.JSONField(default=dict, blank=True)
    error_message = models.TextField(null=True, blank=True)
    worker_id = models.CharField(max_length=100, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    failed_at = models.DateTimeField(null=True, blank=True)
    processing_duration_ms = models.PositiveIntegerField(null=True, blank=True)

    class Meta:
        """Django model metadata."""

        db_table = "email_queue_jobs"
        ordering: ClassVar[list[str]] = ["-priority", "scheduled_for", "id"]
        indexes: ClassVar[list] = [
            models.Index(
                fields=["status", "-priority", "scheduled_for"],
                name="email_job_dispatch_idx",
            ),
            models.Index(fields=["status", "completed_at"], name="email_job_done_idx"),
            models.Index(fields=["status", "failed_at"], name="email_job_failed_idx"),
        ]
        constraints: ClassVar[list] = [
            models.CheckConstraint(
                condition=models.Q(priority__gte=1) & models.Q(priority__lte=10),
                name="email_job_priority_range",
            ),
            models.CheckConstraint(
                condition=models.Q(retry_count__lte=models.F("max_retries")),
                name="email_job_retry_budget",
            ),
        ]

    def __str__(self) -> str:
        """Return string representation of the job."""
        return f"{self.job_type} for {self.user_id} ({self.status})"

    def __repr__(self) -> str:
        """Return detailed representation of the job."""
        return (
            f"<NotificationJob(job_id={self.job_id}, type={self.job_type}, "
            f"user_id={self.user_id}, status={self.status}, "
            f"priority={self.priority})>"
        )

    @property
    def is_terminal(self) -> bool:
        """Whether the job reached completed or failed."""
        return self.status in {status.value for status in JobStatus.terminal()}

    @property
    def can_retry(self) -> bool:
        """Whether another delivery attempt fits in the retry budget."""
        return self.retry_count < self.max_retries
