"""DeliveryClaim model: the idempotency ledger.

A claim row proves that exactly one processing attempt owns the delivery of a
notification type to a user on a given calendar day. The unique constraint on
(user_id, job_type, calendar_day) is the only synchronisation primitive
between concurrent dispatchers.
"""

from typing import ClassVar

from django.db import models

from email_queue.enums import ClaimStatus, JobType


class DeliveryClaim(models.Model):
    """Ledger row for one (user, notification type, day) delivery.

    Attributes:
        user_id: Recipient's user identifier.
        job_type: Notification type being delivered.
        calendar_day: Day in the queue timezone the delivery belongs to.
        address: Address the notification was (or will be) sent to.
        status: processing, sent or failed.
        retry_count: Retries used by the owning attempt.
        error_message: Final error when the delivery failed.
        job: The job that owns the claim, if it still exists.
        claimed_at: When the current owner took the claim.
        sent_at: When the delivery succeeded.
    """

    user_id = models.CharField(max_length=64)
    job_type = models.CharField(max_length=50, choices=JobType.choices())
    calendar_day = models.DateField()
    address = models.CharField(max_length=255, blank=True, default="")
    status = models.CharField(
        max_length=20,
        choices=ClaimStatus.choices(),
        default=ClaimStatus.PROCESSING.value,
    )
    retry_count = models.PositiveSmallIntegerField(default=0)
    error_message = models.TextField(null=True, blank=True)
    job = models.ForeignKey(
        "email_queue.NotificationJob",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="claims",
    )
    claimed_at = models.DateTimeField()
    sent_at = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Django model metadata."""

        db_table = "email_delivery_claims"
        ordering: ClassVar[list[str]] = ["-claimed_at"]
        constraints: ClassVar[list] = [
            models.UniqueConstraint(
                fields=["user_id", "job_type", "calendar_day"],
                name="uniq_delivery_claim_per_day",
            ),
        ]
        indexes: ClassVar[list] = [
            models.Index(fields=["status", "claimed_at"], name="email_claim_status_idx"),
        ]

    def __str__(self) -> str:
        """Return string representation of the claim."""
        return f"{self.job_type} {self.user_id} {self.calendar_day} - {self.status}"

    def __repr__(self) -> str:
        """Return detailed representation of the claim."""
        return (
            f"<DeliveryClaim(user_id={self.user_id}, type={self.job_type}, "
            f"day={self.calendar_day}, status={self.status})>"
        )
