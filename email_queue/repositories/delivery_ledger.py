"""Idempotency ledger guaranteeing at-most-once delivery per user, type and day.

A delivery is owned by whoever holds the ``DeliveryClaim`` row for
(user_id, job_type, calendar_day). Rows are created with get-or-create on the
unique key and taken over only through conditional updates, so the database
arbitrates every race between concurrent dispatchers.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta

from django.db import IntegrityError, transaction
from django.db.models import Q, QuerySet

import structlog

from email_queue.enums import ClaimOutcome, ClaimStatus
from email_queue.models import DeliveryClaim, NotificationJob

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ClaimResult:
    """Outcome of ``DeliveryLedger.try_claim``.

    Losing a race is an expected result, not an error.
    """

    outcome: ClaimOutcome
    claim: DeliveryClaim | None = None

    @property
    def claimed(self) -> bool:
        return self.outcome is ClaimOutcome.CLAIMED


class DeliveryLedger:
    """Read and write delivery claims.

    Args:
        stale_after: Age after which a ``processing`` claim is presumed
            abandoned by a crashed worker and may be taken over.
    """

    def __init__(self, stale_after: timedelta):
        self.stale_after = stale_after

    @staticmethod
    def latest_claim(user_id: str, job_type: str, day: date) -> DeliveryClaim | None:
        return (
            DeliveryClaim.objects.filter(
                user_id=user_id, job_type=job_type, calendar_day=day
            )
            .order_by("-claimed_at")
            .first()
        )

    def is_stale(self, claim: DeliveryClaim, now: datetime) -> bool:
        return (
            claim.status == ClaimStatus.PROCESSING.value
            and claim.claimed_at < now - self.stale_after
        )

    def is_handled(self, claim: DeliveryClaim | None, now: datetime) -> bool:
        """Whether an existing claim means the delivery needs no further work.

        Sent claims and live processing claims count as handled; failed or
        stale claims may be retried by a new owner.
        """
        if claim is None:
            return False
        if claim.status == ClaimStatus.FAILED.value:
            return False
        return not self.is_stale(claim, now)

    def try_claim(
        self,
        job: NotificationJob,
        day: date,
        address: str,
        now: datetime,
    ) -> ClaimResult:
        """Take ownership of the delivery described by ``job`` on ``day``.

        Args:
            job: Job attempting the delivery.
            day: Calendar day in the queue timezone.
            address: Address recorded on the claim until delivery resolves it.
            now: Current time.

        Returns:
            CLAIMED when the caller now owns the delivery, ALREADY_CLAIMED
            when a live or sent claim belongs to someone else.
        """
        try:
            with transaction.atomic():
                claim, created = DeliveryClaim.objects.get_or_create(
                    user_id=job.user_id,
                    job_type=job.job_type,
                    calendar_day=day,
                    defaults={
                        "address": address,
                        "status": ClaimStatus.PROCESSING.value,
                        "job": job,
                        "claimed_at": now,
                    },
                )
        except IntegrityError:
            logger.info(
                "delivery_claim_race_lost",
                user_id=job.user_id,
                job_type=job.job_type,
                calendar_day=day.isoformat(),
            )
            return ClaimResult(ClaimOutcome.ALREADY_CLAIMED)

        if created:
            return ClaimResult(ClaimOutcome.CLAIMED, claim)

        if claim.status == ClaimStatus.FAILED.value or self.is_stale(claim, now):
            return self._reclaim(claim, job, address, now)

        return ClaimResult(ClaimOutcome.ALREADY_CLAIMED, claim)

    @staticmethod
    def _reclaim(
        claim: DeliveryClaim, job: NotificationJob, address: str, now: datetime
    ) -> ClaimResult:
        # Match on the observed status and claimed_at so only one of several
        # concurrent reclaimers can win.
        updated = DeliveryClaim.objects.filter(
            pk=claim.pk, status=claim.status, claimed_at=claim.claimed_at
        ).update(
            status=ClaimStatus.PROCESSING.value,
            job=job,
            address=address,
            claimed_at=now,
            retry_count=0,
            error_message=None,
            sent_at=None,
            updated_at=now,
        )
        if not updated:
            return ClaimResult(ClaimOutcome.ALREADY_CLAIMED, claim)

        logger.info(
            "delivery_reclaimed",
            user_id=claim.user_id,
            job_type=claim.job_type,
            calendar_day=claim.calendar_day.isoformat(),
            previous_status=claim.status,
        )
        claim.refresh_from_db()
        return ClaimResult(ClaimOutcome.CLAIMED, claim)

    @staticmethod
    def _owned(claim: DeliveryClaim) -> QuerySet[DeliveryClaim]:
        # A reclaim swaps the job on the row, so a previous owner matches nothing.
        return DeliveryClaim.objects.filter(
            pk=claim.pk, status=ClaimStatus.PROCESSING.value, job_id=claim.job_id
        )

    @staticmethod
    def record_retry(claim: DeliveryClaim, retry_count: int, error_message: str) -> None:
        DeliveryLedger._owned(claim).update(
            retry_count=retry_count, error_message=error_message
        )

    @staticmethod
    def mark_sent(claim: DeliveryClaim, address: str, now: datetime) -> bool:
        """Finalize a delivery as sent to ``address``.

        Returns:
            False if the claim was taken over by another job in the meantime.
        """
        updated = DeliveryLedger._owned(claim).update(
            status=ClaimStatus.SENT.value,
            address=address,
            sent_at=now,
            error_message=None,
            updated_at=now,
        )
        return updated == 1

    @staticmethod
    def mark_failed(
        claim: DeliveryClaim, error_message: str, retry_count: int, now: datetime
    ) -> bool:
        """Finalize a delivery as failed so a later run may reclaim it.

        Returns:
            False if the claim was taken over by another job in the meantime.
        """
        updated = DeliveryLedger._owned(claim).update(
            status=ClaimStatus.FAILED.value,
            error_message=error_message,
            retry_count=retry_count,
            updated_at=now,
        )
        return updated == 1

    @staticmethod
    def delete_finalized_before(cutoff: date) -> int:
        """Delete sent and failed claims for days before ``cutoff``."""
        deleted, _ = DeliveryClaim.objects.filter(
            Q(status=ClaimStatus.SENT.value) | Q(status=ClaimStatus.FAILED.value),
            calendar_day__lt=cutoff,
        ).delete()
        return deleted
