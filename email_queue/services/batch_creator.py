"""Batch creator: turns eligible users into pending notification jobs."""

from collections.abc import Callable
from datetime import datetime

from django.utils import timezone

import structlog

from email_queue.config import QueueConfig, get_queue_config
from email_queue.enums import BatchTrigger, JobPriority, JobType
from email_queue.exceptions import EligibilityReadError
from email_queue.models import BatchRecord, NotificationJob
from email_queue.repositories import EligibilityRepository, JobRepository
from email_queue.schemas import EligibleUser
from email_queue.services.interfaces import EligibilitySource
from email_queue.timeutils import hour_slot, to_local

logger = structlog.get_logger(__name__)


class BatchCreator:
    """Creates one job per user due a digest.

    Args:
        config: Queue configuration, read from settings when omitted
        eligibility: Source of eligible users
        clock: Returns the current aware datetime
    """

    def __init__(
        self,
        config: QueueConfig | None = None,
        eligibility: EligibilitySource | None = None,
        clock: Callable[[], datetime] = timezone.now,
    ):
        self.config = config or get_queue_config()
        self.eligibility = eligibility or EligibilityRepository()
        self.clock = clock

    def create_hourly_jobs(
        self, now: datetime | None = None, enforce_window: bool = True
    ) -> int:
        """Queue digests for every user whose slot is the current local hour.

        Args:
            now: Moment of the tick; defaults to the clock
            enforce_window: Skip the run when the tick arrives more than the
                tolerance past the top of the hour. Forced admin runs pass
                False.

        Returns:
            Number of jobs queued.

        Raises:
            EligibilityReadError: If eligibility cannot be read; no jobs are
                created for the tick.
        """
        now = now or self.clock()
        local_now = to_local(now, self.config.tzinfo)
        slot = hour_slot(now, self.config.tzinfo)

        if enforce_window and local_now.minute > self.config.hour_tolerance_minutes:
            logger.info(
                "hourly_batch_outside_window",
                hour_slot=slot,
                local_minute=local_now.minute,
                tolerance_minutes=self.config.hour_tolerance_minutes,
            )
            return 0

        try:
            users = self.eligibility.read_eligibility(slot)
        except EligibilityReadError:
            logger.exception("hourly_batch_eligibility_failed", hour_slot=slot)
            raise

        if not users:
            logger.info("hourly_batch_no_users", hour_slot=slot)
            return 0

        return self.enqueue_users(
            users,
            slot=slot,
            trigger=BatchTrigger.HOURLY,
            priority=JobPriority.HOURLY_BATCH,
            now=now,
        )

    def queue_all_enabled(self, now: datetime | None = None) -> int:
        """Queue a digest for every enabled user, ignoring their slot.

        Raises:
            EligibilityReadError: If eligibility cannot be read.
        """
        now = now or self.clock()
        users = self.eligibility.read_all_enabled()
        if not users:
            logger.info("manual_batch_no_users")
            return 0
        return self.enqueue_users(
            users,
            slot=hour_slot(now, self.config.tzinfo),
            trigger=BatchTrigger.MANUAL,
            priority=JobPriority.MANUAL_ALL,
            now=now,
        )

    def enqueue_users(
        self,
        users: list[EligibleUser],
        slot: str,
        trigger: BatchTrigger,
        priority: int,
        now: datetime,
    ) -> int:
        """Record a batch and insert one daily digest job per user."""
        batch = BatchRecord.objects.create(
            hour_slot=slot, trigger=trigger.value, total_users=len(users)
        )
        jobs = [
            NotificationJob(
                job_type=JobType.DAILY_DIGEST.value,
                user_id=user.user_id,
                destination_address=user.email,
                priority=int(priority),
                scheduled_for=now,
                max_retries=self.config.max_retries,
                payload={
                    "batch_id": str(batch.batch_id),
                    "settings_snapshot": user.settings_snapshot,
                    "created_hour": slot,
                },
            )
            for user in users
        ]
        queued = JobRepository.insert_many(jobs)

        BatchRecord.objects.filter(pk=batch.pk).update(queued_jobs=queued)
        logger.info(
            "batch_created",
            batch_id=str(batch.batch_id),
            trigger=trigger.value,
            hour_slot=slot,
            total_users=len(users),
            queued_jobs=queued,
        )
        return queued
