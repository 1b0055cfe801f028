"""Dispatcher: drains due jobs through a bounded pool of worker threads.

Each job runs the claim-process-finalize protocol:

0. Move the job from pending to processing with a conditional update.
1. Check the delivery ledger; a sent or live claim means the delivery was
   already handled and the job completes without sending.
2. Claim the (user, job type, calendar day) tuple.
3. Resolve the recipient, generate content and deliver it, retrying with
   exponential backoff while the job has retries left.
4. Finalize the claim and the job as sent/completed or failed.
"""

import threading
import time
from collections.abc import Callable
from concurrent.futures import Executor, ThreadPoolExecutor
from datetime import datetime
from typing import Any

from django.db import DatabaseError, connections
from django.utils import timezone

import structlog

from email_queue.config import QueueConfig, get_queue_config
from email_queue.constants import WORKER_THREAD_PREFIX
from email_queue.enums import JobOutcome, WorkerStatus
from email_queue.logging.context import clear_job_context, set_job_context
from email_queue.models import DeliveryClaim, NotificationJob
from email_queue.repositories import (
    DailyStatsRepository,
    DeliveryLedger,
    JobRepository,
    RecipientRepository,
)
from email_queue.schemas import DispatchResult
from email_queue.services.interfaces import (
    ContentGenerator,
    DeliveryTransport,
    RecipientResolver,
)
from email_queue.services.retry_policy import RetryPolicy
from email_queue.services.worker_registry import WorkerRegistry
from email_queue.timeutils import local_day

logger = structlog.get_logger(__name__)

CONTENT_GENERATION_FAILED = "content generation failed"
DELIVERY_FAILED = "delivery failed"

ExecutorFactory = Callable[..., Executor]


def _elapsed_ms(started: datetime, finished: datetime) -> int:
    return max(int((finished - started).total_seconds() * 1000), 0)


class Dispatcher:
    """Runs dispatcher passes over the job queue.

    Args:
        content: Content generator (the content service client in production)
        transport: Delivery transport (SMTP in production)
        config: Queue configuration, read from settings when omitted
        recipients: Recipient resolver
        registry: Heartbeat registry for this process
        retry_policy: Backoff schedule between attempts
        clock: Returns the current aware datetime
        sleep: Blocks for the given number of seconds
        executor_factory: Builds the per-pass executor; accepts
            ``max_workers`` and ``thread_name_prefix``
    """

    def __init__(
        self,
        content: ContentGenerator,
        transport: DeliveryTransport,
        config: QueueConfig | None = None,
        recipients: RecipientResolver | None = None,
        registry: WorkerRegistry | None = None,
        retry_policy: RetryPolicy | None = None,
        clock: Callable[[], datetime] = timezone.now,
        sleep: Callable[[float], None] = time.sleep,
        executor_factory: ExecutorFactory = ThreadPoolExecutor,
    ):
        self.content = content
        self.transport = transport
        self.config = config or get_queue_config()
        self.recipients = recipients or RecipientRepository()
        self.registry = registry or WorkerRegistry(clock=clock)
        self.retry_policy = retry_policy or RetryPolicy()
        self.ledger = DeliveryLedger(stale_after=self.config.claim_stale_after)
        self.clock = clock
        self.sleep = sleep
        self.executor_factory = executor_factory

    @property
    def worker_id(self) -> str:
        return self.registry.worker_id

    def process_queue(self) -> DispatchResult:
        """Run one pass over the jobs due now.

        Returns:
            Counters for the pass. Individual job failures are counted, never
            raised.

        Raises:
            QueueAccessError: If pending jobs cannot be selected.
        """
        now = self.clock()
        jobs = JobRepository.fetch_due(now, self.config.max_jobs_per_pass)
        self._record_backlog(now)

        if not jobs:
            self.registry.heartbeat(WorkerStatus.IDLE)
            logger.debug("dispatch_pass_empty", worker_id=self.worker_id)
            return DispatchResult()

        self.registry.heartbeat(WorkerStatus.ACTIVE)
        size = self.config.batch_size
        batches = [jobs[i : i + size] for i in range(0, len(jobs), size)]
        logger.info(
            "dispatch_pass_started",
            worker_id=self.worker_id,
            job_count=len(jobs),
            batch_count=len(batches),
        )

        result = DispatchResult(batches=len(batches))
        with self.executor_factory(
            max_workers=size, thread_name_prefix=WORKER_THREAD_PREFIX
        ) as executor:
            for index, batch in enumerate(batches):
                futures = [executor.submit(self._run_job, job) for job in batch]
                for future in futures:
                    outcome = future.result()
                    if outcome is JobOutcome.FAILED:
                        result.errors += 1
                    else:
                        result.sent += 1
                        if outcome is JobOutcome.SKIPPED:
                            result.skipped += 1
                if index < len(batches) - 1 and self.config.inter_batch_delay > 0:
                    self.sleep(self.config.inter_batch_delay)

        self.registry.heartbeat(
            WorkerStatus.IDLE, jobs_processed=result.total, errors=result.errors
        )
        logger.info(
            "dispatch_pass_finished",
            worker_id=self.worker_id,
            sent=result.sent,
            errors=result.errors,
            skipped=result.skipped,
            batches=result.batches,
        )
        return result

    def _record_backlog(self, now: datetime) -> None:
        try:
            DailyStatsRepository.record_peak_queue_size(
                local_day(now, self.config.tzinfo), JobRepository.count_pending()
            )
        except DatabaseError as e:
            logger.warning("peak_queue_size_update_failed", error=str(e))

    def _run_job(self, job: NotificationJob) -> JobOutcome:
        set_job_context(str(job.job_id), self.worker_id)
        try:
            return self.process_job(job)
        except Exception as e:
            logger.exception(
                "job_processing_crashed",
                user_id=job.user_id,
                job_type=job.job_type,
            )
            self._fail_after_crash(job, e)
            return JobOutcome.FAILED
        finally:
            clear_job_context()
            if threading.current_thread().name.startswith(WORKER_THREAD_PREFIX):
                connections.close_all()

    def _fail_after_crash(self, job: NotificationJob, error: Exception) -> None:
        # The claim stays processing and becomes reclaimable once stale.
        try:
            recorded = JobRepository.mark_failed(
                job, self.clock(), f"unexpected error: {error}"
            )
        except DatabaseError:
            logger.exception("job_failure_not_recorded", user_id=job.user_id)
            return
        if not recorded:
            logger.warning(
                "job_failure_not_recorded", user_id=job.user_id, job_status=job.status
            )

    def process_job(self, job: NotificationJob) -> JobOutcome:
        """Run claim-process-finalize for one job."""
        started = self.clock()
        if not JobRepository.mark_processing(job, self.worker_id, started):
            logger.info("job_taken_by_other_dispatcher", user_id=job.user_id)
            return JobOutcome.SKIPPED

        day = local_day(job.scheduled_for, self.config.tzinfo)

        existing = self.ledger.latest_claim(job.user_id, job.job_type, day)
        if self.ledger.is_handled(existing, started):
            return self._complete_duplicate(job, started, existing.status)

        claim_result = self.ledger.try_claim(job, day, job.destination_address, started)
        if not claim_result.claimed:
            return self._complete_duplicate(job, started, "claimed")

        return self._deliver_with_retries(job, claim_result.claim, started)

    def _complete_duplicate(
        self, job: NotificationJob, started: datetime, reason: str
    ) -> JobOutcome:
        now = self.clock()
        JobRepository.mark_completed(job, now, _elapsed_ms(started, now))
        logger.info(
            "duplicate_delivery_suppressed",
            user_id=job.user_id,
            job_type=job.job_type,
            existing_claim=reason,
        )
        return JobOutcome.SKIPPED

    def _deliver_with_retries(
        self, job: NotificationJob, claim: DeliveryClaim, started: datetime
    ) -> JobOutcome:
        while True:
            address, error = self._attempt(job)
            if error is None:
                now = self.clock()
                if not self.ledger.mark_sent(claim, address, now):
                    logger.warning(
                        "delivery_claim_taken_over",
                        user_id=job.user_id,
                        job_type=job.job_type,
                        claim_id=claim.pk,
                    )
                JobRepository.mark_completed(job, now, _elapsed_ms(started, now))
                logger.info(
                    "job_completed",
                    user_id=job.user_id,
                    job_type=job.job_type,
                    retry_count=job.retry_count,
                    duration_ms=job.processing_duration_ms,
                )
                return JobOutcome.SENT

            if not self.retry_policy.should_retry(job.retry_count, job.max_retries):
                break

            delay = self.retry_policy.delay_for(job.retry_count)
            logger.warning(
                "job_attempt_failed",
                user_id=job.user_id,
                retry_count=job.retry_count,
                max_retries=job.max_retries,
                retry_in_seconds=delay,
                error=error,
            )
            self.sleep(delay)
            if not JobRepository.record_retry(job, error):
                break
            self.ledger.record_retry(claim, job.retry_count, error)

        now = self.clock()
        if not self.ledger.mark_failed(claim, error, job.retry_count, now):
            logger.warning(
                "delivery_claim_taken_over",
                user_id=job.user_id,
                job_type=job.job_type,
                claim_id=claim.pk,
            )
        JobRepository.mark_failed(job, now, error, _elapsed_ms(started, now))
        logger.error(
            "job_failed",
            user_id=job.user_id,
            job_type=job.job_type,
            retry_count=job.retry_count,
            error=error,
        )
        return JobOutcome.FAILED

    def _attempt(self, job: NotificationJob) -> tuple[str, str | None]:
        """Make one delivery attempt.

        Returns:
            The address used and an error message, None on success.
        """
        address = job.destination_address
        try:
            recipient = self.recipients.resolve_recipient(job.user_id)
            if recipient is not None:
                address = recipient.email

            content = self.content.generate_content(job.user_id, job.job_type)
            if content is None:
                return address, CONTENT_GENERATION_FAILED

            delivered = self.transport.deliver(content, address, self._context(job))
        except Exception as e:
            return address, str(e) or type(e).__name__

        return address, None if delivered else DELIVERY_FAILED

    @staticmethod
    def _context(job: NotificationJob) -> dict[str, Any]:
        return {
            "job_id": str(job.job_id),
            "job_type": job.job_type,
            "user_id": job.user_id,
        }


def build_dispatcher(**overrides: Any) -> Dispatcher:
    """Dispatcher wired to the content service, SMTP and this process's registry."""
    from email_queue.services.content_client import ContentClient  # noqa: PLC0415
    from email_queue.services.email_service import EmailService  # noqa: PLC0415
    from email_queue.services.worker_registry import worker_registry  # noqa: PLC0415

    overrides.setdefault("content", ContentClient())
    overrides.setdefault("transport", EmailService())
    overrides.setdefault("registry", worker_registry)
    return Dispatcher(**overrides)
