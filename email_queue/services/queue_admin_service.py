"""Operations behind the admin API."""

from collections.abc import Callable
from datetime import datetime

from django.utils import timezone

import django_rq
import structlog

from email_queue.config import QueueConfig, get_queue_config
from email_queue.enums import BatchTrigger, JobPriority, JobType
from email_queue.exceptions import RecipientNotFoundError
from email_queue.models import NotificationJob
from email_queue.repositories import JobRepository, RecipientRepository
from email_queue.schemas import QueueUserRequest
from email_queue.services.batch_creator import BatchCreator
from email_queue.timeutils import hour_slot

logger = structlog.get_logger(__name__)

DISPATCH_JOB = "email_queue.jobs.queue_jobs.run_dispatcher_pass"
HOURLY_BATCH_JOB = "email_queue.jobs.queue_jobs.run_hourly_batch"


class QueueAdminService:
    """Manual triggers for operators."""

    def __init__(
        self,
        config: QueueConfig | None = None,
        clock: Callable[[], datetime] = timezone.now,
        queue_name: str = "default",
    ):
        self._config = config
        self.clock = clock
        self.queue_name = queue_name

    @property
    def config(self) -> QueueConfig:
        return self._config or get_queue_config()

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    def queue_all_enabled(self) -> int:
        """Queue a digest (priority 7) for every enabled user."""
        queued = BatchCreator(config=self.config, clock=self.clock).queue_all_enabled()
        logger.info("manual_queue_all", queued_jobs=queued)
        return queued

    def queue_user(self, request: QueueUserRequest) -> NotificationJob:
        """Queue one job (priority 8) for a single user.

        Raises:
            RecipientNotFoundError: If the user has no addressable profile.
            JobInsertError: If the job cannot be written.
        """
        recipient = RecipientRepository.resolve_recipient(request.user_id)
        if recipient is None:
            raise RecipientNotFoundError(request.user_id)

        now = self.clock()
        job = JobRepository.insert(
            NotificationJob(
                job_type=JobType(request.job_type).value,
                user_id=recipient.user_id,
                destination_address=recipient.email,
                priority=int(JobPriority.SINGLE_USER),
                scheduled_for=now,
                max_retries=self.config.max_retries,
                payload={
                    "trigger": BatchTrigger.MANUAL.value,
                    "created_hour": hour_slot(now, self.config.tzinfo),
                },
            )
        )
        logger.info(
            "manual_queue_user",
            user_id=job.user_id,
            job_type=job.job_type,
            job_id=str(job.job_id),
        )
        return job

    def enqueue_dispatch_pass(self) -> str:
        """Schedule a dispatcher pass on the RQ queue; returns the RQ job id."""
        rq_job = django_rq.get_queue(self.queue_name).enqueue(DISPATCH_JOB)
        logger.info("dispatch_pass_enqueued", rq_job_id=rq_job.id)
        return rq_job.id

    def enqueue_hourly_batch(self) -> str:
        """Schedule a forced batch creation on the RQ queue; returns the RQ job id."""
        rq_job = django_rq.get_queue(self.queue_name).enqueue(
            HOURLY_BATCH_JOB, enforce_window=False
        )
        logger.info("hourly_batch_enqueued", rq_job_id=rq_job.id)
        return rq_job.id


queue_admin_service = QueueAdminService()
