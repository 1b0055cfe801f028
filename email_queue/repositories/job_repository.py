"""Repository for the notification job queue."""

from datetime import datetime

from django.db import DatabaseError, transaction
from django.db.models import Avg, Count, F, Min, Q, QuerySet

import structlog

from email_queue.enums import JobStatus
from email_queue.exceptions import JobInsertError, QueueAccessError
from email_queue.models import NotificationJob

logger = structlog.get_logger(__name__)

DISPATCH_ORDER = ("-priority", "scheduled_for", "id")


class JobRepository:
    """Durable queue operations on ``NotificationJob`` rows.

    Every status change is a conditional update on the current status, so
    two dispatchers racing for the same row cannot both move it forward.
    """

    @staticmethod
    def fetch_due(now: datetime, limit: int) -> list[NotificationJob]:
        """Return pending jobs due at ``now`` in dispatch order.

        Ordered by priority (highest first), then ``scheduled_for``, then
        insertion order.

        Raises:
            QueueAccessError: If the queue cannot be read.
        """
        try:
            return list(
                NotificationJob.objects.filter(
                    status=JobStatus.PENDING.value, scheduled_for__lte=now
                ).order_by(*DISPATCH_ORDER)[:limit]
            )
        except DatabaseError as e:
            raise QueueAccessError("fetching pending jobs", e) from e

    @staticmethod
    def count_pending() -> int:
        return NotificationJob.objects.filter(status=JobStatus.PENDING.value).count()

    @staticmethod
    def count_all() -> int:
        return NotificationJob.objects.count()

    @staticmethod
    def insert(job: NotificationJob) -> NotificationJob:
        """Insert a single job.

        Raises:
            JobInsertError: If the row could not be written.
        """
        try:
            job.save(force_insert=True)
        except DatabaseError as e:
            raise JobInsertError(job.user_id, e) from e
        return job

    @staticmethod
    def insert_many(jobs: list[NotificationJob]) -> int:
        """Insert jobs in one statement, falling back to one insert per job.

        A failed bulk insert rolls back as a whole; the per-job fallback then
        keeps every row that can be written and logs the rest.

        Returns:
            Number of jobs written.
        """
        if not jobs:
            return 0

        try:
            with transaction.atomic():
                NotificationJob.objects.bulk_create(jobs)
            return len(jobs)
        except DatabaseError as e:
            logger.warning(
                "bulk_job_insert_failed",
                job_count=len(jobs),
                error=str(e),
            )

        inserted = 0
        for job in jobs:
            # bulk_create may have assigned a pk before the rollback.
            job.pk = None
            try:
                with transaction.atomic():
                    JobRepository.insert(job)
                inserted += 1
            except JobInsertError as e:
                logger.error(
                    "job_insert_failed",
                    user_id=e.user_id,
                    job_type=job.job_type,
                    error=str(e),
                )
        return inserted

    @staticmethod
    def mark_processing(job: NotificationJob, worker_id: str, now: datetime) -> bool:
        """Take ownership of a pending job.

        Returns:
            True if this caller moved the job to processing, False if another
            dispatcher got there first.
        """
        updated = NotificationJob.objects.filter(
            pk=job.pk, status=JobStatus.PENDING.value
        ).update(
            status=JobStatus.PROCESSING.value,
            worker_id=worker_id,
            started_at=now,
        )
        if updated:
            job.status = JobStatus.PROCESSING.value
            job.worker_id = worker_id
            job.started_at = now
        return updated == 1

    @staticmethod
    def record_retry(job: NotificationJob, error_message: str) -> bool:
        """Consume one retry from the job's budget.

        Returns:
            False when the budget is already spent.
        """
        updated = NotificationJob.objects.filter(
            pk=job.pk,
            status=JobStatus.PROCESSING.value,
            retry_count__lt=F("max_retries"),
        ).update(retry_count=F("retry_count") + 1, error_message=error_message)
        if updated:
            job.retry_count += 1
            job.error_message = error_message
        return updated == 1

    @staticmethod
    def mark_completed(
        job: NotificationJob, now: datetime, duration_ms: int | None = None
    ) -> bool:
        """Move a processing job to completed.

        Returns:
            False if the job was not processing; ``job`` is then left as is.
        """
        updated = NotificationJob.objects.filter(
            pk=job.pk, status=JobStatus.PROCESSING.value
        ).update(
            status=JobStatus.COMPLETED.value,
            completed_at=now,
            processing_duration_ms=duration_ms,
        )
        if updated:
            job.status = JobStatus.COMPLETED.value
            job.completed_at = now
            job.processing_duration_ms = duration_ms
        return updated == 1

    @staticmethod
    def mark_failed(
        job: NotificationJob,
        now: datetime,
        error_message: str,
        duration_ms: int | None = None,
    ) -> bool:
        """Move a processing job to failed.

        Returns:
            False if the job was not processing; ``job`` is then left as is.
        """
        updated = NotificationJob.objects.filter(
            pk=job.pk, status=JobStatus.PROCESSING.value
        ).update(
            status=JobStatus.FAILED.value,
            failed_at=now,
            error_message=error_message,
            processing_duration_ms=duration_ms,
        )
        if updated:
            job.status = JobStatus.FAILED.value
            job.failed_at = now
            job.error_message = error_message
            job.processing_duration_ms = duration_ms
        return updated == 1

    @staticmethod
    def status_counts() -> dict[str, int]:
        """Return the number of jobs per status, zero-filled.

        Raises:
            QueueAccessError: If the queue cannot be read.
        """
        counts = {status.value: 0 for status in JobStatus}
        try:
            rows = list(NotificationJob.objects.values("status").annotate(n=Count("id")))
        except DatabaseError as e:
            raise QueueAccessError("reading queue stats", e) from e
        for row in rows:
            counts[row["status"]] = row["n"]
        return counts

    @staticmethod
    def oldest_pending_created_at() -> datetime | None:
        try:
            return NotificationJob.objects.filter(
                status=JobStatus.PENDING.value
            ).aggregate(oldest=Min("created_at"))["oldest"]
        except DatabaseError as e:
            raise QueueAccessError("reading queue stats", e) from e

    @staticmethod
    def finished_between(start: datetime, end: datetime) -> QuerySet[NotificationJob]:
        """Jobs that reached a terminal status in ``[start, end)``."""
        return NotificationJob.objects.filter(
            Q(
                status=JobStatus.COMPLETED.value,
                completed_at__gte=start,
                completed_at__lt=end,
            )
            | Q(status=JobStatus.FAILED.value, failed_at__gte=start, failed_at__lt=end)
        )

    @staticmethod
    def summarize_finished(start: datetime, end: datetime) -> dict[str, float | int]:
        """Aggregate terminal jobs in ``[start, end)``.

        Returns:
            Dictionary with processed, succeeded, failed and
            avg_processing_time_ms (successful jobs only).

        Raises:
            QueueAccessError: If the queue cannot be read.
        """
        finished = JobRepository.finished_between(start, end)
        try:
            summary = finished.aggregate(
                processed=Count("id"),
                succeeded=Count("id", filter=Q(status=JobStatus.COMPLETED.value)),
                failed=Count("id", filter=Q(status=JobStatus.FAILED.value)),
                avg_ms=Avg(
                    "processing_duration_ms",
                    filter=Q(
                        status=JobStatus.COMPLETED.value,
                        processing_duration_ms__isnull=False,
                    ),
                ),
            )
        except DatabaseError as e:
            raise QueueAccessError("reading queue stats", e) from e
        return {
            "processed": summary["processed"] or 0,
            "succeeded": summary["succeeded"] or 0,
            "failed": summary["failed"] or 0,
            "avg_processing_time_ms": round(float(summary["avg_ms"] or 0.0), 2),
        }

    @staticmethod
    def delete_finished_before(cutoff: datetime) -> int:
        """Delete completed and failed jobs that finished before ``cutoff``."""
        deleted, _ = NotificationJob.objects.filter(
            Q(status=JobStatus.COMPLETED.value, completed_at__lt=cutoff)
            | Q(status=JobStatus.FAILED.value, failed_at__lt=cutoff)
        ).delete()
        return deleted
