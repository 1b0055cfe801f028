"""Repository for worker heartbeat rows."""

from datetime import datetime, timedelta

from django.db.models import F, QuerySet

from email_queue.constants import ACTIVE_WORKER_WINDOW_SECONDS
from email_queue.models import WorkerHeartbeat


class WorkerRepository:
    """Heartbeat persistence for dispatcher workers."""

    @staticmethod
    def upsert(
        worker_id: str,
        status: str,
        now: datetime,
        jobs_processed: int = 0,
        errors: int = 0,
    ) -> WorkerHeartbeat:
        """Write a heartbeat, adding to the worker's counters.

        ``jobs_processed_today`` resets when the stored heartbeat belongs to
        an earlier UTC day.
        """
        heartbeat, created = WorkerHeartbeat.objects.get_or_create(
            worker_id=worker_id,
            defaults={
                "status": status,
                "last_heartbeat": now,
                "started_at": now,
                "jobs_processed_today": jobs_processed,
                "error_count": errors,
            },
        )
        if created:
            return heartbeat

        if heartbeat.last_heartbeat.date() != now.date():
            WorkerHeartbeat.objects.filter(pk=worker_id).update(jobs_processed_today=0)

        WorkerHeartbeat.objects.filter(pk=worker_id).update(
            status=status,
            last_heartbeat=now,
            jobs_processed_today=F("jobs_processed_today") + jobs_processed,
            error_count=F("error_count") + errors,
        )
        heartbeat.refresh_from_db()
        return heartbeat

    @staticmethod
    def active(now: datetime) -> QuerySet[WorkerHeartbeat]:
        """Workers whose heartbeat is younger than the active window."""
        cutoff = now - timedelta(seconds=ACTIVE_WORKER_WINDOW_SECONDS)
        return WorkerHeartbeat.objects.filter(last_heartbeat__gt=cutoff).order_by(
            "worker_id"
        )

    @staticmethod
    def delete_silent_since(cutoff: datetime) -> int:
        deleted, _ = WorkerHeartbeat.objects.filter(last_heartbeat__lt=cutoff).delete()
        return deleted
