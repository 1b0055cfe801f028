"""Data access layer for the email queue."""

from email_queue.repositories.daily_stats_repository import DailyStatsRepository
from email_queue.repositories.delivery_ledger import ClaimResult, DeliveryLedger
from email_queue.repositories.eligibility_repository import EligibilityRepository
from email_queue.repositories.job_repository import JobRepository
from email_queue.repositories.recipient_repository import RecipientRepository
from email_queue.repositories.worker_repository import WorkerRepository

__all__ = [
    "ClaimResult",
    "DailyStatsRepository",
    "DeliveryLedger",
    "EligibilityRepository",
    "JobRepository",
    "RecipientRepository",
    "WorkerRepository",
]
