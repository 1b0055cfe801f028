"""Database models for the email queue application."""

from email_queue.models.batch_record import BatchRecord
from email_queue.models.daily_stats import DailyStats
from email_queue.models.delivery_claim import DeliveryClaim
from email_queue.models.eligibility_setting import EligibilitySetting
from email_queue.models.notification_job import NotificationJob
from email_queue.models.recipient_profile import RecipientProfile
from email_queue.models.worker_heartbeat import WorkerHeartbeat

__all__ = [
    "BatchRecord",
    "DailyStats",
    "DeliveryClaim",
    "EligibilitySetting",
    "NotificationJob",
    "RecipientProfile",
    "WorkerHeartbeat",
]
