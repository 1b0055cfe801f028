"""Enumerations for the email queue app."""

from email_queue.enums.health_status import HealthStatus
from email_queue.enums.job import (
    BatchTrigger,
    ClaimOutcome,
    ClaimStatus,
    JobOutcome,
    JobPriority,
    JobStatus,
    JobType,
    WorkerStatus,
)

__all__ = [
    "BatchTrigger",
    "ClaimOutcome",
    "ClaimStatus",
    "HealthStatus",
    "JobOutcome",
    "JobPriority",
    "JobStatus",
    "JobType",
    "WorkerStatus",
]
