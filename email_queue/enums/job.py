"""Queue-related enumerations.

This module contains the job types, lifecycle states and priorities used by
the notification job queue and the delivery ledger.
"""

from enum import Enum, IntEnum


class JobType(str, Enum):
    """Kinds of notification a job can deliver."""

    DAILY_DIGEST = "daily_digest"
    GOAL_REMINDER = "goal_reminder"
    MILESTONE_ALERT = "milestone_alert"

    @classmethod
    def choices(cls) -> list[tuple[str, str]]:
        """Return Django model choices for the enum."""
        return [(member.value, member.value) for member in cls]


class JobStatus(str, Enum):
    """Lifecycle of a notification job.

    Jobs only move forward: PENDING -> PROCESSING -> COMPLETED | FAILED.
    Retries happen while the job is PROCESSING.
    """

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @classmethod
    def choices(cls) -> list[tuple[str, str]]:
        """Return Django model choices for the enum."""
        return [(member.value, member.value) for member in cls]

    @classmethod
    def terminal(cls) -> tuple["JobStatus", ...]:
        """Statuses with no further automatic transition."""
        return (cls.COMPLETED, cls.FAILED)


class ClaimStatus(str, Enum):
    """Status of an idempotency claim in the delivery ledger."""

    PROCESSING = "processing"
    SENT = "sent"
    FAILED = "failed"

    @classmethod
    def choices(cls) -> list[tuple[str, str]]:
        """Return Django model choices for the enum."""
        return [(member.value, member.value) for member in cls]


class WorkerStatus(str, Enum):
    """Liveness state reported by a dispatcher worker."""

    ACTIVE = "active"
    IDLE = "idle"
    ERROR = "error"
    STOPPED = "stopped"

    @classmethod
    def choices(cls) -> list[tuple[str, str]]:
        """Return Django model choices for the enum."""
        return [(member.value, member.value) for member in cls]


class BatchTrigger(str, Enum):
    """What caused a batch of jobs to be created."""

    HOURLY = "hourly"
    MANUAL = "manual"


class JobPriority(IntEnum):
    """Priorities assigned by the different job producers.

    Higher values are dispatched first.
    """

    HOURLY_BATCH = 5
    MANUAL_ALL = 7
    SINGLE_USER = 8


class ClaimOutcome(str, Enum):
    """Result of trying to take ownership of a delivery."""

    CLAIMED = "claimed"
    ALREADY_CLAIMED = "already_claimed"


class JobOutcome(str, Enum):
    """How the dispatcher finished with a single job."""

    SENT = "sent"
    SKIPPED = "skipped"
    FAILED = "failed"
