"""Queue configuration normalised from Django settings."""

from datetime import timedelta

from django.conf import settings

from pydantic import BaseModel, ConfigDict, Field, field_validator

from email_queue.timeutils import parse_timezone


class QueueConfig(BaseModel):
    """Runtime configuration for the email queue.

    Built from the ``EMAIL_QUEUE`` settings dictionary; tests construct it
    directly to override individual values.
    """

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    dev_mode: bool = False
    timezone: str = "Africa/Johannesburg"
    batch_size: int = Field(20, ge=1)
    inter_batch_delay: float = Field(1.0, ge=0.0)
    max_retries: int = Field(3, ge=0)
    retention_days: int = Field(30, ge=1)
    hour_tolerance_minutes: int = Field(5, ge=0, le=59)
    dispatch_interval: float = Field(120.0, gt=0.0)
    claim_stale_minutes: int = Field(30, ge=1)
    max_jobs_per_pass: int = Field(500, ge=1)
    heartbeat_interval: float = Field(30.0, gt=0.0)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        parse_timezone(value)
        return value

    @property
    def tzinfo(self):
        """The tzinfo for the configured business timezone."""
        return parse_timezone(self.timezone)

    @property
    def claim_stale_after(self) -> timedelta:
        return timedelta(minutes=self.claim_stale_minutes)

    @property
    def retention(self) -> timedelta:
        return timedelta(days=self.retention_days)

    @classmethod
    def from_settings(cls) -> "QueueConfig":
        """Build the configuration from Django settings."""
        raw = getattr(settings, "EMAIL_QUEUE", {})
        return cls(
            enabled=getattr(settings, "EMAIL_QUEUE_ENABLED", True),
            dev_mode=getattr(settings, "EMAIL_QUEUE_DEV_MODE", False),
            timezone=raw.get("TIMEZONE", "Africa/Johannesburg"),
            batch_size=raw.get("BATCH_SIZE", 20),
            inter_batch_delay=raw.get("INTER_BATCH_DELAY", 1.0),
            max_retries=raw.get("MAX_RETRIES", 3),
            retention_days=raw.get("RETENTION_DAYS", 30),
            hour_tolerance_minutes=raw.get("HOUR_TOLERANCE_MINUTES", 5),
            dispatch_interval=raw.get("DISPATCH_INTERVAL", 120.0),
            claim_stale_minutes=raw.get("CLAIM_STALE_MINUTES", 30),
            max_jobs_per_pass=raw.get("MAX_JOBS_PER_PASS", 500),
            heartbeat_interval=raw.get("HEARTBEAT_INTERVAL", 30.0),
        )


def get_queue_config() -> QueueConfig:
    """Return the queue configuration for the current settings."""
    return QueueConfig.from_settings()
