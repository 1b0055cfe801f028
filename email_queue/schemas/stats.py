"""Operational statistics schemas for the admin API."""

import datetime

from pydantic import BaseModel, Field


class QueueStats(BaseModel):
    """Snapshot of the job queue."""

    pending: int = 0
    processing: int = 0
    completed: int = 0
    failed: int = 0
    total: int = 0
    oldest_pending_age_seconds: float | None = Field(
        None, description="Age of the oldest pending job, None when empty"
    )
    completed_today: int = 0
    failed_today: int = 0
    worker_id: str


class WorkerInfo(BaseModel):
    """One worker as seen through its heartbeat row."""

    worker_id: str
    status: str
    last_heartbeat: str
    jobs_processed_today: int
    error_count: int


class WorkerStats(BaseModel):
    """Workers with a recent heartbeat."""

    active_workers: int
    workers: list[WorkerInfo] = Field(default_factory=list)


class DailyStatsEntry(BaseModel):
    """One persisted daily rollup row."""

    date: datetime.date
    jobs_processed: int
    succeeded: int
    failed: int
    avg_processing_time_ms: float
    peak_queue_size: int


class ProcessingStats(BaseModel):
    """Today's processing figures plus recent history."""

    processed_today: int = 0
    succeeded_today: int = 0
    failed_today: int = 0
    avg_processing_time_ms: float = 0.0
    history: list[DailyStatsEntry] = Field(default_factory=list)


class SystemStats(BaseModel):
    """Process-level information for the service."""

    uptime_seconds: float
    environment: str
    timezone: str
    process_id: int
    worker_id: str
    dev_mode: bool


class QueueOverview(BaseModel):
    """Combined body of ``GET stats``."""

    queue: QueueStats
    processing: ProcessingStats
    workers: WorkerStats
    system: SystemStats
