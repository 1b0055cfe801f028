"""Pydantic schemas for the email queue."""

from email_queue.schemas.base_schema_model import BaseSchemaModel
from email_queue.schemas.digest_content import DigestContent
from email_queue.schemas.dispatch_result import DispatchResult
from email_queue.schemas.health import (
    DependencyHealth,
    LivenessResponse,
    QueueHealthResponse,
    ReadinessResponse,
)
from email_queue.schemas.queue_request import QueueUserRequest
from email_queue.schemas.recipient import EligibleUser, RecipientInfo
from email_queue.schemas.stats import (
    DailyStatsEntry,
    ProcessingStats,
    QueueOverview,
    QueueStats,
    SystemStats,
    WorkerInfo,
    WorkerStats,
)

__all__ = [
    "BaseSchemaModel",
    "DailyStatsEntry",
    "DependencyHealth",
    "DigestContent",
    "DispatchResult",
    "EligibleUser",
    "LivenessResponse",
    "ProcessingStats",
    "QueueHealthResponse",
    "QueueOverview",
    "QueueStats",
    "QueueUserRequest",
    "ReadinessResponse",
    "RecipientInfo",
    "SystemStats",
    "WorkerInfo",
    "WorkerStats",
]
