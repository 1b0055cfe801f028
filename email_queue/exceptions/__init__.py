"""Exception handling utilities for the email queue."""

from email_queue.exceptions.downstream_exceptions import (
    DownstreamServiceError,
    DownstreamServiceUnavailableError,
)
from email_queue.exceptions.handlers import custom_exception_handler
from email_queue.exceptions.queue_exceptions import (
    EligibilityReadError,
    JobInsertError,
    QueueAccessError,
    QueueError,
    RecipientNotFoundError,
)

__all__ = [
    "DownstreamServiceError",
    "DownstreamServiceUnavailableError",
    "EligibilityReadError",
    "JobInsertError",
    "QueueAccessError",
    "QueueError",
    "RecipientNotFoundError",
    "custom_exception_handler",
]
