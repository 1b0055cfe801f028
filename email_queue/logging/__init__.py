"""Logging utilities for the email queue."""

from email_queue.logging.config import setup_logging
from email_queue.logging.context import (
    clear_job_context,
    clear_request_id,
    get_request_id,
    set_job_context,
    set_request_id,
)

__all__ = [
    "clear_job_context",
    "clear_request_id",
    "get_request_id",
    "set_job_context",
    "set_request_id",
    "setup_logging",
]
