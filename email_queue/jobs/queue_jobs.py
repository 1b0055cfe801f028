"""Background jobs enqueued by the admin API.

These run on an RQ worker so the HTTP request returns immediately.
"""

import structlog

from email_queue.services.batch_creator import BatchCreator
from email_queue.services.dispatcher import build_dispatcher

logger = structlog.get_logger(__name__)


def run_dispatcher_pass() -> dict[str, int]:
    """Run one dispatcher pass and return its counters."""
    result = build_dispatcher().process_queue()
    logger.info("manual_dispatch_pass_finished", **result.model_dump())
    return result.model_dump()


def run_hourly_batch(enforce_window: bool = False) -> int:
    """Create the current hour's jobs.

    Admin-forced runs skip the minute-tolerance window by default.
    """
    queued = BatchCreator().create_hourly_jobs(enforce_window=enforce_window)
    logger.info(
        "manual_hourly_batch_finished",
        queued_jobs=queued,
        enforce_window=enforce_window,
    )
    return queued
