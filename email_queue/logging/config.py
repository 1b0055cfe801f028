"""Structlog configuration: JSON file logs plus a colored console stream."""

import logging
import logging.handlers
import os
from pathlib import Path

import structlog

from email_queue.logging.processors import (
    add_job_context,
    add_process_info,
    add_request_context,
    add_service_context,
    console_renderer,
)

MAX_LOG_FILE_BYTES = 50 * 1024 * 1024
LOG_BACKUP_COUNT = 20


def setup_logging() -> None:
    """Configure structlog with JSON file output and colored console output.

    File events carry every correlation field (request, job, worker, process).
    Console events are condensed to ``[LEVEL] timestamp | correlation |
    logger | message``.

    Environment Variables:
    - LOG_FILE_PATH: Path to log file (default: ./logs/digest-queue-service.log)
    - LOG_LEVEL: Logging level (default: INFO)
    """
    log_file_path = os.getenv("LOG_FILE_PATH", "./logs/digest-queue-service.log")
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, log_level, logging.INFO)

    Path(log_file_path).parent.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(format="%(message)s", level=level, handlers=[])

    file_handler = logging.handlers.RotatingFileHandler(
        filename=log_file_path,
        maxBytes=MAX_LOG_FILE_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setLevel(level)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)

    shared_processors = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        add_request_context,
        add_job_context,
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            add_service_context,
            add_process_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Records from stdlib loggers (Django, rq, our own modules) go through
    # the same enrichment via foreign_pre_chain.
    file_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.processors.JSONRenderer(),
            foreign_pre_chain=[
                *shared_processors,
                add_service_context,
                add_process_info,
            ],
        )
    )
    console_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=console_renderer,
            foreign_pre_chain=shared_processors,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    structlog.get_logger(__name__).info(
        "logging_configured",
        log_file=log_file_path,
        log_level=log_level,
        max_file_size_mb=MAX_LOG_FILE_BYTES // (1024 * 1024),
        backup_count=LOG_BACKUP_COUNT,
    )
