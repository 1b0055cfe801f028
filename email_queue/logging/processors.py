"""Custom structlog processors for correlation context and service metadata."""

import os
import threading

from colorama import Fore, Style, init
from structlog.typing import EventDict, WrappedLogger

from email_queue.logging.context import get_job_context, get_request_id

LEVEL_COLORS = {
    "DEBUG": Fore.CYAN,
    "INFO": Fore.GREEN,
    "WARNING": Fore.YELLOW,
    "ERROR": Fore.RED,
    "CRITICAL": Fore.RED + Style.BRIGHT,
}

init(autoreset=True)


def add_request_context(
    _logger: WrappedLogger, _method_name: str, event_dict: EventDict
) -> EventDict:
    """Add the request ID set by RequestIDMiddleware, if any."""
    request_id = get_request_id()
    if request_id:
        event_dict["request_id"] = request_id
    return event_dict


def add_job_context(
    _logger: WrappedLogger, _method_name: str, event_dict: EventDict
) -> EventDict:
    """Add the job and worker currently handled by this thread.

    Explicit ``job_id``/``worker_id`` keywords on the log call win.
    """
    for key, value in get_job_context().items():
        event_dict.setdefault(key, value)
    return event_dict


def add_service_context(
    _logger: WrappedLogger, _method_name: str, event_dict: EventDict
) -> EventDict:
    """Add service_name and environment to every event."""
    event_dict["service_name"] = os.getenv("SERVICE_NAME", "digest-queue-service")
    event_dict["environment"] = os.getenv("ENVIRONMENT", "development")
    return event_dict


def add_process_info(
    _logger: WrappedLogger, _method_name: str, event_dict: EventDict
) -> EventDict:
    """Add process and thread identifiers to every event."""
    event_dict["process_id"] = os.getpid()
    event_dict["thread_name"] = threading.current_thread().name
    return event_dict


def console_renderer(
    _logger: WrappedLogger, _method_name: str, event_dict: EventDict
) -> str:
    """Render events as ``[LEVEL] timestamp | correlation | logger | event key=value``.

    The correlation column shows the request ID for API calls and the job ID
    for dispatcher work.
    """
    level = event_dict.pop("level", "INFO").upper()
    timestamp = event_dict.pop("timestamp", "")
    logger_name = event_dict.pop("logger", "root")
    message = event_dict.pop("event", "")
    correlation = (
        event_dict.pop("request_id", None) or event_dict.get("job_id") or "-"
    )

    for key in ("service_name", "environment", "process_id", "thread_name"):
        event_dict.pop(key, None)
    exception = event_dict.pop("exception", None)

    extras = " ".join(f"{key}={value}" for key, value in sorted(event_dict.items()))
    level_color = LEVEL_COLORS.get(level, Fore.WHITE)

    formatted = (
        f"{level_color}[{level:<8}]{Style.RESET_ALL} "
        f"{Fore.WHITE}{timestamp}{Style.RESET_ALL} | "
        f"{Fore.MAGENTA}{correlation}{Style.RESET_ALL} | "
        f"{Fore.BLUE}{logger_name}{Style.RESET_ALL} | "
        f"{message}"
    )
    if extras:
        formatted += f" {Fore.WHITE}{extras}{Style.RESET_ALL}"
    if exception:
        formatted += f"\n{exception}"
    return formatted
