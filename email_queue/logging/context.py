"""Thread-local context for request and job correlation in logs."""

import threading

_log_context = threading.local()


def set_request_id(request_id: str) -> None:
    """Store the request ID for the current thread."""
    _log_context.request_id = request_id


def get_request_id() -> str | None:
    """Return the current thread's request ID, if any."""
    return getattr(_log_context, "request_id", None)


def clear_request_id() -> None:
    """Forget the current thread's request ID."""
    if hasattr(_log_context, "request_id"):
        delattr(_log_context, "request_id")


def set_job_context(job_id: str, worker_id: str | None = None) -> None:
    """Tag log events from this thread with the job being processed.

    Dispatcher worker threads are reused across jobs, so callers must pair
    this with ``clear_job_context``.
    """
    _log_context.job_id = job_id
    if worker_id is not None:
        _log_context.worker_id = worker_id


def get_job_context() -> dict[str, str]:
    """Return the job/worker tags bound to this thread."""
    context = {}
    job_id = getattr(_log_context, "job_id", None)
    worker_id = getattr(_log_context, "worker_id", None)
    if job_id:
        context["job_id"] = job_id
    if worker_id:
        context["worker_id"] = worker_id
    return context


def clear_job_context() -> None:
    """Remove job/worker tags from this thread."""
    for attr in ("job_id", "worker_id"):
        if hasattr(_log_context, attr):
            delattr(_log_context, attr)
