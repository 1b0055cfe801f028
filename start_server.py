"""Production entry point for the digest queue service.

One image runs three roles, selected with ``SERVICE_ROLE``:

- ``web`` (default): the admin API under Gunicorn
- ``scheduler``: the hourly batch / dispatcher / housekeeping timers
- ``worker``: an RQ worker for admin-triggered passes
"""

import os
import sys

from gunicorn.app.wsgiapp import run

ROLES = ("web", "scheduler", "worker")


def run_web():
    """Start the admin API using Gunicorn.

    - Binds to 0.0.0.0:8000 for container accessibility
    - 2 worker processes with 2 threads each; the API is low-traffic
    - Logs to stdout/stderr for container log aggregation
    """
    sys.argv = [
        "gunicorn",
        "digest_service.wsgi:application",
        "--bind",
        os.getenv("BIND_ADDRESS", "0.0.0.0:8000"),
        "--workers",
        os.getenv("WEB_CONCURRENCY", "2"),
        "--threads",
        "2",
        "--timeout",
        "60",
        "--access-logfile",
        "-",
        "--error-logfile",
        "-",
    ]
    run()


def run_management_command(*args):
    """Run a Django management command in this process."""
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "digest_service.settings")

    import django  # noqa: PLC0415
    from django.core.management import call_command  # noqa: PLC0415

    django.setup()
    call_command(*args)


def main():
    role = os.getenv("SERVICE_ROLE", "web").strip().lower()
    if role == "web":
        run_web()
    elif role == "scheduler":
        run_management_command("run_email_scheduler")
    elif role == "worker":
        run_management_command("rqworker", "default")
    else:
        sys.exit(f"Unknown SERVICE_ROLE {role!r}; expected one of {', '.join(ROLES)}")


if __name__ == "__main__":
    main()
