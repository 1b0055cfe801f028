"""Middleware components for the digest queue service."""

from email_queue.middleware.process_time import ProcessTimeMiddleware
from email_queue.middleware.request_id import RequestIDMiddleware

__all__ = [
    "ProcessTimeMiddleware",
    "RequestIDMiddleware",
]
