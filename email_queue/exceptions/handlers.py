"""Global exception handler for the email queue admin API."""

import logging
import traceback
from datetime import UTC, datetime
from typing import Any

from django.conf import settings
from django.http import Http404

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

from email_queue.exceptions.downstream_exceptions import DownstreamServiceError
from email_queue.exceptions.queue_exceptions import (
    EligibilityReadError,
    QueueAccessError,
    RecipientNotFoundError,
)
from email_queue.logging.context import get_request_id

logger = logging.getLogger(__name__)


def custom_exception_handler(
    exc: Exception, context: dict[str, Any]
) -> Response | None:
    """Custom exception handler for Django REST Framework.

    Renders every error as ``{status, message, request_id, timestamp}`` and
    logs the details needed by operators.

    Args:
        exc: The exception that was raised.
        context: Context dictionary containing request and view information.

    Returns:
        A Response object with the error details.
    """
    view = context.get("view")
    request = getattr(view, "request", None) if view else context.get("request")
    request_id = get_request_id()

    response = exception_handler(exc, context)

    if response is not None:
        response.data = _create_error_response(
            status_code=response.status_code,
            message=_describe_api_exception(exc, response),
            request_id=request_id,
        )
    elif isinstance(exc, (RecipientNotFoundError, Http404)):
        response = Response(
            _create_error_response(
                status_code=status.HTTP_404_NOT_FOUND,
                message=str(exc) or "The requested resource was not found.",
                request_id=request_id,
            ),
            status=status.HTTP_404_NOT_FOUND,
        )
    elif isinstance(
        exc, (QueueAccessError, EligibilityReadError, DownstreamServiceError)
    ):
        response = Response(
            _create_error_response(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                message=str(exc),
                request_id=request_id,
            ),
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    else:
        response = Response(
            _create_error_response(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                message="An internal server error occurred.",
                request_id=request_id,
            ),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if request_id:
        response["X-Request-ID"] = request_id

    _log_exception(exc, request, response)

    return response


def _describe_api_exception(exc: Exception, response: Response) -> str:
    """Flatten a DRF exception's detail into a single message."""
    if isinstance(exc, APIException):
        detail = exc.detail
        if isinstance(detail, dict):
            return "; ".join(
                f"{field}: {', '.join(str(m) for m in messages)}"
                if isinstance(messages, list)
                else f"{field}: {messages}"
                for field, messages in detail.items()
            )
        if isinstance(detail, list):
            return "; ".join(str(item) for item in detail)
        return str(detail)
    return str(response.data)


def _create_error_response(
    status_code: int, message: str, request_id: str | None
) -> dict[str, Any]:
    """Create a standardized error response.

    Args:
        status_code: The HTTP status code.
        message: The error message to return to the client.
        request_id: The request ID for tracing.

    Returns:
        Dictionary with standard error response format.
    """
    return {
        "status": status_code,
        "message": message,
        "request_id": request_id,
        "timestamp": datetime.now(UTC).isoformat(),
    }


def _log_exception(
    exc: Exception,
    request: Any,
    response: Response,
) -> None:
    """Log exception details; 4xx as warnings, everything else as errors."""
    log_level = logging.WARNING if response.status_code < 500 else logging.ERROR

    error_type = type(exc).__name__
    request_path = getattr(request, "path", "unknown")
    request_method = getattr(request, "method", "unknown")

    log_message = (
        f"Exception occurred: {error_type}: {exc} | "
        f"Path: {request_method} {request_path} | "
        f"Status: {response.status_code}"
    )

    if settings.DEBUG:
        stack_trace = "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )
        log_message += f"\nStack trace:\n{stack_trace}"

    logger.log(log_level, log_message)
