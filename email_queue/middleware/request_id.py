"""Request ID middleware for log correlation."""

import uuid
from collections.abc import Callable

from django.http import HttpRequest, HttpResponse

from email_queue.constants import REQUEST_ID_HEADER
from email_queue.logging.context import clear_request_id, set_request_id


class RequestIDMiddleware:
    """Attach a request ID to every request, its logs and its response.

    An incoming ``X-Request-ID`` header is reused; otherwise a UUID is
    generated. The ID lives in thread-local storage for the duration of the
    request only.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())

        set_request_id(request_id)
        request.request_id = request_id  # type: ignore[attr-defined]

        try:
            response = self.get_response(request)
            response[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            clear_request_id()
