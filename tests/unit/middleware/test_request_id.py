"""Unit tests for RequestIDMiddleware."""

import unittest
import uuid

from django.http import HttpRequest, HttpResponse

from email_queue.constants import REQUEST_ID_HEADER
from email_queue.logging.context import get_request_id
from email_queue.middleware.request_id import RequestIDMiddleware


class TestRequestIDMiddleware(unittest.TestCase):
    """Test cases for RequestIDMiddleware."""

    def setUp(self):
        """Set up test fixtures."""
        self.seen_during_request = []

        def get_response(request):
            self.seen_during_request.append(get_request_id())
            return HttpResponse("OK")

        self.middleware = RequestIDMiddleware(get_response)

    def _create_request(self, headers=None):
        request = HttpRequest()
        request.method = "GET"
        request.path = "/api/v1/email-queue/queue"
        for key, value in (headers or {}).items():
            request.META[f"HTTP_{key.upper().replace('-', '_')}"] = value
        return request

    def test_generates_request_id_when_not_present(self):
        """Test that a UUID is generated when no request ID is provided."""
        request = self._create_request()
        response = self.middleware(request)

        uuid.UUID(request.request_id)
        self.assertEqual(response[REQUEST_ID_HEADER], request.request_id)

    def test_uses_existing_request_id(self):
        """Test that an incoming X-Request-ID header is reused."""
        request = self._create_request(headers={REQUEST_ID_HEADER: "abc-123"})

        response = self.middleware(request)

        self.assertEqual(request.request_id, "abc-123")
        self.assertEqual(response[REQUEST_ID_HEADER], "abc-123")

    def test_request_id_only_lives_for_the_request(self):
        """Test the ID is visible to the view and cleared afterwards."""
        request = self._create_request(headers={REQUEST_ID_HEADER: "abc-123"})

        self.middleware(request)

        self.assertEqual(self.seen_during_request, ["abc-123"])
        self.assertIsNone(get_request_id())

    def test_clears_request_id_when_view_raises(self):
        def failing_get_response(request):
            raise RuntimeError("view failed")

        middleware = RequestIDMiddleware(failing_get_response)

        with self.assertRaises(RuntimeError):
            middleware(self._create_request())
        self.assertIsNone(get_request_id())
