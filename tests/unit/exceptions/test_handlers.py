"""Unit tests for the API exception handler."""

import unittest
from unittest.mock import Mock, patch

from django.http import Http404

from rest_framework import status
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.views import APIView

from email_queue.exceptions import (
    DownstreamServiceUnavailableError,
    EligibilityReadError,
    QueueAccessError,
    RecipientNotFoundError,
)
from email_queue.exceptions.handlers import custom_exception_handler


class TestCustomExceptionHandler(unittest.TestCase):
    """Test cases for custom exception handler."""

    def setUp(self):
        """Set up test fixtures."""
        self.mock_request = Mock()
        self.mock_request.path = "/api/v1/email-queue/queue-user"
        self.mock_request.method = "POST"

        self.mock_view = Mock(spec=APIView)
        self.mock_view.request = self.mock_request

        self.context = {"view": self.mock_view, "request": self.mock_request}

    @patch("email_queue.exceptions.handlers.get_request_id")
    def test_recipient_not_found_is_404(self, mock_get_request_id):
        """Test that an unknown user maps to 404 with the standard body."""
        mock_get_request_id.return_value = "req-1"

        response = custom_exception_handler(RecipientNotFoundError("ghost"), self.context)

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["status"], 404)
        self.assertEqual(response.data["message"], "User with ID ghost not found")
        self.assertEqual(response.data["request_id"], "req-1")
        self.assertIn("timestamp", response.data)
        self.assertEqual(response["X-Request-ID"], "req-1")

    def test_queue_access_error_is_503(self):
        """Test that an unreachable queue store maps to 503."""
        response = custom_exception_handler(
            QueueAccessError("reading stats", Exception("down")), self.context
        )

        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)

    def test_eligibility_read_error_is_503(self):
        response = custom_exception_handler(
            EligibilityReadError(None, Exception("db down")), self.context
        )

        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertIn("db down", response.data["message"])

    def test_downstream_unavailable_is_503(self):
        response = custom_exception_handler(
            DownstreamServiceUnavailableError("content-service", 502), self.context
        )

        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)

    def test_drf_exceptions_keep_their_status(self):
        """Test DRF exceptions are reshaped but keep their status code."""
        response = custom_exception_handler(
            ValidationError({"userId": ["This field is required."]}), self.context
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["message"], "userId: This field is required.")

    def test_permission_denied(self):
        response = custom_exception_handler(
            PermissionDenied("A valid admin token is required"), self.context
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["message"], "A valid admin token is required")

    def test_django_http404(self):
        response = custom_exception_handler(Http404("missing"), self.context)

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_unexpected_exception_is_500_without_details(self):
        """Test that unknown errors do not leak their message."""
        response = custom_exception_handler(RuntimeError("secret detail"), self.context)

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data["message"], "An internal server error occurred.")
        self.assertNotIn("X-Request-ID", response)
