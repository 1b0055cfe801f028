"""Component tests for health check endpoints.

This module tests the health check endpoints through the full Django
request/response cycle, including URL routing and HTTP handling.
"""

from unittest.mock import patch

from django.db import DatabaseError
from django.db.utils import OperationalError
from django.test import Client, TestCase

from email_queue.repositories import JobRepository
from email_queue.services import health_service

BASE_URL = "/api/v1/email-queue"


class TestHealthCheckEndpointIntegration(TestCase):
    """Component tests for health check endpoints through HTTP."""

    def setUp(self):
        """Set up test fixtures."""
        self.client = Client()
        health_service._db_health_cache = None
        health_service._db_health_cache_time = 0.0
        health_service._redis_health_cache = None
        health_service._redis_health_cache_time = 0.0

    def test_queue_health_returns_healthy(self):
        """Test GET health returns 200 when the job table can be counted."""
        response = self.client.get(f"{BASE_URL}/health")

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["status"], "healthy")
        self.assertTrue(data["queue_accessible"])
        self.assertIn("timestamp", data)

    @patch.object(JobRepository, "count_all", side_effect=DatabaseError("relation missing"))
    def test_queue_health_returns_503_when_unreachable(self, _count_all):
        """Test GET health returns 503 when the queue cannot be read."""
        response = self.client.get(f"{BASE_URL}/health")

        self.assertEqual(response.status_code, 503)
        data = response.json()
        self.assertEqual(data["status"], "unhealthy")
        self.assertEqual(data["error"], "relation missing")

    def test_liveness_endpoint_returns_alive(self):
        response = self.client.get(f"{BASE_URL}/health/live")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "alive"})

    def test_readiness_endpoint_returns_ready(self):
        """Test GET health/ready reports both dependencies."""
        response = self.client.get(f"{BASE_URL}/health/ready")

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["status"], "ready")
        self.assertTrue(data["dependencies"]["database"]["healthy"])
        self.assertTrue(data["dependencies"]["redis"]["healthy"])

    @patch("email_queue.services.health_service.connection.ensure_connection")
    def test_readiness_endpoint_returns_503_when_database_down(self, mock_ensure_connection):
        """Test readiness returns 503 when the database is unreachable."""
        mock_ensure_connection.side_effect = OperationalError("Connection refused")

        response = self.client.get(f"{BASE_URL}/health/ready")

        self.assertEqual(response.status_code, 503)
        data = response.json()
        self.assertFalse(data["ready"])
        self.assertEqual(data["status"], "not ready")
        self.assertIn("Connection refused", data["dependencies"]["database"]["message"])

    @patch("email_queue.services.health_service.cache.get", return_value=None)
    def test_readiness_endpoint_degraded_when_redis_down(self, _cache_get):
        response = self.client.get(f"{BASE_URL}/health/ready")

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertTrue(data["degraded"])
        self.assertFalse(data["dependencies"]["redis"]["healthy"])
