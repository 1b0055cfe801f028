"""Unit tests for the RQ job entry points."""

from unittest.mock import patch

from django.test import SimpleTestCase

from email_queue.jobs import queue_jobs
from email_queue.schemas import DispatchResult


class TestQueueJobs(SimpleTestCase):
    """Tests for admin-triggered background jobs."""

    @patch("email_queue.jobs.queue_jobs.build_dispatcher")
    def test_run_dispatcher_pass_returns_counters(self, mock_build):
        mock_build.return_value.process_queue.return_value = DispatchResult(
            sent=3, errors=1, skipped=1, batches=1
        )

        result = queue_jobs.run_dispatcher_pass()

        self.assertEqual(result, {"sent": 3, "errors": 1, "skipped": 1, "batches": 1})

    @patch("email_queue.jobs.queue_jobs.BatchCreator")
    def test_run_hourly_batch_ignores_window_by_default(self, mock_creator):
        mock_creator.return_value.create_hourly_jobs.return_value = 6

        self.assertEqual(queue_jobs.run_hourly_batch(), 6)
        mock_creator.return_value.create_hourly_jobs.assert_called_once_with(
            enforce_window=False
        )
