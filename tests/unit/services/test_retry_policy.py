"""Unit tests for RetryPolicy."""

import unittest
from unittest.mock import patch

from email_queue.services.retry_policy import RetryPolicy


class TestRetryPolicy(unittest.TestCase):
    """Tests for backoff delays and retry decisions."""

    def test_backoff_doubles_from_one_second(self):
        policy = RetryPolicy()
        self.assertEqual([policy.delay_for(n) for n in range(3)], [1.0, 2.0, 4.0])

    def test_should_retry_until_budget_spent(self):
        policy = RetryPolicy()
        self.assertTrue(policy.should_retry(0, 3))
        self.assertTrue(policy.should_retry(2, 3))
        self.assertFalse(policy.should_retry(3, 3))

    def test_no_retries_when_budget_is_zero(self):
        self.assertFalse(RetryPolicy().should_retry(0, 0))

    @patch("email_queue.services.retry_policy.random.uniform", return_value=0.05)
    def test_jitter_adds_bounded_amount(self, mock_uniform):
        policy = RetryPolicy(jitter=True)
        self.assertAlmostEqual(policy.delay_for(0), 1.05)
        mock_uniform.assert_called_once_with(0, 0.1)
