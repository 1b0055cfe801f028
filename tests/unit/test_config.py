"""Unit tests for QueueConfig."""

from datetime import timedelta

from django.test import SimpleTestCase, override_settings

from pydantic import ValidationError

from email_queue.config import QueueConfig, get_queue_config


class TestQueueConfig(SimpleTestCase):
    """Tests for configuration loading and validation."""

    def test_defaults(self):
        config = QueueConfig()
        self.assertEqual(config.batch_size, 20)
        self.assertEqual(config.max_retries, 3)
        self.assertEqual(config.hour_tolerance_minutes, 5)
        self.assertEqual(config.claim_stale_after, timedelta(minutes=30))
        self.assertEqual(config.retention, timedelta(days=30))
        self.assertEqual(config.max_jobs_per_pass, 500)

    def test_rejects_unknown_timezone(self):
        with self.assertRaises(ValidationError):
            QueueConfig(timezone="Nowhere/Special")

    def test_rejects_zero_batch_size(self):
        with self.assertRaises(ValidationError):
            QueueConfig(batch_size=0)

    @override_settings(
        EMAIL_QUEUE_ENABLED=False,
        EMAIL_QUEUE_DEV_MODE=True,
        EMAIL_QUEUE={"TIMEZONE": "UTC+01:00", "BATCH_SIZE": 5, "DISPATCH_INTERVAL": 30},
    )
    def test_from_settings(self):
        config = get_queue_config()
        self.assertFalse(config.enabled)
        self.assertTrue(config.dev_mode)
        self.assertEqual(config.timezone, "UTC+01:00")
        self.assertEqual(config.batch_size, 5)
        self.assertEqual(config.dispatch_interval, 30.0)
        # Unset keys fall back to defaults.
        self.assertEqual(config.max_retries, 3)

    def test_config_is_frozen(self):
        config = QueueConfig()
        with self.assertRaises(ValidationError):
            config.batch_size = 10
