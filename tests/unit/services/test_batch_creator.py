"""Unit tests for BatchCreator."""

from datetime import UTC, datetime
from unittest.mock import MagicMock

from django.test import TestCase

from email_queue.enums import JobStatus
from email_queue.exceptions import EligibilityReadError
from email_queue.models import BatchRecord, NotificationJob
from email_queue.services.batch_creator import BatchCreator
from tests.fakes import make_config, make_eligible_user

# 12:03 / 12:07 UTC are 14:03 / 14:07 in Johannesburg.
AT_1403 = datetime(2026, 3, 10, 12, 3, tzinfo=UTC)
AT_1407 = datetime(2026, 3, 10, 12, 7, tzinfo=UTC)


class TestCreateHourlyJobs(TestCase):
    """Tests for hourly batch creation."""

    def setUp(self):
        self.creator = BatchCreator(config=make_config())
        make_eligible_user("u1", time_slot="14:00")
        make_eligible_user("u2", time_slot="14:00")
        make_eligible_user("u3", time_slot="15:00")

    def test_queues_users_for_current_slot_within_window(self):
        queued = self.creator.create_hourly_jobs(now=AT_1403)

        self.assertEqual(queued, 2)
        jobs = NotificationJob.objects.order_by("user_id")
        self.assertEqual([j.user_id for j in jobs], ["u1", "u2"])
        for job in jobs:
            self.assertEqual(job.priority, 5)
            self.assertEqual(job.status, JobStatus.PENDING.value)
            self.assertEqual(job.scheduled_for, AT_1403)
            self.assertEqual(job.payload["created_hour"], "14:00")
            self.assertEqual(job.payload["settings_snapshot"]["user_id"], job.user_id)

    def test_late_tick_queues_nothing(self):
        self.assertEqual(self.creator.create_hourly_jobs(now=AT_1407), 0)
        self.assertEqual(NotificationJob.objects.count(), 0)
        self.assertEqual(BatchRecord.objects.count(), 0)

    def test_forced_run_ignores_window(self):
        self.assertEqual(
            self.creator.create_hourly_jobs(now=AT_1407, enforce_window=False), 2
        )

    def test_writes_one_batch_record(self):
        self.creator.create_hourly_jobs(now=AT_1403)

        batch = BatchRecord.objects.get()
        self.assertEqual(batch.hour_slot, "14:00")
        self.assertEqual(batch.total_users, 2)
        self.assertEqual(batch.queued_jobs, 2)
        self.assertEqual(batch.trigger, "hourly")
        for job in NotificationJob.objects.all():
            self.assertEqual(job.payload["batch_id"], str(batch.batch_id))

    def test_empty_slot_creates_no_batch(self):
        creator = BatchCreator(config=make_config())
        at_0901 = datetime(2026, 3, 10, 7, 1, tzinfo=UTC)
        self.assertEqual(creator.create_hourly_jobs(now=at_0901), 0)
        self.assertEqual(BatchRecord.objects.count(), 0)

    def test_eligibility_failure_is_raised_and_creates_nothing(self):
        eligibility = MagicMock()
        eligibility.read_eligibility.side_effect = EligibilityReadError("14:00")
        creator = BatchCreator(config=make_config(), eligibility=eligibility)

        with self.assertRaises(EligibilityReadError):
            creator.create_hourly_jobs(now=AT_1403)

        self.assertEqual(NotificationJob.objects.count(), 0)

    def test_uses_configured_retry_budget(self):
        creator = BatchCreator(config=make_config(max_retries=1))
        creator.create_hourly_jobs(now=AT_1403)
        self.assertEqual(
            set(NotificationJob.objects.values_list("max_retries", flat=True)), {1}
        )


class TestQueueAllEnabled(TestCase):
    """Tests for the manual all-users trigger."""

    def test_queues_every_enabled_user_at_priority_seven(self):
        make_eligible_user("u1", time_slot="08:00")
        make_eligible_user("u2", time_slot="17:00")
        make_eligible_user("u3", time_slot="17:00", enabled=False)

        queued = BatchCreator(config=make_config()).queue_all_enabled(now=AT_1407)

        self.assertEqual(queued, 2)
        self.assertEqual(
            set(NotificationJob.objects.values_list("priority", flat=True)), {7}
        )
        self.assertEqual(BatchRecord.objects.get().trigger, "manual")
