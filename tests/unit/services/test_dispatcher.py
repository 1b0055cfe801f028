"""Unit tests for the Dispatcher."""

from datetime import timedelta
from unittest.mock import patch

from django.db import DatabaseError
from django.test import TestCase

from email_queue.enums import ClaimStatus, JobOutcome, JobStatus, WorkerStatus
from email_queue.exceptions import QueueAccessError
from email_queue.models import DailyStats, DeliveryClaim, NotificationJob, WorkerHeartbeat
from email_queue.services.dispatcher import (
    CONTENT_GENERATION_FAILED,
    DELIVERY_FAILED,
    Dispatcher,
)
from email_queue.services.worker_registry import WorkerRegistry
from tests.fakes import (
    FIXED_NOW,
    FakeClock,
    FakeContent,
    FakeRecipients,
    FakeTransport,
    InlineExecutor,
    RecordingSleep,
    make_config,
    make_job,
)


class DispatcherTestCase(TestCase):
    """Builds a dispatcher wired to fakes."""

    def setUp(self):
        InlineExecutor.instances = []
        self.clock = FakeClock()
        self.sleep = RecordingSleep(self.clock)
        self.content = FakeContent()
        self.transport = FakeTransport()
        self.recipients = FakeRecipients()

    def build(self, **config_overrides) -> Dispatcher:
        return Dispatcher(
            content=self.content,
            transport=self.transport,
            config=make_config(**config_overrides),
            recipients=self.recipients,
            registry=WorkerRegistry(worker_id="worker-test", clock=self.clock),
            clock=self.clock,
            sleep=self.sleep,
            executor_factory=InlineExecutor,
        )


class TestProcessQueue(DispatcherTestCase):
    """Tests for a full dispatcher pass."""

    def test_empty_queue(self):
        result = self.build().process_queue()

        self.assertEqual(result.total, 0)
        self.assertEqual(result.batches, 0)
        self.assertEqual(InlineExecutor.instances, [])
        self.assertEqual(
            WorkerHeartbeat.objects.get(pk="worker-test").status,
            WorkerStatus.IDLE.value,
        )

    def test_splits_jobs_into_batches_with_delay_between(self):
        for i in range(45):
            make_job(f"user-{i}")

        result = self.build().process_queue()

        self.assertEqual(result.sent, 45)
        self.assertEqual(result.errors, 0)
        self.assertEqual(result.batches, 3)
        self.assertEqual(self.sleep.calls, [1.0, 1.0])
        executor = InlineExecutor.instances[0]
        self.assertEqual(executor.max_workers, 20)
        self.assertEqual(executor.thread_name_prefix, "email-worker")
        self.assertEqual(len(executor.submitted), 45)

    def test_zero_delay_skips_sleep(self):
        for i in range(25):
            make_job(f"user-{i}")

        self.build(inter_batch_delay=0.0).process_queue()

        self.assertEqual(self.sleep.calls, [])

    def test_higher_priority_dispatched_first(self):
        make_job("low-a", priority=5)
        make_job("low-b", priority=5)
        make_job("urgent", priority=8)

        self.build().process_queue()

        submitted = [job.user_id for job in InlineExecutor.instances[0].submitted]
        self.assertEqual(submitted, ["urgent", "low-a", "low-b"])

    def test_future_jobs_are_not_dispatched(self):
        make_job("later", scheduled_for=FIXED_NOW + timedelta(hours=1))

        result = self.build().process_queue()

        self.assertEqual(result.total, 0)
        self.assertEqual(
            NotificationJob.objects.get().status, JobStatus.PENDING.value
        )

    def test_success_completes_job_and_sends_claim(self):
        job = make_job("user-1")

        result = self.build().process_queue()

        self.assertEqual(result.sent, 1)
        job.refresh_from_db()
        self.assertEqual(job.status, JobStatus.COMPLETED.value)
        self.assertEqual(job.worker_id, "worker-test")
        self.assertEqual(job.completed_at, FIXED_NOW)
        claim = DeliveryClaim.objects.get()
        self.assertEqual(claim.status, ClaimStatus.SENT.value)
        self.assertEqual(claim.address, "user-1@example.com")
        self.assertEqual(str(claim.calendar_day), "2026-03-10")
        _, _, context = self.transport.deliveries[0]
        self.assertEqual(context["job_id"], str(job.job_id))
        self.assertEqual(context["job_type"], "daily_digest")

    def test_duplicate_job_same_day_is_skipped(self):
        make_job("user-1")
        make_job("user-1")

        result = self.build().process_queue()

        self.assertEqual(len(self.transport.deliveries), 1)
        self.assertEqual(result.sent, 2)
        self.assertEqual(result.skipped, 1)
        self.assertEqual(result.errors, 0)
        self.assertEqual(DeliveryClaim.objects.count(), 1)
        self.assertEqual(
            set(NotificationJob.objects.values_list("status", flat=True)),
            {JobStatus.COMPLETED.value},
        )

    def test_second_pass_does_not_resend(self):
        make_job("user-1")
        dispatcher = self.build()
        dispatcher.process_queue()

        make_job("user-1")
        result = dispatcher.process_queue()

        self.assertEqual(result.skipped, 1)
        self.assertEqual(len(self.transport.deliveries), 1)

    def test_failures_are_counted_not_raised(self):
        make_job("ok")
        make_job("broken")
        self.transport = FakeTransport([True, False, False, False, False])

        result = self.build().process_queue()

        self.assertEqual(result.sent, 1)
        self.assertEqual(result.errors, 1)
        self.assertEqual(
            NotificationJob.objects.get(user_id="broken").status,
            JobStatus.FAILED.value,
        )

    def test_queue_read_failure_raises(self):
        with patch.object(
            NotificationJob.objects, "filter", side_effect=DatabaseError("down")
        ):
            with self.assertRaises(QueueAccessError):
                self.build().process_queue()

    def test_records_peak_queue_size(self):
        for i in range(3):
            make_job(f"user-{i}")

        self.build().process_queue()

        stats = DailyStats.objects.get()
        self.assertEqual(str(stats.date), "2026-03-10")
        self.assertEqual(stats.peak_queue_size, 3)

    def test_heartbeat_counts_processed_jobs(self):
        make_job("user-1")
        make_job("user-2")

        self.build().process_queue()

        heartbeat = WorkerHeartbeat.objects.get(pk="worker-test")
        self.assertEqual(heartbeat.status, WorkerStatus.IDLE.value)
        self.assertEqual(heartbeat.jobs_processed_today, 2)
        self.assertEqual(heartbeat.error_count, 0)


class TestProcessJob(DispatcherTestCase):
    """Tests for claim-process-finalize on a single job."""

    def test_retries_three_times_then_fails(self):
        job = make_job("user-1")
        self.transport = FakeTransport([False, False, False, False])

        outcome = self.build().process_job(job)

        self.assertIs(outcome, JobOutcome.FAILED)
        self.assertEqual(len(self.transport.deliveries), 4)
        self.assertEqual(self.sleep.calls, [1.0, 2.0, 4.0])
        job.refresh_from_db()
        self.assertEqual(job.status, JobStatus.FAILED.value)
        self.assertEqual(job.retry_count, 3)
        self.assertEqual(job.error_message, DELIVERY_FAILED)
        claim = DeliveryClaim.objects.get()
        self.assertEqual(claim.status, ClaimStatus.FAILED.value)
        self.assertEqual(claim.retry_count, 3)

    def test_recovers_on_retry(self):
        job = make_job("user-1")
        self.transport = FakeTransport([RuntimeError("smtp timeout"), True])

        outcome = self.build().process_job(job)

        self.assertIs(outcome, JobOutcome.SENT)
        self.assertEqual(self.sleep.calls, [1.0])
        job.refresh_from_db()
        self.assertEqual(job.status, JobStatus.COMPLETED.value)
        self.assertEqual(job.retry_count, 1)
        self.assertEqual(job.processing_duration_ms, 1000)
        self.assertEqual(DeliveryClaim.objects.get().status, ClaimStatus.SENT.value)

    def test_zero_retry_budget_fails_after_one_attempt(self):
        job = make_job("user-1", max_retries=0)
        self.transport = FakeTransport([False])

        outcome = self.build().process_job(job)

        self.assertIs(outcome, JobOutcome.FAILED)
        self.assertEqual(self.sleep.calls, [])

    def test_missing_content_fails_without_delivery(self):
        job = make_job("user-1", max_retries=0)
        self.content = FakeContent([None])

        outcome = self.build().process_job(job)

        self.assertIs(outcome, JobOutcome.FAILED)
        self.assertEqual(self.transport.deliveries, [])
        job.refresh_from_db()
        self.assertEqual(job.error_message, CONTENT_GENERATION_FAILED)

    def test_content_error_message_is_recorded(self):
        job = make_job("user-1", max_retries=0)
        self.content = FakeContent([RuntimeError("content service down")])

        self.build().process_job(job)

        job.refresh_from_db()
        self.assertEqual(job.error_message, "content service down")

    def test_resolved_recipient_overrides_stored_address(self):
        job = make_job("user-1")
        self.recipients = FakeRecipients({"user-1": "new@example.com"})

        self.build().process_job(job)

        self.assertEqual(self.transport.deliveries[0][1], "new@example.com")
        self.assertEqual(DeliveryClaim.objects.get().address, "new@example.com")

    def test_unresolved_recipient_uses_stored_address(self):
        job = make_job("user-1", destination_address="stored@example.com")

        self.build().process_job(job)

        self.assertEqual(self.transport.deliveries[0][1], "stored@example.com")

    def test_job_taken_by_another_dispatcher_is_skipped(self):
        job = make_job("user-1")
        NotificationJob.objects.filter(pk=job.pk).update(
            status=JobStatus.PROCESSING.value
        )

        outcome = self.build().process_job(job)

        self.assertIs(outcome, JobOutcome.SKIPPED)
        self.assertEqual(self.transport.deliveries, [])
        self.assertFalse(DeliveryClaim.objects.exists())

    def test_failed_claim_is_retried_by_later_job(self):
        first = make_job("user-1", max_retries=0)
        self.transport = FakeTransport([False])
        self.build().process_job(first)

        second = make_job("user-1")
        self.transport = FakeTransport([True])
        outcome = self.build().process_job(second)

        self.assertIs(outcome, JobOutcome.SENT)
        claim = DeliveryClaim.objects.get()
        self.assertEqual(claim.status, ClaimStatus.SENT.value)
        self.assertEqual(claim.job_id, second.pk)

    def test_live_claim_suppresses_delivery(self):
        DeliveryClaim.objects.create(
            user_id="user-1",
            job_type="daily_digest",
            calendar_day=FIXED_NOW.date(),
            status=ClaimStatus.PROCESSING.value,
            claimed_at=FIXED_NOW - timedelta(minutes=5),
        )
        job = make_job("user-1")

        outcome = self.build().process_job(job)

        self.assertIs(outcome, JobOutcome.SKIPPED)
        self.assertEqual(self.transport.deliveries, [])
        job.refresh_from_db()
        self.assertEqual(job.status, JobStatus.COMPLETED.value)

    def test_stale_claim_is_taken_over(self):
        DeliveryClaim.objects.create(
            user_id="user-1",
            job_type="daily_digest",
            calendar_day=FIXED_NOW.date(),
            status=ClaimStatus.PROCESSING.value,
            claimed_at=FIXED_NOW - timedelta(hours=1),
        )
        job = make_job("user-1")

        outcome = self.build().process_job(job)

        self.assertIs(outcome, JobOutcome.SENT)
        self.assertEqual(len(self.transport.deliveries), 1)

    def test_unexpected_error_marks_job_failed(self):
        job = make_job("user-1")
        dispatcher = self.build()

        with patch.object(
            dispatcher.ledger, "try_claim", side_effect=RuntimeError("boom")
        ):
            outcome = dispatcher._run_job(job)

        self.assertIs(outcome, JobOutcome.FAILED)
        job.refresh_from_db()
        self.assertEqual(job.status, JobStatus.FAILED.value)
        self.assertEqual(job.error_message, "unexpected error: boom")

    def test_crash_before_processing_leaves_job_pending(self):
        job = make_job("user-1")

        with patch(
            "email_queue.services.dispatcher.JobRepository.mark_processing",
            side_effect=RuntimeError("boom"),
        ):
            outcome = self.build()._run_job(job)

        self.assertIs(outcome, JobOutcome.FAILED)
        self.assertEqual(job.status, JobStatus.PENDING.value)
        self.assertIsNone(job.error_message)
        job.refresh_from_db()
        self.assertEqual(job.status, JobStatus.PENDING.value)
