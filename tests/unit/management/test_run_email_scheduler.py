"""Unit tests for the run_email_scheduler management command."""

from io import StringIO
from unittest.mock import patch

from django.core.management import call_command
from django.test import SimpleTestCase, override_settings

COMMAND = "email_queue.management.commands.run_email_scheduler"


class TestRunEmailSchedulerCommand(SimpleTestCase):
    """Tests for starting the scheduler from the command line."""

    @override_settings(EMAIL_QUEUE_ENABLED=False)
    @patch(f"{COMMAND}.EmailScheduler")
    def test_disabled_queue_does_not_start(self, mock_scheduler):
        out = StringIO()

        call_command("run_email_scheduler", stdout=out)

        mock_scheduler.assert_not_called()
        self.assertIn("disabled", out.getvalue())

    @override_settings(EMAIL_QUEUE_ENABLED=False)
    @patch(f"{COMMAND}.signal.signal")
    @patch(f"{COMMAND}.build_dispatcher")
    @patch(f"{COMMAND}.EmailScheduler")
    def test_force_starts_and_dispatches_now(self, mock_scheduler, mock_build, _signal):
        scheduler = mock_scheduler.return_value
        scheduler.wait.side_effect = [False, True]
        out = StringIO()

        call_command("run_email_scheduler", "--force", "--dispatch-now", stdout=out)

        config = mock_build.call_args.kwargs["config"]
        self.assertTrue(config.enabled)
        scheduler.start.assert_called_once_with()
        scheduler.run_dispatch_tick.assert_called_once_with()
        self.assertEqual(scheduler.wait.call_count, 2)
        self.assertIn("Email scheduler stopped", out.getvalue())

    @patch(f"{COMMAND}.signal.signal")
    @patch(f"{COMMAND}.build_dispatcher")
    @patch(f"{COMMAND}.EmailScheduler")
    def test_signal_handler_stops_scheduler(self, mock_scheduler, _build, mock_signal):
        scheduler = mock_scheduler.return_value
        scheduler.wait.return_value = True

        call_command("run_email_scheduler", stdout=StringIO())

        handler = mock_signal.call_args_list[0].args[1]
        handler(15, None)
        scheduler.stop.assert_called_once_with()
