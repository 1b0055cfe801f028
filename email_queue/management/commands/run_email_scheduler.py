"""Run the email queue scheduler in the foreground."""

import signal

from django.core.management.base import BaseCommand

from email_queue.config import get_queue_config
from email_queue.services.dispatcher import build_dispatcher
from email_queue.services.scheduler import EmailScheduler


class Command(BaseCommand):
    """Start the hourly batch, dispatcher and housekeeping timers.

    Runs until SIGTERM or SIGINT; in-flight work finishes before exit.
    """

    help = "Run the email queue scheduler until SIGTERM/SIGINT"

    def add_arguments(self, parser):
        parser.add_argument(
            "--force",
            action="store_true",
            help="Run even when EMAIL_QUEUE_ENABLED is off",
        )
        parser.add_argument(
            "--dispatch-now",
            action="store_true",
            help="Run one dispatcher pass immediately after start",
        )

    def handle(self, *args, **options):
        config = get_queue_config()
        if not config.enabled and not options["force"]:
            self.stdout.write(
                self.style.WARNING(
                    "Email queue is disabled in this environment; "
                    "set EMAIL_QUEUE_ENABLED=true or pass --force"
                )
            )
            return

        if options["force"]:
            config = config.model_copy(update={"enabled": True})

        scheduler = EmailScheduler(dispatcher=build_dispatcher(config=config), config=config)

        def _shutdown(signum, _frame):
            self.stdout.write(f"Received signal {signum}, stopping scheduler")
            scheduler.stop()

        signal.signal(signal.SIGTERM, _shutdown)
        signal.signal(signal.SIGINT, _shutdown)

        scheduler.start()
        self.stdout.write(
            self.style.SUCCESS(
                f"Email scheduler running (timezone {config.timezone}, "
                f"dispatch every {config.dispatch_interval:g}s)"
            )
        )
        if options["dispatch_now"]:
            scheduler.run_dispatch_tick()

        while not scheduler.wait(timeout=1.0):
            pass
        self.stdout.write("Email scheduler stopped")
