"""Django application configuration for the email queue."""

from django.apps import AppConfig
from django.conf import settings


class EmailQueueConfig(AppConfig):
    """Configuration class for the email_queue application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "email_queue"
    verbose_name = "Email digest queue"

    def ready(self) -> None:
        """Configure structured logging once the app registry is loaded."""
        if getattr(settings, "STRUCTURED_LOGGING", False):
            from email_queue.logging.config import setup_logging  # noqa: PLC0415

            setup_logging()
