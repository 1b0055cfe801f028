"""Email transport for sending digests via SMTP."""

import re
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Any

from django.conf import settings

import structlog

from email_queue.schemas import DigestContent

logger = structlog.get_logger(__name__)

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


class EmailService:
    """Delivers generated content over SMTP.

    Builds a multipart message with the HTML body and a plain-text
    alternative (derived from the HTML when the content has none).
    """

    def __init__(self) -> None:
        """Initialize email service with SMTP configuration."""
        self.smtp_host = settings.EMAIL_HOST
        self.smtp_port = settings.EMAIL_PORT
        self.smtp_user = settings.EMAIL_HOST_USER
        self.smtp_password = settings.EMAIL_HOST_PASSWORD
        self.use_tls = settings.EMAIL_USE_TLS
        self.timeout = settings.EMAIL_TIMEOUT
        self.from_email = settings.DEFAULT_FROM_EMAIL
        self.from_name = settings.DEFAULT_FROM_NAME

    def deliver(
        self,
        content: DigestContent,
        address: str,
        context: dict[str, Any] | None = None,
    ) -> bool:
        """Send ``content`` to ``address``.

        Args:
            content: Subject and bodies to send
            address: Recipient email address
            context: Job metadata (job_id, job_type, user_id) used for
                message headers and logging

        Returns:
            True once the SMTP server accepted the message.

        Raises:
            ValueError: If the address is invalid
            smtplib.SMTPException: If the SMTP exchange fails
        """
        context = context or {}
        if not self.is_valid_email(address):
            raise ValueError(f"Invalid email address: {address}")

        message = self._build_message(content, address, context)

        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout) as server:
                if self.use_tls:
                    server.starttls()
                if self.smtp_user and self.smtp_password:
                    server.login(self.smtp_user, self.smtp_password)
                server.send_message(message)
        except smtplib.SMTPException as e:
            logger.error(
                "email_send_failed",
                to_email=address,
                subject=content.subject,
                error=str(e),
                **context,
            )
            raise

        logger.info("email_sent", to_email=address, subject=content.subject, **context)
        return True

    def _build_message(
        self, content: DigestContent, address: str, context: dict[str, Any]
    ) -> MIMEMultipart:
        message = MIMEMultipart("alternative")
        message["Subject"] = content.subject
        message["From"] = formataddr((self.from_name, self.from_email))
        message["To"] = address
        if context.get("job_id"):
            message["X-Notification-Job"] = str(context["job_id"])
        if context.get("job_type"):
            message["X-Notification-Type"] = str(context["job_type"])

        plain = content.text_body or self._html_to_plain(content.html_body)
        message.attach(MIMEText(plain, "plain"))
        message.attach(MIMEText(content.html_body, "html"))
        return message

    @staticmethod
    def is_valid_email(email: str) -> bool:
        return bool(EMAIL_PATTERN.match(email or ""))

    @staticmethod
    def _html_to_plain(html: str) -> str:
        """Convert HTML to plain text."""
        text = re.sub(r"<[^>]+>", "", html)

        text = text.replace("&nbsp;", " ")
        text = text.replace("&lt;", "<")
        text = text.replace("&gt;", ">")
        text = text.replace("&amp;", "&")
        text = text.replace("&quot;", '"')

        text = re.sub(r"\n\s*\n", "\n\n", text)
        return text.strip()
