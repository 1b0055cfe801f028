"""Client for the external content service that produces digest content."""

from django.conf import settings

import structlog
from pydantic import ValidationError

from email_queue.exceptions import DownstreamServiceError
from email_queue.schemas import DigestContent
from email_queue.services.downstream.base_downstream_client import (
    BaseDownstreamClient,
)

logger = structlog.get_logger(__name__)


class ContentClient(BaseDownstreamClient):
    """Fetches ready-to-send content for a user and notification type."""

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
    ):
        super().__init__(
            service_name="content-service",
            base_url=base_url or settings.CONTENT_SERVICE_BASE_URL,
            token=settings.CONTENT_SERVICE_TOKEN if token is None else token,
            timeout=timeout or settings.CONTENT_SERVICE_TIMEOUT,
        )

    def generate_content(self, user_id: str, job_type: str) -> DigestContent | None:
        """Ask the content service to generate content for ``user_id``.

        Args:
            user_id: Recipient's user ID
            job_type: Notification type (daily_digest, goal_reminder, ...)

        Returns:
            The generated content, or None when the service has nothing for
            this user (404).

        Raises:
            DownstreamServiceError: On client errors or an invalid response body
            DownstreamServiceUnavailableError: If the service is unavailable
            requests.Timeout: If request times out
            requests.ConnectionError: If connection fails
        """
        url = f"{self.base_url}/users/{user_id}/digests"
        response = self._make_request("POST", url, json_data={"type": job_type})

        if response.status_code == 404:
            logger.warning(
                "content_not_available", user_id=user_id, job_type=job_type
            )
            return None

        try:
            payload = response.json()
            payload.setdefault("user_id", user_id)
            return DigestContent.model_validate(payload)
        except (ValueError, ValidationError, AttributeError) as e:
            logger.error(
                "content_response_invalid",
                user_id=user_id,
                job_type=job_type,
                error=str(e),
            )
            raise DownstreamServiceError(
                message=f"Invalid content response for user {user_id}: {e}",
                service_name=self.service_name,
                status_code=response.status_code,
            ) from e
