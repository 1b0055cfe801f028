"""Base client for downstream service communication."""

from typing import Any

import requests
import structlog

from email_queue.exceptions import (
    DownstreamServiceError,
    DownstreamServiceUnavailableError,
)
from email_queue.logging.context import get_request_id

logger = structlog.get_logger(__name__)


class BaseDownstreamClient:
    """Base class for downstream service HTTP clients.

    Uses a static bearer token when one is configured.
    """

    def __init__(
        self,
        service_name: str,
        base_url: str,
        token: str = "",
        timeout: float = 10,
        session: requests.Session | None = None,
    ):
        """Initialize base downstream client.

        Args:
            service_name: Name of the downstream service (for logging/errors)
            base_url: Base URL for the service
            token: Bearer token sent with every request, if set
            timeout: Request timeout in seconds
            session: Session to reuse connections across requests
        """
        self.service_name = service_name
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get_headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        request_id = get_request_id()
        if request_id:
            headers["X-Request-ID"] = request_id
        return headers

    def _make_request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        json_data: dict[str, Any] | None = None,
    ) -> requests.Response:
        """Make HTTP request with error handling.

        404 responses are returned to the caller, which decides what a
        missing resource means.

        Raises:
            DownstreamServiceError: For client errors (4xx except 404)
            DownstreamServiceUnavailableError: For server errors (5xx)
            requests.Timeout: For timeout errors
            requests.ConnectionError: For connection errors
        """
        try:
            response = self.session.request(
                method=method,
                url=url,
                headers=self._get_headers(),
                params=params,
                json=json_data,
                timeout=self.timeout,
            )
        except requests.Timeout:
            logger.error(
                "downstream_request_timeout",
                service=self.service_name,
                method=method,
                url=url,
                timeout=self.timeout,
            )
            raise
        except requests.ConnectionError as e:
            logger.error(
                "downstream_connection_failed",
                service=self.service_name,
                method=method,
                url=url,
                error=str(e),
            )
            raise

        logger.debug(
            "downstream_response",
            service=self.service_name,
            method=method,
            url=url,
            status_code=response.status_code,
        )

        if response.status_code >= 500:
            logger.error(
                "downstream_server_error",
                service=self.service_name,
                status_code=response.status_code,
                response_text=response.text[:500],
            )
            raise DownstreamServiceUnavailableError(
                service_name=self.service_name,
                status_code=response.status_code,
            )

        if response.status_code >= 400 and response.status_code != 404:
            logger.error(
                "downstream_client_error",
                service=self.service_name,
                status_code=response.status_code,
                response_text=response.text[:500],
            )
            raise DownstreamServiceError(
                message=(
                    f"{self.service_name} returned "
                    f"{response.status_code}: {response.text}"
                ),
                service_name=self.service_name,
                status_code=response.status_code,
            )

        return response
