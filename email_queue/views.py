"""Admin API views for the email queue."""

import structlog
from pydantic import ValidationError
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from email_queue.constants import DISABLED_MESSAGE
from email_queue.enums import HealthStatus
from email_queue.schemas import QueueHealthResponse, QueueUserRequest
from email_queue.services import health_service, stats_service
from email_queue.services.queue_admin_service import queue_admin_service

logger = structlog.get_logger(__name__)


def disabled_response() -> Response:
    return Response(
        {"message": DISABLED_MESSAGE, "enabled": False}, status=status.HTTP_200_OK
    )


class QueueAdminView(APIView):
    """Base view for admin endpoints that act on the queue.

    When the queue is disabled every handler answers 200 with the
    disabled-state message instead of acting.
    """

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        self.queue_enabled = queue_admin_service.enabled

    def handle_disabled(self) -> Response | None:
        if not self.queue_enabled:
            logger.info("admin_request_while_disabled", path=self.request.path)
            return disabled_response()
        return None


class QueueStatsOverviewView(QueueAdminView):
    """Queue, processing, worker and system statistics."""

    def get(self, _request):
        """Handle GET request for the full statistics overview.

        Returns:
            200 OK with ``{queue, processing, workers, system}``
            503 Service Unavailable if the queue cannot be read
        """
        if disabled := self.handle_disabled():
            return disabled
        overview = stats_service.overview()
        return Response(overview.model_dump(mode="json"), status=status.HTTP_200_OK)


class QueueStatsView(QueueAdminView):
    """Queue depth by status."""

    def get(self, _request):
        if disabled := self.handle_disabled():
            return disabled
        stats = stats_service.queue_stats()
        return Response(stats.model_dump(mode="json"), status=status.HTTP_200_OK)


class ProcessAllView(QueueAdminView):
    """Queue a digest for every enabled user."""

    def post(self, _request):
        """Handle POST request to queue digests for all enabled users.

        Returns:
            200 OK with ``{message, queued_jobs}``
        """
        if disabled := self.handle_disabled():
            return disabled

        queued = queue_admin_service.queue_all_enabled()
        return Response(
            {
                "message": f"Queued {queued} jobs for all enabled users",
                "queued_jobs": queued,
            },
            status=status.HTTP_200_OK,
        )


class QueueUserView(QueueAdminView):
    """Queue a single job for one user."""

    def post(self, request):
        """Handle POST request to queue a job for one user.

        Args:
            request: HTTP request with ``userId`` and optional ``jobType``

        Returns:
            201 Created with ``{message, job_id}``
            400 Bad Request if validation fails
            404 Not Found if the user is unknown
        """
        if disabled := self.handle_disabled():
            return disabled

        try:
            queue_request = QueueUserRequest.model_validate(request.data)
        except ValidationError as e:
            errors = e.errors(include_url=False, include_context=False, include_input=False)
            logger.warning("queue_user_invalid_request", validation_errors=errors)
            return Response(
                {
                    "error": "bad_request",
                    "message": "Invalid request parameters",
                    "errors": errors,
                },
                status=status.HTTP_400_BAD_REQUEST,
            )

        job = queue_admin_service.queue_user(queue_request)
        return Response(
            {
                "message": f"Queued {job.job_type} for user {job.user_id}",
                "job_id": str(job.job_id),
            },
            status=status.HTTP_201_CREATED,
        )


class ProcessPendingView(QueueAdminView):
    """Schedule an immediate dispatcher pass."""

    def post(self, _request):
        if disabled := self.handle_disabled():
            return disabled
        rq_job_id = queue_admin_service.enqueue_dispatch_pass()
        return Response(
            {"message": "Dispatcher pass scheduled", "rq_job_id": rq_job_id},
            status=status.HTTP_202_ACCEPTED,
        )


class CreateHourlyJobsView(QueueAdminView):
    """Schedule batch creation for the current hour, ignoring the minute window."""

    def post(self, _request):
        if disabled := self.handle_disabled():
            return disabled
        rq_job_id = queue_admin_service.enqueue_hourly_batch()
        return Response(
            {"message": "Hourly batch creation scheduled", "rq_job_id": rq_job_id},
            status=status.HTTP_202_ACCEPTED,
        )


class QueueHealthView(QueueAdminView):
    """Queue liveness: healthy iff the job table answers a count.

    Exempt from the admin token so monitors can poll it.
    """

    permission_classes = (AllowAny,)

    def get(self, _request):
        if not self.queue_enabled:
            body = QueueHealthResponse(
                status=HealthStatus.DISABLED.value,
                timestamp=health_service.clock().isoformat(),
                queue_accessible=False,
                error=DISABLED_MESSAGE,
            )
            return Response(body.model_dump(mode="json"), status=status.HTTP_200_OK)

        health = health_service.check_queue()
        http_status = (
            status.HTTP_200_OK
            if health.status == HealthStatus.HEALTHY.value
            else status.HTTP_503_SERVICE_UNAVAILABLE
        )
        return Response(health.model_dump(mode="json"), status=http_status)


class LivenessCheckView(APIView):
    """Liveness probe; never touches dependencies."""

    permission_classes = (AllowAny,)

    def get(self, _request):
        liveness = health_service.get_liveness_status()
        return Response(liveness.model_dump(), status=status.HTTP_200_OK)


class ReadinessCheckView(APIView):
    """Readiness probe reporting database and Redis.

    Returns 503 only when the database is unreachable.
    """

    permission_classes = (AllowAny,)

    def get(self, _request):
        readiness = health_service.get_readiness_status()
        http_status = (
            status.HTTP_200_OK if readiness.ready else status.HTTP_503_SERVICE_UNAVAILABLE
        )
        return Response(readiness.model_dump(mode="json"), status=http_status)
