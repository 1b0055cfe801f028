"""Permission classes for the admin API."""

import hmac

from django.conf import settings

import structlog
from rest_framework.permissions import BasePermission

from email_queue.constants import ADMIN_TOKEN_HEADER

logger = structlog.get_logger(__name__)


class HasAdminToken(BasePermission):
    """Require the shared admin token when one is configured.

    With ``EMAIL_QUEUE_ADMIN_TOKEN`` unset every request is allowed, which
    leaves access control to the network layer in front of the service.
    """

    message = "A valid admin token is required"

    def has_permission(self, request, view) -> bool:
        expected = getattr(settings, "EMAIL_QUEUE_ADMIN_TOKEN", "")
        if not expected:
            return True

        provided = request.headers.get(ADMIN_TOKEN_HEADER, "")
        if hmac.compare_digest(provided.encode(), expected.encode()):
            return True

        logger.warning(
            "admin_token_rejected",
            path=request.path,
            method=request.method,
        )
        return False
