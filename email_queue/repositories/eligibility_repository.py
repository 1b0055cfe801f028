"""Repository for reading digest eligibility settings."""

from django.db import DatabaseError

import structlog

from email_queue.exceptions import EligibilityReadError
from email_queue.models import EligibilitySetting, RecipientProfile
from email_queue.schemas import EligibleUser

logger = structlog.get_logger(__name__)


class EligibilityRepository:
    """Reads enabled digest settings joined with the recipient's address."""

    @staticmethod
    def read_eligibility(time_slot: str) -> list[EligibleUser]:
        """Return users with digests enabled for ``time_slot`` (``HH:00``).

        Raises:
            EligibilityReadError: If the settings cannot be read.
        """
        return EligibilityRepository._read(time_slot)

    @staticmethod
    def read_all_enabled() -> list[EligibleUser]:
        """Return every user with digests enabled, regardless of slot.

        Raises:
            EligibilityReadError: If the settings cannot be read.
        """
        return EligibilityRepository._read(None)

    @staticmethod
    def _read(time_slot: str | None) -> list[EligibleUser]:
        try:
            settings_qs = EligibilitySetting.objects.filter(enabled=True)
            if time_slot is not None:
                settings_qs = settings_qs.filter(time_slot=time_slot)
            settings_rows = list(settings_qs.order_by("user_id"))

            emails = dict(
                RecipientProfile.objects.filter(
                    user_id__in=[row.user_id for row in settings_rows]
                ).values_list("user_id", "email")
            )
        except DatabaseError as e:
            raise EligibilityReadError(time_slot, e) from e

        eligible = []
        for row in settings_rows:
            email = (emails.get(row.user_id) or "").strip()
            if not email:
                logger.warning(
                    "eligible_user_without_address",
                    user_id=row.user_id,
                    time_slot=row.time_slot,
                )
                continue
            eligible.append(
                EligibleUser(
                    user_id=row.user_id,
                    email=email,
                    time_slot=row.time_slot,
                    settings_snapshot=row.snapshot(),
                )
            )
        return eligible
