"""Repository for recipient lookups."""

from email_queue.models import RecipientProfile
from email_queue.schemas import RecipientInfo


class RecipientRepository:
    """Resolves user IDs to addressable recipients."""

    @staticmethod
    def resolve_recipient(user_id: str) -> RecipientInfo | None:
        """Return the recipient for ``user_id``, or None if unknown or unaddressable."""
        profile = RecipientProfile.objects.filter(user_id=user_id).first()
        if profile is None or not profile.email:
            return None
        return RecipientInfo.model_validate(profile)
