"""Collaborator contracts the dispatcher and batch creator depend on.

Production implementations live beside this module; tests pass fakes that
satisfy the same protocols.
"""

from typing import Any, Protocol

from email_queue.schemas import DigestContent, EligibleUser, RecipientInfo


class ContentGenerator(Protocol):
    def generate_content(self, user_id: str, job_type: str) -> DigestContent | None:
        """Return content for the user, or None when nothing can be generated."""


class DeliveryTransport(Protocol):
    def deliver(
        self, content: DigestContent, address: str, context: dict[str, Any]
    ) -> bool:
        """Send ``content`` to ``address``; True on success."""


class EligibilitySource(Protocol):
    def read_eligibility(self, time_slot: str) -> list[EligibleUser]: ...

    def read_all_enabled(self) -> list[EligibleUser]: ...


class RecipientResolver(Protocol):
    def resolve_recipient(self, user_id: str) -> RecipientInfo | None: ...
