"""Recipient and eligibility schemas."""

from typing import Any

from pydantic import Field

from email_queue.schemas.base_schema_model import BaseSchemaModel


class RecipientInfo(BaseSchemaModel):
    """Where and to whom a notification is sent."""

    user_id: str
    email: str
    full_name: str = ""
    business_type: str = ""


class EligibleUser(BaseSchemaModel):
    """A user due a digest in the current hour slot."""

    user_id: str
    email: str
    time_slot: str
    settings_snapshot: dict[str, Any] = Field(default_factory=dict)
