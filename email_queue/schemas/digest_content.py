"""Digest content schema returned by the content service."""

from typing import Any

from pydantic import Field

from email_queue.schemas.base_schema_model import BaseSchemaModel


class DigestContent(BaseSchemaModel):
    """Ready-to-send content for one user's notification."""

    user_id: str = Field(..., description="User the content was generated for")
    subject: str = Field(..., min_length=1, description="Email subject line")
    html_body: str = Field(..., min_length=1, description="Rendered HTML body")
    text_body: str | None = Field(None, description="Plain-text alternative")
    personalization: dict[str, Any] = Field(
        default_factory=dict, description="Values used to personalise the content"
    )
