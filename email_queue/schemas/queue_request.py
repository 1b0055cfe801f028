"""Admin request schemas."""

from pydantic import Field

from email_queue.enums import JobType
from email_queue.schemas.base_schema_model import BaseSchemaModel


class QueueUserRequest(BaseSchemaModel):
    """Body of ``POST queue-user``."""

    user_id: str = Field(..., min_length=1, max_length=64)
    job_type: JobType = Field(JobType.DAILY_DIGEST, validate_default=True)
