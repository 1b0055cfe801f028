"""Result of one dispatcher pass."""

from pydantic import BaseModel, Field


class DispatchResult(BaseModel):
    """Counters for a single dispatcher pass.

    ``skipped`` is a subset of ``sent``: duplicate-suppressed jobs count as
    successes and are also reported separately.
    """

    sent: int = Field(0, ge=0)
    errors: int = Field(0, ge=0)
    skipped: int = Field(0, ge=0)
    batches: int = Field(0, ge=0)

    @property
    def total(self) -> int:
        return self.sent + self.errors
