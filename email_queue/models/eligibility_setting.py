"""EligibilitySetting model matching the daily_email_settings table.

This model is unmanaged as the table is owned by the account-settings
subsystem. The queue only reads rows matching the current hour slot.
"""

from typing import ClassVar

from django.db import models


class EligibilitySetting(models.Model):
    """A user's digest delivery preferences."""

    user_id = models.CharField(max_length=64, primary_key=True)
    enabled = models.BooleanField(default=False)
    time_slot = models.CharField(max_length=5, db_column="send_time")
    timezone = models.CharField(max_length=64, default="Africa/Johannesburg")
    content_preferences = models.JSONField(default=dict, blank=True)

    class Meta:
        """Django model metadata."""

        db_table = "daily_email_settings"
        managed = False  # Schema is managed externally
        ordering: ClassVar[list[str]] = ["user_id"]

    def __str__(self) -> str:
        """Return string representation of the setting."""
        state = "enabled" if self.enabled else "disabled"
        return f"{self.user_id} @ {self.time_slot} ({state})"

    def snapshot(self) -> dict:
        """Return a JSON-serialisable copy stored on queued jobs."""
        return {
            "user_id": self.user_id,
            "enabled": self.enabled,
            "time_slot": self.time_slot,
            "timezone": self.timezone,
            "content_preferences": self.content_preferences or {},
        }
