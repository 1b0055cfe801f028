"""RecipientProfile model matching the user_profiles table.

This model is unmanaged as the schema is owned by the identity subsystem.
It provides read-only access to the fields needed to address a digest.
"""

from typing import ClassVar

from django.db import models


class RecipientProfile(models.Model):
    """Minimal user profile used for recipient resolution."""

    user_id = models.CharField(max_length=64, primary_key=True)
    email = models.CharField(max_length=255)
    full_name = models.CharField(max_length=255, default="", blank=True)
    business_type = models.CharField(max_length=255, default="", blank=True)

    class Meta:
        """Django model metadata."""

        db_table = "user_profiles"
        managed = False  # Schema is managed externally
        ordering: ClassVar[list[str]] = ["user_id"]

    def __str__(self) -> str:
        """Return string representation of the profile."""
        return f"{self.full_name or self.user_id} ({self.email})"
