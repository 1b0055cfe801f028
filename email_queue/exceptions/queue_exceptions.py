"""Exceptions raised by the email queue core."""


class QueueError(Exception):
    """Base exception for email queue errors."""


class EligibilityReadError(QueueError):
    """Eligibility settings could not be read for an hour slot."""

    def __init__(self, time_slot: str | None, cause: Exception | None = None):
        """Initialize eligibility read error.

        Args:
            time_slot: Hour slot being read, or None for all slots
            cause: Underlying persistence error
        """
        self.time_slot = time_slot
        slot = time_slot or "all slots"
        message = f"Failed to read eligibility settings for {slot}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class JobInsertError(QueueError):
    """A notification job could not be written to the queue."""

    def __init__(self, user_id: str, cause: Exception | None = None):
        """Initialize job insert error.

        Args:
            user_id: User the job was for
            cause: Underlying persistence error
        """
        self.user_id = user_id
        super().__init__(f"Failed to queue job for user {user_id}: {cause}")


class QueueAccessError(QueueError):
    """The job queue store is unavailable (503)."""

    def __init__(self, operation: str, cause: Exception | None = None):
        """Initialize queue access error.

        Args:
            operation: What the queue was being used for
            cause: Underlying persistence error
        """
        self.operation = operation
        super().__init__(f"Queue unavailable during {operation}: {cause}")


class RecipientNotFoundError(QueueError):
    """No recipient profile exists for a user (404)."""

    def __init__(self, user_id: str):
        """Initialize recipient not found error.

        Args:
            user_id: ID of the user that could not be resolved
        """
        self.user_id = user_id
        super().__init__(f"User with ID {user_id} not found")
