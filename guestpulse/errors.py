"""
Error taxonomy for GuestPulse.

Store reads raise DataFetchError, store writes raise PersistenceError.
ComposerError is produced by LLM calls and converted to a fallback at the
composer boundary; it never reaches the dashboard caller.
"""


class GuestPulseError(Exception):
    """Base class for all GuestPulse errors."""


class DataFetchError(GuestPulseError):
    """Reading feedback or snapshots from the store failed."""


class PersistenceError(GuestPulseError):
    """Writing a status, response or snapshot to the store failed."""


class ComposerError(GuestPulseError):
    """The LLM call failed or returned output that could not be parsed."""


class FeedbackNotFoundError(GuestPulseError):
    """No feedback document exists for the requested id."""

    def __init__(self, feedback_id: str):
        super().__init__(f"Feedback not found: {feedback_id}")
        self.feedback_id = feedback_id
