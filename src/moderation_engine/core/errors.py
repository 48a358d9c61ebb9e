"""Error kinds raised by the moderation engine."""

from __future__ import annotations


class ModerationError(RuntimeError):
    """Base exception for moderation engine failures."""


class NotFoundError(ModerationError):
    """Raised when a referenced report or content item does not exist."""


class StoreUnavailableError(ModerationError):
    """Raised when a backing store fails with a (possibly transient) I/O error."""


class ContentDeletionError(StoreUnavailableError):
    """Raised when reported content could not be deleted after approval.

    The report claim has been reverted to ``pending`` by the time this is raised,
    unless ``reverted`` is False.
    """

    def __init__(self, message: str, *, reverted: bool = True) -> None:
        super().__init__(message)
        self.reverted = reverted


class InvalidInputError(ModerationError, ValueError):
    """Raised when caller-supplied fields are malformed."""
