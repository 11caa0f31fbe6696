"""Exceptions raised by the note service and its storage backends."""


class NoteError(Exception):
    """Base class for note errors. ``message`` is safe to show to users."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NoteValidationError(NoteError):
    """A required field is missing or the note id cannot be resolved."""


class NoteNotFoundError(NoteError):
    """No note matches the resolved id."""


class StoreError(NoteError):
    """The underlying storage failed. The cause is chained, never returned."""
