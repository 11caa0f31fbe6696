"""CRUD operations on notes.

``NoteService`` wraps a storage backend with the rules every caller
relies on: required fields, id resolution, partial updates, color
normalization and display shaping.
"""

from __future__ import annotations

import logging

from worklog.colors import normalize_color
from worklog.errors import NoteNotFoundError, NoteValidationError, StoreError
from worklog.metrics import NOTE_OPERATIONS, NOTES_STORED
from worklog.models import Note, NoteCreate, NoteUpdate, is_valid_note_id
from worklog.storage import NoteStorage

logger = logging.getLogger(__name__)


def resolve_note_id(path_id: str | None, body_id: str | None = None) -> str:
    """Pick the id to act on: the path id if valid, else the body id.

    Raises:
        NoteValidationError: neither id is a valid note id.
    """
    for candidate in (path_id, body_id):
        if is_valid_note_id(candidate):
            return candidate.strip()
    raise NoteValidationError("Invalid note id.")


class NoteService:
    """Note CRUD over an injected storage backend."""

    def __init__(self, storage: NoteStorage) -> None:
        self.storage = storage

    async def list_notes(self) -> list[Note]:
        """All notes, newest first, with display colors."""
        try:
            notes = await self.storage.list_notes()
        except StoreError:
            NOTE_OPERATIONS.labels(operation="list", outcome="error").inc()
            raise
        NOTE_OPERATIONS.labels(operation="list", outcome="ok").inc()
        NOTES_STORED.set(len(notes))
        return [note.for_display() for note in notes]

    async def get_note(self, note_id: str | None) -> Note:
        resolved = resolve_note_id(note_id)
        note = await self.storage.get(resolved)
        if note is None:
            raise NoteNotFoundError("Note not found.")
        return note.for_display()

    async def create_note(self, payload: NoteCreate) -> Note:
        """Validate and persist a new note.

        Raises:
            NoteValidationError: title or date is missing or blank.
        """
        if not payload.title or not payload.date:
            NOTE_OPERATIONS.labels(operation="create", outcome="invalid").inc()
            raise NoteValidationError("Title and date are required.")

        fields = payload.model_dump(exclude={"color"}, exclude_none=True)
        note = Note(**fields, color=normalize_color(payload.color))
        try:
            saved = await self.storage.insert(note)
        except StoreError:
            NOTE_OPERATIONS.labels(operation="create", outcome="error").inc()
            raise
        NOTE_OPERATIONS.labels(operation="create", outcome="ok").inc()
        NOTES_STORED.inc()
        return saved.for_display()

    async def update_note(self, path_id: str | None, payload: NoteUpdate) -> Note:
        """Apply the non-blank fields of *payload* to an existing note.

        Raises:
            NoteValidationError: no usable id in the path or payload.
            NoteNotFoundError: the id matches no note.
        """
        try:
            note_id = resolve_note_id(path_id, payload.id)
        except NoteValidationError:
            NOTE_OPERATIONS.labels(operation="update", outcome="invalid").inc()
            raise

        changes = payload.changes()
        if "color" in changes:
            changes["color"] = normalize_color(changes["color"])

        try:
            updated = await self.storage.update(note_id, changes)
        except StoreError:
            NOTE_OPERATIONS.labels(operation="update", outcome="error").inc()
            raise
        if updated is None:
            NOTE_OPERATIONS.labels(operation="update", outcome="not_found").inc()
            raise NoteNotFoundError("Note not found.")
        NOTE_OPERATIONS.labels(operation="update", outcome="ok").inc()
        return updated.for_display()

    async def delete_note(self, path_id: str | None, body_id: str | None = None) -> str:
        """Remove a note and return its id."""
        try:
            note_id = resolve_note_id(path_id, body_id)
        except NoteValidationError:
            NOTE_OPERATIONS.labels(operation="delete", outcome="invalid").inc()
            raise

        try:
            deleted = await self.storage.delete(note_id)
        except StoreError:
            NOTE_OPERATIONS.labels(operation="delete", outcome="error").inc()
            raise
        if not deleted:
            NOTE_OPERATIONS.labels(operation="delete", outcome="not_found").inc()
            raise NoteNotFoundError("Note not found.")
        NOTE_OPERATIONS.labels(operation="delete", outcome="ok").inc()
        NOTES_STORED.dec()
        return note_id

    async def count(self) -> int:
        return await self.storage.count()
