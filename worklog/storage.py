"""Storage backends for notes.

``JsonNoteStorage`` keeps every note in one JSON file and is the default.
``PostgresNoteStorage`` (see ``worklog.database``) keeps one JSONB document
per row. Both are constructed by ``build_storage`` and must be initialized
with ``await storage.init()`` before use.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, Field, ValidationError

from worklog.config import Settings
from worklog.database import PostgresNoteStorage
from worklog.errors import StoreError
from worklog.models import Note, utc_now

logger = logging.getLogger(__name__)


class NoteStorage(Protocol):
    """Operations every backend provides. Each call touches one document."""

    backend: str

    async def init(self) -> None: ...

    async def close(self) -> None: ...

    async def list_notes(self) -> list[Note]: ...

    async def get(self, note_id: str) -> Note | None: ...

    async def insert(self, note: Note) -> Note: ...

    async def update(self, note_id: str, changes: dict[str, str]) -> Note | None: ...

    async def delete(self, note_id: str) -> bool: ...

    async def count(self) -> int: ...


class NoteCollection(BaseModel):
    """Container for all notes, used for JSON serialization."""

    notes: list[Note] = Field(default_factory=list)


class JsonNoteStorage:
    """Manages note persistence using a local JSON file."""

    backend = "json"

    def __init__(self, storage_path: Path) -> None:
        self._path = Path(storage_path)
        self._collection = NoteCollection()
        self._lock = asyncio.Lock()

    async def init(self) -> None:
        """Load notes from disk. Creates the file if missing."""
        if not self._path.exists():
            logger.info("No storage file found at %s — starting fresh", self._path)
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                logger.error("Failed to create %s: %s", self._path.parent, exc)
                raise StoreError("Failed to create notes directory.") from exc
            self._persist()
            return
        try:
            raw = self._path.read_text(encoding="utf-8")
            self._collection = NoteCollection.model_validate_json(raw)
        except (OSError, ValidationError) as exc:
            logger.error("Failed to load notes from %s: %s", self._path, exc)
            raise StoreError("Failed to load notes.") from exc
        logger.info("Loaded %d notes from %s", len(self._collection.notes), self._path)

    async def close(self) -> None:
        """Nothing to release; every write is already on disk."""

    def _persist(self) -> None:
        """Write current state to disk, replacing the file in one step."""
        tmp = self._path.with_name(self._path.name + ".tmp")
        try:
            tmp.write_text(
                self._collection.model_dump_json(by_alias=True, indent=2),
                encoding="utf-8",
            )
            tmp.replace(self._path)
        except OSError as exc:
            logger.error("Failed to write notes to %s: %s", self._path, exc)
            raise StoreError("Failed to write notes.") from exc

    def _index_of(self, note_id: str) -> int | None:
        for index, note in enumerate(self._collection.notes):
            if note.id == note_id:
                return index
        return None

    async def list_notes(self) -> list[Note]:
        """Return every note, newest first."""
        return sorted(self._collection.notes, key=Note.sort_key, reverse=True)

    async def get(self, note_id: str) -> Note | None:
        index = self._index_of(note_id)
        return None if index is None else self._collection.notes[index]

    async def insert(self, note: Note) -> Note:
        async with self._lock:
            self._collection.notes.append(note)
            try:
                self._persist()
            except StoreError:
                self._collection.notes.pop()
                raise
        logger.info("Saved note %s — '%s'", note.id, note.title)
        return note

    async def update(self, note_id: str, changes: dict[str, str]) -> Note | None:
        async with self._lock:
            index = self._index_of(note_id)
            if index is None:
                return None
            previous = self._collection.notes[index]
            updated = previous.model_copy(update={**changes, "updated_at": utc_now()})
            self._collection.notes[index] = updated
            try:
                self._persist()
            except StoreError:
                self._collection.notes[index] = previous
                raise
        logger.info("Updated note %s — fields=%s", note_id, sorted(changes))
        return updated

    async def delete(self, note_id: str) -> bool:
        async with self._lock:
            index = self._index_of(note_id)
            if index is None:
                return False
            removed = self._collection.notes.pop(index)
            try:
                self._persist()
            except StoreError:
                self._collection.notes.insert(index, removed)
                raise
        logger.info("Deleted note %s", note_id)
        return True

    async def count(self) -> int:
        """Number of stored notes."""
        return len(self._collection.notes)


def build_storage(settings: Settings) -> NoteStorage:
    """Construct the backend named by ``settings.storage_backend``."""
    if settings.storage_backend == "postgres":
        return PostgresNoteStorage(settings.database_url)
    return JsonNoteStorage(settings.notes_file)
