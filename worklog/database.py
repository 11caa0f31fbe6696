"""PostgreSQL document storage for notes.

Each note is one JSONB document keyed by its UUID. Uses SQLAlchemy async
engine with asyncpg driver. Every failure surfaces as ``StoreError``.
"""

from __future__ import annotations

import json
import logging
import uuid
from typing import Any, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from worklog.errors import StoreError
from worklog.models import Note, utc_now

logger = logging.getLogger(__name__)

_CREATE_TABLE_STMTS = [
    """CREATE TABLE IF NOT EXISTS notes (
        id UUID PRIMARY KEY,
        doc JSONB NOT NULL
    )""",
    "CREATE INDEX IF NOT EXISTS idx_notes_date ON notes ((doc->>'date'))",
]

_SELECT_ORDERED = (
    "SELECT doc FROM notes "
    "ORDER BY doc->>'date' DESC, "
    "COALESCE(doc->>'startTime', '') DESC, "
    "doc->>'createdAt' DESC"
)


def _load_doc(value: Any) -> Note:
    """Build a Note from a JSONB column value (decoded or raw text)."""
    if isinstance(value, (str, bytes)):
        value = json.loads(value)
    return Note.model_validate(value)


def _store_error(action: str, exc: Exception) -> StoreError:
    logger.error("PostgreSQL %s failed: %s", action, exc)
    return StoreError(f"Failed to {action}.")


class PostgresNoteStorage:
    """Async PostgreSQL client holding notes as JSONB documents."""

    backend = "postgres"

    def __init__(self, database_url: str) -> None:
        self._url = database_url
        self._engine: Optional[AsyncEngine] = None

    @property
    def available(self) -> bool:
        """Whether the PostgreSQL connection is active."""
        return self._engine is not None

    def _require_engine(self) -> AsyncEngine:
        if self._engine is None:
            raise StoreError("Storage is not initialized.")
        return self._engine

    async def init(self) -> None:
        """Create engine, connection pool, and tables."""
        try:
            self._engine = create_async_engine(self._url, pool_size=5, max_overflow=10)
            async with self._engine.begin() as conn:
                for stmt in _CREATE_TABLE_STMTS:
                    await conn.execute(text(stmt))
        except (SQLAlchemyError, OSError) as exc:
            self._engine = None
            raise _store_error("connect to the database", exc) from exc
        logger.info("PostgreSQL connected — notes table ready")

    async def close(self) -> None:
        """Dispose of the engine and connection pool."""
        if self._engine:
            await self._engine.dispose()
            self._engine = None

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_notes(self) -> list[Note]:
        """Return every note, newest first."""
        engine = self._require_engine()
        try:
            async with engine.connect() as conn:
                result = await conn.execute(text(_SELECT_ORDERED))
                rows = result.fetchall()
        except (SQLAlchemyError, OSError) as exc:
            raise _store_error("fetch notes", exc) from exc
        return [_load_doc(row[0]) for row in rows]

    async def get(self, note_id: str) -> Note | None:
        engine = self._require_engine()
        try:
            async with engine.connect() as conn:
                result = await conn.execute(
                    text("SELECT doc FROM notes WHERE id = :id"),
                    {"id": uuid.UUID(note_id)},
                )
                row = result.fetchone()
        except (SQLAlchemyError, OSError) as exc:
            raise _store_error("fetch note", exc) from exc
        return _load_doc(row[0]) if row else None

    async def count(self) -> int:
        engine = self._require_engine()
        try:
            async with engine.connect() as conn:
                result = await conn.execute(text("SELECT COUNT(*) FROM notes"))
                row = result.fetchone()
        except (SQLAlchemyError, OSError) as exc:
            raise _store_error("count notes", exc) from exc
        return int(row[0]) if row else 0

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def insert(self, note: Note) -> Note:
        engine = self._require_engine()
        try:
            async with engine.begin() as conn:
                await conn.execute(
                    text("INSERT INTO notes (id, doc) VALUES (:id, CAST(:doc AS JSONB))"),
                    {
                        "id": uuid.UUID(note.id),
                        "doc": note.model_dump_json(by_alias=True),
                    },
                )
        except (SQLAlchemyError, OSError) as exc:
            raise _store_error("create note", exc) from exc
        logger.info("Saved note %s — '%s'", note.id, note.title)
        return note

    async def update(self, note_id: str, changes: dict[str, str]) -> Note | None:
        """Merge *changes* into the stored document in one statement."""
        engine = self._require_engine()
        patch = {
            Note.model_fields[name].alias or name: value
            for name, value in changes.items()
        }
        patch["updatedAt"] = utc_now()
        try:
            async with engine.begin() as conn:
                result = await conn.execute(
                    text(
                        "UPDATE notes SET doc = doc || CAST(:patch AS JSONB) "
                        "WHERE id = :id RETURNING doc"
                    ),
                    {"id": uuid.UUID(note_id), "patch": json.dumps(patch)},
                )
                row = result.fetchone()
        except (SQLAlchemyError, OSError) as exc:
            raise _store_error("update note", exc) from exc
        if not row:
            return None
        logger.info("Updated note %s — fields=%s", note_id, sorted(changes))
        return _load_doc(row[0])

    async def delete(self, note_id: str) -> bool:
        engine = self._require_engine()
        try:
            async with engine.begin() as conn:
                result = await conn.execute(
                    text("DELETE FROM notes WHERE id = :id RETURNING id"),
                    {"id": uuid.UUID(note_id)},
                )
                row = result.fetchone()
        except (SQLAlchemyError, OSError) as exc:
            raise _store_error("delete note", exc) from exc
        if not row:
            return False
        logger.info("Deleted note %s", note_id)
        return True
