"""Pydantic models for work-log notes.

Attributes are snake_case in Python and camelCase on the wire
(``endDate``, ``startTime``, ``createdAt`` ...).
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from worklog.colors import DEFAULT_COLOR, normalize_color


def utc_now() -> str:
    return datetime.now(UTC).isoformat()


def is_valid_note_id(value: object) -> bool:
    """Whether *value* is in the store's native id format (a UUID string)."""
    if not isinstance(value, str) or not value.strip():
        return False
    try:
        uuid.UUID(value.strip())
    except ValueError:
        return False
    return True


class CamelModel(BaseModel):
    """Base model that speaks camelCase JSON and trims strings."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class NoteFields(CamelModel):
    """Optional free-text fields shared by notes and note payloads."""

    end_date: str | None = Field(default=None, description="Inclusive last day, YYYY-MM-DD")
    location: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    activities: str | None = None
    result: str | None = None
    blockers: str | None = None
    participants: str | None = None
    tags: str | None = Field(default=None, description="Free-form tag string")


class Note(NoteFields):
    """A persisted work-log note."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    title: str = Field(..., min_length=1, description="Note title")
    date: str = Field(..., min_length=1, description="First day, YYYY-MM-DD")
    color: str = DEFAULT_COLOR
    created_at: str = Field(
        default_factory=utc_now,
        description="ISO-8601 creation timestamp",
    )
    updated_at: str = Field(
        default_factory=utc_now,
        description="ISO-8601 last update timestamp",
    )

    def for_display(self) -> Note:
        """Return a copy with a canonical ``#RRGGBB`` color."""
        return self.model_copy(update={"color": normalize_color(self.color)})

    def sort_key(self) -> tuple[str, str, str]:
        """Key for newest-first listing: date, start time, creation time."""
        return (self.date, self.start_time or "", self.created_at)


class NoteCreate(NoteFields):
    """Body of a create request. Unknown fields are ignored."""

    title: str | None = None
    date: str | None = None
    color: str | None = None


class NoteUpdate(NoteCreate):
    """Body of an update request: any subset of note fields plus ``_id``."""

    id: str | None = Field(default=None, alias="_id")

    def changes(self) -> dict[str, str]:
        """Fields to apply, skipping those that are absent or blank."""
        data = self.model_dump(exclude={"id"}, exclude_none=True)
        return {key: value for key, value in data.items() if value != ""}


class DeleteRequest(CamelModel):
    """Optional body of a delete request."""

    id: str | None = Field(default=None, alias="_id")
