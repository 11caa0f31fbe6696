"""Monthly calendar projection.

Builds the 6x7 Sunday-first grid for a month and places each note under
every day its ``[date, endDate]`` range covers.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from datetime import date, timedelta

from pydantic import Field

from worklog.dates import expand_date_range, shift_month, to_date_key
from worklog.models import CamelModel, Note

GRID_DAYS = 42
PREVIEW_LIMIT = 2

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June", "July",
    "August", "September", "October", "November", "December",
)


class MonthRef(CamelModel):
    year: int
    month: int


class CalendarCell(CamelModel):
    """One day of the grid.

    ``notes`` always holds every note on the day; ``preview`` and
    ``overflow`` are the truncated view for a small cell.
    """

    date: str
    day: int
    in_month: bool
    is_today: bool = False
    notes: list[Note] = Field(default_factory=list)
    preview: list[Note] = Field(default_factory=list)
    overflow: int = 0


class CalendarMonth(CamelModel):
    year: int
    month: int
    label: str
    previous: MonthRef
    next: MonthRef
    cells: list[CalendarCell]


def month_label(year: int, month: int) -> str:
    """E.g. ``"October 2026"``."""
    return f"{MONTH_NAMES[month - 1]} {year}"


def build_month_days(year: int, month: int) -> list[date]:
    """The 42 dates shown for *month*, starting on the Sunday on or before the 1st.

    Raises:
        ValueError: the grid would fall outside the supported date range.
    """
    first = date(year, month, 1)
    # date.weekday() is Monday=0; shift so Sunday=0
    offset = (first.weekday() + 1) % 7
    try:
        start = first - timedelta(days=offset)
        return [start + timedelta(days=i) for i in range(GRID_DAYS)]
    except OverflowError as exc:
        raise ValueError(f"{year}-{month:02d} is outside the supported calendar range") from exc


def bucket_notes_by_day(notes: Iterable[Note]) -> dict[str, list[Note]]:
    """Map each date-key to the notes whose range covers it, in input order."""
    buckets: dict[str, list[Note]] = defaultdict(list)
    for note in notes:
        if not note.date:
            continue
        for key in expand_date_range(note.date, note.end_date):
            buckets[key].append(note)
    return dict(buckets)


def project_month(
    notes: Iterable[Note],
    year: int,
    month: int,
    today: date | None = None,
) -> CalendarMonth:
    """Build the calendar view of *month* populated with *notes*.

    Raises:
        ValueError: *month* is not in 1..12.
    """
    if not 1 <= month <= 12:
        raise ValueError(f"month must be between 1 and 12, got {month}")
    today = today or date.today()
    buckets = bucket_notes_by_day(notes)

    cells = []
    for day in build_month_days(year, month):
        key = to_date_key(day)
        day_notes = buckets.get(key, [])
        cells.append(
            CalendarCell(
                date=key,
                day=day.day,
                in_month=day.month == month,
                is_today=day == today,
                notes=day_notes,
                preview=day_notes[:PREVIEW_LIMIT],
                overflow=max(len(day_notes) - PREVIEW_LIMIT, 0),
            )
        )

    prev_year, prev_month = shift_month(year, month, -1)
    next_year, next_month = shift_month(year, month, 1)
    return CalendarMonth(
        year=year,
        month=month,
        label=month_label(year, month),
        previous=MonthRef(year=prev_year, month=prev_month),
        next=MonthRef(year=next_year, month=next_month),
        cells=cells,
    )
