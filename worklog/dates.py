"""Date-key helpers and range expansion for calendar placement.

A date-key is a calendar date serialized as ``YYYY-MM-DD``.
"""

from __future__ import annotations

from datetime import date, timedelta

MAX_RANGE_DAYS = 366

_ONE_DAY = timedelta(days=1)


def parse_date_key(key: str | None) -> date | None:
    """Parse ``YYYY-MM-DD`` into a date.

    Returns None when the key is missing, has fewer than three parts, or has
    a zero or non-numeric component. Out-of-range months and days roll over,
    so ``2024-02-30`` is March 1st and ``2024-13-01`` is January 1st, 2025.
    """
    if not key:
        return None
    parts = key.strip().split("-")
    if len(parts) < 3:
        return None
    try:
        year, month, day = (int(p) for p in parts[:3])
    except ValueError:
        return None
    if not year or not month or not day:
        return None
    try:
        first = date(year + (month - 1) // 12, (month - 1) % 12 + 1, 1)
        return first + timedelta(days=day - 1)
    except (ValueError, OverflowError):
        return None


def to_date_key(value: date) -> str:
    """Format a date as ``YYYY-MM-DD``."""
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def expand_date_range(start_key: str | None, end_key: str | None = None) -> list[str]:
    """Return every date-key covered by ``[start_key, end_key]``.

    The two ends are order-normalized, both are inclusive, and the result is
    ascending. A blank *end_key* means a single day; an unparseable one falls
    back to the start. The output never holds more than ``MAX_RANGE_DAYS``
    keys.
    """
    start = parse_date_key(start_key)
    if start is None:
        return []
    resolved_end = end_key if end_key and end_key.strip() else start_key
    end = parse_date_key(resolved_end) or start

    first, last = (start, end) if start <= end else (end, start)
    keys: list[str] = []
    cursor = first
    while len(keys) < MAX_RANGE_DAYS:
        keys.append(to_date_key(cursor))
        if cursor >= last:
            break
        cursor += _ONE_DAY
    return keys


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Move ``(year, month)`` by *delta* months."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1
