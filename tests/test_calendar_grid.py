"""Tests for worklog.calendar_grid — month grid and note bucketing."""

from datetime import date

import pytest

from worklog.calendar_grid import (
    GRID_DAYS,
    PREVIEW_LIMIT,
    bucket_notes_by_day,
    build_month_days,
    month_label,
    project_month,
)
from worklog.models import Note


def _note(title: str, day: str, end: str | None = None) -> Note:
    return Note(title=title, date=day, end_date=end)


class TestBuildMonthDays:
    def test_always_42_days(self):
        for month in range(1, 13):
            assert len(build_month_days(2024, month)) == GRID_DAYS

    def test_starts_on_sunday(self):
        days = build_month_days(2024, 3)
        assert days[0] == date(2024, 2, 25)
        assert days[0].weekday() == 6
        assert days[-1] == date(2024, 4, 6)

    def test_month_starting_on_sunday_has_no_leading_padding(self):
        days = build_month_days(2024, 9)
        assert days[0] == date(2024, 9, 1)

    @pytest.mark.parametrize(("year", "month"), [(1, 1), (9999, 12)])
    def test_grid_outside_date_range(self, year, month):
        with pytest.raises(ValueError, match="outside the supported calendar range"):
            build_month_days(year, month)

    def test_edge_months_that_fit(self):
        assert build_month_days(1, 2)[0] == date(1, 1, 28)
        assert build_month_days(9999, 11)[-1] == date(9999, 12, 11)

    def test_consecutive(self):
        days = build_month_days(2025, 2)
        assert all((b - a).days == 1 for a, b in zip(days, days[1:]))


class TestBucketNotes:
    def test_multi_day_note_on_every_day(self):
        note = _note("Trip", "2024-03-05", "2024-03-07")
        buckets = bucket_notes_by_day([note])
        assert sorted(buckets) == ["2024-03-05", "2024-03-06", "2024-03-07"]
        assert all(b == [note] for b in buckets.values())

    def test_reversed_range_still_placed(self):
        buckets = bucket_notes_by_day([_note("Back", "2024-03-07", "2024-03-05")])
        assert sorted(buckets) == ["2024-03-05", "2024-03-06", "2024-03-07"]

    def test_keeps_input_order(self):
        a, b = _note("A", "2024-03-05"), _note("B", "2024-03-05")
        assert bucket_notes_by_day([b, a])["2024-03-05"] == [b, a]

    def test_malformed_date_skipped(self):
        assert bucket_notes_by_day([_note("Bad", "2024-00-05")]) == {}


class TestProjectMonth:
    def test_label_and_navigation(self):
        cal = project_month([], 2024, 1, today=date(2024, 1, 15))
        assert cal.label == "January 2024"
        assert (cal.previous.year, cal.previous.month) == (2023, 12)
        assert (cal.next.year, cal.next.month) == (2024, 2)

    def test_in_month_and_today_flags(self):
        cal = project_month([], 2024, 3, today=date(2024, 3, 10))
        assert cal.cells[0].date == "2024-02-25"
        assert cal.cells[0].in_month is False
        today_cells = [c for c in cal.cells if c.is_today]
        assert [c.date for c in today_cells] == ["2024-03-10"]
        assert sum(c.in_month for c in cal.cells) == 31

    def test_padding_days_also_get_notes(self):
        note = _note("Leap", "2024-02-29")
        cal = project_month([note], 2024, 3, today=date(2024, 3, 1))
        cell = next(c for c in cal.cells if c.date == "2024-02-29")
        assert cell.notes == [note]
        assert cell.in_month is False

    def test_preview_truncation_keeps_full_list(self):
        notes = [_note(f"N{i}", "2024-03-05") for i in range(5)]
        cal = project_month(notes, 2024, 3, today=date(2024, 3, 1))
        cell = next(c for c in cal.cells if c.date == "2024-03-05")
        assert len(cell.notes) == 5
        assert cell.preview == notes[:PREVIEW_LIMIT]
        assert cell.overflow == 3

    def test_no_overflow_at_limit(self):
        notes = [_note("A", "2024-03-05"), _note("B", "2024-03-05")]
        cal = project_month(notes, 2024, 3, today=date(2024, 3, 1))
        cell = next(c for c in cal.cells if c.date == "2024-03-05")
        assert cell.overflow == 0
        assert len(cell.preview) == 2

    def test_camel_case_serialization(self):
        cal = project_month([], 2024, 3, today=date(2024, 3, 1))
        data = cal.model_dump(by_alias=True)
        assert {"inMonth", "isToday", "preview", "overflow"} <= set(data["cells"][0])

    @pytest.mark.parametrize("month", [0, 13])
    def test_invalid_month(self, month):
        with pytest.raises(ValueError):
            project_month([], 2024, month)


def test_month_label():
    assert month_label(2026, 10) == "October 2026"
