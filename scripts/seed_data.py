"""Seed the work-log service with sample notes.

Creates a handful of single-day and multi-day notes for the current month,
exercises an update and a delete, then prints the busy days of the
calendar. Requires the service to be running (python -m worklog.main).

Usage:
    python scripts/seed_data.py [--base-url http://localhost:8000]
"""

from __future__ import annotations

import argparse
import sys
from datetime import date

import requests

DEFAULT_BASE_URL = "http://localhost:8000"
TIMEOUT = 10


def _notes_for(year: int, month: int) -> list[dict]:
    """Sample notes placed in the given month."""

    def day(d: int) -> str:
        return f"{year:04d}-{month:02d}-{d:02d}"

    return [
        {
            "title": "Standup",
            "date": day(3),
            "startTime": "09:30",
            "endTime": "09:45",
            "participants": "team",
            "color": "blue",
        },
        {
            "title": "Client workshop",
            "date": day(8),
            "endDate": day(10),
            "location": "Office B",
            "activities": "Requirements walkthrough",
            "color": "emerald",
        },
        {
            "title": "Release prep",
            "date": day(9),
            "startTime": "14:00",
            "blockers": "Waiting on QA sign-off",
            "color": "f97316",
        },
        {
            "title": "Retro",
            "date": day(9),
            "startTime": "16:00",
            "result": "Three action items",
            "color": "#8b5cf6",
        },
        {
            "title": "Conference trip",
            "date": day(22),
            "endDate": day(20),
            "tags": "travel",
            "color": "rose",
        },
        {
            "title": "Scratch note",
            "date": day(15),
        },
    ]


def check_health(base_url: str) -> bool:
    """Verify the service is reachable and healthy."""
    try:
        resp = requests.get(f"{base_url}/health", timeout=TIMEOUT)
        data = resp.json()
        return data.get("status") == "healthy"
    except (requests.RequestException, ValueError) as e:
        print(f"  Health check failed: {e}")
        return False


def create_note(base_url: str, payload: dict) -> dict:
    """POST /notes and return the created note."""
    resp = requests.post(f"{base_url}/notes", json=payload, timeout=TIMEOUT)
    resp.raise_for_status()
    return resp.json()


def update_note(base_url: str, note_id: str, payload: dict) -> dict:
    """PUT /notes/{id} and return the updated note."""
    resp = requests.put(f"{base_url}/notes/{note_id}", json=payload, timeout=TIMEOUT)
    resp.raise_for_status()
    return resp.json()


def delete_note(base_url: str, note_id: str) -> None:
    """DELETE /notes/{id}."""
    resp = requests.delete(f"{base_url}/notes/{note_id}", timeout=TIMEOUT)
    resp.raise_for_status()


def get_calendar(base_url: str, year: int, month: int) -> dict:
    """GET /calendar/{year}/{month}."""
    resp = requests.get(f"{base_url}/calendar/{year}/{month}", timeout=TIMEOUT)
    resp.raise_for_status()
    return resp.json()


def main() -> None:
    """Create sample notes and print the resulting calendar."""
    parser = argparse.ArgumentParser(description="Seed sample work-log notes")
    parser.add_argument(
        "--base-url",
        default=DEFAULT_BASE_URL,
        help=f"Service base URL (default: {DEFAULT_BASE_URL})",
    )
    args = parser.parse_args()
    base_url = args.base_url.rstrip("/")
    today = date.today()

    print(f"\n  Seeding notes via {base_url}")
    print("  " + "=" * 58)

    if not check_health(base_url):
        print("  FAIL: Service is not healthy. Is it running?")
        sys.exit(1)
    print("  OK: Service is healthy.\n")

    created: list[dict] = []
    for payload in _notes_for(today.year, today.month):
        try:
            note = create_note(base_url, payload)
        except requests.RequestException as e:
            print(f"  ERROR creating '{payload['title']}': {e}")
            continue
        created.append(note)
        span = note["date"] + (f" → {note['endDate']}" if note.get("endDate") else "")
        print(f"  + {note['title']:<18} {span:<26} {note['color']}")

    by_title = {note["title"]: note for note in created}
    if "Standup" in by_title:
        updated = update_note(base_url, by_title["Standup"]["id"], {"color": "purple"})
        print(f"\n  ~ Standup recolored to {updated['color']}")
    if "Scratch note" in by_title:
        delete_note(base_url, by_title["Scratch note"]["id"])
        print("  - Scratch note deleted")

    calendar = get_calendar(base_url, today.year, today.month)
    print(f"\n  {calendar['label']}")
    for cell in calendar["cells"]:
        if not cell["inMonth"] or not cell["notes"]:
            continue
        titles = ", ".join(n["title"] for n in cell["preview"])
        more = f" (+{cell['overflow']} more)" if cell["overflow"] else ""
        print(f"    {cell['date']}  {titles}{more}")
    print()


if __name__ == "__main__":
    main()
