"""HTTP tests for worklog.main using FastAPI's TestClient."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from worklog.config import Settings
from worklog.errors import StoreError
from worklog.main import create_app

MISSING_ID = "00000000-0000-0000-0000-000000000000"


@pytest.fixture()
def client(tmp_path: Path):
    """A client whose app stores notes in a temp JSON file."""
    app = create_app(Settings(notes_file=tmp_path / "notes.json"))
    with TestClient(app) as c:
        yield c


def _create(client: TestClient, **fields) -> dict:
    body = {"title": "Standup", "date": "2024-03-05", **fields}
    resp = client.post("/notes", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()


# ---------------------------------------------------------------------------
# POST /notes
# ---------------------------------------------------------------------------


class TestCreate:
    def test_created_with_default_color(self, client: TestClient) -> None:
        note = _create(client)
        assert note["color"] == "#3b82f6"
        assert isinstance(note["id"], str)
        assert note["title"] == "Standup"
        assert "createdAt" in note and "updatedAt" in note

    def test_camel_case_fields(self, client: TestClient) -> None:
        note = _create(client, endDate="2024-03-07", startTime="09:00", endTime="10:00")
        assert note["endDate"] == "2024-03-07"
        assert note["startTime"] == "09:00"
        assert note["endTime"] == "10:00"

    def test_empty_title_rejected(self, client: TestClient) -> None:
        resp = client.post("/notes", json={"title": "", "date": "2024-03-05"})
        assert resp.status_code == 400
        assert resp.json() == {"message": "Title and date are required."}
        assert client.get("/notes").json() == []

    def test_missing_date_rejected(self, client: TestClient) -> None:
        resp = client.post("/notes", json={"title": "No date"})
        assert resp.status_code == 400

    def test_malformed_body_is_400(self, client: TestClient) -> None:
        resp = client.post(
            "/notes", content="not json", headers={"Content-Type": "application/json"}
        )
        assert resp.status_code == 400
        assert "message" in resp.json()

    def test_unknown_fields_ignored(self, client: TestClient) -> None:
        note = _create(client, owner="someone")
        assert "owner" not in note


# ---------------------------------------------------------------------------
# GET /notes
# ---------------------------------------------------------------------------


class TestList:
    def test_ordering(self, client: TestClient) -> None:
        _create(client, title="early", date="2024-03-01")
        _create(client, title="late-morning", date="2024-03-05", startTime="09:00")
        _create(client, title="late-evening", date="2024-03-05", startTime="18:00")
        titles = [n["title"] for n in client.get("/notes").json()]
        assert titles == ["late-evening", "late-morning", "early"]

    def test_store_failure_is_generic_500(self, client: TestClient) -> None:
        storage = client.app.state.service.storage
        storage.list_notes = AsyncMock(side_effect=StoreError("disk on fire"))
        resp = client.get("/notes")
        assert resp.status_code == 500
        assert resp.json() == {"message": "Failed to fetch notes."}


# ---------------------------------------------------------------------------
# GET / PUT / DELETE /notes/{id}
# ---------------------------------------------------------------------------


class TestSingleNote:
    def test_get(self, client: TestClient) -> None:
        note = _create(client)
        resp = client.get(f"/notes/{note['id']}")
        assert resp.status_code == 200
        assert resp.json()["id"] == note["id"]

    def test_get_missing(self, client: TestClient) -> None:
        assert client.get(f"/notes/{MISSING_ID}").status_code == 404

    def test_update_color_emerald(self, client: TestClient) -> None:
        note = _create(client)
        resp = client.put(f"/notes/{note['id']}", json={"color": "emerald"})
        assert resp.status_code == 200
        assert resp.json()["color"] == "#10b981"
        listed = client.get("/notes").json()
        assert listed[0]["color"] == "#10b981"

    def test_update_partial(self, client: TestClient) -> None:
        note = _create(client, location="HQ")
        resp = client.put(f"/notes/{note['id']}", json={"title": "Renamed", "endDate": "2024-03-08"})
        body = resp.json()
        assert body["title"] == "Renamed"
        assert body["location"] == "HQ"
        assert body["endDate"] == "2024-03-08"

    def test_update_body_id_fallback(self, client: TestClient) -> None:
        note = _create(client)
        resp = client.put("/notes/undefined", json={"_id": note["id"], "title": "Via body"})
        assert resp.status_code == 200
        assert resp.json()["title"] == "Via body"

    def test_update_invalid_id(self, client: TestClient) -> None:
        resp = client.put("/notes/undefined", json={"title": "x"})
        assert resp.status_code == 400
        assert resp.json() == {"message": "Invalid note id."}

    def test_update_missing(self, client: TestClient) -> None:
        resp = client.put(f"/notes/{MISSING_ID}", json={"title": "x"})
        assert resp.status_code == 404
        assert resp.json() == {"message": "Note not found."}

    def test_delete(self, client: TestClient) -> None:
        note = _create(client)
        resp = client.delete(f"/notes/{note['id']}")
        assert resp.status_code == 200
        assert resp.json()["id"] == note["id"]
        assert client.get("/notes").json() == []

    def test_delete_missing_keeps_collection(self, client: TestClient) -> None:
        note = _create(client)
        resp = client.delete(f"/notes/{MISSING_ID}")
        assert resp.status_code == 404
        assert [n["id"] for n in client.get("/notes").json()] == [note["id"]]

    def test_delete_body_id_fallback(self, client: TestClient) -> None:
        note = _create(client)
        resp = client.request("DELETE", "/notes/undefined", json={"_id": note["id"]})
        assert resp.status_code == 200

    def test_delete_invalid_id(self, client: TestClient) -> None:
        assert client.delete("/notes/42").status_code == 400


# ---------------------------------------------------------------------------
# GET /calendar/{year}/{month}
# ---------------------------------------------------------------------------


class TestCalendar:
    def test_multi_day_note_on_each_day(self, client: TestClient) -> None:
        _create(client, title="Trip", date="2024-03-07", endDate="2024-03-05", color="rose")
        resp = client.get("/calendar/2024/3")
        assert resp.status_code == 200
        cal = resp.json()
        assert cal["label"] == "March 2024"
        assert len(cal["cells"]) == 42
        busy = {c["date"]: c for c in cal["cells"] if c["notes"]}
        assert sorted(busy) == ["2024-03-05", "2024-03-06", "2024-03-07"]
        assert busy["2024-03-06"]["notes"][0]["color"] == "#f43f5e"

    def test_overflow(self, client: TestClient) -> None:
        for i in range(4):
            _create(client, title=f"N{i}", date="2024-03-05")
        cal = client.get("/calendar/2024/3").json()
        cell = next(c for c in cal["cells"] if c["date"] == "2024-03-05")
        assert len(cell["notes"]) == 4
        assert len(cell["preview"]) == 2
        assert cell["overflow"] == 2

    def test_navigation(self, client: TestClient) -> None:
        cal = client.get("/calendar/2024/12").json()
        assert cal["next"] == {"year": 2025, "month": 1}
        assert cal["previous"] == {"year": 2024, "month": 11}

    def test_today_flag(self, client: TestClient) -> None:
        today = date.today()
        cal = client.get(f"/calendar/{today.year}/{today.month}").json()
        assert [c["date"] for c in cal["cells"] if c["isToday"]] == [today.isoformat()]

    @pytest.mark.parametrize("month", [0, 13])
    def test_bad_month(self, client: TestClient, month: int) -> None:
        assert client.get(f"/calendar/2024/{month}").status_code == 400


# ---------------------------------------------------------------------------
# Ops
# ---------------------------------------------------------------------------


class TestOps:
    def test_health(self, client: TestClient) -> None:
        _create(client)
        data = client.get("/health").json()
        assert data == {"status": "healthy", "backend": "json", "total_notes": 1}

    def test_metrics(self, client: TestClient) -> None:
        _create(client)
        resp = client.get("/metrics")
        assert resp.status_code == 200
        assert "worklog_http_requests_total" in resp.text
        assert "worklog_note_operations_total" in resp.text
