"""
Work Log MCP Server

Exposes tools for listing, saving, updating and deleting work-log notes and
for reading the monthly calendar via the Model Context Protocol. Runs on
port 8001 (``MCP_PORT``) with SSE transport.
"""

import logging
from datetime import UTC, datetime
from typing import Any

import anyio
from mcp.server.fastmcp import FastMCP

from worklog.calendar_grid import project_month
from worklog.config import Settings, get_settings
from worklog.errors import NoteError
from worklog.models import Note, NoteCreate, NoteUpdate
from worklog.service import NoteService
from worklog.storage import build_storage

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
)
logger = logging.getLogger("worklog_mcp")


def _dump(note: Note) -> dict[str, Any]:
    return note.model_dump(by_alias=True)


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


class WorklogTools:
    """MCP tool implementations bound to a note service."""

    def __init__(self, service: NoteService) -> None:
        self.service = service

    async def list_notes(self) -> dict:
        """List every work-log note, newest date first.

        Use this tool when the user wants to browse or review their notes.

        Returns:
            Dictionary with the notes and their count.
        """
        try:
            notes = await self.service.list_notes()
        except NoteError as exc:
            return {"error": exc.message}
        logger.info("Tool list_notes invoked — found=%d", len(notes))
        return {"count": len(notes), "notes": [_dump(n) for n in notes]}

    async def save_note(
        self,
        title: str,
        date: str,
        end_date: str | None = None,
        start_time: str | None = None,
        end_time: str | None = None,
        location: str | None = None,
        activities: str | None = None,
        result: str | None = None,
        blockers: str | None = None,
        participants: str | None = None,
        tags: str | None = None,
        color: str | None = None,
    ) -> dict:
        """Save a new work-log note for a day or a range of days.

        Use this tool when the user wants to record what they did, plan, or
        need to remember on a given date.

        Args:
            title: Short title for the note.
            date: First day, formatted YYYY-MM-DD.
            end_date: Optional last day (YYYY-MM-DD) for multi-day notes.
            start_time: Optional start time, e.g. "09:30".
            end_time: Optional end time.
            location: Optional place.
            activities: What was done.
            result: Outcome.
            blockers: Anything that got in the way.
            participants: Who was involved.
            tags: Free-form tag text.
            color: Display color: "#RRGGBB", six hex digits, or one of
                blue, emerald, purple, orange, rose.

        Returns:
            Dictionary with the new note_id and the saved note.
        """
        payload = NoteCreate(
            title=title,
            date=date,
            end_date=end_date,
            start_time=start_time,
            end_time=end_time,
            location=location,
            activities=activities,
            result=result,
            blockers=blockers,
            participants=participants,
            tags=tags,
            color=color,
        )
        try:
            note = await self.service.create_note(payload)
        except NoteError as exc:
            return {"error": exc.message}
        logger.info("Tool save_note invoked — id=%s", note.id)
        return {
            "note_id": note.id,
            "message": f"Note '{note.title}' saved successfully.",
            "note": _dump(note),
        }

    async def update_note(
        self,
        note_id: str,
        title: str | None = None,
        date: str | None = None,
        end_date: str | None = None,
        start_time: str | None = None,
        end_time: str | None = None,
        location: str | None = None,
        activities: str | None = None,
        result: str | None = None,
        blockers: str | None = None,
        participants: str | None = None,
        tags: str | None = None,
        color: str | None = None,
    ) -> dict:
        """Change fields of an existing note. Omitted fields stay as they are.

        Args:
            note_id: Id of the note to change.
            title, date, end_date, start_time, end_time, location,
            activities, result, blockers, participants, tags, color:
                New values; only the ones given are applied.

        Returns:
            Dictionary with the updated note.
        """
        payload = NoteUpdate(
            title=title,
            date=date,
            end_date=end_date,
            start_time=start_time,
            end_time=end_time,
            location=location,
            activities=activities,
            result=result,
            blockers=blockers,
            participants=participants,
            tags=tags,
            color=color,
        )
        try:
            note = await self.service.update_note(note_id, payload)
        except NoteError as exc:
            return {"error": exc.message}
        logger.info("Tool update_note invoked — id=%s", note.id)
        return {"message": f"Note '{note.title}' updated.", "note": _dump(note)}

    async def delete_note(self, note_id: str) -> dict:
        """Delete a note by id.

        Returns:
            Dictionary with the deleted note_id.
        """
        try:
            deleted_id = await self.service.delete_note(note_id)
        except NoteError as exc:
            return {"error": exc.message}
        logger.info("Tool delete_note invoked — id=%s", deleted_id)
        return {"note_id": deleted_id, "message": "Note deleted."}

    async def get_calendar(self, year: int, month: int) -> dict:
        """Show which notes fall on each day of a month.

        Multi-day notes appear on every day they span.

        Args:
            year: Four-digit year.
            month: Month number, 1-12.

        Returns:
            Dictionary with the month label and the days that have notes.
        """
        try:
            notes = await self.service.list_notes()
            calendar = project_month(notes, year, month)
        except NoteError as exc:
            return {"error": exc.message}
        except ValueError as exc:
            return {"error": str(exc)}

        days = [
            {
                "date": cell.date,
                "notes": [
                    {"id": n.id, "title": n.title, "startTime": n.start_time}
                    for n in cell.notes
                ],
            }
            for cell in calendar.cells
            if cell.in_month and cell.notes
        ]
        logger.info(
            "Tool get_calendar invoked — %s, busy_days=%d", calendar.label, len(days)
        )
        return {"label": calendar.label, "days": days}

    async def health_check(self) -> dict:
        """Check whether the Work Log server is healthy.

        Returns:
            Dictionary with server status, note count, and timestamp.
        """
        logger.info("Tool health_check invoked")
        try:
            total = await self.service.count()
        except NoteError as exc:
            return {"status": "degraded", "server": "worklog", "error": exc.message}
        return {
            "status": "healthy",
            "server": "worklog",
            "total_notes": total,
            "timestamp": datetime.now(UTC).isoformat(),
        }


# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------


def build_server(tools: WorklogTools, port: int = 8001) -> FastMCP:
    """Create the FastMCP server and register every tool."""
    mcp = FastMCP("worklog", host="0.0.0.0", port=port)
    for fn in (
        tools.list_notes,
        tools.save_note,
        tools.update_note,
        tools.delete_note,
        tools.get_calendar,
        tools.health_check,
    ):
        mcp.tool()(fn)
    return mcp


async def serve(settings: Settings) -> None:
    """Open storage, run the SSE server until stopped, then close storage."""
    storage = build_storage(settings)
    await storage.init()
    mcp = build_server(WorklogTools(NoteService(storage)), port=settings.mcp_port)
    try:
        logger.info("Starting Work Log MCP server on port %d ...", settings.mcp_port)
        await mcp.run_sse_async()
    finally:
        await storage.close()


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    anyio.run(serve, get_settings())
