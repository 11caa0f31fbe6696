"""FastAPI application for the work-log notes service.

Endpoints:
  GET    /notes                   — List all notes, newest first
  POST   /notes                   — Create a note
  GET    /notes/{id}              — Fetch one note
  PUT    /notes/{id}              — Partially update a note
  DELETE /notes/{id}              — Delete a note
  GET    /calendar/{year}/{month} — 42-day calendar grid with notes per day
  GET    /health                  — Service and storage status
  GET    /metrics                 — Prometheus metrics
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Body, Depends, FastAPI, Path, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware

from worklog.calendar_grid import CalendarMonth, project_month
from worklog.config import Settings, get_settings
from worklog.errors import NoteNotFoundError, NoteValidationError, StoreError
from worklog.metrics import HTTP_DURATION, HTTP_REQUESTS
from worklog.models import DeleteRequest, Note, NoteCreate, NoteUpdate
from worklog.service import NoteService
from worklog.storage import build_storage

_settings = get_settings()

logging.basicConfig(
    level=_settings.log_level,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
)
logger = logging.getLogger(__name__)

# Endpoints excluded from HTTP metrics to avoid cardinality explosion
_METRICS_EXCLUDE = {"/metrics", "/openapi.json", "/docs", "/redoc"}

# Generic messages for storage failures, keyed by HTTP method
_STORE_FAILURE_MESSAGES = {
    "GET": "Failed to fetch notes.",
    "POST": "Failed to create note.",
    "PUT": "Failed to update note.",
    "DELETE": "Failed to delete note.",
}


class MetricsMiddleware(BaseHTTPMiddleware):
    """Record HTTP request count and duration for Prometheus."""

    async def dispatch(self, request: Request, call_next):
        """Wrap each request with timing and counting."""
        path = request.url.path
        if path in _METRICS_EXCLUDE:
            return await call_next(request)

        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start

        route = request.scope.get("route")
        endpoint = getattr(route, "path", path)
        HTTP_REQUESTS.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
        ).inc()
        HTTP_DURATION.labels(endpoint=endpoint).observe(elapsed)
        return response


def get_service(request: Request) -> NoteService:
    """Dependency: the service bound to this app's storage."""
    return request.app.state.service


def _message(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


async def _on_validation_error(request: Request, exc: NoteValidationError) -> JSONResponse:
    logger.info("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return _message(400, exc.message)


async def _on_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.info("%s %s malformed request: %s", request.method, request.url.path, exc.errors())
    return _message(400, "Malformed request.")


async def _on_not_found(request: Request, exc: NoteNotFoundError) -> JSONResponse:
    return _message(404, exc.message)


async def _on_store_error(request: Request, exc: StoreError) -> JSONResponse:
    logger.error(
        "%s %s storage failure: %s (cause: %r)",
        request.method,
        request.url.path,
        exc.message,
        exc.__cause__,
    )
    return _message(500, _STORE_FAILURE_MESSAGES.get(request.method, "Storage failure."))


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the app. Storage is built and opened in the lifespan."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup: open storage. Shutdown: close it."""
        storage = build_storage(settings)
        logger.info("Opening %s note storage...", storage.backend)
        await storage.init()
        app.state.service = NoteService(storage)
        yield
        await storage.close()
        logger.info("Note storage closed.")

    app = FastAPI(title="Work Log", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(MetricsMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(NoteValidationError, _on_validation_error)
    app.add_exception_handler(RequestValidationError, _on_request_validation_error)
    app.add_exception_handler(NoteNotFoundError, _on_not_found)
    app.add_exception_handler(StoreError, _on_store_error)

    # --- Notes ---

    @app.get("/notes", response_model=list[Note])
    async def list_notes(service: NoteService = Depends(get_service)) -> list[Note]:
        """List all notes ordered by date, start time and creation, newest first."""
        return await service.list_notes()

    @app.post("/notes", response_model=Note, status_code=201)
    async def create_note(
        payload: NoteCreate, service: NoteService = Depends(get_service)
    ) -> Note:
        """Create a note. Title and date are required."""
        return await service.create_note(payload)

    @app.get("/notes/{note_id}", response_model=Note)
    async def get_note(note_id: str, service: NoteService = Depends(get_service)) -> Note:
        """Fetch a single note."""
        return await service.get_note(note_id)

    @app.put("/notes/{note_id}", response_model=Note)
    async def update_note(
        note_id: str,
        payload: NoteUpdate,
        service: NoteService = Depends(get_service),
    ) -> Note:
        """Apply a partial update; falls back to ``_id`` in the body."""
        return await service.update_note(note_id, payload)

    @app.delete("/notes/{note_id}")
    async def delete_note(
        note_id: str,
        payload: DeleteRequest | None = Body(default=None),
        service: NoteService = Depends(get_service),
    ) -> dict[str, str]:
        """Delete a note; falls back to ``_id`` in an optional body."""
        body_id = payload.id if payload else None
        deleted_id = await service.delete_note(note_id, body_id)
        return {"message": "Note deleted.", "id": deleted_id}

    # --- Calendar ---

    @app.get("/calendar/{year}/{month}", response_model=CalendarMonth)
    async def calendar_month(
        year: int = Path(ge=1000, le=9998),
        month: int = Path(ge=1, le=12),
        service: NoteService = Depends(get_service),
    ) -> CalendarMonth:
        """The 42-day grid for a month with every note placed on each day it spans."""
        notes = await service.list_notes()
        return project_month(notes, year, month)

    # --- Ops ---

    @app.get("/health")
    async def health(service: NoteService = Depends(get_service)) -> dict[str, Any]:
        """Report service status and the number of stored notes."""
        try:
            total = await service.count()
        except StoreError as exc:
            logger.warning("Health check storage failure: %s", exc.message)
            return {"status": "degraded", "backend": service.storage.backend}
        return {
            "status": "healthy",
            "backend": service.storage.backend,
            "total_notes": total,
        }

    @app.get("/metrics")
    async def metrics() -> Response:
        """Prometheus metrics endpoint."""
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return app


app = create_app(_settings)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=_settings.host, port=_settings.port)
