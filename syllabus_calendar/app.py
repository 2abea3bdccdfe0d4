from __future__ import annotations

import logging
import time
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from fastapi import FastAPI, File, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from .event_extractor import NO_EVENTS_WARNING, extract_events
from .event_filter import count_by_type, filter_events
from .ics_exporter import build_ics
from .models import CalendarEvent, ExportRequest, ExtractRequest, ExtractionResponse
from .settings import settings
from .text_extractor import EMPTY_UPLOAD_MESSAGE, extract_text_from_upload

LOG_LEVEL = getattr(logging, settings.log_level.upper(), logging.INFO)
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger("syllabus_calendar.app")
logger.setLevel(LOG_LEVEL)

ALLOWED_ORIGINS = settings.allowed_origins or ["*"]
INTERNAL_ERROR_MESSAGE = "Failed to process the syllabus. Please try again."


app = FastAPI(
    title=settings.app_title,
    description=settings.app_description,
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _uptime_seconds() -> float:
    started_at = getattr(app.state, "started_at", None)
    if not started_at:
        return 0.0
    return max(0.0, (datetime.now(timezone.utc) - started_at).total_seconds())


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or str(uuid4())


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid4())
    request.state.request_id = request_id
    start_time = time.perf_counter()
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id

    if settings.enable_request_logging:
        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            "Request completed",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )

    return response


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    request_id = _request_id(request)
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail), "request_id": request_id},
        headers={**(getattr(exc, "headers", None) or {}), "X-Request-ID": request_id},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    request_id = _request_id(request)
    logger.exception(
        "Unhandled server error",
        extra={"request_id": request_id, "path": request.url.path},
    )
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": INTERNAL_ERROR_MESSAGE, "request_id": request_id},
        headers={"X-Request-ID": request_id},
    )


@app.on_event("startup")
async def startup() -> None:
    app.state.started_at = datetime.now(timezone.utc)
    app.state.settings = settings


def _reference_day(reference_date: Optional[date]) -> date:
    return reference_date or datetime.now().date()


def summarise_events(
    events: List[CalendarEvent], text_preview: Optional[str] = None
) -> ExtractionResponse:
    return ExtractionResponse(
        success=True,
        events=events,
        total_found=len(events),
        counts_by_type=count_by_type(events),
        warning=None if events else NO_EVENTS_WARNING,
        text_preview=text_preview,
    )


@app.get("/health")
async def health() -> Dict[str, Any]:
    return {
        "status": "ok",
        "uptime_seconds": round(_uptime_seconds(), 3),
        "version": app.version,
    }


@app.get("/health/live")
async def health_live() -> Dict[str, Any]:
    return {"status": "ok", "uptime_seconds": round(_uptime_seconds(), 3)}


@app.post(
    "/api/upload",
    response_model=ExtractionResponse,
    response_model_exclude_none=True,
)
async def upload_syllabus(
    file: Optional[UploadFile] = File(default=None),
    reference_date: Optional[date] = None,
) -> ExtractionResponse:
    if file is None:
        raise HTTPException(status_code=400, detail=EMPTY_UPLOAD_MESSAGE)

    text, preview = await extract_text_from_upload(
        file,
        max_file_size=settings.max_upload_bytes,
        max_characters=settings.max_input_characters,
    )
    events = extract_events(
        text,
        _reference_day(reference_date),
        year_pivot=settings.two_digit_year_pivot,
    )
    logger.info(
        "Extracted %d events from %s (%d characters)",
        len(events),
        file.filename or "uploaded",
        len(text),
    )
    return summarise_events(events, text_preview=preview)


@app.post(
    "/api/extract",
    response_model=ExtractionResponse,
    response_model_exclude_none=True,
)
async def extract(request: ExtractRequest) -> ExtractionResponse:
    if len(request.text) > settings.max_input_characters:
        raise HTTPException(
            status_code=400,
            detail=f"Text is too long (maximum {settings.max_input_characters:,} characters).",
        )

    events = extract_events(
        request.text,
        _reference_day(request.reference_date),
        year_pivot=settings.two_digit_year_pivot,
    )
    return summarise_events(events)


@app.post("/api/export/ics")
async def export_ics(request: ExportRequest) -> Response:
    reference = _reference_day(request.reference_date)
    selected = filter_events(
        request.events,
        types=request.types,
        event_ids=request.event_ids,
        date_from=request.date_from,
        date_to=request.date_to,
        upcoming_only=request.upcoming_only,
        reference=reference,
    )
    if not selected:
        raise HTTPException(status_code=400, detail="No events match the export selection.")

    content = build_ics(
        selected,
        product_id=settings.ics_product_id,
        calendar_name=request.calendar_name,
    )
    headers = {
        "Content-Disposition": f'attachment; filename="{settings.ics_filename}"'
    }
    return Response(
        content=content,
        media_type="text/calendar; charset=utf-8",
        headers=headers,
    )
