from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, root_validator, validator

EventType = Literal["assignment", "exam", "reading", "deadline", "holiday", "class", "other"]


class CalendarEvent(BaseModel):
    """A dated syllabus entry produced by one extraction run."""

    id: int = Field(..., ge=1, description="Sequential id, unique within one extraction run")
    title: str = Field(..., min_length=3, description="Cleaned display title")
    date: datetime = Field(..., description="Midnight of the event day (timezone-naive)")
    type: EventType = Field(default="other", description="Event category")
    description: Optional[str] = Field(
        default=None,
        description="Source line, only when it says more than the title",
    )
    raw_text: str = Field(..., alias="rawText", description="Unmodified source line")

    class Config:
        allow_population_by_field_name = True
        allow_mutation = False

    @validator("title")
    def ensure_title_not_blank(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("title must not be blank")
        return cleaned

    @validator("date")
    def drop_timezone(cls, value: datetime) -> datetime:
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value


class ExtractRequest(BaseModel):
    text: str = Field(
        ...,
        description="Plain syllabus text to scan for dated events",
    )
    reference_date: Optional[date] = Field(
        default=None,
        alias="referenceDate",
        description="Reference day; its year fills in dates written without a year",
    )

    class Config:
        allow_population_by_field_name = True

    @validator("text")
    def ensure_non_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Text is empty. Paste the syllabus contents first.")
        return value


class ExtractionResponse(BaseModel):
    success: bool = True
    events: List[CalendarEvent] = Field(default_factory=list)
    total_found: int = Field(default=0, alias="totalFound")
    counts_by_type: Dict[str, int] = Field(default_factory=dict, alias="countsByType")
    warning: Optional[str] = None
    message: Optional[str] = None
    text_preview: Optional[str] = Field(default=None, alias="textPreview")

    class Config:
        allow_population_by_field_name = True


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    request_id: Optional[str] = None


class ExportRequest(BaseModel):
    """Events to serialize plus optional filters choosing a subset of them."""

    events: List[CalendarEvent] = Field(..., max_items=5_000)
    event_ids: List[int] = Field(default_factory=list, alias="eventIds")
    types: List[EventType] = Field(default_factory=list)
    date_from: Optional[date] = Field(default=None, alias="dateFrom")
    date_to: Optional[date] = Field(default=None, alias="dateTo")
    upcoming_only: bool = Field(default=False, alias="upcomingOnly")
    reference_date: Optional[date] = Field(default=None, alias="referenceDate")
    calendar_name: str = Field(default="", max_length=200, alias="calendarName")

    class Config:
        allow_population_by_field_name = True

    @validator("calendar_name")
    def _normalise_calendar_name(cls, value: str) -> str:  # type: ignore[override]
        return value.strip()

    @root_validator
    def _check_date_window(cls, values: dict) -> dict:  # type: ignore[override]
        date_from = values.get("date_from")
        date_to = values.get("date_to")
        if date_from and date_to and date_from > date_to:
            raise ValueError("dateFrom must not be later than dateTo.")
        return values
