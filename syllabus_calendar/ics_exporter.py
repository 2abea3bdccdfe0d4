from __future__ import annotations

import hashlib
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

from icalendar import Calendar, Event

from .models import CalendarEvent

DEFAULT_PRODUCT_ID = "-//Syllabus Calendar//EN"
UID_DOMAIN = "syllabus-calendar"


def _event_uid(event: CalendarEvent) -> str:
    digest = hashlib.md5(event.title.encode("utf-8")).hexdigest()[:12]
    return f"{event.id}-{event.date:%Y%m%d}-{digest}@{UID_DOMAIN}"


def _build_vevent(event: CalendarEvent, generated_at: datetime) -> Event:
    start = event.date.date()
    vevent = Event()
    vevent.add("uid", _event_uid(event))
    vevent.add("dtstamp", generated_at)
    vevent.add("summary", event.title)
    vevent.add("description", event.description or event.raw_text)
    vevent.add("categories", [event.type])
    # All-day event: DTEND is exclusive, so the next day.
    vevent.add("dtstart", start)
    vevent.add("dtend", start + timedelta(days=1))
    return vevent


def build_ics(
    events: Sequence[CalendarEvent],
    *,
    product_id: str = DEFAULT_PRODUCT_ID,
    calendar_name: str = "",
    generated_at: Optional[datetime] = None,
) -> bytes:
    """Serialize events into a single VCALENDAR with one all-day VEVENT each."""

    stamp = generated_at or datetime.now(timezone.utc)
    if stamp.tzinfo is None:
        stamp = stamp.replace(tzinfo=timezone.utc)

    calendar = Calendar()
    calendar.add("prodid", product_id)
    calendar.add("version", "2.0")
    calendar.add("calscale", "GREGORIAN")
    calendar.add("method", "PUBLISH")
    if calendar_name:
        calendar.add("x-wr-calname", calendar_name)

    for event in events:
        calendar.add_component(_build_vevent(event, stamp))

    return calendar.to_ical()
