from __future__ import annotations

import math
from datetime import date, datetime
from typing import Dict, List, Optional, Sequence

from .event_classifier import EVENT_TYPES
from .models import CalendarEvent

SECONDS_PER_DAY = 24 * 60 * 60


def _as_datetime(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    return datetime(value.year, value.month, value.day)


def is_upcoming(event: CalendarEvent, reference: date | datetime) -> bool:
    return event.date > _as_datetime(reference)


def is_past_due(event: CalendarEvent, reference: date | datetime) -> bool:
    return event.type == "assignment" and event.date < _as_datetime(reference)


def days_until(event: CalendarEvent, reference: date | datetime) -> int:
    """Whole days left before the event, rounded up; negative once it has passed."""
    delta = event.date - _as_datetime(reference)
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)


def count_by_type(events: Sequence[CalendarEvent]) -> Dict[str, int]:
    counts = {event_type: 0 for event_type in EVENT_TYPES}
    for event in events:
        counts[event.type] = counts.get(event.type, 0) + 1
    return counts


def filter_events(
    events: Sequence[CalendarEvent],
    *,
    types: Sequence[str] = (),
    event_ids: Sequence[int] = (),
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    upcoming_only: bool = False,
    reference: Optional[date | datetime] = None,
) -> List[CalendarEvent]:
    """Select the events to export, keeping their original order."""

    type_filters = {event_type.lower() for event_type in types if event_type}
    id_filters = set(event_ids)
    if upcoming_only and reference is None:
        raise ValueError("reference is required when upcoming_only is set")

    selected: List[CalendarEvent] = []
    for event in events:
        if id_filters and event.id not in id_filters:
            continue
        if type_filters and event.type not in type_filters:
            continue

        event_day = event.date.date()
        if date_from and event_day < date_from:
            continue
        if date_to and event_day > date_to:
            continue
        if upcoming_only and reference is not None and not is_upcoming(event, reference):
            continue

        selected.append(event)

    return selected
