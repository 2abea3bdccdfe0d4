from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, List, Optional, Pattern, Sequence, Tuple

from .date_normalizer import (
    MONTH_ABBREVIATIONS,
    MONTH_NAMES,
    RANGE_SEPARATOR,
    TWO_DIGIT_YEAR_PIVOT,
    normalise_date,
)
from .event_classifier import classify_event
from .models import CalendarEvent
from .text_cleaner import clean_line, is_page_footer, split_raw_lines

logger = logging.getLogger("syllabus_calendar.extractor")

NO_EVENTS_WARNING = (
    "No dates found in syllabus. The document may not contain recognizable date formats."
)
TITLE_MIN_LENGTH = 3
SHORT_TITLE_LENGTH = 5
CONTEXT_LINE_MIN_LENGTH = 10
CONTEXT_TITLE_MAX_LENGTH = 80
DEDUP_TITLE_PREFIX_LENGTH = 20


@dataclass(frozen=True)
class Line:
    """A cleaned, non-blank line; ``raw`` keeps the trimmed source text."""

    index: int
    text: str
    raw: str = ""

    @property
    def source(self) -> str:
        return self.raw or self.text


@dataclass(frozen=True)
class DatePattern:
    name: str
    regex: Pattern[str]


@dataclass(frozen=True)
class DateMatch:
    text: str
    pattern: str
    line: Line
    start: int
    end: int


DATE_PATTERNS: Tuple[DatePattern, ...] = (
    DatePattern("iso", re.compile(r"\b\d{4}-\d{1,2}-\d{1,2}\b")),
    DatePattern(
        "range",
        re.compile(
            rf"\b(?:{MONTH_NAMES}|{MONTH_ABBREVIATIONS}\.?)\s+\d{{1,2}}{RANGE_SEPARATOR}\d{{1,2}}(?:,?\s*\d{{4}})?\b",
            re.IGNORECASE,
        ),
    ),
    DatePattern(
        "month_name",
        re.compile(rf"\b{MONTH_NAMES}\s+\d{{1,2}}(?:,?\s*\d{{4}})?\b", re.IGNORECASE),
    ),
    DatePattern(
        "month_abbreviation",
        re.compile(rf"\b{MONTH_ABBREVIATIONS}\.?\s+\d{{1,2}}(?:,?\s*\d{{4}})?\b", re.IGNORECASE),
    ),
    DatePattern("slash", re.compile(r"\b\d{1,2}/\d{1,2}(?:/\d{2,4})?\b")),
    DatePattern("dash", re.compile(r"\b\d{1,2}-\d{1,2}(?:-\d{2,4})?\b")),
)

WEEKDAY_NAMES = r"(?:Monday|Tuesday|Wednesday|Thursday|Friday|Saturday|Sunday)"
# Abbreviations only count when followed by "." or ",".
WEEKDAY_ABBREVIATIONS = r"(?:Mon|Tues|Tue|Wed|Thurs|Thur|Thu|Fri|Sat|Sun)"
TITLE_PREFIX_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r"^Week\s+\d+:?\s*", re.IGNORECASE),
    re.compile(r"^Class\s+\d+:?\s*", re.IGNORECASE),
    re.compile(r"^Session\s+\d+:?\s*", re.IGNORECASE),
    re.compile(r"^Lab\s+#?\d+\s*[-–—]?\s*", re.IGNORECASE),
    re.compile(r"^\d+\.\s*"),
    re.compile(r"^[-–—]+\s*"),
    re.compile(r"\s*[-–—]+\s*$"),
    re.compile(rf"^{WEEKDAY_NAMES}\b\.?,?\s*", re.IGNORECASE),
    re.compile(rf"^{WEEKDAY_ABBREVIATIONS}(?:\.,?|,)\s*", re.IGNORECASE),
    re.compile(r"^(?:due|submit|turn\s+in)\b:?\s*", re.IGNORECASE),
)
SEPARATOR_CHARS = " :;,"
MULTI_SPACE_PATTERN = re.compile(r"\s+")

GENERIC_TITLE_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r"^(?:week|class|session|lab|lecture|exam)\s*\d*$", re.IGNORECASE),
    re.compile(r"^(?:due|submit|assignment)$", re.IGNORECASE),
    re.compile(r"^\d+$"),
    re.compile(r"^[a-z]\s*$", re.IGNORECASE),
)
NON_ALPHANUMERIC_PATTERN = re.compile(r"[^0-9a-z]")


def split_lines(text: str) -> List[Line]:
    lines: List[Line] = []
    for raw in split_raw_lines(text):
        cleaned = clean_line(raw)
        if not cleaned or is_page_footer(cleaned):
            continue
        lines.append(Line(index=len(lines), text=cleaned, raw=raw.strip()))
    return lines


def iter_date_matches(line: Line) -> List[DateMatch]:
    """Collect date tokens from every recognizer, longest recognizers first.

    A token lying wholly inside an already accepted token is ignored, so a
    range such as ``Jan 15-20`` does not also surface as ``Jan 15``.
    """

    seen_spans: list[tuple[int, int]] = []
    matches: List[DateMatch] = []
    for pattern in DATE_PATTERNS:
        for match in pattern.regex.finditer(line.text):
            span = match.span()
            if any(start <= span[0] and span[1] <= end for start, end in seen_spans):
                continue
            seen_spans.append(span)
            matches.append(
                DateMatch(
                    text=match.group(),
                    pattern=pattern.name,
                    line=line,
                    start=span[0],
                    end=span[1],
                )
            )
    matches.sort(key=lambda item: item.start)
    return matches


def has_date_token(text: str) -> bool:
    return any(pattern.regex.search(text) for pattern in DATE_PATTERNS)


def _strip_title_noise(title: str) -> str:
    candidate = title.strip(SEPARATOR_CHARS)
    while True:
        updated = candidate
        for pattern in TITLE_PREFIX_PATTERNS:
            updated = pattern.sub("", updated, count=1)
        updated = updated.strip(SEPARATOR_CHARS)
        if updated == candidate:
            return candidate
        candidate = updated


def _context_title(lines: Sequence[Line], index: int) -> str:
    window = lines[max(0, index - 1) : min(len(lines), index + 2)]
    neighbours = [
        line.text
        for line in window
        if line.index != index
        and len(line.text) >= CONTEXT_LINE_MIN_LENGTH
        and not has_date_token(line.text)
    ]
    return " ".join(neighbours)[:CONTEXT_TITLE_MAX_LENGTH]


def build_title(line: Line, date_text: str, lines: Sequence[Line]) -> str:
    title = re.sub(re.escape(date_text) + r"\.?", " ", line.text, flags=re.IGNORECASE)
    title = MULTI_SPACE_PATTERN.sub(" ", title)
    title = _strip_title_noise(title)

    if len(title) < SHORT_TITLE_LENGTH:
        context = _context_title(lines, line.index)
        if len(context) > len(title):
            title = context.strip()

    return MULTI_SPACE_PATTERN.sub(" ", title).strip()


def is_generic_title(title: str) -> bool:
    stripped = title.strip()
    return any(pattern.match(stripped) for pattern in GENERIC_TITLE_PATTERNS)


def dedup_key(event: CalendarEvent) -> tuple[str, str]:
    day = event.date.date().isoformat()
    title_key = NON_ALPHANUMERIC_PATTERN.sub("", event.title.lower())[:DEDUP_TITLE_PREFIX_LENGTH]
    return day, title_key


def deduplicate_and_sort(events: Iterable[CalendarEvent]) -> List[CalendarEvent]:
    """Drop generic titles and near-duplicates, then order by date (stable)."""
    seen: set[tuple[str, str]] = set()
    unique: List[CalendarEvent] = []
    for event in events:
        if is_generic_title(event.title):
            continue
        key = dedup_key(event)
        if key in seen:
            continue
        seen.add(key)
        unique.append(event)
    return sorted(unique, key=lambda event: event.date)


def _build_event(
    event_id: int,
    match: DateMatch,
    lines: Sequence[Line],
    event_date: datetime,
) -> Optional[CalendarEvent]:
    title = build_title(match.line, match.text, lines)
    if len(title) < TITLE_MIN_LENGTH or is_generic_title(title):
        return None

    source = match.line.source
    return CalendarEvent(
        id=event_id,
        title=title,
        date=event_date,
        type=classify_event(match.line.text),
        description=source if len(source) > len(title) else None,
        raw_text=source,
    )


def extract_events(
    text: str,
    reference_date: Optional[date] = None,
    *,
    year_pivot: int = TWO_DIGIT_YEAR_PIVOT,
) -> List[CalendarEvent]:
    """Scan syllabus text and return its dated events in chronological order.

    ``reference_date`` supplies the year for dates written without one. Lines
    with unreadable dates or empty titles are skipped, never raised.
    """

    reference = reference_date or datetime.now().date()
    lines = split_lines(text)

    candidates: List[CalendarEvent] = []
    match_count = 0
    for line in lines:
        for match in iter_date_matches(line):
            match_count += 1
            event_date = normalise_date(match.text, reference.year, year_pivot=year_pivot)
            if event_date is None:
                logger.debug("Skipping unreadable date %r on line %d", match.text, line.index)
                continue
            event = _build_event(len(candidates) + 1, match, lines, event_date)
            if event is None:
                logger.debug("Skipping generic title for %r on line %d", match.text, line.index)
                continue
            candidates.append(event)

    events = deduplicate_and_sort(candidates)
    logger.debug(
        "Extracted %d events from %d lines (%d date tokens, %d candidates)",
        len(events),
        len(lines),
        match_count,
        len(candidates),
    )
    return events
