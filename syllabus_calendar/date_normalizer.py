from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

from dateutil import parser as date_parser

TWO_DIGIT_YEAR_PIVOT = 50

MONTH_NAMES = (
    r"(?:January|February|March|April|May|June|July|August|September|October|November|December)"
)
MONTH_ABBREVIATIONS = r"(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sept|Sep|Oct|Nov|Dec)"
MONTH_TOKEN = rf"(?:{MONTH_NAMES}|{MONTH_ABBREVIATIONS}\.?)"
RANGE_SEPARATOR = r"\s*[-–—]\s*"

BARE_NUMERIC_PATTERN = re.compile(r"^(?P<month>\d{1,2})[/-](?P<day>\d{1,2})$")
NUMERIC_WITH_YEAR_PATTERN = re.compile(
    r"^(?P<month>\d{1,2})[/-](?P<day>\d{1,2})[/-](?P<year>\d{2,4})$"
)
MONTH_DAY_PATTERN = re.compile(rf"^{MONTH_TOKEN}\s+\d{{1,2}}$", re.IGNORECASE)
MONTH_RANGE_PATTERN = re.compile(
    rf"^(?P<start>{MONTH_TOKEN}\s+\d{{1,2}}){RANGE_SEPARATOR}\d{{1,2}}(?P<year>,?\s*\d{{4}})?$",
    re.IGNORECASE,
)


def resolve_two_digit_year(year: int, *, pivot: int = TWO_DIGIT_YEAR_PIVOT) -> int:
    """Map ``24`` to 2024 and ``72`` to 1972 around ``pivot``; longer years pass through."""
    if year >= 100:
        return year
    return 2000 + year if year < pivot else 1900 + year


def _collapse_range(value: str) -> str:
    match = MONTH_RANGE_PATTERN.match(value)
    if not match:
        return value
    return match.group("start") + (match.group("year") or "")


def _build_date(year: int, month: int, day: int) -> Optional[datetime]:
    try:
        return datetime(year, month, day)
    except ValueError:
        return None


def normalise_date(
    raw: str,
    default_year: int,
    *,
    year_pivot: int = TWO_DIGIT_YEAR_PIVOT,
) -> Optional[datetime]:
    """Turn a matched date token into midnight of that calendar day.

    Tokens without a year take ``default_year``. Numeric tokens are read
    month-first. Returns ``None`` when the token is not a real calendar date;
    callers skip the match in that case.
    """

    cleaned = _collapse_range(raw.strip())
    if not cleaned:
        return None

    bare = BARE_NUMERIC_PATTERN.match(cleaned)
    if bare:
        cleaned = f"{bare.group('month')}/{bare.group('day')}/{default_year}"
    elif MONTH_DAY_PATTERN.match(cleaned):
        cleaned = f"{cleaned}, {default_year}"

    numeric = NUMERIC_WITH_YEAR_PATTERN.match(cleaned)
    if numeric:
        year = resolve_two_digit_year(int(numeric.group("year")), pivot=year_pivot)
        return _build_date(year, int(numeric.group("month")), int(numeric.group("day")))

    try:
        parsed = date_parser.parse(cleaned, default=datetime(default_year, 1, 1))
    except (ValueError, OverflowError):
        return None
    return parsed.replace(hour=0, minute=0, second=0, microsecond=0, tzinfo=None)
