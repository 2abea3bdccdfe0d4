from __future__ import annotations

from datetime import date, datetime

from .event_extractor import (
    Line,
    build_title,
    dedup_key,
    deduplicate_and_sort,
    extract_events,
    has_date_token,
    is_generic_title,
    iter_date_matches,
    split_lines,
)
from .models import CalendarEvent

REFERENCE = date(2025, 1, 1)

SYLLABUS = """
CS 101 Introduction to Programming - Fall Semester

Week 1: Sep 2 - Course overview and syllabus review
Homework 1 due 9/12
Read Chapter 3 (pages 45-80) by Sept. 19
Midterm Exam October 15, 2025
Last day to drop without a W: 10/20
Thanksgiving break, no class Nov 26-28
Project proposal due 11/3
Final exam Dec 15
"""


def _event(event_id: int, title: str, day: datetime, line: str = "") -> CalendarEvent:
    return CalendarEvent(
        id=event_id,
        title=title,
        date=day,
        type="other",
        raw_text=line or title,
    )


def test_split_lines_trims_and_drops_blank_lines():
    lines = split_lines("  first line  \r\n\n   \nsecond\n")
    assert [line.text for line in lines] == ["first line", "second"]
    assert [line.index for line in lines] == [0, 1]


def test_split_lines_handles_empty_text():
    assert split_lines("") == []


def test_extract_events_empty_text_returns_empty_list():
    assert extract_events("", reference_date=REFERENCE) == []
    assert extract_events("   \n\n ", reference_date=REFERENCE) == []


def test_extract_events_defaults_missing_year():
    events = extract_events("Assignment due 9/2", reference_date=date(2025, 6, 1))
    assert len(events) == 1
    event = events[0]
    assert event.date == datetime(2025, 9, 2)
    assert event.type == "assignment"
    assert event.title == "Assignment due"
    assert event.raw_text == "Assignment due 9/2"
    assert event.description == "Assignment due 9/2"


def test_extract_events_collapses_date_range_to_start():
    events = extract_events("Jan 15-20, 2024: Reading week", reference_date=date(2025, 6, 1))
    assert len(events) == 1
    assert events[0].date == datetime(2024, 1, 15)
    assert events[0].type == "reading"
    assert events[0].title == "Reading week"


def test_extract_events_classifies_exam_before_class():
    events = extract_events(
        "Final exam review and class discussion on 12/10",
        reference_date=REFERENCE,
    )
    assert len(events) == 1
    assert events[0].type == "exam"


def test_extract_events_resolves_two_digit_years():
    events = extract_events(
        "Alumni seminar 1/15/72\nGuest lecture 1/15/24",
        reference_date=REFERENCE,
    )
    assert [event.date for event in events] == [datetime(1972, 1, 15), datetime(2024, 1, 15)]


def test_extract_events_pulls_title_from_context_line():
    text = "\n".join(
        [
            "Research paper outline workshop",
            "10/5:",
            "Bring two printed copies",
        ]
    )
    events = extract_events(text, reference_date=REFERENCE)
    assert len(events) == 1
    assert events[0].title == "Research paper outline workshop Bring two printed copies"
    assert events[0].date == datetime(2025, 10, 5)
    assert events[0].raw_text == "10/5:"
    assert events[0].description is None


def test_extract_events_sorted_and_unique():
    events = extract_events(SYLLABUS, reference_date=REFERENCE)
    assert events

    dates = [event.date for event in events]
    assert dates == sorted(dates)

    keys = [dedup_key(event) for event in events]
    assert len(keys) == len(set(keys))

    for event in events:
        assert not is_generic_title(event.title)
        assert len(event.title) >= 3


def test_extract_events_syllabus_types():
    events = extract_events(SYLLABUS, reference_date=REFERENCE)
    by_day = {event.date.date(): event for event in events}

    assert by_day[date(2025, 9, 12)].type == "assignment"
    assert by_day[date(2025, 9, 19)].type == "reading"
    assert by_day[date(2025, 10, 15)].type == "exam"
    assert by_day[date(2025, 10, 20)].type == "deadline"
    assert by_day[date(2025, 11, 26)].type == "holiday"
    assert by_day[date(2025, 12, 15)].type == "exam"
    assert by_day[date(2025, 9, 2)].title == "Course overview and syllabus review"


def test_extract_events_is_deterministic():
    first = extract_events(SYLLABUS, reference_date=REFERENCE)
    second = extract_events(SYLLABUS, reference_date=REFERENCE)
    assert [event.dict() for event in first] == [event.dict() for event in second]


def test_extract_events_ids_are_unique_and_follow_discovery_order():
    text = "Quiz 2 on 3/4\nEssay draft due 2/1"
    events = extract_events(text, reference_date=REFERENCE)
    assert [event.title for event in events] == ["Essay draft due", "Quiz 2 on"]
    assert [event.id for event in events] == [2, 1]


def test_extract_events_skips_invalid_calendar_dates():
    events = extract_events("Lab safety briefing 13/45", reference_date=REFERENCE)
    assert events == []


def test_extract_events_drops_generic_titles():
    events = extract_events("Week 3 9/16\nLecture 4 - 9/18", reference_date=REFERENCE)
    assert events == []


def test_extract_events_keeps_multiple_dates_on_one_line():
    events = extract_events(
        "Presentation slots 4/7 and 4/9 for group projects",
        reference_date=REFERENCE,
    )
    assert [event.date for event in events] == [datetime(2025, 4, 7), datetime(2025, 4, 9)]
    assert all(event.type == "assignment" for event in events)


def test_extract_events_uses_custom_year_pivot():
    events = extract_events("Reunion seminar 6/1/40", reference_date=REFERENCE, year_pivot=30)
    assert events[0].date == datetime(1940, 6, 1)


def test_iter_date_matches_prefers_whole_range():
    line = Line(index=0, text="January 15–20, 2024 orientation")
    matches = iter_date_matches(line)
    assert [(match.text, match.pattern) for match in matches] == [("January 15–20, 2024", "range")]


def test_iter_date_matches_orders_by_position():
    line = Line(index=0, text="Dec 1 review, essay 11/20, quiz 2025-11-25")
    matches = iter_date_matches(line)
    assert [match.pattern for match in matches] == ["month_abbreviation", "slash", "iso"]
    assert [match.start for match in matches] == sorted(match.start for match in matches)


def test_iter_date_matches_recognises_abbreviation_with_period():
    line = Line(index=0, text="Essay due Jan. 15, 2024")
    matches = iter_date_matches(line)
    assert [match.text for match in matches] == ["Jan. 15, 2024"]


def test_has_date_token():
    assert has_date_token("Meet on 9/2")
    assert has_date_token("March 3 kickoff")
    assert not has_date_token("Bring calculators and notes")


def test_build_title_strips_structural_prefixes():
    lines = split_lines("Week 3: Monday, Sep 15 - Lab #2 - Titration")
    assert build_title(lines[0], "Sep 15", lines) == "Titration"


def test_build_title_removes_due_marker_and_numbering():
    lines = split_lines("1. Due: Lab report 10/1")
    assert build_title(lines[0], "10/1", lines) == "Lab report"


def test_build_title_keeps_holiday_word():
    lines = split_lines("Holiday observed 11/11")
    assert build_title(lines[0], "11/11", lines) == "Holiday observed"


def test_build_title_ignores_context_lines_with_dates():
    lines = split_lines("Project checkpoint 4/1\n4/2\nShort")
    assert build_title(lines[1], "4/2", lines) == ""


def test_is_generic_title():
    for title in ("Week 4", "lecture", "Lab 2", "due", "Assignment", "12", "x", "Exam"):
        assert is_generic_title(title), title
    for title in ("Final exam", "Lab report", "Assignment 3"):
        assert not is_generic_title(title), title


def test_deduplicate_and_sort_collapses_punctuation_variants():
    day = datetime(2025, 3, 1)
    events = [
        _event(1, "Midterm, Exam!", day),
        _event(2, "midterm exam", day),
        _event(3, "Essay", datetime(2025, 2, 1)),
        _event(4, "Week 2", datetime(2025, 1, 1)),
    ]
    result = deduplicate_and_sort(events)
    assert [event.id for event in result] == [3, 1]


def test_deduplicate_and_sort_is_stable_for_same_day():
    day = datetime(2025, 3, 1)
    events = [_event(1, "Lab report", day), _event(2, "Reading quiz", day), _event(3, "Poster", day)]
    assert [event.id for event in deduplicate_and_sort(events)] == [1, 2, 3]


def test_dedup_key_truncates_title():
    event = _event(1, "A very long assignment title for the course", datetime(2025, 5, 5))
    assert dedup_key(event) == ("2025-05-05", "averylongassignmentt")


def test_split_lines_keeps_source_text_beside_cleaned_text():
    lines = split_lines("• Essay due 9/2\nPage 2 of 7\n  Pro\ufb01le draft 9/3  ")
    assert [line.text for line in lines] == ["Essay due 9/2", "Profile draft 9/3"]
    assert [line.raw for line in lines] == ["• Essay due 9/2", "Pro\ufb01le draft 9/3"]


def test_extract_events_raw_text_is_the_source_line():
    events = extract_events("• Essay due 9/2\nPro\ufb01le re\ufb02ection due 9/3", reference_date=REFERENCE)
    assert [event.title for event in events] == ["Essay due", "Profile reflection due"]
    assert [event.raw_text for event in events] == ["• Essay due 9/2", "Pro\ufb01le re\ufb02ection due 9/3"]
    assert events[0].description == "• Essay due 9/2"
    assert events[0].type == "assignment"


def test_build_title_keeps_words_that_look_like_weekday_abbreviations():
    lines = split_lines("Sun Tzu reading 9/2\nSAT prep session 9/3")
    assert build_title(lines[0], "9/2", lines) == "Sun Tzu reading"
    assert build_title(lines[1], "9/3", lines) == "SAT prep session"


def test_build_title_strips_punctuated_weekday_abbreviations():
    lines = split_lines("Fri., 9/5 Problem set\nTue, Oct 7 Poster session")
    assert build_title(lines[0], "9/5", lines) == "Problem set"
    assert build_title(lines[1], "Oct 7", lines) == "Poster session"


def test_build_title_keeps_periods_that_belong_to_the_title():
    lines = split_lines("Review slides, notes, etc. 9/4\nEssay due 9/2.")
    assert build_title(lines[0], "9/4", lines) == "Review slides, notes, etc."
    assert build_title(lines[1], "9/2", lines) == "Essay due"
