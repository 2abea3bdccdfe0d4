from __future__ import annotations

from typing import Callable, Dict, Tuple

EVENT_TYPES: Tuple[str, ...] = (
    "assignment",
    "exam",
    "reading",
    "deadline",
    "holiday",
    "class",
    "other",
)
DEFAULT_EVENT_TYPE = "other"

# Evaluated top to bottom; the first category with a hit wins.
CATEGORY_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "exam": ("exam", "test", "quiz", "final", "midterm", "practical", "course end date"),
    "assignment": ("assignment", "homework", "hw", "due", "submit", "paper", "project"),
    "reading": ("read", "chapter", "pages", "article", "case"),
    "deadline": ("deadline", "drop", "add", "registration", "withdraw", "last day"),
    "holiday": ("holiday", "no class", "break", "vacation", "recess", "no lab", "no lecture"),
    "class": ("class", "lecture", "session", "seminar", "discussion", "lab"),
}

# Extra conjunctive rules checked alongside a category's plain keywords.
CATEGORY_RULES: Dict[str, Tuple[Callable[[str], bool], ...]] = {
    "assignment": (lambda lowered: "lab" in lowered and "due" in lowered,),
}


def classify_event(line: str) -> str:
    """Return the event type for a syllabus line using substring keyword hits."""
    lowered = line.lower()
    for category, keywords in CATEGORY_KEYWORDS.items():
        if any(keyword in lowered for keyword in keywords):
            return category
        if any(rule(lowered) for rule in CATEGORY_RULES.get(category, ())):
            return category
    return DEFAULT_EVENT_TYPE
