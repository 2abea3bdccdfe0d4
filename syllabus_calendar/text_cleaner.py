from __future__ import annotations

import re

LIGATURES = {
    "ﬀ": "ff",
    "ﬁ": "fi",
    "ﬂ": "fl",
    "ﬃ": "ffi",
    "ﬄ": "ffl",
}
ZERO_WIDTH_PATTERN = re.compile(r"[\u200b\u200c\u200d\u2060\ufeff]")
EXOTIC_SPACE_PATTERN = re.compile(r"[\u00a0\u2000-\u200a\u202f\u205f\u3000\t]")
PAGE_FOOTER_PATTERN = re.compile(r"^page\s+\d+(?:\s+of\s+\d+)?$", re.IGNORECASE)
BULLET_PREFIXES: tuple[str, ...] = ("•", "●", "▪", "◦", "‣", "*")


def is_page_footer(line: str) -> bool:
    return bool(PAGE_FOOTER_PATTERN.match(line.strip()))


def _strip_bullet(line: str) -> str:
    for prefix in BULLET_PREFIXES:
        if line.startswith(prefix):
            return line[len(prefix) :].strip()
    return line


def clean_line(line: str) -> str:
    """Tidy one PDF-extracted line; the result is trimmed and bullet-free."""
    for ligature, replacement in LIGATURES.items():
        line = line.replace(ligature, replacement)
    line = ZERO_WIDTH_PATTERN.sub("", line)
    line = EXOTIC_SPACE_PATTERN.sub(" ", line)
    return _strip_bullet(line.strip())


def split_raw_lines(text: str) -> list[str]:
    return text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
