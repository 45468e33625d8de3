from __future__ import annotations

from datetime import date, datetime
from typing import Any, List

DEFAULT_WRAP_WIDTH = 110
MIN_BREAK_POSITION = 20

DATE_DISPLAY_FORMAT = "%b %d, %Y"
_FALLBACK_DATE_FORMATS = ("%m/%d/%Y", "%B %d, %Y", "%b %d, %Y", "%Y/%m/%d")


def _last_whitespace(text: str, limit: int) -> int:
    for idx in range(min(limit, len(text) - 1), -1, -1):
        if text[idx].isspace():
            return idx
    return -1


def wrap_line(line: str, max_chars: int = DEFAULT_WRAP_WIDTH) -> List[str]:
    """
    Split ``line`` into rows no longer than ``max_chars``.

    Breaks at the last whitespace at or before the limit; when that break would
    leave a row shorter than ``MIN_BREAK_POSITION`` the row is hard-cut at the limit.
    """
    text = "" if line is None else str(line)
    if max_chars <= 0:
        return [text]
    if len(text) <= max_chars:
        return [text]

    rows: List[str] = []
    remaining = text
    while len(remaining) > max_chars:
        cut = _last_whitespace(remaining, max_chars)
        if cut < MIN_BREAK_POSITION:
            cut = max_chars
        chunk = remaining[:cut].strip()
        if chunk:
            rows.append(chunk)
        remaining = remaining[cut:].lstrip()
    remaining = remaining.rstrip()
    if remaining:
        rows.append(remaining)
    return rows or [""]


def _parse_iso(text: str) -> datetime:
    cleaned = text.strip()
    if cleaned.endswith(("Z", "z")):
        cleaned = cleaned[:-1] + "+00:00"
    return datetime.fromisoformat(cleaned)


def format_date(value: Any) -> str:
    """Render a date-like value as ``Jan 05, 2024``; anything unparseable is returned as given."""
    if value is None or value == "":
        return ""
    if isinstance(value, datetime):
        return value.strftime(DATE_DISPLAY_FORMAT)
    if isinstance(value, date):
        return value.strftime(DATE_DISPLAY_FORMAT)

    text = str(value)
    if not text.strip():
        return text
    try:
        return _parse_iso(text).strftime(DATE_DISPLAY_FORMAT)
    except ValueError:
        pass
    for fmt in _FALLBACK_DATE_FORMATS:
        try:
            return datetime.strptime(text.strip(), fmt).strftime(DATE_DISPLAY_FORMAT)
        except ValueError:
            continue
    return text
