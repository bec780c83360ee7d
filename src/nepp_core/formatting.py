"""Display formatting helpers for calendar hosts."""

import calendar
from datetime import date, timedelta
from typing import Optional, Union

from .dates import normalize_time
from .types import EventKind

_KIND_LABELS = {
    EventKind.EVENT: "Event",
    EventKind.FORM_DUE: "Form Due",
    EventKind.ANNOUNCEMENT: "Announcement",
}


def date_key(day: date) -> str:
    """Canonical ``YYYY-MM-DD`` key used to index entries by day."""
    return day.isoformat()


def format_time(value: Optional[str]) -> str:
    """Format a 24h ``HH:MM`` string as ``h:MM AM/PM``."""
    normalized = normalize_time(value)
    if normalized is None:
        return ""
    hours, minutes = (int(part) for part in normalized.split(":"))
    suffix = "PM" if hours >= 12 else "AM"
    return f"{hours % 12 or 12}:{minutes:02d} {suffix}"


def format_relative_date(day: date, today: Optional[date] = None) -> str:
    """Today / Tomorrow / Yesterday, otherwise an abbreviated ``Mar 1``."""
    today = today or date.today()
    if day == today:
        return "Today"
    if day == today + timedelta(days=1):
        return "Tomorrow"
    if day == today - timedelta(days=1):
        return "Yesterday"
    return f"{calendar.month_abbr[day.month]} {day.day}"


def event_type_label(kind: Union[EventKind, str, None]) -> str:
    try:
        return _KIND_LABELS[EventKind(kind)]
    except ValueError:
        return _KIND_LABELS[EventKind.EVENT]


def month_title(year: int, month: int) -> str:
    """Header text for a month view, e.g. ``March 2024``."""
    return f"{calendar.month_name[month]} {year}"
