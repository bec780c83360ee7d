"""Pure filters over aggregated calendar entries."""

import logging
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple, Union

from .types import CalendarEvent

logger = logging.getLogger(__name__)

DEFAULT_UPCOMING_LIMIT = 5


class TimeWindow(str, Enum):
    """Named time windows relative to the current wall-clock date."""

    ALL = "all"
    UPCOMING = "upcoming"
    PAST = "past"
    TODAY = "today"
    THIS_WEEK = "this-week"
    THIS_MONTH = "this-month"


def filter_by_group(
    events: Sequence[CalendarEvent], group_id: Optional[str]
) -> List[CalendarEvent]:
    """Keep entries associated with ``group_id``; no group keeps everything."""
    if not group_id:
        return list(events)
    return [event for event in events if event.group_id == group_id]


def week_bounds(today: date) -> Tuple[date, date]:
    """Sunday-to-Saturday week containing ``today``, both ends inclusive."""
    start = today - timedelta(days=(today.weekday() + 1) % 7)
    return start, start + timedelta(days=6)


def month_bounds(today: date) -> Tuple[date, date]:
    """First and last day of the calendar month containing ``today``."""
    start = today.replace(day=1)
    if start.month == 12:
        next_start = start.replace(year=start.year + 1, month=1)
    else:
        next_start = start.replace(month=start.month + 1)
    return start, next_start - timedelta(days=1)


def _window_predicate(
    window: TimeWindow, today: date
) -> Optional[Callable[[date], bool]]:
    if window is TimeWindow.UPCOMING:
        return lambda day: day >= today
    if window is TimeWindow.PAST:
        return lambda day: day < today
    if window is TimeWindow.TODAY:
        return lambda day: day == today
    if window is TimeWindow.THIS_WEEK:
        start, end = week_bounds(today)
        return lambda day: start <= day <= end
    if window is TimeWindow.THIS_MONTH:
        start, end = month_bounds(today)
        return lambda day: start <= day <= end
    return None


def filter_by_time_window(
    events: Sequence[CalendarEvent],
    window: Union[TimeWindow, str],
    now: Optional[datetime] = None,
) -> List[CalendarEvent]:
    """Keep entries falling inside a named time window.

    Args:
        events: Entries to filter.
        window: A TimeWindow or its string value.
        now: Reference time; defaults to the wall clock at call time.

    Returns:
        Matching entries in input order. Unknown windows return the input.
    """
    try:
        window = TimeWindow(window)
    except ValueError:
        logger.warning(f"Unknown time window {window!r}, returning events unfiltered")
        return list(events)

    today = (now or datetime.now()).date()
    predicate = _window_predicate(window, today)
    if predicate is None:
        return list(events)
    return [event for event in events if predicate(event.date)]


def search(events: Sequence[CalendarEvent], term: Optional[str]) -> List[CalendarEvent]:
    """Case-insensitive substring search over title, description and location."""
    if not term or not term.strip():
        return list(events)

    needle = term.strip().lower()

    def matches(event: CalendarEvent) -> bool:
        fields = (event.title, event.description, event.location)
        return any(field and needle in field.lower() for field in fields)

    return [event for event in events if matches(event)]


def _is_upcoming(event: CalendarEvent, now: datetime) -> bool:
    today = now.date()
    if event.date != today:
        return event.date > today
    # Untimed entries stay upcoming for their whole day
    if not event.time:
        return True
    return event.time >= now.strftime("%H:%M")


def upcoming(
    events: Sequence[CalendarEvent],
    limit: int = DEFAULT_UPCOMING_LIMIT,
    now: Optional[datetime] = None,
) -> List[CalendarEvent]:
    """First ``limit`` entries at or after now, in list order."""
    if limit <= 0:
        return []
    now = now or datetime.now()
    return [event for event in events if _is_upcoming(event, now)][:limit]


def events_for_date(events: Sequence[CalendarEvent], day: date) -> List[CalendarEvent]:
    """Entries on one calendar day, in list order."""
    return [event for event in events if event.date == day]
