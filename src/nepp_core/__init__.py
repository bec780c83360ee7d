"""
NEPP Core

Calendar aggregation and month-grid rendering for the NEPP community portal.
"""

from .aggregator import (
    AggregationResult,
    EventAggregator,
    SourceFailure,
    aggregate,
    dedupe_events,
    sort_events,
)
from .dates import normalize_time, parse_date, resolve_date
from .exceptions import FetchError, MalformedDateError
from .fetchers import EventFetchers, EventSource, RawRecord
from .filters import (
    TimeWindow,
    events_for_date,
    filter_by_group,
    filter_by_time_window,
    search,
    upcoming,
)
from .month_calendar import (
    DayCell,
    Direction,
    MonthCalendar,
    MonthGrid,
    SelectionEvent,
    render_month,
    shift_month,
)
from .normalize import normalize_raw_event
from .types import (
    CalendarEvent,
    DateInput,
    EventKind,
    SourceRef,
    Timestamp,
    Visibility,
)

__version__ = "0.1.0"

__all__ = [
    "AggregationResult",
    "CalendarEvent",
    "DateInput",
    "DayCell",
    "Direction",
    "EventAggregator",
    "EventFetchers",
    "EventKind",
    "EventSource",
    "FetchError",
    "MalformedDateError",
    "MonthCalendar",
    "MonthGrid",
    "RawRecord",
    "SelectionEvent",
    "SourceFailure",
    "SourceRef",
    "TimeWindow",
    "Timestamp",
    "Visibility",
    "aggregate",
    "dedupe_events",
    "events_for_date",
    "filter_by_group",
    "filter_by_time_window",
    "normalize_raw_event",
    "normalize_time",
    "parse_date",
    "render_month",
    "resolve_date",
    "search",
    "shift_month",
    "sort_events",
    "upcoming",
]
