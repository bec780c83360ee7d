"""Month-grid calendar rendering and day selection.

Months are 1-indexed (January is 1) and weeks start on Sunday.
"""

import calendar
import datetime as dt
import logging
from enum import Enum
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Union,
)

from pydantic import BaseModel, Field, ValidationError

from .dates import resolve_date
from .formatting import date_key, month_title
from .types import CalendarEvent, EventKind

logger = logging.getLogger(__name__)

DAYS_PER_WEEK = 7
WEEKDAY_HEADERS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")

SelectionListener = Callable[["SelectionEvent"], Any]


class Direction(str, Enum):
    PREV = "prev"
    NEXT = "next"


class DayCell(BaseModel):
    """One day in a month grid, possibly padding from an adjacent month."""

    year: int
    month: int
    day: int = Field(description="Real day-of-month number")
    in_month: bool = Field(description="False for padding from adjacent months")
    is_today: bool = False
    events: List[CalendarEvent] = Field(default_factory=list)
    has_events: bool = False
    has_announcement: bool = False
    has_form_due: bool = False

    @property
    def date(self) -> dt.date:
        return dt.date(self.year, self.month, self.day)

    @property
    def date_string(self) -> str:
        return date_key(self.date)


class MonthGrid(BaseModel):
    """Complete weeks of day cells for one month view."""

    year: int
    month: int
    cells: List[DayCell]
    mini: bool = False

    @property
    def title(self) -> str:
        return month_title(self.year, self.month)

    @property
    def weeks(self) -> List[List[DayCell]]:
        return [
            self.cells[i : i + DAYS_PER_WEEK]
            for i in range(0, len(self.cells), DAYS_PER_WEEK)
        ]

    @property
    def month_cells(self) -> List[DayCell]:
        """Cells belonging to the displayed month."""
        return [cell for cell in self.cells if cell.in_month]


class SelectionEvent(BaseModel):
    """Signal emitted when a day of the displayed month is selected."""

    date: dt.date
    date_string: str


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    """Add ``delta`` months to a 1-indexed (year, month) with year rollover."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def _day_flags(events: Sequence[CalendarEvent]) -> Dict[str, bool]:
    kinds = {event.kind for event in events}
    return {
        "has_events": EventKind.EVENT in kinds,
        "has_announcement": EventKind.ANNOUNCEMENT in kinds,
        "has_form_due": EventKind.FORM_DUE in kinds,
    }


def render_month(
    year: int,
    month: int,
    events_by_date: Optional[Mapping[str, Sequence[CalendarEvent]]] = None,
    today: Optional[dt.date] = None,
    mini: bool = False,
) -> MonthGrid:
    """Build the month grid for ``(year, month)``.

    Args:
        year: Calendar year.
        month: 1-indexed month; out-of-range values roll over into
            adjacent years.
        events_by_date: Entries keyed by ``YYYY-MM-DD``.
        today: Day to flag as today; defaults to the current date.
        mini: Presentation flag carried through to the grid.

    Returns:
        MonthGrid whose cell count is a multiple of seven.
    """
    year, month = shift_month(year, month, 0)
    events_by_date = events_by_date or {}
    today = today or dt.date.today()

    first_weekday, days_in_month = calendar.monthrange(year, month)
    # calendar.monthrange counts Monday as 0
    leading = (first_weekday + 1) % DAYS_PER_WEEK

    prev_year, prev_month = shift_month(year, month, -1)
    next_year, next_month = shift_month(year, month, 1)
    prev_days = calendar.monthrange(prev_year, prev_month)[1]

    cells: List[DayCell] = []
    for day in range(prev_days - leading + 1, prev_days + 1):
        cells.append(
            DayCell(year=prev_year, month=prev_month, day=day, in_month=False)
        )

    for day in range(1, days_in_month + 1):
        current = dt.date(year, month, day)
        day_events = list(events_by_date.get(date_key(current), []))
        cells.append(
            DayCell(
                year=year,
                month=month,
                day=day,
                in_month=True,
                is_today=current == today,
                events=day_events,
                **_day_flags(day_events),
            )
        )

    trailing = -len(cells) % DAYS_PER_WEEK
    for day in range(1, trailing + 1):
        cells.append(
            DayCell(year=next_year, month=next_month, day=day, in_month=False)
        )

    return MonthGrid(year=year, month=month, cells=cells, mini=mini)


def _coerce_entry(entry: Any) -> Optional[CalendarEvent]:
    if isinstance(entry, CalendarEvent):
        return entry if isinstance(entry.date, dt.date) else None
    if isinstance(entry, Mapping):
        day = resolve_date(entry.get("date"))
        if day is None:
            return None
        try:
            return CalendarEvent.model_validate({**entry, "date": day})
        except ValidationError:
            return None
    return None


class MonthCalendar:
    """Stateful month view over a date-indexed set of calendar entries.

    Each instance owns its viewed month, its entry lookup and its selection
    listeners; separate instances (e.g. a full view and a mini sidebar view)
    share nothing.
    """

    def __init__(
        self,
        year: Optional[int] = None,
        month: Optional[int] = None,
        mini: bool = False,
    ) -> None:
        today = dt.date.today()
        self.year, self.month = shift_month(
            year if year is not None else today.year,
            month if month is not None else today.month,
            0,
        )
        self.is_mini = mini
        self.selected_date: Optional[dt.date] = None
        self._events_by_date: Dict[str, List[CalendarEvent]] = {}
        self._listeners: List[SelectionListener] = []
        self.grid = self.render()

    @property
    def view(self) -> Tuple[int, int]:
        """The currently viewed (year, month)."""
        return self.year, self.month

    @property
    def events_by_date(self) -> Dict[str, List[CalendarEvent]]:
        return {key: list(events) for key, events in self._events_by_date.items()}

    def render(self) -> MonthGrid:
        """Render the currently viewed month."""
        return render_month(
            self.year, self.month, self._events_by_date, mini=self.is_mini
        )

    def _refresh(self) -> MonthGrid:
        self.grid = self.render()
        return self.grid

    def navigate(self, direction: Union[Direction, str]) -> Tuple[int, int]:
        """Move the view one month back or forward.

        Raises:
            ValueError: If ``direction`` is not ``prev`` or ``next``.
        """
        direction = Direction(direction)
        delta = -1 if direction is Direction.PREV else 1
        self.year, self.month = shift_month(self.year, self.month, delta)
        self._refresh()
        return self.view

    def show_month(self, year: int, month: int) -> Tuple[int, int]:
        """Jump the view to a specific (year, month)."""
        self.year, self.month = shift_month(year, month, 0)
        self._refresh()
        return self.view

    def on_select(self, listener: SelectionListener) -> SelectionListener:
        """Register a selection listener; usable as a decorator."""
        self._listeners.append(listener)
        return listener

    def remove_listener(self, listener: SelectionListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def select_day(self, cell: DayCell) -> Optional[SelectionEvent]:
        """Select a day cell and notify listeners.

        Only days of the viewed month are selectable. Padding cells, and
        cells left over from a previously viewed month, emit nothing and
        return None.
        """
        if not cell.in_month or (cell.year, cell.month) != self.view:
            return None

        self.selected_date = cell.date
        selection = SelectionEvent(date=cell.date, date_string=cell.date_string)
        for listener in list(self._listeners):
            listener(selection)
        return selection

    def set_mini_mode(self, enabled: bool = True) -> None:
        """Toggle reduced-density presentation; no effect on entries or selection."""
        self.is_mini = enabled
        self._refresh()

    def set_events(self, events: Iterable[Any]) -> None:
        """Replace the entry lookup and re-render the viewed month."""
        lookup: Dict[str, List[CalendarEvent]] = {}
        skipped = 0
        for entry in events:
            event = _coerce_entry(entry)
            if event is None:
                skipped += 1
                continue
            lookup.setdefault(date_key(event.date), []).append(event)

        if skipped:
            logger.warning(f"Skipped {skipped} calendar entries without a valid date")
        self._events_by_date = lookup
        self._refresh()

    def add_event(self, entry: Any) -> bool:
        """Add a single entry to the lookup; returns False if it was skipped."""
        event = _coerce_entry(entry)
        if event is None:
            logger.warning(f"Skipped calendar entry without a valid date: {entry!r}")
            return False
        self._events_by_date.setdefault(date_key(event.date), []).append(event)
        self._refresh()
        return True

    def events_for_date(self, day: Union[dt.date, str]) -> List[CalendarEvent]:
        resolved = resolve_date(day)
        if resolved is None:
            return []
        return list(self._events_by_date.get(date_key(resolved), []))
