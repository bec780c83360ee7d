"""Events page controller wiring the aggregator to calendar views."""

import logging
from datetime import datetime
from typing import Any, List, Optional, Union

from nepp_core.aggregator import AggregationResult, EventAggregator
from nepp_core.fetchers import EventFetchers
from nepp_core.filters import (
    DEFAULT_UPCOMING_LIMIT,
    TimeWindow,
    events_for_date,
    filter_by_group,
    filter_by_time_window,
    search,
    upcoming,
)
from nepp_core.month_calendar import MonthCalendar, SelectionEvent
from nepp_core.types import CalendarEvent
from neppweb.api_clients.base import BaseIdentityProvider

logger = logging.getLogger(__name__)

_UNSET: Any = object()


class NotAuthenticatedError(Exception):
    """Raised when page data is requested without a signed-in user."""


class EventsPageController:
    """Owns the state of one events page view.

    Holds the aggregated entries, the list filters, and two independent
    calendars (a full view and a mini sidebar view) kept in sync on every load.
    """

    def __init__(
        self,
        fetchers: EventFetchers,
        identity: BaseIdentityProvider,
        upcoming_limit: int = DEFAULT_UPCOMING_LIMIT,
        time_window: Union[TimeWindow, str] = TimeWindow.ALL,
    ):
        self.aggregator = EventAggregator(fetchers)
        self.identity = identity
        self.upcoming_limit = upcoming_limit

        self.calendar = MonthCalendar()
        self.mini_calendar = MonthCalendar()
        self.mini_calendar.set_mini_mode(True)
        for month_calendar in self.calendars:
            month_calendar.on_select(self.handle_date_selection)

        self.events: List[CalendarEvent] = []
        self.filtered_events: List[CalendarEvent] = []
        self.selected_day_events: List[CalendarEvent] = []
        self.group_ids: List[str] = []
        self.last_result: Optional[AggregationResult] = None

        self.group_filter: Optional[str] = None
        self.time_window = TimeWindow(time_window)
        self.search_term = ""

    @property
    def calendars(self) -> List[MonthCalendar]:
        return [self.calendar, self.mini_calendar]

    async def _load_group_ids(self) -> List[str]:
        try:
            return await self.identity.current_user_group_ids()
        except Exception as e:
            logger.error(f"Error loading user groups: {e}")
            return []

    async def load_all_data(self) -> AggregationResult:
        """Aggregate the signed-in user's entries and refresh every view.

        Raises:
            NotAuthenticatedError: If no user is signed in.
        """
        user_id = self.identity.current_user_id()
        if user_id is None:
            raise NotAuthenticatedError("Please log in to access events.")

        self.group_ids = await self._load_group_ids()
        result = await self.aggregator.aggregate(user_id, self.group_ids)

        self.last_result = result
        self.events = result.events
        for month_calendar in self.calendars:
            month_calendar.set_events(self.events)
        self.apply_filters()
        return result

    @property
    def warning_message(self) -> Optional[str]:
        """User-facing note about sources that failed on the last load."""
        result = self.last_result
        if result is None or not result.has_partial_failure:
            return None
        if result.is_total_failure:
            return "Failed to load events data"
        sources = ", ".join(source.value for source in result.failed_sources)
        return f"Some calendar sources could not be loaded: {sources}"

    def apply_filters(self, now: Optional[datetime] = None) -> List[CalendarEvent]:
        """Recompute the list view from the current filters."""
        filtered = filter_by_group(self.events, self.group_filter)
        filtered = filter_by_time_window(filtered, self.time_window, now=now)
        filtered = search(filtered, self.search_term)
        self.filtered_events = filtered
        return filtered

    def set_filters(
        self,
        group_id: Optional[str] = _UNSET,
        time_window: Union[TimeWindow, str] = _UNSET,
        search_term: str = _UNSET,
        now: Optional[datetime] = None,
    ) -> List[CalendarEvent]:
        """Update any subset of the list filters and re-filter."""
        if group_id is not _UNSET:
            self.group_filter = group_id or None
        if time_window is not _UNSET:
            self.time_window = TimeWindow(time_window)
        if search_term is not _UNSET:
            self.search_term = search_term or ""
        return self.apply_filters(now=now)

    def upcoming_events(self, now: Optional[datetime] = None) -> List[CalendarEvent]:
        return upcoming(self.events, self.upcoming_limit, now=now)

    def handle_date_selection(self, selection: SelectionEvent) -> List[CalendarEvent]:
        """Show the entries of the day selected on either calendar."""
        self.selected_day_events = events_for_date(self.events, selection.date)
        logger.debug(
            f"Selected {selection.date_string} with "
            f"{len(self.selected_day_events)} entries"
        )
        return self.selected_day_events

    def get_event(self, event_id: str) -> Optional[CalendarEvent]:
        for event in self.events:
            if event.id == event_id:
                return event
        return None

    def can_modify(self, event_id: str) -> bool:
        """Whether the signed-in user may edit or delete the given entry."""
        event = self.get_event(event_id)
        if event is None:
            return False
        return event.can_modify(self.identity.current_user_id())
