"""Aggregation of events, form due dates and announcements into one calendar."""

import asyncio
import logging
from typing import Any, Awaitable, Dict, Iterable, List, Sequence

from pydantic import BaseModel, Field

from .fetchers import EventFetchers, EventSource, RawRecord
from .normalize import normalize_raw_event
from .types import CalendarEvent

logger = logging.getLogger(__name__)


class SourceFailure(BaseModel):
    """Why one source contributed nothing to an aggregation pass."""

    source: EventSource = Field(description="The source whose fetch failed")
    error_type: str = Field(description="Exception class name")
    message: str = Field(description="Exception message")


class AggregationResult(BaseModel):
    """Combined, sorted calendar entries plus per-source diagnostics."""

    events: List[CalendarEvent] = Field(default_factory=list)
    failures: List[SourceFailure] = Field(default_factory=list)
    dropped: Dict[EventSource, int] = Field(
        default_factory=dict,
        description="Records dropped per source because their date was unusable",
    )

    @property
    def has_partial_failure(self) -> bool:
        return bool(self.failures)

    @property
    def is_total_failure(self) -> bool:
        return len(self.failures) == len(EventSource)

    @property
    def failed_sources(self) -> List[EventSource]:
        return [failure.source for failure in self.failures]


def dedupe_events(events: Iterable[CalendarEvent]) -> List[CalendarEvent]:
    """Drop repeated IDs, keeping the first occurrence."""
    seen = set()
    unique: List[CalendarEvent] = []
    for event in events:
        if event.id in seen:
            continue
        seen.add(event.id)
        unique.append(event)
    return unique


def sort_events(events: Iterable[CalendarEvent]) -> List[CalendarEvent]:
    """Stable sort by (date, time) ascending."""
    return sorted(events, key=lambda event: event.sort_key)


class EventAggregator:
    """Builds the unified calendar list from the three record sources."""

    def __init__(self, fetchers: EventFetchers):
        self.fetchers = fetchers

    def _source_calls(
        self, user_id: str, group_ids: Sequence[str]
    ) -> Dict[EventSource, Awaitable[List[RawRecord]]]:
        return {
            EventSource.EVENTS: self.fetchers.fetch_user_and_group_events(
                user_id, group_ids
            ),
            EventSource.FORMS: self.fetchers.fetch_forms_with_due_dates(
                user_id, group_ids
            ),
            EventSource.ANNOUNCEMENTS: self.fetchers.fetch_scheduled_announcements(
                user_id, group_ids
            ),
        }

    def _normalize_source(
        self, source: EventSource, records: Any, result: AggregationResult
    ) -> List[CalendarEvent]:
        events: List[CalendarEvent] = []
        dropped = 0
        for record in records or []:
            event = normalize_raw_event(record, source.kind)
            if event is None:
                dropped += 1
                continue
            events.append(event)

        if dropped:
            logger.warning(
                f"Dropped {dropped} {source.value} record(s) with unusable dates"
            )
        result.dropped[source] = dropped
        return events

    async def aggregate(
        self, user_id: str, group_ids: Sequence[str]
    ) -> AggregationResult:
        """Fetch, normalize, de-duplicate and sort all calendar entries.

        The three fetches run concurrently; a failing source contributes no
        entries and is reported in ``failures`` instead of raising.

        Args:
            user_id: The signed-in user.
            group_ids: Groups the user belongs to.

        Returns:
            AggregationResult with the sorted entries and any source failures.
        """
        group_ids = list(group_ids)
        calls = self._source_calls(user_id, group_ids)
        outcomes = await asyncio.gather(*calls.values(), return_exceptions=True)

        result = AggregationResult()
        combined: List[CalendarEvent] = []
        for source, outcome in zip(calls.keys(), outcomes):
            if isinstance(outcome, Exception):
                logger.warning(f"Failed to fetch {source.value}: {outcome}")
                result.failures.append(
                    SourceFailure(
                        source=source,
                        error_type=type(outcome).__name__,
                        message=str(outcome),
                    )
                )
                continue
            if isinstance(outcome, BaseException):
                raise outcome
            combined.extend(self._normalize_source(source, outcome, result))

        result.events = sort_events(dedupe_events(combined))

        if result.is_total_failure:
            logger.error(f"All calendar sources failed for user {user_id}")
        else:
            logger.info(
                f"Aggregated {len(result.events)} calendar entries for user {user_id}"
            )
        return result


async def aggregate(
    user_id: str, group_ids: Sequence[str], fetchers: EventFetchers
) -> AggregationResult:
    """Aggregate calendar entries with a one-off EventAggregator."""
    return await EventAggregator(fetchers).aggregate(user_id, group_ids)
