"""Shared test fixtures and utilities for NEPP calendar tests.

This module contains common test fixtures, helper classes, and utilities
that are used across multiple test files.
"""

from datetime import date
from typing import Any, Dict, List, Optional, Sequence

import pytest

from nepp_core.fetchers import EventFetchers, RawRecord
from nepp_core.types import CalendarEvent, EventKind, SourceRef


class MockEventFetchers(EventFetchers):
    """Fetchers returning canned records, or raising canned errors."""

    def __init__(
        self,
        events: Optional[List[RawRecord]] = None,
        forms: Optional[List[RawRecord]] = None,
        announcements: Optional[List[RawRecord]] = None,
        errors: Optional[Dict[str, Exception]] = None,
    ) -> None:
        self.events = events or []
        self.forms = forms or []
        self.announcements = announcements or []
        self.errors = errors or {}
        self.calls: List[tuple] = []

    async def _respond(
        self, source: str, records: List[RawRecord], user_id: str, group_ids: Sequence[str]
    ) -> List[RawRecord]:
        self.calls.append((source, user_id, list(group_ids)))
        if source in self.errors:
            raise self.errors[source]
        return [dict(record) for record in records]

    async def fetch_user_and_group_events(
        self, user_id: str, group_ids: Sequence[str]
    ) -> List[RawRecord]:
        return await self._respond("events", self.events, user_id, group_ids)

    async def fetch_forms_with_due_dates(
        self, user_id: str, group_ids: Sequence[str]
    ) -> List[RawRecord]:
        return await self._respond("forms", self.forms, user_id, group_ids)

    async def fetch_scheduled_announcements(
        self, user_id: str, group_ids: Sequence[str]
    ) -> List[RawRecord]:
        return await self._respond(
            "announcements", self.announcements, user_id, group_ids
        )


# Test data factories
def make_event(
    event_id: str,
    day: date,
    time: Optional[str] = None,
    kind: EventKind = EventKind.EVENT,
    **fields: Any,
) -> CalendarEvent:
    """Create a CalendarEvent with a source_ref matching its kind."""
    source_ref = None
    if kind is EventKind.FORM_DUE:
        source_ref = SourceRef(form_id=event_id)
    elif kind is EventKind.ANNOUNCEMENT:
        source_ref = SourceRef(announcement_id=event_id)
    return CalendarEvent(
        id=event_id,
        kind=kind,
        title=fields.pop("title", f"Entry {event_id}"),
        date=day,
        time=time,
        source_ref=source_ref,
        **fields,
    )


def raw_event(doc_id: str, day: Any, **fields: Any) -> RawRecord:
    return {"id": doc_id, "title": f"Event {doc_id}", "date": day, **fields}


def raw_form(doc_id: str, due: Any, **fields: Any) -> RawRecord:
    return {"id": doc_id, "title": f"Form {doc_id}", "dueDate": due, **fields}


def raw_announcement(doc_id: str, scheduled: Any, **fields: Any) -> RawRecord:
    return {
        "id": doc_id,
        "title": f"Announcement {doc_id}",
        "content": "Details inside",
        "scheduledDate": scheduled,
        **fields,
    }


# Shared fixtures
@pytest.fixture
def mixed_events() -> List[CalendarEvent]:
    """Provide a small sorted list covering every entry kind."""
    return [
        make_event("ev-1", date(2024, 6, 9), "08:00", title="Sunday Brunch"),
        make_event(
            "form-f1",
            date(2024, 6, 12),
            "23:59",
            kind=EventKind.FORM_DUE,
            title="Form Due: Permission Slip",
            location="Online Form",
            group_id="grade5",
        ),
        make_event(
            "ev-2",
            date(2024, 6, 15),
            "09:00",
            title="Science Fair",
            description="Projects in the gym",
            location="Gym",
            group_id="grade5",
            created_by="alice",
        ),
        make_event(
            "announcement-a1",
            date(2024, 6, 15),
            "12:00",
            kind=EventKind.ANNOUNCEMENT,
            title="Early Dismissal",
            location="Announcement",
        ),
        make_event("ev-3", date(2024, 6, 16), None, title="Field Day", group_id="robotics"),
        make_event("ev-4", date(2024, 7, 1), "10:00", title="Summer Camp"),
    ]


@pytest.fixture
def mock_fetchers() -> MockEventFetchers:
    """Provide empty MockEventFetchers for each test."""
    return MockEventFetchers()
