"""Abstract data-access collaborator consumed by the aggregator."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Sequence

from .types import EventKind

RawRecord = Dict[str, Any]


class EventSource(str, Enum):
    """The three record sources merged into the calendar."""

    EVENTS = "events"
    FORMS = "forms"
    ANNOUNCEMENTS = "announcements"

    @property
    def kind(self) -> EventKind:
        return _SOURCE_KINDS[self]


_SOURCE_KINDS = {
    EventSource.EVENTS: EventKind.EVENT,
    EventSource.FORMS: EventKind.FORM_DUE,
    EventSource.ANNOUNCEMENTS: EventKind.ANNOUNCEMENT,
}


class EventFetchers(ABC):
    """Abstract base class for calendar record fetchers.

    Each operation returns raw records (document fields plus ``id``) already
    scoped to what the user may see, and may raise on failure.
    """

    @abstractmethod
    async def fetch_user_and_group_events(
        self, user_id: str, group_ids: Sequence[str]
    ) -> List[RawRecord]:
        """Fetch plain events created by, inviting, or shared with the user."""

    @abstractmethod
    async def fetch_forms_with_due_dates(
        self, user_id: str, group_ids: Sequence[str]
    ) -> List[RawRecord]:
        """Fetch forms that carry a due date."""

    @abstractmethod
    async def fetch_scheduled_announcements(
        self, user_id: str, group_ids: Sequence[str]
    ) -> List[RawRecord]:
        """Fetch announcements that carry a scheduled date."""
