"""Core calendar types shared by the aggregator and month calendar."""

import datetime as dt
from enum import Enum
from typing import Any, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

FORM_ID_PREFIX = "form-"
ANNOUNCEMENT_ID_PREFIX = "announcement-"


class EventKind(str, Enum):
    """Display category of a calendar entry."""

    EVENT = "event"
    FORM_DUE = "form-due"
    ANNOUNCEMENT = "announcement"


class Visibility(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"


class Timestamp(BaseModel):
    """An epoch timestamp as the document store serializes it."""

    model_config = ConfigDict(frozen=True)

    seconds: int = Field(description="Whole seconds since the Unix epoch")
    nanoseconds: int = Field(default=0, description="Sub-second remainder")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Timestamp":
        """Build a Timestamp from ``{"seconds": ...}`` or ``{"_seconds": ...}``."""
        seconds = data.get("seconds", data.get("_seconds"))
        nanoseconds = data.get("nanoseconds", data.get("_nanoseconds", 0))
        if seconds is None:
            raise ValueError(f"Mapping has no seconds field: {dict(data)}")
        return cls(seconds=int(seconds), nanoseconds=int(nanoseconds or 0))

    def to_datetime(self) -> dt.datetime:
        """Convert to a naive datetime on the local wall clock."""
        aware = dt.datetime.fromtimestamp(
            self.seconds + self.nanoseconds / 1_000_000_000, tz=dt.timezone.utc
        )
        return aware.astimezone().replace(tzinfo=None)


DateInput = Union[str, dt.date, dt.datetime, Timestamp, Mapping[str, Any], Any]


class SourceRef(BaseModel):
    """Back-reference from a derived calendar entry to its source record."""

    model_config = ConfigDict(frozen=True)

    form_id: Optional[str] = Field(None, description="Originating form document ID")
    announcement_id: Optional[str] = Field(
        None, description="Originating announcement document ID"
    )


class CalendarEvent(BaseModel):
    """Unified representation of anything that can appear on a calendar."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Globally unique ID, prefixed for derived entries")
    kind: EventKind = Field(default=EventKind.EVENT, description="Entry category")
    title: str = Field(description="Display title")
    description: Optional[str] = Field(None, description="Free-text description")
    date: dt.date = Field(description="Calendar day the entry falls on")
    time: Optional[str] = Field(None, description="24h HH:MM start time")
    location: Optional[str] = Field(None, description="Location label")
    visibility: Visibility = Field(default=Visibility.PUBLIC)
    created_by: Optional[str] = Field(None, description="Owning user ID")
    group_id: Optional[str] = Field(None, description="Associated group ID")
    source_ref: Optional[SourceRef] = Field(
        None, description="Originating form or announcement for derived entries"
    )

    @model_validator(mode="after")
    def _check_provenance(self) -> "CalendarEvent":
        ref = self.source_ref
        has_form = ref is not None and ref.form_id is not None
        has_announcement = ref is not None and ref.announcement_id is not None

        if has_form and has_announcement:
            raise ValueError("source_ref cannot reference both a form and an announcement")
        if self.kind is EventKind.FORM_DUE and not has_form:
            raise ValueError("form-due entries require source_ref.form_id")
        if self.kind is EventKind.ANNOUNCEMENT and not has_announcement:
            raise ValueError("announcement entries require source_ref.announcement_id")
        if self.kind is EventKind.EVENT and (has_form or has_announcement):
            raise ValueError("plain events cannot carry a source_ref")
        return self

    @property
    def is_derived(self) -> bool:
        """Whether this entry was synthesized from a form or announcement."""
        return self.kind is not EventKind.EVENT

    @property
    def date_string(self) -> str:
        return self.date.isoformat()

    @property
    def sort_key(self) -> Tuple[dt.date, str]:
        return (self.date, self.time or "")

    def starts_at(self) -> dt.datetime:
        """Start as a naive local datetime; untimed entries start at midnight."""
        hour, minute = (0, 0)
        if self.time:
            hour, minute = (int(part) for part in self.time.split(":"))
        return dt.datetime(self.date.year, self.date.month, self.date.day, hour, minute)

    def can_modify(self, user_id: Optional[str]) -> bool:
        """Whether ``user_id`` may edit or delete this entry.

        Derived entries are only changed through their source record.
        """
        if self.is_derived or user_id is None:
            return False
        return self.created_by == user_id
