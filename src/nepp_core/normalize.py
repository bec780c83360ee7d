"""Normalization of raw store records into CalendarEvent objects."""

import logging
from typing import Any, Mapping, Optional, Union

from .dates import normalize_time, resolve_date
from .types import (
    ANNOUNCEMENT_ID_PREFIX,
    FORM_ID_PREFIX,
    CalendarEvent,
    EventKind,
    SourceRef,
    Visibility,
)

logger = logging.getLogger(__name__)

DEFAULT_FORM_DUE_TIME = "23:59"
DEFAULT_ANNOUNCEMENT_TIME = "09:00"
FORM_LOCATION = "Online Form"
ANNOUNCEMENT_LOCATION = "Announcement"
UNTITLED = "Untitled"


def _text(record: Mapping[str, Any], key: str) -> Optional[str]:
    value = record.get(key)
    if value is None:
        return None
    value = str(value)
    return value if value.strip() else None


def _visibility(record: Mapping[str, Any]) -> Visibility:
    try:
        return Visibility(record.get("type") or Visibility.PUBLIC.value)
    except ValueError:
        return Visibility.PUBLIC


def _normalize_event(record: Mapping[str, Any], doc_id: str) -> Optional[CalendarEvent]:
    day = resolve_date(record.get("date"))
    if day is None:
        return None
    return CalendarEvent(
        id=doc_id,
        kind=EventKind.EVENT,
        title=_text(record, "title") or UNTITLED,
        description=_text(record, "description"),
        date=day,
        time=normalize_time(record.get("time")),
        location=_text(record, "location"),
        visibility=_visibility(record),
        created_by=_text(record, "createdBy"),
        group_id=_text(record, "groupId"),
    )


def _normalize_form(record: Mapping[str, Any], doc_id: str) -> Optional[CalendarEvent]:
    day = resolve_date(record.get("dueDate"))
    if day is None:
        return None
    form_title = _text(record, "title") or UNTITLED
    return CalendarEvent(
        id=f"{FORM_ID_PREFIX}{doc_id}",
        kind=EventKind.FORM_DUE,
        title=f"Form Due: {form_title}",
        description=f'Form "{form_title}" is due',
        date=day,
        time=normalize_time(record.get("dueTime")) or DEFAULT_FORM_DUE_TIME,
        location=FORM_LOCATION,
        visibility=_visibility(record),
        created_by=_text(record, "createdBy"),
        group_id=_text(record, "groupId"),
        source_ref=SourceRef(form_id=doc_id),
    )


def _normalize_announcement(
    record: Mapping[str, Any], doc_id: str
) -> Optional[CalendarEvent]:
    day = resolve_date(record.get("scheduledDate"))
    if day is None:
        return None
    return CalendarEvent(
        id=f"{ANNOUNCEMENT_ID_PREFIX}{doc_id}",
        kind=EventKind.ANNOUNCEMENT,
        title=_text(record, "title") or UNTITLED,
        description=_text(record, "content"),
        date=day,
        time=normalize_time(record.get("scheduledTime")) or DEFAULT_ANNOUNCEMENT_TIME,
        location=ANNOUNCEMENT_LOCATION,
        visibility=_visibility(record),
        created_by=_text(record, "createdBy"),
        group_id=_text(record, "groupId"),
        source_ref=SourceRef(announcement_id=doc_id),
    )


_NORMALIZERS = {
    EventKind.EVENT: _normalize_event,
    EventKind.FORM_DUE: _normalize_form,
    EventKind.ANNOUNCEMENT: _normalize_announcement,
}


def normalize_raw_event(
    record: Mapping[str, Any], kind: Union[EventKind, str]
) -> Optional[CalendarEvent]:
    """Normalize one raw store record into a CalendarEvent.

    Args:
        record: Document fields plus its ``id``, as returned by a fetcher.
        kind: Which source the record came from.

    Returns:
        The normalized event, or None if the record has no usable ID or its
        date is missing or unparseable.
    """
    try:
        kind = EventKind(kind)
    except ValueError:
        logger.debug(f"Unknown record kind {kind!r}, dropping record")
        return None

    if not isinstance(record, Mapping):
        logger.debug(f"Dropping non-mapping {kind.value} record: {record!r}")
        return None

    doc_id = record.get("id")
    if doc_id is None or not str(doc_id):
        logger.debug(f"Dropping {kind.value} record without an id")
        return None

    event = _NORMALIZERS[kind](record, str(doc_id))
    if event is None:
        logger.debug(f"Dropping {kind.value} record {doc_id}: unresolvable date")
    return event
