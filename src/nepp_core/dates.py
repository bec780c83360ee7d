"""Date shape adapter for records coming out of the document store.

Dates arrive in one of a small, closed set of shapes:

- native ``date`` / ``datetime`` values,
- timestamps (``Timestamp``, a ``{"seconds": ...}`` mapping, or an SDK object
  exposing ``to_datetime()``, ``to_date()`` or ``toDate()``),
- strings (ISO dates and datetimes, plus a few locale formats).

Everything funnels through :func:`resolve_date` so call sites never inspect the
shape themselves.
"""

import logging
import re
from datetime import date, datetime
from typing import Any, Mapping, Optional

from .exceptions import MalformedDateError
from .types import DateInput, Timestamp

logger = logging.getLogger(__name__)

_LOCALE_FORMATS = ("%m/%d/%Y", "%B %d, %Y", "%b %d, %Y")
_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2})?$")
_CONVERSION_METHODS = ("to_datetime", "to_date", "toDate")


def _from_datetime(value: datetime) -> date:
    # Aware values are shown on the local wall clock
    if value.tzinfo is not None:
        value = value.astimezone()
    return value.date()


def _from_string(value: str) -> Optional[date]:
    text = value.strip()
    if not text:
        return None

    try:
        return date.fromisoformat(text)
    except ValueError:
        pass

    try:
        iso_text = text[:-1] + "+00:00" if text.endswith("Z") else text
        return _from_datetime(datetime.fromisoformat(iso_text))
    except ValueError:
        pass

    for fmt in _LOCALE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def _from_converter(value: Any) -> Optional[date]:
    for method_name in _CONVERSION_METHODS:
        method = getattr(value, method_name, None)
        if callable(method):
            converted = method()
            if isinstance(converted, datetime):
                return _from_datetime(converted)
            if isinstance(converted, date):
                return converted
            return None
    return None


def resolve_date(value: DateInput) -> Optional[date]:
    """Resolve any supported date shape to a calendar day.

    Args:
        value: A string, date, datetime, timestamp-like object or mapping.

    Returns:
        The calendar day, or None when the value is missing or unparseable.
    """
    if value is None:
        return None
    # datetime is a date subclass, check it first
    if isinstance(value, datetime):
        return _from_datetime(value)
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return _from_string(value)
    try:
        if isinstance(value, Timestamp):
            return value.to_datetime().date()
        if isinstance(value, Mapping):
            return Timestamp.from_mapping(value).to_datetime().date()
    except (TypeError, ValueError, OverflowError, OSError) as e:
        logger.debug(f"Date conversion failed for {value!r}: {e}")
        return None

    # Any converter failure resolves to None
    try:
        return _from_converter(value)
    except Exception as e:
        logger.debug(f"Date converter failed for {value!r}: {e}")
        return None


def parse_date(value: DateInput) -> date:
    """Resolve ``value`` to a calendar day, raising on failure.

    Raises:
        MalformedDateError: If the value cannot be resolved.
    """
    resolved = resolve_date(value)
    if resolved is None:
        raise MalformedDateError(f"Cannot resolve date from {value!r}")
    return resolved


def normalize_time(value: Any) -> Optional[str]:
    """Normalize a time string to zero-padded 24h ``HH:MM``.

    Returns None for missing or malformed values.
    """
    if not isinstance(value, str):
        return None
    match = _TIME_PATTERN.match(value.strip())
    if not match:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return None
    return f"{hour:02d}:{minute:02d}"
