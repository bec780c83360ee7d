"""Exceptions for calendar aggregation operations."""


class MalformedDateError(ValueError):
    """Exception raised when a record's date cannot be resolved to a calendar day."""


class FetchError(Exception):
    """Exception raised by fetch collaborators when a source cannot be read."""
