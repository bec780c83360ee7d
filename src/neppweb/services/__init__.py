"""Page-level services for the NEPP portal."""

from .events import EventsPageController, NotAuthenticatedError

__all__ = [
    "EventsPageController",
    "NotAuthenticatedError",
]
