"""
NEPP Web

Portal application layer around the NEPP calendar core.
"""

from .config import AppConfig, get_current_config
from .notifications import NotificationPoller
from .services import EventsPageController, NotAuthenticatedError

__version__ = "0.1.0"

__all__ = [
    "AppConfig",
    "EventsPageController",
    "NotAuthenticatedError",
    "NotificationPoller",
    "get_current_config",
]
