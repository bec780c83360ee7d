"""Collaborator clients for the NEPP portal."""

from .base import BaseIdentityProvider, BaseNotificationClient
from .memory import (
    InMemoryDocumentStore,
    InMemoryEventFetchers,
    InMemoryNotificationClient,
    StaticIdentityProvider,
    load_store_from_json,
)

__all__ = [
    "BaseIdentityProvider",
    "BaseNotificationClient",
    "InMemoryDocumentStore",
    "InMemoryEventFetchers",
    "InMemoryNotificationClient",
    "StaticIdentityProvider",
    "load_store_from_json",
]
