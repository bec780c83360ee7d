"""In-memory document store and the portal collaborators built on it."""

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Union

from nepp_core.exceptions import FetchError
from nepp_core.fetchers import EventFetchers, RawRecord

from .base import BaseIdentityProvider, BaseNotificationClient

logger = logging.getLogger(__name__)

COLLECTIONS = ("events", "forms", "announcements", "groups", "notifications")

Predicate = Callable[[RawRecord], bool]


class InMemoryDocumentStore:
    """Collections of documents keyed by document ID."""

    def __init__(self) -> None:
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {
            name: {} for name in COLLECTIONS
        }

    def add(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Insert or replace a document."""
        self._collections.setdefault(collection, {})[doc_id] = dict(data)

    def get(self, collection: str, doc_id: str) -> Optional[RawRecord]:
        data = self._collections.get(collection, {}).get(doc_id)
        if data is None:
            return None
        return {"id": doc_id, **data}

    def delete(self, collection: str, doc_id: str) -> bool:
        return self._collections.get(collection, {}).pop(doc_id, None) is not None

    def query(
        self, collection: str, predicate: Optional[Predicate] = None
    ) -> List[RawRecord]:
        """Return matching documents (with ``id``) in insertion order."""
        records = [
            {"id": doc_id, **data}
            for doc_id, data in self._collections.get(collection, {}).items()
        ]
        if predicate is None:
            return records
        return [record for record in records if predicate(record)]

    def count(self, collection: str) -> int:
        return len(self._collections.get(collection, {}))


def _documents(raw: Union[Dict[str, Any], List[Dict[str, Any]]]) -> Iterable[tuple]:
    if isinstance(raw, dict):
        return raw.items()
    pairs = []
    for item in raw:
        data = dict(item)
        doc_id = data.pop("id", None)
        if doc_id is None:
            raise ValueError(f"Seed document without an id: {item}")
        pairs.append((str(doc_id), data))
    return pairs


def load_store_from_json(path: Union[str, Path]) -> InMemoryDocumentStore:
    """Load a document store from a JSON seed file.

    Each top-level key names a collection and holds either a mapping of
    document ID to fields, or a list of documents carrying an ``id``.
    """
    with open(path, "r", encoding="utf-8") as f:
        seed = json.load(f)

    if not isinstance(seed, dict):
        raise ValueError(f"Seed file {path} must contain a JSON object")

    store = InMemoryDocumentStore()
    for collection, raw in seed.items():
        for doc_id, data in _documents(raw):
            store.add(collection, doc_id, data)

    counts = {name: store.count(name) for name in seed.keys()}
    logger.info(f"Loaded seed data from {path}: {counts}")
    return store


def _merge_unique(*batches: Sequence[RawRecord]) -> List[RawRecord]:
    merged: List[RawRecord] = []
    seen = set()
    for batch in batches:
        for record in batch:
            if record["id"] in seen:
                continue
            seen.add(record["id"])
            merged.append(record)
    return merged


class InMemoryEventFetchers(EventFetchers):
    """Calendar record fetchers scoped the way the portal's queries scope them."""

    def __init__(self, store: InMemoryDocumentStore):
        self.store = store

    async def fetch_user_and_group_events(
        self, user_id: str, group_ids: Sequence[str]
    ) -> List[RawRecord]:
        try:
            return self._visible_events(user_id, group_ids)
        except Exception as e:
            raise FetchError(f"Failed to fetch events: {e}") from e

    async def fetch_forms_with_due_dates(
        self, user_id: str, group_ids: Sequence[str]
    ) -> List[RawRecord]:
        try:
            return self._forms_with_due_dates(user_id, group_ids)
        except Exception as e:
            raise FetchError(f"Failed to fetch forms: {e}") from e

    async def fetch_scheduled_announcements(
        self, user_id: str, group_ids: Sequence[str]
    ) -> List[RawRecord]:
        try:
            return self._scheduled_announcements(user_id, group_ids)
        except Exception as e:
            raise FetchError(f"Failed to fetch announcements: {e}") from e

    def _visible_events(
        self, user_id: str, group_ids: Sequence[str]
    ) -> List[RawRecord]:
        groups = set(group_ids)
        visible: List[RawRecord] = []
        for record in self.store.query("events"):
            selected = record.get("selectedGroups") or []
            shared_groups = [group_id for group_id in selected if group_id in groups]
            is_creator = record.get("createdBy") == user_id
            is_invited = user_id in (record.get("invitedUsers") or [])
            if not (is_creator or is_invited or shared_groups):
                continue
            if not record.get("groupId") and (shared_groups or selected):
                # Stamp the group the user sees the event through
                record["groupId"] = (shared_groups or selected)[0]
            visible.append(record)
        return visible

    def _forms_with_due_dates(
        self, user_id: str, group_ids: Sequence[str]
    ) -> List[RawRecord]:
        own = self.store.query("forms", lambda r: r.get("createdBy") == user_id)
        from_groups = [
            self.store.query("forms", lambda r, g=group_id: r.get("groupId") == g)
            for group_id in group_ids
        ]
        forms = _merge_unique(own, *from_groups)
        return [form for form in forms if form.get("dueDate") is not None]

    def _scheduled_announcements(
        self, user_id: str, group_ids: Sequence[str]
    ) -> List[RawRecord]:
        def scheduled(record: RawRecord) -> bool:
            return record.get("scheduledDate") is not None

        own = self.store.query(
            "announcements",
            lambda r: r.get("createdBy") == user_id and scheduled(r),
        )
        from_groups = [
            self.store.query(
                "announcements",
                lambda r, g=group_id: r.get("groupId") == g and scheduled(r),
            )
            for group_id in group_ids
        ]
        return _merge_unique(own, *from_groups)


class StaticIdentityProvider(BaseIdentityProvider):
    """Identity for a fixed user, with memberships read from the store's groups."""

    def __init__(self, user_id: Optional[str], store: InMemoryDocumentStore):
        self._user_id = user_id
        self.store = store

    def current_user_id(self) -> Optional[str]:
        return self._user_id

    async def current_user_group_ids(self) -> List[str]:
        user_id = self._user_id
        if user_id is None:
            return []
        groups = self.store.query(
            "groups", lambda r: user_id in (r.get("members") or [])
        )
        return [group["id"] for group in groups]

    def sign_in(self, user_id: str) -> None:
        self._user_id = user_id

    def sign_out(self) -> None:
        self._user_id = None


class InMemoryNotificationClient(BaseNotificationClient):
    """Unread counts over the store's notifications collection."""

    def __init__(self, store: InMemoryDocumentStore):
        self.store = store

    async def get_unread_count(self, user_id: str) -> int:
        unread = self.store.query(
            "notifications",
            lambda r: r.get("userId") == user_id and not r.get("read", False),
        )
        return len(unread)
