"""Document store protocol and the watch machinery shared by the adapters.

A store holds schemaless camelCase documents in named collections. CRUD is
awaited; watches are registered synchronously, deliver the current snapshot
immediately, and are re-delivered after every write that touches them.

Adapters implement four blocking primitives (_load, _load_all, _save,
_remove) and decide in _run whether they are called inline or off-loaded.
Watch dispatch always happens on the caller's thread.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal, Protocol

from loguru import logger

from coachsync.core.errors import StoreError
from coachsync.core.ordering import SortDirection, compare_values, sort_documents, utc_now

MATCHES = "matches"
PLAYERS = "players"
USERS = "users"

FilterOperator = Literal["==", "!=", "<", "<=", ">", ">=", "in", "not-in", "array-contains"]

Unsubscribe = Callable[[], None]
WatchCallback = Callable[..., None]
Document = dict[str, Any]


@dataclass(frozen=True)
class QueryFilter:
    """A single field predicate; all filters of a query must hold."""

    field: str
    operator: FilterOperator
    value: Any


def _ordered(left: Any, right: Any) -> bool:
    """True when both values belong to one comparable family."""
    if isinstance(left, datetime) and isinstance(right, datetime):
        return True
    if isinstance(left, str) and isinstance(right, str):
        return True
    numbers = (int, float)
    return (
        isinstance(left, numbers)
        and isinstance(right, numbers)
        and not isinstance(left, bool)
        and not isinstance(right, bool)
    )


def matches_filter(document: Mapping[str, Any], query_filter: QueryFilter) -> bool:
    """Evaluate one filter. Documents missing the field never match."""
    if query_filter.field not in document:
        return False
    value = document[query_filter.field]
    expected = query_filter.value
    operator = query_filter.operator

    if operator == "==":
        return value == expected
    if operator == "!=":
        return value != expected
    if operator == "in":
        return value in expected
    if operator == "not-in":
        return value not in expected
    if operator == "array-contains":
        return isinstance(value, list) and expected in value

    if not _ordered(value, expected):
        return False
    order = compare_values(value, expected)
    if operator == "<":
        return order < 0
    if operator == "<=":
        return order <= 0
    if operator == ">":
        return order > 0
    if operator == ">=":
        return order >= 0
    raise StoreError("invalid-argument", f"Unsupported filter operator: {operator}")


def matches_filters(document: Mapping[str, Any] | None, filters: Sequence[QueryFilter]) -> bool:
    if document is None:
        return False
    return all(matches_filter(document, query_filter) for query_filter in filters)


def apply_query(
    documents: Iterable[Document],
    filters: Sequence[QueryFilter],
    order_by: str | None = None,
    direction: SortDirection = "asc",
    limit: int | None = None,
) -> list[Document]:
    """Filter, order and limit documents in memory."""
    results = [document for document in documents if matches_filters(document, filters)]
    if order_by:
        results = sort_documents(results, order_by, direction)
    if limit is not None:
        results = results[:limit]
    return results


class DocumentStore(Protocol):
    """Narrow persistence interface consumed by the services."""

    async def create(self, collection: str, data: Mapping[str, Any], doc_id: str | None = None) -> str: ...

    async def read(self, collection: str, doc_id: str) -> Document | None: ...

    async def update(self, collection: str, doc_id: str, patch: Mapping[str, Any]) -> None: ...

    async def delete(self, collection: str, doc_id: str) -> None: ...

    async def query(
        self,
        collection: str,
        filters: Sequence[QueryFilter] = (),
        order_by: str | None = None,
        direction: SortDirection = "asc",
        limit: int | None = None,
    ) -> list[Document]: ...

    def watch_document(self, collection: str, doc_id: str, callback: WatchCallback) -> Unsubscribe: ...

    def watch_query(
        self,
        collection: str,
        filters: Sequence[QueryFilter],
        callback: WatchCallback,
        order_by: str | None = None,
        direction: SortDirection = "asc",
    ) -> Unsubscribe: ...


@dataclass(eq=False)
class _Watcher:
    collection: str
    callback: WatchCallback
    doc_id: str | None = None
    filters: tuple[QueryFilter, ...] = ()
    order_by: str | None = None
    direction: SortDirection = "asc"
    active: bool = True

    @property
    def is_query(self) -> bool:
        return self.doc_id is None


@dataclass
class _Delivery:
    watcher: _Watcher
    data: Any
    error: StoreError | None = None


@dataclass
class _WatchRegistry:
    watchers: list[_Watcher] = field(default_factory=list)

    def add(self, watcher: _Watcher) -> None:
        self.watchers.append(watcher)

    def discard(self, watcher: _Watcher) -> None:
        watcher.active = False
        if watcher in self.watchers:
            self.watchers.remove(watcher)

    def for_collection(self, collection: str) -> list[_Watcher]:
        return [watcher for watcher in self.watchers if watcher.collection == collection]


class BaseDocumentStore:
    """CRUD and watch dispatch on top of four blocking primitives."""

    name = "base"

    def __init__(self) -> None:
        self._registry = _WatchRegistry()

    # ------------------------------------------------------------------
    # Primitives implemented by adapters
    # ------------------------------------------------------------------

    def _load(self, collection: str, doc_id: str) -> Document | None:
        raise NotImplementedError

    def _load_all(self, collection: str) -> list[Document]:
        raise NotImplementedError

    def _save(self, collection: str, doc_id: str, data: Document) -> None:
        raise NotImplementedError

    def _remove(self, collection: str, doc_id: str) -> bool:
        raise NotImplementedError

    async def _run(self, func: Callable[..., Any], *args: Any) -> Any:
        return func(*args)

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    async def create(self, collection: str, data: Mapping[str, Any], doc_id: str | None = None) -> str:
        """Write a document, replacing any existing document with the same id.

        Returns:
            The document id (generated when not supplied)
        """
        doc_id = doc_id or uuid.uuid4().hex
        now = utc_now()
        record = {key: value for key, value in data.items() if key != "id"}
        if record.get("createdAt") is None:
            record["createdAt"] = now
        record["updatedAt"] = now

        before = await self._run(self._load, collection, doc_id)
        await self._run(self._save, collection, doc_id, record)
        logger.debug(f"[STORE] Created {collection}/{doc_id}")
        await self._publish(collection, doc_id, before)
        return doc_id

    async def read(self, collection: str, doc_id: str) -> Document | None:
        return await self._run(self._load, collection, doc_id)

    async def update(self, collection: str, doc_id: str, patch: Mapping[str, Any]) -> None:
        """Merge a patch into an existing document.

        Raises:
            StoreError: "not-found" when the document does not exist
        """
        before = await self._run(self._load, collection, doc_id)
        if before is None:
            raise StoreError("not-found", f"No document to update: {collection}/{doc_id}")

        record = {key: value for key, value in before.items() if key != "id"}
        record.update({key: value for key, value in patch.items() if key != "id"})
        record["updatedAt"] = utc_now()

        await self._run(self._save, collection, doc_id, record)
        logger.debug(f"[STORE] Updated {collection}/{doc_id} fields={sorted(patch)}")
        await self._publish(collection, doc_id, before)

    async def delete(self, collection: str, doc_id: str) -> None:
        before = await self._run(self._load, collection, doc_id)
        if before is None:
            return
        await self._run(self._remove, collection, doc_id)
        logger.debug(f"[STORE] Deleted {collection}/{doc_id}")
        await self._publish(collection, doc_id, before)

    async def query(
        self,
        collection: str,
        filters: Sequence[QueryFilter] = (),
        order_by: str | None = None,
        direction: SortDirection = "asc",
        limit: int | None = None,
    ) -> list[Document]:
        documents = await self._run(self._load_all, collection)
        return apply_query(documents, filters, order_by, direction, limit)

    # ------------------------------------------------------------------
    # Watches
    # ------------------------------------------------------------------

    def watch_document(self, collection: str, doc_id: str, callback: WatchCallback) -> Unsubscribe:
        """Watch one document; delivers ``callback(document_or_None)`` now and on change."""
        watcher = _Watcher(collection=collection, callback=callback, doc_id=doc_id)
        self._registry.add(watcher)
        self._dispatch([self._snapshot(watcher)])
        return self._unsubscriber(watcher)

    def watch_query(
        self,
        collection: str,
        filters: Sequence[QueryFilter],
        callback: WatchCallback,
        order_by: str | None = None,
        direction: SortDirection = "asc",
    ) -> Unsubscribe:
        """Watch a query; delivers ``callback(documents)`` now and after relevant writes."""
        watcher = _Watcher(
            collection=collection,
            callback=callback,
            filters=tuple(filters),
            order_by=order_by,
            direction=direction,
        )
        self._registry.add(watcher)
        self._dispatch([self._snapshot(watcher)])
        return self._unsubscriber(watcher)

    def broadcast_error(self, collection: str, error: BaseException) -> None:
        """Deliver an error to every watcher on a collection."""
        store_error = StoreError.wrap(error)
        logger.warning(f"[STORE] Broadcasting {store_error.code} to watchers of {collection}")
        deliveries = [
            _Delivery(watcher, [] if watcher.is_query else None, store_error)
            for watcher in self._registry.for_collection(collection)
        ]
        self._dispatch(deliveries)

    @property
    def watcher_count(self) -> int:
        return len(self._registry.watchers)

    def _unsubscriber(self, watcher: _Watcher) -> Unsubscribe:
        def unsubscribe() -> None:
            self._registry.discard(watcher)

        return unsubscribe

    def _snapshot(self, watcher: _Watcher) -> _Delivery:
        try:
            if watcher.is_query:
                documents = self._load_all(watcher.collection)
                data = apply_query(documents, watcher.filters, watcher.order_by, watcher.direction)
            else:
                data = self._load(watcher.collection, watcher.doc_id)
        except Exception as e:
            logger.warning(f"[STORE] Snapshot failed on {watcher.collection}: {e}")
            return _Delivery(watcher, [] if watcher.is_query else None, StoreError.wrap(e, "unavailable"))
        return _Delivery(watcher, data)

    def _collect_deliveries(self, collection: str, doc_id: str, before: Document | None) -> list[_Delivery]:
        after = self._load(collection, doc_id)
        deliveries = []
        for watcher in self._registry.for_collection(collection):
            if watcher.is_query:
                if not (matches_filters(before, watcher.filters) or matches_filters(after, watcher.filters)):
                    continue
            elif watcher.doc_id != doc_id:
                continue
            deliveries.append(self._snapshot(watcher))
        return deliveries

    async def _publish(self, collection: str, doc_id: str, before: Document | None) -> None:
        deliveries = await self._run(self._collect_deliveries, collection, doc_id, before)
        self._dispatch(deliveries)

    def _dispatch(self, deliveries: Iterable[_Delivery]) -> None:
        for delivery in deliveries:
            # An earlier callback may have unsubscribed this watcher
            if not delivery.watcher.active:
                continue
            try:
                delivery.watcher.callback(delivery.data, delivery.error)
            except Exception:
                logger.exception(f"[STORE] Watch callback failed on {delivery.watcher.collection}")
