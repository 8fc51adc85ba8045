"""Document store protocol and adapters."""

from __future__ import annotations

from loguru import logger

from coachsync.config.settings import Settings
from coachsync.store.base import (
    MATCHES,
    PLAYERS,
    USERS,
    BaseDocumentStore,
    DocumentStore,
    QueryFilter,
    Unsubscribe,
    WatchCallback,
    apply_query,
    matches_filters,
)
from coachsync.store.memory import InMemoryDocumentStore
from coachsync.store.sql import SqlDocumentStore


def build_store(settings: Settings) -> BaseDocumentStore:
    """Create the store adapter selected by ``settings.store_backend``."""
    if settings.store_backend == "sql":
        logger.info("[STORE] Using SQL document store")
        return SqlDocumentStore(settings.database_url)
    logger.info("[STORE] Using in-memory document store")
    return InMemoryDocumentStore()


__all__ = [
    "MATCHES",
    "PLAYERS",
    "USERS",
    "BaseDocumentStore",
    "DocumentStore",
    "InMemoryDocumentStore",
    "QueryFilter",
    "SqlDocumentStore",
    "Unsubscribe",
    "WatchCallback",
    "apply_query",
    "build_store",
    "matches_filters",
]
