"""Live synchronization of matches and player aggregates."""

from coachsync.sync.manager import (
    CrossComponentSync,
    Debounced,
    Subscription,
    SubscriptionKind,
    SubscriptionState,
    SyncEvent,
    SyncEventType,
    SyncManager,
)

__all__ = [
    "CrossComponentSync",
    "Debounced",
    "Subscription",
    "SubscriptionKind",
    "SubscriptionState",
    "SyncEvent",
    "SyncEventType",
    "SyncManager",
]
