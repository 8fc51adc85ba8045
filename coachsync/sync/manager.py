"""Live subscriptions over store watches.

Each subscription owns one or more store watches and multiplexes them into a
single callback of tagged SyncEvents. Lifecycle is created -> active ->
torn_down; a torn-down subscription never delivers again and is never reused.

Query watches are opened without store-side ordering and sorted here, so
stores that cannot order without an index still deliver ordered payloads.
Watch failures arrive as events with an empty payload and ``error`` set;
they are never raised.
"""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from loguru import logger

from coachsync.config.settings import Settings
from coachsync.config.settings import settings as default_settings
from coachsync.core.errors import StoreError
from coachsync.core.ordering import SortDirection, sort_documents
from coachsync.store import MATCHES, PLAYERS, DocumentStore, QueryFilter, Unsubscribe


class SyncEventType(str, Enum):
    MATCHES_UPDATED = "matches_updated"
    PLAYER_UPDATED = "player_updated"
    PLAYERS_UPDATED = "players_updated"
    TEAM_MATCHES_UPDATED = "team_matches_updated"
    MATCH_UPDATED = "match_updated"
    CROSS_COMPONENT_SYNC = "cross_component_sync"


class SubscriptionKind(str, Enum):
    PLAYER = "player"
    COACH = "coach"
    MATCH = "match"
    CROSS_COMPONENT = "cross_component"


class SubscriptionState(str, Enum):
    CREATED = "created"
    ACTIVE = "active"
    TORN_DOWN = "torn_down"


@dataclass(frozen=True)
class SyncEvent:
    """Tagged payload delivered to subscription callbacks.

    Attributes:
        type: Which watch produced the event
        data: Sorted document list for query watches, a document (or None) otherwise
        error: Set when the underlying watch failed
        event: Cross-component sub-event ("match_added" or "player_stats_updated")
    """

    type: SyncEventType
    data: Any
    error: StoreError | None = None
    player_id: str | None = None
    coach_id: str | None = None
    match_id: str | None = None
    event: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"type": self.type.value, "data": self.data}
        for key, value in (
            ("playerId", self.player_id),
            ("coachId", self.coach_id),
            ("matchId", self.match_id),
            ("event", self.event),
        ):
            if value is not None:
                payload[key] = value
        if self.error is not None:
            payload["error"] = {"code": self.error.code, "message": str(self.error)}
        return payload


SyncCallback = Callable[[SyncEvent], None]


@dataclass(eq=False)
class Subscription:
    id: str
    kind: SubscriptionKind
    callback: SyncCallback
    state: SubscriptionState = SubscriptionState.CREATED
    releases: list[Unsubscribe] = field(default_factory=list)

    @property
    def is_active(self) -> bool:
        return self.state is SubscriptionState.ACTIVE

    def activate(self) -> None:
        if self.state is SubscriptionState.CREATED:
            self.state = SubscriptionState.ACTIVE

    def dispatch(self, event: SyncEvent) -> None:
        # The initial snapshot arrives while the subscription is still being created
        if self.state is SubscriptionState.TORN_DOWN:
            return
        self.callback(event)

    def tear_down(self) -> None:
        if self.state is SubscriptionState.TORN_DOWN:
            return
        self.state = SubscriptionState.TORN_DOWN
        releases, self.releases = self.releases, []
        for release in releases:
            release()


class CrossComponentSync:
    """Fan-out controls for one player/coach pair.

    Callbacks can be added and removed at any time; destroy() releases the
    underlying watches and drops every callback.
    """

    def __init__(self, sync_id: str, player_id: str, coach_id: str, manager: SyncManager):
        self.sync_id = sync_id
        self.player_id = player_id
        self.coach_id = coach_id
        self._manager = manager
        self._callbacks: list[SyncCallback] = []

    def add_callback(self, callback: SyncCallback) -> None:
        self._callbacks.append(callback)

    def remove_callback(self, callback: SyncCallback) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    @property
    def callback_count(self) -> int:
        return len(self._callbacks)

    def destroy(self) -> None:
        self._manager.unsubscribe(self.sync_id)
        self._callbacks.clear()

    def _fan_out(self, event: SyncEvent) -> None:
        for callback in list(self._callbacks):
            if callback in self._callbacks:
                callback(event)


class Debounced:
    """Trailing-edge debounce on the running event loop.

    Each call restarts the timer; when it fires, the wrapped callback runs
    once with the arguments of the last call.
    """

    def __init__(self, callback: Callable[..., Any], delay_ms: int):
        self._callback = callback
        self._delay = delay_ms / 1000
        self._handle: asyncio.TimerHandle | None = None

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self._delay, self._fire, args, kwargs)

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
        self._handle = None
        self._callback(*args, **kwargs)


class SyncManager:
    """Registry of live subscriptions for one store."""

    def __init__(self, store: DocumentStore, settings: Settings | None = None):
        self._store = store
        self._settings = settings or default_settings
        self._subscriptions: dict[str, Subscription] = {}
        self._online = True
        self._connection_listeners: list[tuple[Callable[[], None] | None, Callable[[], None] | None]] = []

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe_to_player(self, player_id: str, callback: SyncCallback) -> str:
        """Watch a player's matches (newest first) and aggregate document.

        Returns:
            Subscription id
        """
        subscription = self._register(SubscriptionKind.PLAYER, player_id, callback)

        def on_matches(data: Any, error: StoreError | None = None) -> None:
            subscription.dispatch(
                SyncEvent(SyncEventType.MATCHES_UPDATED, self._sorted(data, "date", "desc"), error, player_id=player_id)
            )

        def on_player(data: Any, error: StoreError | None = None) -> None:
            subscription.dispatch(SyncEvent(SyncEventType.PLAYER_UPDATED, data, error, player_id=player_id))

        self._attach(subscription, self._store.watch_query, MATCHES, [QueryFilter("playerId", "==", player_id)], on_matches)
        self._attach(subscription, self._store.watch_document, PLAYERS, player_id, on_player)
        return self._activate(subscription)

    def subscribe_to_coach(self, coach_id: str, callback: SyncCallback) -> str:
        """Watch a coach's players (by name) and the coach's matches (newest first)."""
        subscription = self._register(SubscriptionKind.COACH, coach_id, callback)
        filters = [QueryFilter("coachId", "==", coach_id)]

        def on_players(data: Any, error: StoreError | None = None) -> None:
            subscription.dispatch(
                SyncEvent(SyncEventType.PLAYERS_UPDATED, self._sorted(data, "name", "asc"), error, coach_id=coach_id)
            )

        def on_matches(data: Any, error: StoreError | None = None) -> None:
            subscription.dispatch(
                SyncEvent(SyncEventType.TEAM_MATCHES_UPDATED, self._sorted(data, "date", "desc"), error, coach_id=coach_id)
            )

        self._attach(subscription, self._store.watch_query, PLAYERS, filters, on_players)
        self._attach(subscription, self._store.watch_query, MATCHES, filters, on_matches)
        return self._activate(subscription)

    def subscribe_to_match(self, match_id: str, callback: SyncCallback) -> str:
        subscription = self._register(SubscriptionKind.MATCH, match_id, callback)

        def on_match(data: Any, error: StoreError | None = None) -> None:
            subscription.dispatch(SyncEvent(SyncEventType.MATCH_UPDATED, data, error, match_id=match_id))

        self._attach(subscription, self._store.watch_document, MATCHES, match_id, on_match)
        return self._activate(subscription)

    def subscribe_cross_component(self, player_id: str, coach_id: str) -> CrossComponentSync:
        """Shared watches for one player/coach pair with many callbacks.

        Callbacks receive ``cross_component_sync`` events whose ``event`` is
        ``match_added`` (matches of the pair, newest first) or
        ``player_stats_updated`` (the player's aggregate).
        """
        controls: CrossComponentSync | None = None
        subscription = self._register(
            SubscriptionKind.CROSS_COMPONENT, f"{player_id}-{coach_id}", lambda event: controls._fan_out(event)
        )
        controls = CrossComponentSync(subscription.id, player_id, coach_id, self)

        def on_matches(data: Any, error: StoreError | None = None) -> None:
            subscription.dispatch(
                SyncEvent(
                    SyncEventType.CROSS_COMPONENT_SYNC,
                    self._sorted(data, "date", "desc"),
                    error,
                    player_id=player_id,
                    coach_id=coach_id,
                    event="match_added",
                )
            )

        def on_player(data: Any, error: StoreError | None = None) -> None:
            subscription.dispatch(
                SyncEvent(
                    SyncEventType.CROSS_COMPONENT_SYNC,
                    data,
                    error,
                    player_id=player_id,
                    coach_id=coach_id,
                    event="player_stats_updated",
                )
            )

        pair_filters = [QueryFilter("playerId", "==", player_id), QueryFilter("coachId", "==", coach_id)]
        self._attach(subscription, self._store.watch_query, MATCHES, pair_filters, on_matches)
        self._attach(subscription, self._store.watch_document, PLAYERS, player_id, on_player)
        self._activate(subscription)
        return controls

    def unsubscribe(self, subscription_id: str) -> None:
        """Tear down a subscription; unknown or already torn-down ids are ignored."""
        subscription = self._subscriptions.pop(subscription_id, None)
        if subscription is None:
            return
        subscription.tear_down()
        logger.debug(f"[SYNC] Unsubscribed {subscription_id}")

    def unsubscribe_all(self) -> None:
        for subscription_id in list(self._subscriptions):
            self.unsubscribe(subscription_id)

    def is_active(self, subscription_id: str) -> bool:
        subscription = self._subscriptions.get(subscription_id)
        return subscription is not None and subscription.is_active

    @property
    def active_count(self) -> int:
        return sum(1 for subscription in self._subscriptions.values() if subscription.is_active)

    def get_subscription(self, subscription_id: str) -> Subscription | None:
        return self._subscriptions.get(subscription_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def debounce(self, callback: Callable[..., Any], delay_ms: int | None = None) -> Debounced:
        """Wrap a callback so bursts collapse into one call with the last arguments."""
        if delay_ms is None:
            delay_ms = self._settings.debounce_delay_ms
        return Debounced(callback, delay_ms)

    def on_connection_state(
        self,
        on_online: Callable[[], None] | None = None,
        on_offline: Callable[[], None] | None = None,
    ) -> Callable[[], None]:
        """Register connectivity listeners.

        Returns:
            Callable removing the listeners
        """
        listener = (on_online, on_offline)
        self._connection_listeners.append(listener)

        def remove() -> None:
            if listener in self._connection_listeners:
                self._connection_listeners.remove(listener)

        return remove

    def set_connection_state(self, online: bool) -> None:
        """Record connectivity; listeners fire only on transitions."""
        if online == self._online:
            return
        self._online = online
        if online:
            logger.info("[SYNC] Connection restored - resyncing data")
        else:
            logger.warning("[SYNC] Connection lost - entering offline mode")
        for on_online, on_offline in list(self._connection_listeners):
            handler = on_online if online else on_offline
            if handler is not None:
                handler()

    @property
    def online(self) -> bool:
        return self._online

    def _register(self, kind: SubscriptionKind, key: str, callback: SyncCallback) -> Subscription:
        subscription_id = f"{kind.value}-{key}-{uuid.uuid4().hex[:8]}"
        subscription = Subscription(id=subscription_id, kind=kind, callback=callback)
        self._subscriptions[subscription_id] = subscription
        return subscription

    def _attach(self, subscription: Subscription, watch: Callable[..., Unsubscribe], *args: Any) -> None:
        if subscription.state is SubscriptionState.TORN_DOWN:
            return
        try:
            release = watch(*args)
        except Exception:
            logger.exception(f"[SYNC] Failed to establish watch for {subscription.id}")
            self.unsubscribe(subscription.id)
            raise
        # The initial snapshot may have torn the subscription down already
        if subscription.state is SubscriptionState.TORN_DOWN:
            release()
            return
        subscription.releases.append(release)

    def _activate(self, subscription: Subscription) -> str:
        subscription.activate()
        logger.debug(f"[SYNC] Subscription {subscription.id} active ({len(subscription.releases)} watches)")
        return subscription.id

    @staticmethod
    def _sorted(data: Any, field: str, direction: SortDirection) -> list[Any]:
        if not data:
            return []
        return sort_documents(data, field, direction)
