"""Synchronous fan-out dispatcher for wallet SDK events.

This module provides the ``EventDispatcher``: a per-category listener
registry with in-line, same-thread delivery. SDK producers (connection,
account and transaction logic) call ``emit()``; application code
registers listeners with ``subscribe()`` or ``subscribe_once()``.

Architecture note:
    There is no queue and no background thread. ``emit()`` calls every
    listener directly and returns once the last listener's synchronous
    body has run. Listeners that start asynchronous work are not awaited.

Snapshot-then-iterate:
    ``emit()`` copies the category's listeners into a tuple before the
    delivery loop starts, and delivers to exactly that tuple. Listeners
    subscribed or unsubscribed while the loop runs (by other listeners,
    or by a re-entrant ``emit()``) only affect later emissions.

Failure isolation:
    Each listener call is wrapped in ``try/except Exception``. A failing
    listener is counted and logged (rate-limited) and delivery moves on
    to the next listener. ``emit()`` never raises because of a listener.

Listener identity:
    Listeners are keyed by identity, not equality. Bound methods are
    keyed by ``(id(instance), function)`` because every ``obj.method``
    access creates a new bound-method object; without this a method
    could never be unsubscribed the way it was subscribed.

Thread safety:
    One ``threading.Lock`` guards the registry and the counters. It is
    held only while reading or mutating the registry and is always
    released before a listener runs, so listeners may call back into
    the dispatcher without deadlocking.

Example:
    >>> from core.dispatcher import EventDispatcher
    >>> from core.events import WalletEventType
    >>> dispatcher = EventDispatcher()
    >>> seen = []
    >>> dispatcher.subscribe(WalletEventType.CONNECT, seen.append)
    >>> dispatcher.emit(WalletEventType.CONNECT, {"address": "oct1..."})
    >>> seen[0].payload
    {'address': 'oct1...'}
    >>> dispatcher.listener_count(WalletEventType.CONNECT)
    1
"""

import logging
import threading
from typing import Any, Hashable

from pydantic import BaseModel, ConfigDict, Field

from core.events import (
    EventCategory,
    Listener,
    WalletEvent,
    normalize_category,
    now_ms,
)

logger: logging.Logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class DispatcherConfig(BaseModel):
    """Configuration for :class:`EventDispatcher`.

    Attributes:
        debug_enabled: Emit DEBUG records for subscribe, unsubscribe and
            emit. Diagnostic only; dispatch behaviour is identical either
            way.
        log_first_n: Number of listener failures logged with a full
            traceback before switching to sampled logging.
        log_every_n: After ``log_first_n`` failures, log every N-th
            failure at ERROR level without a traceback.

    Example:
        >>> DispatcherConfig(debug_enabled=True).debug_enabled
        True
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    debug_enabled: bool = Field(
        default=False,
        description="Emit DEBUG diagnostics for registration and emission.",
    )
    log_first_n: int = Field(
        default=10,
        ge=1,
        description="Listener failures logged with traceback before sampling.",
    )
    log_every_n: int = Field(
        default=1000,
        ge=1,
        description="Sampling interval for listener failure logs.",
    )


# ---------------------------------------------------------------------------
# Stats Model
# ---------------------------------------------------------------------------


class DispatcherStats(BaseModel):
    """Immutable snapshot of dispatcher counters.

    Returned by :meth:`EventDispatcher.stats`.

    Attributes:
        total_emitted: ``emit()`` calls, including those with no
            listeners.
        total_delivered: Listener invocations that returned normally.
        listener_errors: Listener invocations that raised and were
            isolated.
        active_categories: Categories with at least one listener.
        total_listeners: Registrations across all categories.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    total_emitted: int = Field(ge=0, description="emit() calls.")
    total_delivered: int = Field(
        ge=0,
        description="Listener invocations that returned normally.",
    )
    listener_errors: int = Field(
        ge=0,
        description="Listener invocations that raised (isolated).",
    )
    active_categories: int = Field(
        ge=0,
        description="Categories with at least one listener.",
    )
    total_listeners: int = Field(
        ge=0,
        description="Registrations across all categories.",
    )


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------


def _identity(listener: Any) -> Hashable:
    """Return the registry key for ``listener``.

    Plain functions, lambdas and callable objects are keyed by ``id()``.
    Bound methods are keyed by their instance and function, and bound
    builtin methods (``events.append``) by their instance and name.
    """
    owner: Any = getattr(listener, "__self__", None)
    if owner is None:
        return id(listener)
    func: Any = getattr(listener, "__func__", None)
    if func is None:
        func = getattr(listener, "__name__", None)
    if func is None:
        return id(listener)
    return (id(owner), func)


class _OnceListener:
    """Self-removing wrapper created by :meth:`EventDispatcher.subscribe_once`.

    The fired flag is claimed under a lock and the wrapper removes itself
    *before* calling the wrapped listener, so neither a re-entrant emit
    nor a concurrent emit holding an older snapshot can fire it twice.
    """

    __slots__ = ("_dispatcher", "_category", "listener", "_fired", "_lock")

    def __init__(
        self,
        dispatcher: "EventDispatcher",
        category: EventCategory,
        listener: Listener,
    ) -> None:
        self._dispatcher = dispatcher
        self._category = category
        self.listener: Listener = listener
        self._fired: bool = False
        self._lock = threading.Lock()

    def __call__(self, event: WalletEvent) -> None:
        with self._lock:
            if self._fired:
                return
            self._fired = True
        self._dispatcher._remove(self._category, _identity(self))
        if self._dispatcher._debug:
            logger.debug("Once listener fired for '%s'", self._category)
        self.listener(event)


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------


class EventDispatcher:
    """Per-category listener registry with synchronous fan-out.

    Registry layout:
        ``dict[category, dict[identity, listener]]``. The inner dict
        keeps insertion order, which is the delivery order. Empty inner
        dicts are dropped, so a category is present only while it has
        listeners.

    Args:
        config: Dispatcher configuration. Defaults to
            ``DispatcherConfig()`` (debug diagnostics off).

    Example:
        >>> dispatcher = EventDispatcher(
        ...     config=DispatcherConfig(debug_enabled=True),
        ... )
        >>> dispatcher.subscribe_once("txSent", print)
        >>> dispatcher.has_listeners("txSent")
        True
    """

    def __init__(self, config: DispatcherConfig | None = None) -> None:
        self._config: DispatcherConfig = config or DispatcherConfig()
        self._debug: bool = self._config.debug_enabled
        self._log_first_n: int = self._config.log_first_n
        self._log_every_n: int = self._config.log_every_n

        self._listeners: dict[EventCategory, dict[Hashable, Listener]] = {}
        self._lock = threading.Lock()

        # Counters, guarded by _lock
        self._total_emitted: int = 0
        self._total_delivered: int = 0
        self._listener_errors: int = 0

        logger.info(
            "EventDispatcher created (debug=%s)",
            self._debug,
        )

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def subscribe(self, category: EventCategory, listener: Listener) -> None:
        """Register ``listener`` for ``category``.

        Idempotent per ``(category, listener)`` pair: a second call with
        the same listener keeps the original registration and its
        position in the delivery order.

        Args:
            category: Category to listen on. Created on demand.
            listener: Callable taking one :class:`WalletEvent`.
        """
        category = normalize_category(category)
        self._add(category, listener)
        if self._debug:
            logger.debug("Added listener for '%s' event", category)

    def unsubscribe(self, category: EventCategory, listener: Listener) -> None:
        """Remove ``listener`` from ``category``.

        No-op when the listener or the category is not registered. Also
        cancels a pending :meth:`subscribe_once` registration of the same
        listener in this category.

        Args:
            category: Category the listener was registered under.
            listener: The listener originally passed in.
        """
        category = normalize_category(category)
        key: Hashable = _identity(listener)
        with self._lock:
            entries = self._listeners.get(category)
            if entries is None:
                return
            entries.pop(key, None)
            for once_key, registered in list(entries.items()):
                if (
                    isinstance(registered, _OnceListener)
                    and _identity(registered.listener) == key
                ):
                    del entries[once_key]
            if not entries:
                del self._listeners[category]
        if self._debug:
            logger.debug("Removed listener for '%s' event", category)

    def subscribe_once(self, category: EventCategory, listener: Listener) -> None:
        """Register ``listener`` to run on the next ``category`` emission only.

        Each call creates its own wrapper, so calling twice with the same
        listener yields two one-shot registrations.

        Args:
            category: Category to listen on.
            listener: Callable invoked at most once.
        """
        category = normalize_category(category)
        self._add(category, _OnceListener(self, category, listener))
        if self._debug:
            logger.debug("Added once listener for '%s' event", category)

    def remove_all_listeners(self, category: EventCategory | None = None) -> None:
        """Clear one category, or the whole registry when ``category`` is None."""
        if category is not None:
            category = normalize_category(category)
        with self._lock:
            if category is None:
                self._listeners.clear()
            else:
                self._listeners.pop(category, None)
        if self._debug:
            if category is None:
                logger.debug("Removed all event listeners")
            else:
                logger.debug("Removed all listeners for '%s' event", category)

    # ------------------------------------------------------------------
    # Emission
    # ------------------------------------------------------------------

    def emit(self, category: EventCategory, payload: Any = None) -> None:
        """Deliver ``payload`` to every listener of ``category``.

        Builds one :class:`WalletEvent` stamped with the current time and
        passes it to a snapshot of the category's listeners, in
        registration order. Listener exceptions are isolated; see the
        module docstring.

        Args:
            category: Category to emit under. No-op when nobody listens.
            payload: Event data, passed through unchanged.
        """
        category = normalize_category(category)
        event: WalletEvent = WalletEvent.model_construct(
            category=category,
            payload=payload,
            emitted_at_ms=now_ms(),
        )

        with self._lock:
            self._total_emitted += 1
            entries = self._listeners.get(category)
            snapshot: tuple[Listener, ...] = (
                tuple(entries.values()) if entries else ()
            )

        if not snapshot:
            if self._debug:
                logger.debug("No listeners for '%s' event", category)
            return

        if self._debug:
            logger.debug(
                "Emitting '%s' event to %d listeners",
                category,
                len(snapshot),
            )

        delivered: int = 0
        for listener in snapshot:
            try:
                listener(event)
            except Exception:
                self._on_listener_error(category)
            else:
                delivered += 1

        with self._lock:
            self._total_delivered += delivered

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def listener_count(self, category: EventCategory) -> int:
        """Return the number of listeners registered for ``category``."""
        category = normalize_category(category)
        with self._lock:
            entries = self._listeners.get(category)
            return len(entries) if entries else 0

    def has_listeners(self, category: EventCategory) -> bool:
        """Return ``True`` if ``category`` has at least one listener."""
        return self.listener_count(category) > 0

    def active_categories(self) -> list[EventCategory]:
        """Return categories with listeners, in first-subscription order."""
        with self._lock:
            return [category for category, entries in self._listeners.items() if entries]

    def listeners(self, category: EventCategory) -> tuple[Listener, ...]:
        """Return a snapshot of the callables registered for ``category``.

        One-shot registrations appear as their wrapper; the original
        listener is available on its ``listener`` attribute.
        """
        category = normalize_category(category)
        with self._lock:
            entries = self._listeners.get(category)
            return tuple(entries.values()) if entries else ()

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    def stats(self) -> DispatcherStats:
        """Return a snapshot of dispatcher counters.

        Returns:
            Frozen :class:`DispatcherStats`.

        Example:
            >>> dispatcher.emit("connect")
            >>> dispatcher.stats().total_emitted
            1
        """
        with self._lock:
            return DispatcherStats(
                total_emitted=self._total_emitted,
                total_delivered=self._total_delivered,
                listener_errors=self._listener_errors,
                active_categories=len(self._listeners),
                total_listeners=sum(
                    len(entries) for entries in self._listeners.values()
                ),
            )

    def reset_stats(self) -> None:
        """Zero the counters. Registered listeners are kept."""
        with self._lock:
            self._total_emitted = 0
            self._total_delivered = 0
            self._listener_errors = 0

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _add(self, category: EventCategory, listener: Listener) -> None:
        key: Hashable = _identity(listener)
        with self._lock:
            entries = self._listeners.setdefault(category, {})
            if key not in entries:
                entries[key] = listener

    def _remove(self, category: EventCategory, key: Hashable) -> None:
        with self._lock:
            entries = self._listeners.get(category)
            if entries is None:
                return
            entries.pop(key, None)
            if not entries:
                del self._listeners[category]

    def _on_listener_error(self, category: EventCategory) -> None:
        """Count and log a listener failure with rate limiting.

        First ``log_first_n`` errors: full stack trace via
        ``logger.exception()``. Subsequent errors: every
        ``log_every_n``-th occurrence at ERROR level (no trace).

        Must be called from inside the ``except`` block.
        """
        with self._lock:
            self._listener_errors += 1
            count: int = self._listener_errors
        if count <= self._log_first_n:
            logger.exception(
                "Error in event listener for '%s' (%d/%d)",
                category,
                count,
                self._log_first_n,
            )
        elif count % self._log_every_n == 0:
            logger.error(
                "Listener errors ongoing: %d total (category=%s)",
                count,
                category,
            )
