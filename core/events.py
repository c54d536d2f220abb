"""Wallet event categories and the immutable event envelope.

This module defines the event types that SDK producers emit through the
:class:`~core.dispatcher.EventDispatcher` and that application listeners
receive. The envelope is a Pydantic model with ``frozen=True`` so a single
instance can be handed to every listener of an emission without any of
them being able to alter what the others see.

Category convention:
    A category is any ``str``. :class:`WalletEventType` enumerates the
    categories the SDK emits itself. Because it is a ``str`` enum,
    ``WalletEventType.CONNECT`` and ``"connect"`` name the same category
    and can be used interchangeably with the dispatcher.

Timestamp convention:
    ``emitted_at_ms`` is wall-clock milliseconds since the Unix epoch
    (``time.time_ns() // 1_000_000``), captured once per ``emit()`` call.

Example:
    >>> from core.events import WalletEvent, WalletEventType
    >>> event = WalletEvent(
    ...     category=WalletEventType.CONNECT,
    ...     payload={"address": "oct1..."},
    ...     emitted_at_ms=1739500000000,
    ... )
    >>> event.category == "connect"
    True
    >>> event.payload["address"]
    'oct1...'
"""

import time
from enum import Enum
from typing import Callable, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Type aliases
# ---------------------------------------------------------------------------

T = TypeVar("T")
"""Type variable for the event payload (``WalletEvent[BalanceUpdate]``)."""

EventCategory = str
"""Category token. Value equality; any string is a valid category."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class WalletEventType(str, Enum):
    """Categories emitted by the wallet SDK.

    Attributes:
        CONNECT: Wallet connection established.
        DISCONNECT: Wallet connection closed (by user or extension).
        ACCOUNT_CHANGED: Active account switched in the wallet.
        NETWORK_CHANGED: Active network switched in the wallet.
        BALANCE_CHANGED: Balance of the active account changed.
        TRANSACTION_SENT: Transaction submitted to the network.
        TRANSACTION_CONFIRMED: Transaction included and confirmed.
        TRANSACTION_FAILED: Transaction rejected or dropped.
        ERROR: SDK-level error surfaced to the application.
    """

    CONNECT = "connect"
    DISCONNECT = "disconnect"
    ACCOUNT_CHANGED = "accountChanged"
    NETWORK_CHANGED = "networkChanged"
    BALANCE_CHANGED = "balanceChanged"
    TRANSACTION_SENT = "transactionSent"
    TRANSACTION_CONFIRMED = "transactionConfirmed"
    TRANSACTION_FAILED = "transactionFailed"
    ERROR = "error"


# ---------------------------------------------------------------------------
# Event Model
# ---------------------------------------------------------------------------


class WalletEvent(BaseModel, Generic[T]):
    """Immutable envelope delivered to listeners.

    Built fresh by the dispatcher for every ``emit()`` call and shared by
    all listeners of that emission. The dispatcher keeps no reference to
    it after delivery.

    Attributes:
        category: Category the event was emitted under.
        payload: Producer-supplied data. Not copied; producers should
            pass values they do not mutate afterwards.
        emitted_at_ms: Wall-clock emission time in milliseconds since
            the epoch. Non-negative.

    Example:
        >>> event = WalletEvent(category="txSent", payload="0xabc",
        ...                     emitted_at_ms=0)
        >>> event.payload
        '0xabc'
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    category: EventCategory = Field(
        min_length=1,
        description="Category the event was emitted under",
    )
    payload: T = Field(description="Producer-supplied event data")
    emitted_at_ms: int = Field(
        ge=0,
        description="Wall-clock emission time (epoch milliseconds)",
    )


Listener = Callable[[WalletEvent], None]
"""Listener signature: ``(event: WalletEvent) -> None``."""


def normalize_category(category: EventCategory) -> EventCategory:
    """Return the plain string for ``category``.

    Enum members are reduced to their value so registry keys, log
    records and ``WalletEvent.category`` always hold ``"connect"``
    rather than ``WalletEventType.CONNECT``.
    """
    if isinstance(category, Enum):
        return category.value
    return category


def now_ms() -> int:
    """Return the current wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000
