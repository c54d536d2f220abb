"""Core event layer for the 0xio Wallet SDK.

This package provides the wallet event envelope and categories, the
synchronous event dispatcher that SDK components emit through, and the
static network configuration table. All models are Pydantic-based with
frozen configuration for immutability.
"""

from core.dispatcher import DispatcherConfig, DispatcherStats, EventDispatcher
from core.events import EventCategory, Listener, WalletEvent, WalletEventType
from core.networks import (
    DEFAULT_NETWORK_ID,
    NETWORKS,
    NetworkInfo,
    NetworkRegistry,
    UnknownNetworkError,
    get_all_networks,
    get_network_config,
    is_valid_network_id,
)

__all__: list[str] = [
    "DEFAULT_NETWORK_ID",
    "DispatcherConfig",
    "DispatcherStats",
    "EventCategory",
    "EventDispatcher",
    "Listener",
    "NETWORKS",
    "NetworkInfo",
    "NetworkRegistry",
    "UnknownNetworkError",
    "WalletEvent",
    "WalletEventType",
    "get_all_networks",
    "get_network_config",
    "is_valid_network_id",
]
