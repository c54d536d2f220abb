"""Static network configuration for the 0xio wallet SDK.

This module holds the table of networks the SDK knows about and a small
registry for looking them up by identifier. Descriptors are frozen
Pydantic models defined once at import time and never mutated.

Legacy identifiers:
    ``octra-testnet`` is kept for backward compatibility. It resolves to
    its own descriptor but shares the RPC and explorer endpoints of
    ``0xio-testnet``.

Lookup policy:
    An unknown identifier raises :class:`UnknownNetworkError`. The
    registry never falls back to the default network for an id it does
    not recognise; only an omitted id (``None``) resolves to the default.

Example:
    >>> from core.networks import get_network_config, is_valid_network_id
    >>> get_network_config().id
    '0xio-testnet'
    >>> get_network_config("octra-testnet").rpc_url
    'https://0xio.network'
    >>> is_valid_network_id("no-such-network")
    False
"""

from collections.abc import Mapping
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class UnknownNetworkError(LookupError):
    """Raised when a network identifier is not configured.

    Attributes:
        network_id: The identifier that failed to resolve.
    """

    def __init__(self, network_id: str) -> None:
        self.network_id: str = network_id
        super().__init__(f"Unknown network ID: {network_id}")


# ---------------------------------------------------------------------------
# Descriptor Model
# ---------------------------------------------------------------------------


class NetworkInfo(BaseModel):
    """Immutable descriptor of one network endpoint configuration.

    Attributes:
        id: Network identifier used for lookup.
        name: Human-readable display name.
        rpc_url: JSON-RPC endpoint. Empty for the user-configured
            ``custom`` network.
        explorer_url: Block explorer base URL. May be empty.
        color: Display colour hint (CSS hex).
        is_testnet: ``True`` for test networks.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(min_length=1, description="Network identifier")
    name: str = Field(description="Display name")
    rpc_url: str = Field(description="JSON-RPC endpoint URL")
    explorer_url: str = Field(description="Block explorer base URL")
    color: str = Field(description="Display colour hint (CSS hex)")
    is_testnet: bool = Field(description="True for test networks")


# ---------------------------------------------------------------------------
# Static Table
# ---------------------------------------------------------------------------

_TESTNET_RPC_URL: str = "https://0xio.network"
_TESTNET_EXPLORER_URL: str = "https://0xioscan.io/"

NETWORKS: Mapping[str, NetworkInfo] = MappingProxyType(
    {
        "0xio-testnet": NetworkInfo(
            id="0xio-testnet",
            name="0xio Testnet",
            rpc_url=_TESTNET_RPC_URL,
            explorer_url=_TESTNET_EXPLORER_URL,
            color="#6366f1",
            is_testnet=True,
        ),
        # Legacy id
        "octra-testnet": NetworkInfo(
            id="octra-testnet",
            name="0xio Testnet (Legacy)",
            rpc_url=_TESTNET_RPC_URL,
            explorer_url=_TESTNET_EXPLORER_URL,
            color="#6366f1",
            is_testnet=True,
        ),
        # Endpoints supplied by the user at runtime
        "custom": NetworkInfo(
            id="custom",
            name="Custom Network",
            rpc_url="",
            explorer_url="",
            color="#64748b",
            is_testnet=False,
        ),
    }
)
"""Read-only table of configured networks, keyed by identifier."""

DEFAULT_NETWORK_ID: str = "0xio-testnet"


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class NetworkRegistry:
    """Lookup over a fixed table of :class:`NetworkInfo` descriptors.

    Args:
        networks: Mapping of identifier to descriptor. Defaults to
            :data:`NETWORKS`. Copied on construction.
        default_id: Identifier returned by ``lookup()`` when no id is
            given. Must be a key of ``networks``.

    Raises:
        ValueError: If ``default_id`` is not a key of ``networks``.

    Example:
        >>> registry = NetworkRegistry()
        >>> registry.lookup().name
        '0xio Testnet'
        >>> registry.is_known("custom")
        True
    """

    def __init__(
        self,
        networks: Mapping[str, NetworkInfo] = NETWORKS,
        default_id: str = DEFAULT_NETWORK_ID,
    ) -> None:
        if default_id not in networks:
            raise ValueError(
                f"Default network {default_id!r} is not a configured network"
            )
        self._networks: Mapping[str, NetworkInfo] = MappingProxyType(dict(networks))
        self._default_id: str = default_id

    @property
    def default_id(self) -> str:
        """Identifier used when ``lookup()`` is called without one."""
        return self._default_id

    def lookup(self, network_id: str | None = None) -> NetworkInfo:
        """Return the descriptor for ``network_id``.

        Args:
            network_id: Identifier to resolve. ``None`` resolves to
                :attr:`default_id`.

        Returns:
            The configured :class:`NetworkInfo`.

        Raises:
            UnknownNetworkError: If ``network_id`` is not configured.
        """
        if network_id is None:
            network_id = self._default_id
        try:
            return self._networks[network_id]
        except KeyError:
            raise UnknownNetworkError(network_id) from None

    def list_all(self) -> list[NetworkInfo]:
        """Return every configured descriptor, in definition order."""
        return list(self._networks.values())

    def is_known(self, network_id: str) -> bool:
        """Return ``True`` if ``network_id`` is configured."""
        return network_id in self._networks


_default_registry: NetworkRegistry = NetworkRegistry()


def get_network_config(network_id: str = DEFAULT_NETWORK_ID) -> NetworkInfo:
    """Return the descriptor for ``network_id`` from the default table.

    Raises:
        UnknownNetworkError: If ``network_id`` is not configured.
    """
    return _default_registry.lookup(network_id)


def get_all_networks() -> list[NetworkInfo]:
    """Return every descriptor in the default table."""
    return _default_registry.list_all()


def is_valid_network_id(network_id: str) -> bool:
    """Return ``True`` if ``network_id`` is in the default table."""
    return _default_registry.is_known(network_id)
