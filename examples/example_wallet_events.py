"""Example: wallet lifecycle events through the EventDispatcher.

This script plays the part of the SDK's connection and transaction logic
and shows how application code observes it:

    Simulated wallet → EventDispatcher.emit() → application listeners

Patterns demonstrated:

    1. **Persistent listeners** for balance and transaction updates.
    2. **One-shot listener** that waits for the first ``connect``.
    3. **Failure isolation**: a buggy listener does not stop the others.
    4. **Unsubscribe on disconnect** and final stats.

Configuration:
    Copy ``.env.sample`` to ``.env`` or export the variables directly:
       - ``OXIO_NETWORK_ID`` (default: ``0xio-testnet``)
       - ``OXIO_DEBUG`` (``1`` enables dispatcher debug records)

Usage:
    python -m examples.example_wallet_events
    python -m examples.example_wallet_events --network octra-testnet
    python -m examples.example_wallet_events --transactions 5 --debug
"""

import argparse
import logging
import os

from dotenv import load_dotenv

from core.dispatcher import DispatcherConfig, DispatcherStats, EventDispatcher
from core.events import WalletEvent, WalletEventType
from core.networks import (
    DEFAULT_NETWORK_ID,
    NetworkInfo,
    UnknownNetworkError,
    get_all_networks,
    get_network_config,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger: logging.Logger = logging.getLogger(__name__)

_ADDRESS: str = "oct1example0000000000000000000000000000"


class BalanceTracker:
    """Application-side state updated from wallet events."""

    def __init__(self) -> None:
        self.balance: float = 0.0
        self.confirmed: int = 0

    def on_balance(self, event: WalletEvent) -> None:
        self.balance = event.payload["balance"]
        logger.info("Balance now %.4f OCT", self.balance)

    def on_confirmed(self, event: WalletEvent) -> None:
        self.confirmed += 1
        logger.info(
            "Transaction %s confirmed at %d",
            event.payload["hash"],
            event.emitted_at_ms,
        )


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in ("1", "true", "yes")


def main() -> None:
    """Run the simulated wallet session."""
    load_dotenv()

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        description="Wallet event dispatch walkthrough",
    )
    parser.add_argument(
        "--network",
        type=str,
        default=os.environ.get("OXIO_NETWORK_ID", DEFAULT_NETWORK_ID),
        help=f"Network id to connect to (default: {DEFAULT_NETWORK_ID})",
    )
    parser.add_argument(
        "--transactions",
        type=int,
        default=3,
        help="Number of simulated transactions (default: 3)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=_env_flag("OXIO_DEBUG"),
        help="Enable dispatcher debug diagnostics",
    )
    args: argparse.Namespace = parser.parse_args()

    if args.debug:
        logging.getLogger("core").setLevel(logging.DEBUG)

    try:
        network: NetworkInfo = get_network_config(args.network)
    except UnknownNetworkError as exc:
        logger.error(
            "%s. Known networks: %s",
            exc,
            ", ".join(info.id for info in get_all_networks()),
        )
        return

    dispatcher: EventDispatcher = EventDispatcher(
        config=DispatcherConfig(debug_enabled=args.debug),
    )
    tracker: BalanceTracker = BalanceTracker()

    # Application listeners
    dispatcher.subscribe_once(
        WalletEventType.CONNECT,
        lambda event: logger.info(
            "Connected to %s as %s",
            event.payload["network"],
            event.payload["address"],
        ),
    )
    dispatcher.subscribe(WalletEventType.BALANCE_CHANGED, tracker.on_balance)
    dispatcher.subscribe(
        WalletEventType.TRANSACTION_CONFIRMED,
        tracker.on_confirmed,
    )

    def broken_listener(event: WalletEvent) -> None:
        raise RuntimeError("analytics backend unavailable")

    dispatcher.subscribe(WalletEventType.TRANSACTION_SENT, broken_listener)

    # Simulated SDK producers
    dispatcher.emit(
        WalletEventType.CONNECT,
        {"address": _ADDRESS, "network": network.name},
    )
    balance: float = 100.0
    dispatcher.emit(WalletEventType.BALANCE_CHANGED, {"balance": balance})

    for i in range(args.transactions):
        tx_hash: str = f"0x{i:064x}"
        dispatcher.emit(
            WalletEventType.TRANSACTION_SENT,
            {"hash": tx_hash, "rpc": network.rpc_url},
        )
        dispatcher.emit(WalletEventType.TRANSACTION_CONFIRMED, {"hash": tx_hash})
        balance -= 1.5
        dispatcher.emit(WalletEventType.BALANCE_CHANGED, {"balance": balance})

    dispatcher.unsubscribe(WalletEventType.BALANCE_CHANGED, tracker.on_balance)
    dispatcher.emit(WalletEventType.DISCONNECT, {"address": _ADDRESS})
    logger.info("Active categories: %s", dispatcher.active_categories())
    dispatcher.remove_all_listeners()

    stats: DispatcherStats = dispatcher.stats()
    logger.info("=" * 60)
    logger.info("Final Statistics")
    logger.info("-" * 60)
    logger.info("Network: %s (%s)", network.name, network.rpc_url or "unset")
    logger.info("Confirmed transactions seen: %d", tracker.confirmed)
    logger.info("Final balance: %.4f OCT", tracker.balance)
    logger.info(
        "Dispatcher: emitted=%d, delivered=%d, listener_errors=%d",
        stats.total_emitted,
        stats.total_delivered,
        stats.listener_errors,
    )
    logger.info("=" * 60)


if __name__ == "__main__":
    main()
