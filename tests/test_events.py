"""Unit tests for core.events module.

Tests the WalletEvent Pydantic envelope, the WalletEventType enum, and
the category/timestamp helpers. Validates creation, immutability, field
constraints, model_construct bypass, and enum/string interchangeability.
"""

import time

import pytest
from pydantic import ValidationError

from core.events import WalletEvent, WalletEventType, normalize_category, now_ms


# ---------------------------------------------------------------------------
# WalletEventType Enum Tests
# ---------------------------------------------------------------------------


class TestWalletEventType:
    """Tests for WalletEventType str enum."""

    def test_enum_values(self) -> None:
        """Enum values are the wire-level category names."""
        assert WalletEventType.CONNECT == "connect"
        assert WalletEventType.DISCONNECT == "disconnect"
        assert WalletEventType.ACCOUNT_CHANGED == "accountChanged"
        assert WalletEventType.NETWORK_CHANGED == "networkChanged"
        assert WalletEventType.BALANCE_CHANGED == "balanceChanged"
        assert WalletEventType.TRANSACTION_SENT == "transactionSent"
        assert WalletEventType.TRANSACTION_CONFIRMED == "transactionConfirmed"
        assert WalletEventType.TRANSACTION_FAILED == "transactionFailed"
        assert WalletEventType.ERROR == "error"

    def test_enum_from_string(self) -> None:
        """Enum can be constructed from its string value."""
        flag: WalletEventType = WalletEventType("accountChanged")
        assert flag is WalletEventType.ACCOUNT_CHANGED

    def test_invalid_value_raises(self) -> None:
        """Unknown string raises ValueError."""
        with pytest.raises(ValueError):
            WalletEventType("no-such-event")


# ---------------------------------------------------------------------------
# Helper Tests
# ---------------------------------------------------------------------------


class TestHelpers:
    """Tests for normalize_category and now_ms."""

    def test_normalize_enum(self) -> None:
        """Enum members reduce to a plain str."""
        value = normalize_category(WalletEventType.TRANSACTION_SENT)
        assert value == "transactionSent"
        assert type(value) is str

    def test_normalize_string_passthrough(self) -> None:
        """Plain strings are returned unchanged."""
        assert normalize_category("custom-category") == "custom-category"

    def test_now_ms_is_wall_clock_millis(self) -> None:
        """now_ms tracks time.time() in milliseconds."""
        before: int = int(time.time() * 1000)
        value: int = now_ms()
        after: int = int(time.time() * 1000)
        assert before - 1 <= value <= after + 1


# ---------------------------------------------------------------------------
# WalletEvent Tests
# ---------------------------------------------------------------------------


class TestWalletEvent:
    """Tests for WalletEvent Pydantic model."""

    def test_creation_with_valid_data(self) -> None:
        """Model is created with valid data."""
        event: WalletEvent = WalletEvent(
            category="transactionSent",
            payload={"hash": "0xabc", "amount": 1.5},
            emitted_at_ms=1739500000000,
        )
        assert event.category == "transactionSent"
        assert event.payload == {"hash": "0xabc", "amount": 1.5}
        assert event.emitted_at_ms == 1739500000000

    def test_enum_category_accepted(self) -> None:
        """WalletEventType members are valid categories."""
        event: WalletEvent = WalletEvent(
            category=WalletEventType.CONNECT,
            payload=None,
            emitted_at_ms=0,
        )
        assert event.category == "connect"

    def test_parametrised_payload(self) -> None:
        """Generic parametrisation validates the payload type."""
        event: WalletEvent[int] = WalletEvent[int](
            category="balanceChanged",
            payload="42",
            emitted_at_ms=0,
        )
        assert event.payload == 42
        with pytest.raises(ValidationError):
            WalletEvent[int](
                category="balanceChanged",
                payload="not-a-number",
                emitted_at_ms=0,
            )

    def test_frozen_immutability(self) -> None:
        """Frozen model rejects attribute assignment."""
        event: WalletEvent = WalletEvent(
            category="connect",
            payload=None,
            emitted_at_ms=0,
        )
        with pytest.raises(ValidationError):
            event.payload = "changed"  # type: ignore[misc]

    def test_extra_fields_rejected(self) -> None:
        """Extra fields are rejected (extra='forbid')."""
        with pytest.raises(ValidationError):
            WalletEvent(
                category="connect",
                payload=None,
                emitted_at_ms=0,
                source="wallet",  # type: ignore[call-arg]
            )

    def test_empty_category_rejected(self) -> None:
        """Empty category is rejected (min_length=1)."""
        with pytest.raises(ValidationError):
            WalletEvent(category="", payload=None, emitted_at_ms=0)

    def test_negative_timestamp_rejected(self) -> None:
        """Negative emitted_at_ms is rejected (ge=0)."""
        with pytest.raises(ValidationError):
            WalletEvent(category="connect", payload=None, emitted_at_ms=-1)

    def test_missing_payload_rejected(self) -> None:
        """payload is required on validated construction."""
        with pytest.raises(ValidationError):
            WalletEvent(category="connect", emitted_at_ms=0)  # type: ignore[call-arg]

    def test_model_construct_skips_validation(self) -> None:
        """model_construct accepts values without validation."""
        event: WalletEvent = WalletEvent.model_construct(
            category="",
            payload=object,
            emitted_at_ms=0,
        )
        assert event.category == ""
        assert event.payload is object
