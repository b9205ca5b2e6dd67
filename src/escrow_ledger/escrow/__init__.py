"""Escrow Ledger core.

This module provides the escrow state machine for buyer/seller orders.

Key components:
- EscrowLedger (order creation, buyer confirmation, permissionless refund)
- LedgerRegistry (one ledger per deployment address, idempotent initialize)
- FundsTransfer / Clock capabilities with in-memory implementations
- Deterministic order receipts (keccak256 over ABI-encoded snapshots)
- Utility functions for APT formatting and account normalization

Example usage:
    ```python
    from escrow_ledger.escrow import (
        InMemoryFunds,
        LedgerRegistry,
        ManualClock,
        parse_apt,
    )

    funds = InMemoryFunds({"0xb0b": parse_apt("10")})
    clock = ManualClock()
    registry = LedgerRegistry(funds, clock)
    ledger = registry.initialize("0xa11ce")

    # Buyer escrows 1 APT for 24 hours
    order_id = ledger.create_order(
        buyer="0xb0b",
        seller="0x5e11",
        product_name="Test Product",
        amount=parse_apt("1"),
        timeline_hours=24,
    )

    # Either the buyer confirms delivery...
    ledger.confirm_product_received("0xb0b", order_id)

    # ...or, after 24 hours, anyone triggers the refund
    # clock.advance_hours(24)
    # ledger.process_refund("0xc4a", order_id)
    ```
"""

from .types import (
    Order,
    OrderStatus,
    LedgerPolicy,
    SECONDS_PER_HOUR,
)
from .errors import (
    EscrowError,
    NotInitialized,
    OrderNotFound,
    NotBuyer,
    InvalidStatus,
    TimelineNotExpired,
    InsufficientFunds,
    InvalidOrder,
    LedgerInvariantError,
)
from .capabilities import (
    FundsTransfer,
    Clock,
    InMemoryFunds,
    SystemClock,
    ManualClock,
)
from .ledger import EscrowLedger
from .registry import LedgerRegistry
from .receipts import compute_order_receipt, verify_order_receipt
from .utils import (
    OCTAS_PER_APT,
    U64_MAX,
    ZERO_ADDRESS,
    normalize_account,
    format_apt,
    parse_apt,
    hours_to_seconds,
    status_label,
    shorten_address,
)

__all__ = [
    # Types
    "Order",
    "OrderStatus",
    "LedgerPolicy",
    "SECONDS_PER_HOUR",
    # Errors
    "EscrowError",
    "NotInitialized",
    "OrderNotFound",
    "NotBuyer",
    "InvalidStatus",
    "TimelineNotExpired",
    "InsufficientFunds",
    "InvalidOrder",
    "LedgerInvariantError",
    # Capabilities
    "FundsTransfer",
    "Clock",
    "InMemoryFunds",
    "SystemClock",
    "ManualClock",
    # Ledger
    "EscrowLedger",
    "LedgerRegistry",
    # Receipts
    "compute_order_receipt",
    "verify_order_receipt",
    # Utils
    "OCTAS_PER_APT",
    "U64_MAX",
    "ZERO_ADDRESS",
    "normalize_account",
    "format_apt",
    "parse_apt",
    "hours_to_seconds",
    "status_label",
    "shorten_address",
]
