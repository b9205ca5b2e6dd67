"""Escrow Ledger SDK.

Trust-minimized buyer/seller escrow: funds are held per order and released
to the seller on buyer confirmation, or returned to the buyer once the
order's timeline has expired.
"""

from .escrow import (
    Order,
    OrderStatus,
    LedgerPolicy,
    EscrowError,
    NotInitialized,
    OrderNotFound,
    NotBuyer,
    InvalidStatus,
    TimelineNotExpired,
    InsufficientFunds,
    InvalidOrder,
    FundsTransfer,
    Clock,
    InMemoryFunds,
    SystemClock,
    ManualClock,
    EscrowLedger,
    LedgerRegistry,
    compute_order_receipt,
    verify_order_receipt,
    format_apt,
    parse_apt,
)
from .marketplace import (
    EscrowMarketplace,
    MarketplaceConfig,
    OrderSummary,
    load_config_from_env,
)

__version__ = "0.1.0"

__all__ = [
    "Order",
    "OrderStatus",
    "LedgerPolicy",
    "EscrowError",
    "NotInitialized",
    "OrderNotFound",
    "NotBuyer",
    "InvalidStatus",
    "TimelineNotExpired",
    "InsufficientFunds",
    "InvalidOrder",
    "FundsTransfer",
    "Clock",
    "InMemoryFunds",
    "SystemClock",
    "ManualClock",
    "EscrowLedger",
    "LedgerRegistry",
    "compute_order_receipt",
    "verify_order_receipt",
    "format_apt",
    "parse_apt",
    "EscrowMarketplace",
    "MarketplaceConfig",
    "OrderSummary",
    "load_config_from_env",
]
