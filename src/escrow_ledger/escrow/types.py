"""Escrow Types for the Escrow Ledger.

Value types shared by the ledger, the registry and the marketplace facade.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict

SECONDS_PER_HOUR = 3600


class OrderStatus(IntEnum):
    """Order lifecycle state. Values are the on-chain status codes."""

    PENDING = 1
    DELIVERED = 2
    REFUNDED = 3

    @property
    def label(self) -> str:
        """Lowercase display name (e.g., "pending")."""
        return self.name.lower()

    @property
    def is_terminal(self) -> bool:
        return self is not OrderStatus.PENDING


@dataclass(frozen=True)
class Order:
    """One escrow transaction held by the ledger."""

    order_id: int
    """Unique, monotonically assigned order ID (u64, starts at 1)."""

    buyer: str
    """Normalized account that funded the order."""

    seller: str
    """Normalized account that receives funds on confirmation."""

    product_name: str
    """UTF-8 product description supplied by the buyer."""

    amount: int
    """Escrowed amount in octas (1 APT = 100_000_000 octas)."""

    status: OrderStatus
    """Current lifecycle state."""

    created_at: int
    """Unix timestamp in seconds, taken from the ledger clock at creation."""

    timeline_hours: int
    """Hours after creation until anyone may trigger a refund."""

    escrow_released: bool = False
    """True once the amount has left the escrow pool."""

    @property
    def refund_deadline(self) -> int:
        """Earliest timestamp (seconds) at which a refund is allowed."""
        return self.created_at + self.timeline_hours * SECONDS_PER_HOUR

    @property
    def is_pending(self) -> bool:
        return self.status is OrderStatus.PENDING

    def is_refundable(self, now: int) -> bool:
        """Whether a refund would be accepted at ``now``."""
        return self.is_pending and now >= self.refund_deadline

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly view of the order (status as its integer code)."""
        return {
            "order_id": self.order_id,
            "buyer": self.buyer,
            "seller": self.seller,
            "product_name": self.product_name,
            "amount": self.amount,
            "status": int(self.status),
            "created_at": self.created_at,
            "timeline_hours": self.timeline_hours,
            "escrow_released": self.escrow_released,
        }


@dataclass(frozen=True)
class LedgerPolicy:
    """Validation policy applied by the ledger when creating orders."""

    require_positive_amount: bool = True
    """Reject orders with ``amount == 0``."""

    allow_self_dealing: bool = False
    """Allow orders where buyer and seller are the same account."""
