"""Escrow Marketplace facade.

Entry point for applications that talk to one marketplace deployment.
It wraps a LedgerRegistry and:
1. Routes every call to the ledger at the configured deployment address
2. Applies the order form rules (required fields, timeline bounds)
3. Converts human readable APT amounts to octas and back
4. Produces display-ready order summaries
"""

import os
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, TypedDict, Union

from dotenv import find_dotenv, load_dotenv

from ..escrow import (
    Clock,
    EscrowLedger,
    FundsTransfer,
    LedgerPolicy,
    LedgerRegistry,
    Order,
    compute_order_receipt,
    format_apt,
    normalize_account,
    parse_apt,
)

# Default marketplace deployment on Aptos testnet
DEFAULT_MARKETPLACE_ADDRESS = (
    "0xaba3b69b006249fa70a1d34f2de400e3419705ffb0b7db0831c714a7378379d7"
)


class LedgerPolicyConfig(TypedDict, total=False):
    """Order validation policy."""

    require_positive_amount: bool
    """Reject zero-amount orders. Default: True"""

    allow_self_dealing: bool
    """Allow buyer == seller. Default: False"""


class MarketplaceConfig(TypedDict, total=False):
    """Configuration for the marketplace facade."""

    marketplace_address: str
    """Deployment address of the ledger. Default: testnet deployment"""

    default_timeline_hours: int
    """Timeline used when an order does not specify one. Default: 24"""

    min_timeline_hours: int
    """Shortest timeline accepted from the order form. Default: 1"""

    max_timeline_hours: int
    """Longest timeline accepted from the order form. Default: 8760 (1 year)"""

    policy: LedgerPolicyConfig
    """Validation policy applied when the ledger is initialized"""


@dataclass
class ResolvedMarketplaceConfig:
    """Resolved marketplace configuration with all defaults applied."""

    marketplace_address: str
    default_timeline_hours: int
    min_timeline_hours: int
    max_timeline_hours: int
    policy: LedgerPolicy


@dataclass
class OrderSummary:
    """Display-ready view of an order."""

    order_id: int
    buyer: str
    seller: str
    product_name: str
    amount: int
    """Amount in octas."""

    amount_apt: str
    """Amount formatted in APT (e.g., "1.5")."""

    status: str
    """Status label: "pending", "delivered" or "refunded"."""

    refund_deadline: int

    @classmethod
    def from_order(cls, order: Order) -> "OrderSummary":
        return cls(
            order_id=order.order_id,
            buyer=order.buyer,
            seller=order.seller,
            product_name=order.product_name,
            amount=order.amount,
            amount_apt=format_apt(order.amount),
            status=order.status.label,
            refund_deadline=order.refund_deadline,
        )


def resolve_config(
    config: Optional[MarketplaceConfig] = None,
) -> ResolvedMarketplaceConfig:
    """Apply defaults to a marketplace config.

    Raises:
        ValueError: If the address is invalid or the timeline bounds are inconsistent
    """
    config = config or {}
    policy_config = config.get("policy", {})

    resolved = ResolvedMarketplaceConfig(
        marketplace_address=normalize_account(
            config.get("marketplace_address", DEFAULT_MARKETPLACE_ADDRESS)
        ),
        default_timeline_hours=config.get("default_timeline_hours", 24),
        min_timeline_hours=config.get("min_timeline_hours", 1),
        max_timeline_hours=config.get("max_timeline_hours", 8760),
        policy=LedgerPolicy(
            require_positive_amount=policy_config.get("require_positive_amount", True),
            allow_self_dealing=policy_config.get("allow_self_dealing", False),
        ),
    )

    if resolved.min_timeline_hours < 0:
        raise ValueError(
            f"min_timeline_hours must be >= 0, got {resolved.min_timeline_hours}"
        )
    if resolved.min_timeline_hours > resolved.max_timeline_hours:
        raise ValueError(
            f"min_timeline_hours ({resolved.min_timeline_hours}) exceeds "
            f"max_timeline_hours ({resolved.max_timeline_hours})"
        )
    if not (
        resolved.min_timeline_hours
        <= resolved.default_timeline_hours
        <= resolved.max_timeline_hours
    ):
        raise ValueError(
            f"default_timeline_hours ({resolved.default_timeline_hours}) outside "
            f"[{resolved.min_timeline_hours}, {resolved.max_timeline_hours}]"
        )
    return resolved


def _env_int(name: str) -> Optional[int]:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _env_bool(name: str) -> Optional[bool]:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return None
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


def load_config_from_env(
    prefix: str = "ESCROW_", dotenv_path: Optional[str] = None
) -> MarketplaceConfig:
    """Build a marketplace config from environment variables.

    Without ``dotenv_path`` the .env file is searched from the current
    working directory upwards. Variables already set in the environment
    win over the .env file.

    Reads:
        {prefix}MARKETPLACE_ADDRESS, {prefix}DEFAULT_TIMELINE_HOURS,
        {prefix}MIN_TIMELINE_HOURS, {prefix}MAX_TIMELINE_HOURS,
        {prefix}ALLOW_SELF_DEALING, {prefix}REQUIRE_POSITIVE_AMOUNT

    Raises:
        ValueError: If a variable cannot be parsed
    """
    load_dotenv(dotenv_path or find_dotenv(usecwd=True))

    config: MarketplaceConfig = {}
    address = os.environ.get(f"{prefix}MARKETPLACE_ADDRESS")
    if address:
        config["marketplace_address"] = address

    for key in ("default_timeline_hours", "min_timeline_hours", "max_timeline_hours"):
        value = _env_int(f"{prefix}{key.upper()}")
        if value is not None:
            config[key] = value

    policy: LedgerPolicyConfig = {}
    for key in ("allow_self_dealing", "require_positive_amount"):
        flag = _env_bool(f"{prefix}{key.upper()}")
        if flag is not None:
            policy[key] = flag
    if policy:
        config["policy"] = policy

    return config


class EscrowMarketplace:
    """Escrow marketplace bound to one deployment address.

    Example:
        ```python
        marketplace = EscrowMarketplace(
            {"marketplace_address": "0xa11ce", "default_timeline_hours": 48},
            funds=InMemoryFunds({"0xb0b": parse_apt("5")}),
            clock=SystemClock(),
        )
        marketplace.initialize()

        order_id = marketplace.create_order(
            buyer="0xb0b",
            seller="0x5e11",
            product_name="Test Product",
            amount_apt="1.25",
        )

        for summary in marketplace.get_user_orders("0xb0b"):
            print(summary.order_id, summary.amount_apt, summary.status)
        ```
    """

    def __init__(
        self,
        config: Optional[MarketplaceConfig] = None,
        *,
        funds: Optional[FundsTransfer] = None,
        clock: Optional[Clock] = None,
        registry: Optional[LedgerRegistry] = None,
    ):
        """Initialize the marketplace facade.

        Args:
            config: Optional configuration for the marketplace
            funds: Coin store moved by the ledger
            clock: Time source for deadlines
            registry: Share an existing registry instead of funds + clock

        Raises:
            ValueError: If neither a registry nor funds and clock are given
        """
        self._config = resolve_config(config)

        if registry is None:
            if funds is None or clock is None:
                raise ValueError("Provide a registry, or both funds and clock")
            registry = LedgerRegistry(funds, clock, self._config.policy)
        self._registry = registry

    @property
    def address(self) -> str:
        return self._config.marketplace_address

    @property
    def registry(self) -> LedgerRegistry:
        return self._registry

    def get_config(self) -> ResolvedMarketplaceConfig:
        """Get the marketplace configuration."""
        return self._config

    def initialize(self) -> EscrowLedger:
        """Create the ledger at the configured address (no-op if it exists)."""
        return self._registry.initialize(self.address, self._config.policy)

    def is_initialized(self) -> bool:
        return self._registry.is_initialized(self.address)

    @property
    def ledger(self) -> EscrowLedger:
        """Ledger at the configured address.

        Raises:
            NotInitialized: If initialize() has not been called
        """
        return self._registry.get(self.address)

    def create_order(
        self,
        buyer: str,
        seller: str,
        product_name: str,
        amount_apt: Union[str, int, float, Decimal],
        timeline_hours: Optional[int] = None,
    ) -> int:
        """Escrow an APT amount for a product.

        Args:
            buyer: Connected account paying for the order
            seller: Seller address
            product_name: Product name
            amount_apt: Amount in APT (converted to octas, rounding down)
            timeline_hours: Hours before refund; defaults to the configured value

        Returns:
            The new order ID

        Raises:
            ValueError: If a form field is missing or out of bounds
            EscrowError: If the ledger rejects the order
        """
        if not seller or amount_apt is None or amount_apt == "" or not product_name:
            raise ValueError("seller, amount and product_name are required")

        if timeline_hours is None:
            timeline_hours = self._config.default_timeline_hours
        if isinstance(timeline_hours, bool):
            raise ValueError(f"Invalid timeline: {timeline_hours!r}")
        try:
            timeline_hours = int(str(timeline_hours).strip())
        except ValueError:
            raise ValueError(f"Invalid timeline: {timeline_hours!r}. Must be whole hours")
        if not (
            self._config.min_timeline_hours
            <= timeline_hours
            <= self._config.max_timeline_hours
        ):
            raise ValueError(
                f"Invalid timeline: {timeline_hours}h. Must be between "
                f"{self._config.min_timeline_hours}h and {self._config.max_timeline_hours}h"
            )

        amount = parse_apt(amount_apt)
        return self.ledger.create_order(
            buyer=buyer,
            seller=seller,
            product_name=product_name,
            amount=amount,
            timeline_hours=timeline_hours,
        )

    def confirm_product_received(self, caller: str, order_id: int) -> OrderSummary:
        """Release escrow to the seller. Only the buyer can do this."""
        return OrderSummary.from_order(
            self.ledger.confirm_product_received(caller, order_id)
        )

    def process_refund(self, caller: str, order_id: int) -> OrderSummary:
        """Refund the buyer once the timeline expired. Anyone can trigger this."""
        return OrderSummary.from_order(self.ledger.process_refund(caller, order_id))

    def get_order(self, order_id: int) -> OrderSummary:
        return OrderSummary.from_order(self.ledger.get_order(order_id))

    def get_user_orders(self, user: str) -> List[OrderSummary]:
        """Orders where the user is buyer or seller, oldest first."""
        return [OrderSummary.from_order(o) for o in self.ledger.get_user_orders(user)]

    def get_escrow_balance(self) -> int:
        """Escrow pool in octas."""
        return self.ledger.get_escrow_balance()

    def get_escrow_balance_apt(self) -> str:
        return format_apt(self.get_escrow_balance())

    def receipt(self, order_id: int) -> str:
        """Receipt hash of the current state of an order."""
        return compute_order_receipt(self.address, self.ledger.get_order(order_id))


__all__ = [
    "EscrowMarketplace",
    "MarketplaceConfig",
    "LedgerPolicyConfig",
    "ResolvedMarketplaceConfig",
    "OrderSummary",
    "DEFAULT_MARKETPLACE_ADDRESS",
    "resolve_config",
    "load_config_from_env",
]
