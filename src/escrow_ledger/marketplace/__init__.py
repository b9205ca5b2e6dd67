"""Marketplace facade for the Escrow Ledger."""

from .client import (
    EscrowMarketplace,
    MarketplaceConfig,
    LedgerPolicyConfig,
    ResolvedMarketplaceConfig,
    OrderSummary,
    DEFAULT_MARKETPLACE_ADDRESS,
    resolve_config,
    load_config_from_env,
)

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
