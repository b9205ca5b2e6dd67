"""Escrow Marketplace Example.

This example walks through both order outcomes against an in-memory
coin store and a manual clock:
- Buyer confirms delivery, funds go to the seller
- Timeline expires, anyone triggers the refund back to the buyer

Prerequisites:
1. pip install escrow-ledger-sdk
2. Optionally set ESCROW_* environment variables (or a .env file)

Usage:
    python marketplace_demo.py
"""

import logging

from escrow_ledger import (
    EscrowError,
    EscrowMarketplace,
    InMemoryFunds,
    ManualClock,
    format_apt,
    load_config_from_env,
    parse_apt,
)
from escrow_ledger.escrow import shorten_address

BUYER = "0xb0b"
SELLER = "0x5e11"
KEEPER = "0xc4a"


def print_orders(marketplace: EscrowMarketplace, user: str) -> None:
    for summary in marketplace.get_user_orders(user):
        print(
            f"    #{summary.order_id} {summary.product_name!r}: "
            f"{summary.amount_apt} APT "
            f"{shorten_address(summary.buyer)} -> {shorten_address(summary.seller)} "
            f"[{summary.status.upper()}]"
        )


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    funds = InMemoryFunds({BUYER: parse_apt("10")})
    clock = ManualClock()
    marketplace = EscrowMarketplace(load_config_from_env(), funds=funds, clock=clock)

    print("=" * 60)
    print("  ESCROW MARKETPLACE")
    print("=" * 60)
    print(f"  Deployment: {shorten_address(marketplace.address)}")

    marketplace.initialize()

    print("\n[1] Buyer escrows 2.5 APT for a delivered product...")
    delivered = marketplace.create_order(BUYER, SELLER, "Mechanical Keyboard", "2.5", 24)
    print(f"    Escrow pool: {marketplace.get_escrow_balance_apt()} APT")

    print("\n[2] Seller tries to release the funds...")
    try:
        marketplace.confirm_product_received(SELLER, delivered)
    except EscrowError as e:
        print(f"    Rejected: {e.code} ({e})")

    print("\n[3] Buyer confirms the product was received...")
    marketplace.confirm_product_received(BUYER, delivered)
    print(f"    Seller balance: {format_apt(funds.balance(SELLER))} APT")

    print("\n[4] Buyer escrows 1 APT for a product that never arrives...")
    stalled = marketplace.create_order(BUYER, SELLER, "Vintage Lamp", "1", 1)
    try:
        marketplace.process_refund(KEEPER, stalled)
    except EscrowError as e:
        print(f"    Early refund rejected: {e.code}")

    clock.advance_hours(1)
    print("\n[5] One hour later, a keeper triggers the refund...")
    marketplace.process_refund(KEEPER, stalled)
    print(f"    Buyer balance: {format_apt(funds.balance(BUYER))} APT")
    print(f"    Escrow pool: {marketplace.get_escrow_balance_apt()} APT")

    print("\n[6] Buyer order history:")
    print_orders(marketplace, BUYER)
    print(f"\n    Receipt #{stalled}: {marketplace.receipt(stalled)[:20]}...")


if __name__ == "__main__":
    main()
