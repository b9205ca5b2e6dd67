"""Utility functions for the Escrow Ledger."""

from decimal import ROUND_FLOOR, Decimal, InvalidOperation
from typing import Union

from eth_utils import add_0x_prefix, is_hexstr, remove_0x_prefix

from .types import SECONDS_PER_HOUR, OrderStatus

# 1 APT = 10^8 octas
OCTAS_PER_APT = 100_000_000

# Account addresses are 32 bytes
ADDRESS_LENGTH = 32

# Largest value of a u64 field
U64_MAX = 2**64 - 1

# Zero address
ZERO_ADDRESS = "0x" + "00" * ADDRESS_LENGTH


def normalize_account(account: str) -> str:
    """Normalize an account identifier to its long form.

    Short addresses are left-padded with zeros, so "0x1" and
    "0x000...001" name the same account.

    Args:
        account: Hex address, with or without 0x prefix (up to 32 bytes)

    Returns:
        Lowercase 0x-prefixed 64 hex character address

    Raises:
        ValueError: If the value is not a hex string of at most 32 bytes
    """
    if not isinstance(account, str) or not account.strip():
        raise ValueError(f"Invalid account: {account!r}")

    value = account.strip()
    body = remove_0x_prefix(value)
    if not body or not is_hexstr(add_0x_prefix(body)):
        raise ValueError(f"Invalid account: {account!r}")
    if len(body) > ADDRESS_LENGTH * 2:
        raise ValueError(f"Invalid account: {account!r} longer than {ADDRESS_LENGTH} bytes")

    return add_0x_prefix(body.lower().rjust(ADDRESS_LENGTH * 2, "0"))


def format_apt(amount: int) -> str:
    """Format an octa amount to a human readable APT string.

    Args:
        amount: Amount in octas (e.g., 150000000 = 1.5 APT)

    Returns:
        Human readable string (e.g., "1.5")
    """
    whole, frac = divmod(amount, OCTAS_PER_APT)
    if not frac:
        return str(whole)
    return f"{whole}.{frac:08d}".rstrip("0")


def parse_apt(amount: Union[str, int, float, Decimal]) -> int:
    """Parse a human readable APT amount to octas, rounding down.

    Args:
        amount: Human readable amount (e.g., "1.5" or 1.5)

    Returns:
        Amount in octas (e.g., 150000000)

    Raises:
        ValueError: If the amount is not a number or is negative
    """
    try:
        value = Decimal(str(amount).strip())
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {amount!r}")
    if not value.is_finite():
        raise ValueError(f"Invalid amount: {amount!r}")
    if value < 0:
        raise ValueError(f"Invalid amount: {amount!r}. Must not be negative")
    return int((value * OCTAS_PER_APT).to_integral_value(rounding=ROUND_FLOOR))


def hours_to_seconds(hours: int) -> int:
    """Convert a timeline in hours to seconds."""
    return hours * SECONDS_PER_HOUR


def status_label(status: int) -> str:
    """Display name for a status code ("unknown" for unrecognized codes)."""
    try:
        return OrderStatus(status).label
    except ValueError:
        return "unknown"


def shorten_address(address: str) -> str:
    """Shorten an address for display (e.g., "0x1234...abcd")."""
    if len(address) <= 10:
        return address
    return f"{address[:6]}...{address[-4:]}"
