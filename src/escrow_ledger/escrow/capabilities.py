"""Capabilities consumed by the escrow ledger.

The ledger never moves coins or reads the time on its own. It is handed:
- a FundsTransfer (balance query, atomic debit and credit of an account)
- a Clock (non-decreasing unix time in seconds)

In-memory implementations are provided for tests, demos and embedding.
"""

import threading
import time
from typing import Dict, Optional, Protocol

from .errors import InsufficientFunds
from .types import SECONDS_PER_HOUR
from .utils import normalize_account


class FundsTransfer(Protocol):
    """Protocol for the coin store backing the ledger."""

    def balance(self, account: str) -> int:
        """Get the transferable balance of an account."""
        ...

    def debit(self, account: str, amount: int) -> None:
        """Withdraw ``amount`` from an account, all-or-nothing.

        Raises:
            InsufficientFunds: If the account balance is below ``amount``
        """
        ...

    def credit(self, account: str, amount: int) -> None:
        """Deposit ``amount`` into an account."""
        ...


class Clock(Protocol):
    """Protocol for a source of non-decreasing time."""

    def now(self) -> int:
        """Current unix time in seconds."""
        ...


class InMemoryFunds:
    """Thread-safe account balances held in a dict.

    Accounts are normalized on every call, so short and long address forms
    refer to the same balance.
    """

    def __init__(self, balances: Optional[Dict[str, int]] = None):
        self._lock = threading.Lock()
        self._balances: Dict[str, int] = {}
        for account, amount in (balances or {}).items():
            self.mint(account, amount)

    def balance(self, account: str) -> int:
        key = normalize_account(account)
        with self._lock:
            return self._balances.get(key, 0)

    def debit(self, account: str, amount: int) -> None:
        _check_amount(amount)
        key = normalize_account(account)
        with self._lock:
            available = self._balances.get(key, 0)
            if available < amount:
                raise InsufficientFunds(key, amount, available)
            self._balances[key] = available - amount

    def credit(self, account: str, amount: int) -> None:
        _check_amount(amount)
        key = normalize_account(account)
        with self._lock:
            self._balances[key] = self._balances.get(key, 0) + amount

    def mint(self, account: str, amount: int) -> None:
        """Create ``amount`` out of thin air for an account (test funding)."""
        self.credit(account, amount)

    def balances(self) -> Dict[str, int]:
        """Snapshot of all non-zero balances."""
        with self._lock:
            return {k: v for k, v in self._balances.items() if v}

    def total_supply(self) -> int:
        with self._lock:
            return sum(self._balances.values())


def _check_amount(amount: int) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
        raise ValueError(f"Invalid amount: {amount!r}. Must be a non-negative int")


class SystemClock:
    """Wall clock time, truncated to whole seconds."""

    def now(self) -> int:
        return int(time.time())


class ManualClock:
    """Clock that only moves when told to. Never goes backwards."""

    def __init__(self, start: Optional[int] = None):
        self._now = int(time.time()) if start is None else start
        self._lock = threading.Lock()

    def now(self) -> int:
        with self._lock:
            return self._now

    def advance(self, seconds: int) -> int:
        """Move the clock forward and return the new time."""
        if seconds < 0:
            raise ValueError(f"Cannot move clock backwards by {seconds}s")
        with self._lock:
            self._now += seconds
            return self._now

    def advance_hours(self, hours: int) -> int:
        return self.advance(hours * SECONDS_PER_HOUR)

    def set(self, timestamp: int) -> None:
        with self._lock:
            if timestamp < self._now:
                raise ValueError(
                    f"Clock is non-decreasing: {timestamp} is before {self._now}"
                )
            self._now = timestamp
