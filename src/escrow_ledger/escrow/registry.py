"""Ledger registry: one EscrowLedger per deployment address."""

import logging
import threading
from typing import Dict, List, Optional

from .capabilities import Clock, FundsTransfer
from .errors import NotInitialized
from .ledger import EscrowLedger
from .types import LedgerPolicy
from .utils import normalize_account

logger = logging.getLogger(__name__)


class LedgerRegistry:
    """Holds the ledgers of every deployment sharing a funds store and clock.

    Example:
        ```python
        registry = LedgerRegistry(InMemoryFunds(), SystemClock())
        registry.initialize("0xa11ce")  # creates
        registry.initialize("0xa11ce")  # no-op, same ledger returned
        ledger = registry.get("0xa11ce")
        ```
    """

    def __init__(
        self,
        funds: FundsTransfer,
        clock: Clock,
        policy: Optional[LedgerPolicy] = None,
    ):
        self._funds = funds
        self._clock = clock
        self._policy = policy or LedgerPolicy()
        self._lock = threading.Lock()
        self._ledgers: Dict[str, EscrowLedger] = {}

    def initialize(
        self, address: str, policy: Optional[LedgerPolicy] = None
    ) -> EscrowLedger:
        """Create the ledger at ``address`` unless one already exists.

        Repeat calls return the existing ledger unchanged; ``policy`` only
        applies when the ledger is first created.

        Raises:
            ValueError: If the address is invalid
        """
        key = normalize_account(address)
        with self._lock:
            ledger = self._ledgers.get(key)
            if ledger is not None:
                logger.debug("ledger at %s already initialized", key)
                return ledger
            ledger = EscrowLedger(key, self._funds, self._clock, policy or self._policy)
            self._ledgers[key] = ledger

        logger.info("escrow ledger initialized at %s", key)
        return ledger

    def get(self, address: str) -> EscrowLedger:
        """Get the ledger at ``address``.

        Raises:
            NotInitialized: If initialize() was never called for the address
        """
        key = normalize_account(address)
        with self._lock:
            ledger = self._ledgers.get(key)
        if ledger is None:
            raise NotInitialized(key)
        return ledger

    def is_initialized(self, address: str) -> bool:
        key = normalize_account(address)
        with self._lock:
            return key in self._ledgers

    def addresses(self) -> List[str]:
        with self._lock:
            return list(self._ledgers)
