"""Escrow Ledger state machine.

Holds the orders of one marketplace deployment together with the pooled
escrow balance, and moves funds through the injected FundsTransfer:

    create_order              buyer  -> pool     (Pending)
    confirm_product_received  pool   -> seller   (Pending -> Delivered, buyer only)
    process_refund            pool   -> buyer    (Pending -> Refunded, anyone, after deadline)

Each mutation runs under a single lock: validation, the transfer and the
state update form one indivisible step. Funds move before the ledger state
changes, so a failing transfer leaves the ledger untouched. Orders are
immutable values; a transition swaps in a new Order, so readers never see
a half-updated one.
"""

import logging
import threading
from dataclasses import replace
from typing import Dict, List, Union

from .capabilities import Clock, FundsTransfer
from .errors import (
    EscrowError,
    InsufficientFunds,
    InvalidOrder,
    InvalidStatus,
    LedgerInvariantError,
    NotBuyer,
    OrderNotFound,
    TimelineNotExpired,
)
from .types import LedgerPolicy, Order, OrderStatus
from .utils import U64_MAX, normalize_account

logger = logging.getLogger(__name__)


class EscrowLedger:
    """Escrow ledger for a single deployment address.

    Use LedgerRegistry.initialize() to obtain one; constructing it directly
    is fine for embedding and tests.

    Example:
        ```python
        funds = InMemoryFunds({"0xb0b": 1000})
        ledger = EscrowLedger("0xa11ce", funds, ManualClock(start=0))

        order_id = ledger.create_order("0xb0b", "0x5e11", "Book", 100, 24)
        ledger.confirm_product_received("0xb0b", order_id)
        ```
    """

    def __init__(
        self,
        address: str,
        funds: FundsTransfer,
        clock: Clock,
        policy: LedgerPolicy = LedgerPolicy(),
    ):
        self.address = normalize_account(address)
        self.policy = policy
        self._funds = funds
        self._clock = clock
        self._lock = threading.RLock()

        self._orders: Dict[int, Order] = {}
        self._next_order_id = 1
        self._escrow_pool = 0

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_order(
        self,
        buyer: str,
        seller: str,
        product_name: Union[str, bytes],
        amount: int,
        timeline_hours: int,
    ) -> int:
        """Escrow ``amount`` from the buyer and open a pending order.

        Args:
            buyer: Caller identity; pays for the order
            seller: Account paid on confirmation
            product_name: Product description (str, or UTF-8 bytes)
            amount: Amount in octas
            timeline_hours: Hours until a refund may be triggered

        Returns:
            The new order ID

        Raises:
            InvalidOrder: If any argument fails validation
            InsufficientFunds: If the buyer cannot cover ``amount``
        """
        buyer = self._account(buyer, "buyer")
        seller = self._account(seller, "seller")
        name = self._product_name(product_name)
        amount = self._u64(amount, "amount")
        timeline_hours = self._u64(timeline_hours, "timeline_hours")

        if self.policy.require_positive_amount and amount == 0:
            raise self._reject(InvalidOrder("amount must be > 0"))
        if not self.policy.allow_self_dealing and buyer == seller:
            raise self._reject(InvalidOrder("buyer and seller must differ"))

        with self._lock:
            available = self._funds.balance(buyer)
            if available < amount:
                raise self._reject(InsufficientFunds(buyer, amount, available))

            created_at = self._clock.now()
            self._funds.debit(buyer, amount)

            order_id = self._next_order_id
            self._orders[order_id] = Order(
                order_id=order_id,
                buyer=buyer,
                seller=seller,
                product_name=name,
                amount=amount,
                status=OrderStatus.PENDING,
                created_at=created_at,
                timeline_hours=timeline_hours,
                escrow_released=False,
            )
            self._next_order_id += 1
            self._escrow_pool += amount

        logger.info(
            "order %d created on %s: buyer=%s seller=%s amount=%d timeline=%dh",
            order_id, self.address, buyer, seller, amount, timeline_hours,
        )
        return order_id

    def confirm_product_received(self, caller: str, order_id: int) -> Order:
        """Release an order's funds to the seller. Buyer only.

        Raises:
            OrderNotFound: If the order does not exist
            NotBuyer: If ``caller`` is not the order's buyer
            InvalidStatus: If the order is not pending
        """
        caller = self._account(caller, "caller")

        with self._lock:
            order = self._require_order(order_id)
            if caller != order.buyer:
                raise self._reject(NotBuyer(order.order_id, caller))
            if not order.is_pending:
                raise self._reject(InvalidStatus(order.order_id, order.status))

            self._funds.credit(order.seller, order.amount)
            updated = self._release(order, OrderStatus.DELIVERED)

        logger.info(
            "order %d delivered on %s: %d released to seller %s",
            updated.order_id, self.address, updated.amount, updated.seller,
        )
        return updated

    def process_refund(self, caller: str, order_id: int) -> Order:
        """Return an expired order's funds to the buyer. Anyone may call.

        Any well-formed account may trigger the refund; ``caller`` is only
        validated and recorded in the log.

        Raises:
            InvalidOrder: If ``caller`` is not a valid account address
            OrderNotFound: If the order does not exist
            InvalidStatus: If the order is not pending
            TimelineNotExpired: If the refund deadline has not been reached
        """
        caller = self._account(caller, "caller")

        with self._lock:
            order = self._require_order(order_id)
            if not order.is_pending:
                raise self._reject(InvalidStatus(order.order_id, order.status))

            now = self._clock.now()
            if now < order.refund_deadline:
                raise self._reject(
                    TimelineNotExpired(order.order_id, order.refund_deadline, now)
                )

            self._funds.credit(order.buyer, order.amount)
            updated = self._release(order, OrderStatus.REFUNDED)

        logger.info(
            "order %d refunded on %s by %s: %d returned to buyer %s",
            updated.order_id, self.address, caller, updated.amount, updated.buyer,
        )
        return updated

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: int) -> Order:
        with self._lock:
            return self._require_order(order_id)

    def get_all_orders(self) -> List[Order]:
        """All orders in creation order."""
        with self._lock:
            return list(self._orders.values())

    def get_user_orders(self, user: str) -> List[Order]:
        """Orders where ``user`` is the buyer or the seller, in creation order."""
        user = self._account(user, "user")
        with self._lock:
            return [
                order
                for order in self._orders.values()
                if order.buyer == user or order.seller == user
            ]

    def get_escrow_balance(self) -> int:
        with self._lock:
            return self._escrow_pool

    @property
    def next_order_id(self) -> int:
        with self._lock:
            return self._next_order_id

    @property
    def order_count(self) -> int:
        with self._lock:
            return len(self._orders)

    def check_invariants(self) -> None:
        """Verify pool and order flags against the stored orders.

        Raises:
            LedgerInvariantError: If the ledger is inconsistent
        """
        with self._lock:
            pending = sum(o.amount for o in self._orders.values() if o.is_pending)
            if pending != self._escrow_pool:
                raise LedgerInvariantError(
                    f"escrow pool {self._escrow_pool} != pending total {pending}"
                )
            for order in self._orders.values():
                if order.escrow_released != order.status.is_terminal:
                    raise LedgerInvariantError(
                        f"order {order.order_id} escrow_released="
                        f"{order.escrow_released} with status {order.status.label}"
                    )
            if self._orders and max(self._orders) >= self._next_order_id:
                raise LedgerInvariantError(
                    f"next_order_id {self._next_order_id} already assigned"
                )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _release(self, order: Order, status: OrderStatus) -> Order:
        # caller holds the lock and has already moved the funds
        updated = replace(order, status=status, escrow_released=True)
        self._orders[order.order_id] = updated
        self._escrow_pool -= order.amount
        return updated

    def _require_order(self, order_id: int) -> Order:
        order = None
        if isinstance(order_id, int) and not isinstance(order_id, bool):
            order = self._orders.get(order_id)
        if order is None:
            raise self._reject(OrderNotFound(order_id))
        return order

    def _reject(self, error: EscrowError) -> EscrowError:
        logger.debug("rejected on %s: %s %s", self.address, error.code, error.message)
        return error

    def _account(self, value: str, name: str) -> str:
        try:
            return normalize_account(value)
        except ValueError:
            raise self._reject(InvalidOrder(f"Invalid {name} address: {value!r}"))

    def _u64(self, value: int, name: str) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise self._reject(InvalidOrder(f"{name} must be an int, got {value!r}"))
        if value < 0 or value > U64_MAX:
            raise self._reject(InvalidOrder(f"{name} out of u64 range: {value}"))
        return value

    def _product_name(self, value: Union[str, bytes]) -> str:
        if isinstance(value, (bytes, bytearray)):
            try:
                return bytes(value).decode("utf-8")
            except UnicodeDecodeError:
                raise self._reject(InvalidOrder("product_name is not valid UTF-8"))
        if not isinstance(value, str):
            raise self._reject(InvalidOrder(f"product_name must be text, got {value!r}"))
        return value
