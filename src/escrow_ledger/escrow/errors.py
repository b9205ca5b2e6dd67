"""
Error types for the escrow ledger.

Every rejection is local to the requested operation: the ledger state is left
untouched and the error is raised synchronously to the caller.

Hierarchy
---------
EscrowError
 ├─ NotInitialized       : no ledger exists at the deployment address
 ├─ OrderNotFound        : unknown order id
 ├─ NotBuyer             : confirmation attempted by someone other than the buyer
 ├─ InvalidStatus        : order already delivered or refunded
 ├─ TimelineNotExpired   : refund requested before the deadline
 ├─ InsufficientFunds    : buyer cannot cover the order amount
 ├─ InvalidOrder         : malformed arguments (address, amount, timeline)
 └─ LedgerInvariantError : internal consistency check failed
"""

from typing import Optional


class EscrowError(Exception):
    """Base class for escrow ledger errors."""

    code: str = "EscrowError"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.code)
        self.message = message or self.code

    def __str__(self) -> str:
        return self.message


class NotInitialized(EscrowError):
    code: str = "NotInitialized"

    def __init__(self, address: str) -> None:
        super().__init__(f"no escrow ledger initialized at {address}")
        self.address = address


class OrderNotFound(EscrowError):
    code: str = "OrderNotFound"

    def __init__(self, order_id: int) -> None:
        super().__init__(f"order {order_id} not found")
        self.order_id = order_id


class NotBuyer(EscrowError):
    """Only the buyer of an order may confirm delivery."""

    code: str = "NotBuyer"

    def __init__(self, order_id: int, caller: str) -> None:
        super().__init__(f"{caller} is not the buyer of order {order_id}")
        self.order_id = order_id
        self.caller = caller


class InvalidStatus(EscrowError):
    """The order is no longer pending."""

    code: str = "InvalidStatus"

    def __init__(self, order_id: int, status: int) -> None:
        super().__init__(f"order {order_id} is not pending (status={int(status)})")
        self.order_id = order_id
        self.status = status


class TimelineNotExpired(EscrowError):
    code: str = "TimelineNotExpired"

    def __init__(self, order_id: int, deadline: int, now: int) -> None:
        super().__init__(
            f"order {order_id} refundable at {deadline}, now {now} "
            f"({deadline - now}s remaining)"
        )
        self.order_id = order_id
        self.deadline = deadline
        self.now = now


class InsufficientFunds(EscrowError):
    code: str = "InsufficientFunds"

    def __init__(
        self,
        account: str,
        required: int,
        available: Optional[int] = None,
    ) -> None:
        if available is not None:
            details = f" (required={required}, available={available})"
        else:
            details = f" (required={required})"
        super().__init__(f"insufficient funds for {account}{details}")
        self.account = account
        self.required = required
        self.available = available


class InvalidOrder(EscrowError):
    """Order arguments failed validation before any state was touched."""

    code: str = "InvalidOrder"


class LedgerInvariantError(EscrowError):
    """Escrow pool or order flags disagree with the stored orders."""

    code: str = "LedgerInvariantError"
