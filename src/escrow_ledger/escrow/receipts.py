"""Order receipts for the Escrow Ledger.

A receipt is a deterministic hash of an order snapshot that provides:
- Cross-deployment separation (via the ledger address)
- Change detection (any field or status transition yields a new receipt)
"""

from eth_abi import encode
from eth_utils import decode_hex, keccak

from .types import Order
from .utils import normalize_account

RECEIPT_TYPES = [
    "bytes32",  # ledger address
    "uint64",  # order_id
    "bytes32",  # buyer
    "bytes32",  # seller
    "string",  # product_name
    "uint64",  # amount
    "uint8",  # status
    "uint64",  # created_at
    "uint64",  # timeline_hours
    "bool",  # escrow_released
]


def compute_order_receipt(ledger_address: str, order: Order) -> str:
    """Compute the receipt hash of an order snapshot.

    Args:
        ledger_address: Deployment address of the ledger holding the order
        order: Order snapshot

    Returns:
        bytes32 hex string receipt

    Raises:
        ValueError: If the ledger address is invalid
    """
    encoded = encode(
        RECEIPT_TYPES,
        [
            decode_hex(normalize_account(ledger_address)),
            order.order_id,
            decode_hex(order.buyer),
            decode_hex(order.seller),
            order.product_name,
            order.amount,
            int(order.status),
            order.created_at,
            order.timeline_hours,
            order.escrow_released,
        ],
    )

    return "0x" + keccak(encoded).hex()


def verify_order_receipt(receipt: str, ledger_address: str, order: Order) -> bool:
    """Verify a receipt matches the given order snapshot.

    Args:
        receipt: The receipt to verify
        ledger_address: Deployment address of the ledger
        order: Order snapshot to check against

    Returns:
        True if the receipt matches, False otherwise
    """
    try:
        reconstructed = compute_order_receipt(ledger_address, order)
        return reconstructed.lower() == receipt.lower()
    except Exception:
        return False
