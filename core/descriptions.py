"""
Line-item descriptions for ledger entries.

Two variants are provided:
- rich_description: used for data sent to FreeAgent. Adds the most
  meaningful reference and a status note for unsettled funds.
- display_description: a cheaper label for on-screen previews.
"""
from typing import Dict, List, Optional

from core.schema import RawTransaction, Reference, ReferenceType, TransactionStatus, TransactionType

# FreeAgent rejects statement descriptions longer than this
MAX_DESCRIPTION_LENGTH = 255

NO_MEMO_SENTINEL = "No description"
NO_SALES_RECORD_SENTINEL = "0"

TRANSACTION_TYPE_LABELS: Dict[TransactionType, str] = {
    TransactionType.SALE: "Sale",
    TransactionType.REFUND: "Refund",
    TransactionType.WITHDRAWAL: "Payout/Withdrawal",
    TransactionType.NON_SALE_CHARGE: "Fee/Charge",
    TransactionType.DISPUTE: "Dispute",
    TransactionType.TRANSFER: "Transfer",
    TransactionType.ADJUSTMENT: "Adjustment",
    TransactionType.CREDIT: "Credit",
    TransactionType.DEBIT: "Debit",
}

TRANSACTION_STATUS_LABELS: Dict[TransactionStatus, str] = {
    TransactionStatus.FUNDS_PROCESSING: "Processing",
    TransactionStatus.FUNDS_ON_HOLD: "On Hold",
    TransactionStatus.FUNDS_AVAILABLE_FOR_PAYOUT: "Ready for Payout",
    TransactionStatus.PAYOUT_INITIATED: "Payout Initiated",
    TransactionStatus.COMPLETED: "Completed",
}

# COMPLETED has a label above but is intentionally not annotated
STATUSES_NEEDING_INFO = frozenset({
    TransactionStatus.FUNDS_PROCESSING,
    TransactionStatus.FUNDS_ON_HOLD,
    TransactionStatus.FUNDS_AVAILABLE_FOR_PAYOUT,
    TransactionStatus.PAYOUT_INITIATED,
})

REFERENCE_PRIORITY_ORDER: List[ReferenceType] = [
    ReferenceType.ORDER_ID,
    ReferenceType.ITEM_ID,
    ReferenceType.PAYOUT_ID,
    ReferenceType.TRANSACTION_ID,
    ReferenceType.INVOICE_ID,
]

REFERENCE_LABELS: Dict[ReferenceType, str] = {
    ReferenceType.ORDER_ID: "Order",
    ReferenceType.ITEM_ID: "Item",
    ReferenceType.PAYOUT_ID: "Payout",
    ReferenceType.TRANSACTION_ID: "Transaction",
    ReferenceType.INVOICE_ID: "Invoice",
    ReferenceType.DISPUTE_ID: "Dispute",
}

_UNLISTED_PRIORITY = len(REFERENCE_PRIORITY_ORDER)


def format_transaction_type(transaction_type: Optional[str]) -> str:
    """Human label for a transaction type; unknown types pass through unchanged."""
    txn_type = TransactionType.parse(transaction_type)
    if txn_type is None:
        return transaction_type or ""
    return TRANSACTION_TYPE_LABELS[txn_type]


def format_transaction_status(transaction_status: Optional[str]) -> str:
    """Human label for a funds status; unknown statuses pass through unchanged."""
    status = TransactionStatus.parse(transaction_status)
    if status is None:
        return transaction_status or ""
    return TRANSACTION_STATUS_LABELS[status]


def needs_status_info(transaction_status: Optional[str]) -> bool:
    """True when the funds are not yet settled and the status is worth showing."""
    return TransactionStatus.parse(transaction_status) in STATUSES_NEEDING_INFO


def format_reference(reference_type: str, reference_id: str) -> str:
    ref_type = ReferenceType.parse(reference_type)
    if ref_type is None:
        return f"{reference_type}: {reference_id}"
    return f"{REFERENCE_LABELS[ref_type]} #{reference_id}"


def _reference_priority(reference: Reference) -> int:
    ref_type = ReferenceType.parse(reference.reference_type)
    if ref_type in REFERENCE_PRIORITY_ORDER:
        return REFERENCE_PRIORITY_ORDER.index(ref_type)
    return _UNLISTED_PRIORITY


def meaningful_reference(
    references: List[Reference],
    sales_record_reference: Optional[str] = None,
) -> Optional[str]:
    """
    Pick the most useful reference to show in a description.

    Args:
        references: Typed references attached to the transaction
        sales_record_reference: Fallback reference used when the list is empty

    Returns:
        Formatted reference (e.g. "Order #123") or None
    """
    if not references:
        if sales_record_reference and sales_record_reference != NO_SALES_RECORD_SENTINEL:
            return f"Ref: {sales_record_reference}"
        return None

    # sorted() is stable, so ties keep eBay's order
    top = sorted(references, key=_reference_priority)[0]
    return format_reference(top.reference_type, top.reference_id)


def memo_text(txn: RawTransaction) -> Optional[str]:
    """The transaction memo, or None when eBay sent nothing useful."""
    if txn.transaction_memo and txn.transaction_memo != NO_MEMO_SENTINEL:
        return txn.transaction_memo
    return None


def rich_description(txn: RawTransaction) -> str:
    """
    Build the description sent to FreeAgent.

    Format: <memo or "eBay <type>">[ - <reference>][ (<status>)],
    cut to 255 characters.
    """
    description = memo_text(txn) or f"eBay {format_transaction_type(txn.transaction_type)}"

    reference = meaningful_reference(txn.references, txn.sales_record_reference)
    if reference:
        description += f" - {reference}"

    if needs_status_info(txn.transaction_status):
        description += f" ({format_transaction_status(txn.transaction_status)})"

    return description[:MAX_DESCRIPTION_LENGTH]


def display_description(txn: RawTransaction) -> str:
    """Short description for preview tables."""
    memo = memo_text(txn)
    if memo:
        return memo[:MAX_DESCRIPTION_LENGTH]

    label = format_transaction_type(txn.transaction_type)
    identifier = txn.sales_record_reference
    if not identifier or identifier == NO_SALES_RECORD_SENTINEL:
        identifier = txn.transaction_id
    if identifier:
        return f"{label} - {identifier}"[:MAX_DESCRIPTION_LENGTH]
    return f"eBay {label}"[:MAX_DESCRIPTION_LENGTH]
