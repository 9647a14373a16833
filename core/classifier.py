"""
Debit/credit and category classification of eBay transactions.
"""
from typing import Dict, NamedTuple

from core.schema import BookingEntry, Category, RawTransaction, TransactionType

# Types that always move money out of the seller account
DEBIT_TRANSACTION_TYPES = frozenset({
    TransactionType.WITHDRAWAL,
    TransactionType.NON_SALE_CHARGE,
    TransactionType.REFUND,
})

CATEGORY_MAP: Dict[TransactionType, Category] = {
    TransactionType.SALE: Category.SALES,
    TransactionType.REFUND: Category.REFUNDS,
    TransactionType.NON_SALE_CHARGE: Category.BUSINESS_EXPENSES,
    TransactionType.WITHDRAWAL: Category.BANK_TRANSFERS,
    TransactionType.DISPUTE: Category.DISPUTES,
    TransactionType.ADJUSTMENT: Category.ADJUSTMENTS,
    TransactionType.TRANSFER: Category.TRANSFERS,
}


class Classification(NamedTuple):
    is_debit: bool
    category: Category


def determine_if_debit(txn: RawTransaction, amount: float) -> bool:
    """
    Decide whether a transaction is a debit.

    The first matching rule wins: eBay's booking entry, then the
    transaction type, then the sign of the amount.
    """
    if BookingEntry.parse(txn.booking_entry) is BookingEntry.DEBIT:
        return True
    if TransactionType.parse(txn.transaction_type) in DEBIT_TRANSACTION_TYPES:
        return True
    return amount < 0


def determine_category(txn: RawTransaction) -> Category:
    """Map the transaction type to an accounting category, Other when unmapped."""
    txn_type = TransactionType.parse(txn.transaction_type)
    if txn_type is None:
        return Category.OTHER
    return CATEGORY_MAP.get(txn_type, Category.OTHER)


def classify(txn: RawTransaction, amount: float) -> Classification:
    """
    Classify a transaction for the ledger.

    Args:
        txn: Raw eBay transaction
        amount: Parsed numeric amount (sign as reported by eBay)

    Returns:
        Classification with debit flag and category
    """
    return Classification(
        is_debit=determine_if_debit(txn, amount),
        category=determine_category(txn),
    )
