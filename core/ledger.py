"""
Ledger entry builder.
Turns raw eBay transactions into signed ledger entries with batch statistics.
"""
import math
import re
from datetime import datetime, timezone
from typing import Any, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from core.classifier import classify
from core.descriptions import MAX_DESCRIPTION_LENGTH, rich_description
from core.logger import setup_logger
from core.schema import LedgerEntry, ProcessedBatch, RawTransaction

logger = setup_logger(__name__)

MAX_REFERENCE_LENGTH = 50

# Leading numeric prefix, so "12.50 GBP" still reads as 12.5
_NUMERIC_PREFIX = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")

# "+0100" style offsets and fractions of any length, both rejected by
# fromisoformat before Python 3.11
_BASIC_OFFSET = re.compile(r"(T.*[+-]\d{2})(\d{2})$")
_FRACTION = re.compile(r"\.(\d+)(?=[+-]\d{2}:?\d{2}$|$)")

TransactionLike = Union[RawTransaction, Mapping[str, Any]]


def parse_amount(value: Any) -> float:
    """
    Parse an eBay amount value to a float.

    Args:
        value: Amount value (string or number)

    Returns:
        Parsed amount; 0.0 when missing, unparseable or not finite
    """
    if value is None:
        return 0.0

    # Only the leading number counts, so "1_000" reads as 1
    match = _NUMERIC_PREFIX.match(str(value))
    if not match:
        logger.debug(f"Unparseable amount '{value}', using 0")
        return 0.0
    result = float(match.group(0))

    if not math.isfinite(result):
        logger.debug(f"Non-finite amount '{value}', using 0")
        return 0.0
    return result


def to_dated_on(transaction_date: str) -> str:
    """
    Calendar date (YYYY-MM-DD) of an ISO-8601 timestamp.

    Timezone-aware timestamps are converted to UTC before the time of day
    is dropped. Values that do not parse fall back to their first 10 chars.
    """
    text = (transaction_date or "").strip()
    normalized = _BASIC_OFFSET.sub(r"\1:\2", text.replace("Z", "+00:00"))
    normalized = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), normalized)
    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError:
        return text[:10]
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.date().isoformat()


def _as_transaction(txn: TransactionLike) -> Optional[RawTransaction]:
    if isinstance(txn, RawTransaction):
        return txn
    try:
        return RawTransaction.model_validate(txn)
    except PydanticValidationError as e:
        logger.warning(f"Skipping malformed transaction: {e.error_count()} invalid fields")
        return None


def build_ledger_entry(txn: TransactionLike) -> Optional[LedgerEntry]:
    """
    Map one raw transaction to a ledger entry.

    Args:
        txn: Raw eBay transaction (model or dict)

    Returns:
        LedgerEntry, or None when the amount is zero or the record is
        too malformed to read
    """
    txn = _as_transaction(txn)
    if txn is None:
        return None

    original_amount = parse_amount(txn.amount.value)
    classification = classify(txn, original_amount)
    display_amount = abs(original_amount)
    signed_amount = -display_amount if classification.is_debit else display_amount

    if signed_amount == 0:
        return None

    reference = txn.transaction_id[:MAX_REFERENCE_LENGTH] if txn.transaction_id else None

    return LedgerEntry(
        dated_on=to_dated_on(txn.transaction_date),
        amount=signed_amount,
        description=rich_description(txn)[:MAX_DESCRIPTION_LENGTH],
        reference=reference,
        category=classification.category,
        is_debit=classification.is_debit,
        original_amount=original_amount,
    )


def summarize_entries(entries: List[LedgerEntry]) -> ProcessedBatch:
    """Wrap entries in a batch with credit/debit counts and totals."""
    debit_count = sum(1 for entry in entries if entry.is_debit)
    return ProcessedBatch(
        entries=entries,
        credit_count=len(entries) - debit_count,
        debit_count=debit_count,
        total_amount=sum(abs(entry.amount) for entry in entries),
        net_amount=sum(entry.amount for entry in entries),
    )


def build_batch(transactions: Optional[Iterable[TransactionLike]]) -> ProcessedBatch:
    """
    Build ledger entries for a list of transactions.

    Entries keep the input order; zero-amount transactions are dropped.

    Args:
        transactions: Raw eBay transactions

    Returns:
        ProcessedBatch with entries and aggregate statistics
    """
    transactions = list(transactions or [])
    if not transactions:
        return ProcessedBatch()

    logger.info(f"Processing {len(transactions)} transactions for FreeAgent...")

    entries = []
    for txn in transactions:
        entry = build_ledger_entry(txn)
        if entry is not None:
            entries.append(entry)

    batch = summarize_entries(entries)
    logger.info(
        f"Processed {len(batch.entries)} transactions: "
        f"{batch.credit_count} credits, {batch.debit_count} debits"
    )
    return batch
