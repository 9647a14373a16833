"""
Pydantic schemas for eBay transactions, ledger entries and sync payloads.
Wire names follow the backend's camelCase; Python attributes are snake_case.
"""
from datetime import date
from enum import Enum
from typing import Annotated, List, Optional

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
)
from pydantic.alias_generators import to_camel


class _LookupEnum(str, Enum):
    """String enum with a non-raising lookup for values eBay may add later."""

    @classmethod
    def parse(cls, value):
        if value is None:
            return None
        try:
            return cls(value)
        except ValueError:
            return None


class TransactionType(_LookupEnum):
    SALE = "SALE"
    REFUND = "REFUND"
    WITHDRAWAL = "WITHDRAWAL"
    NON_SALE_CHARGE = "NON_SALE_CHARGE"
    DISPUTE = "DISPUTE"
    TRANSFER = "TRANSFER"
    ADJUSTMENT = "ADJUSTMENT"
    CREDIT = "CREDIT"
    DEBIT = "DEBIT"


class BookingEntry(_LookupEnum):
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"


class ReferenceType(_LookupEnum):
    ORDER_ID = "ORDER_ID"
    ITEM_ID = "ITEM_ID"
    PAYOUT_ID = "PAYOUT_ID"
    TRANSACTION_ID = "TRANSACTION_ID"
    INVOICE_ID = "INVOICE_ID"
    DISPUTE_ID = "DISPUTE_ID"


class TransactionStatus(_LookupEnum):
    FUNDS_PROCESSING = "FUNDS_PROCESSING"
    FUNDS_ON_HOLD = "FUNDS_ON_HOLD"
    FUNDS_AVAILABLE_FOR_PAYOUT = "FUNDS_AVAILABLE_FOR_PAYOUT"
    PAYOUT_INITIATED = "PAYOUT_INITIATED"
    COMPLETED = "COMPLETED"


class Category(_LookupEnum):
    """Accounting categories assigned to ledger entries."""
    SALES = "Sales"
    REFUNDS = "Refunds"
    BUSINESS_EXPENSES = "Business Expenses"
    BANK_TRANSFERS = "Bank Transfers"
    DISPUTES = "Disputes"
    ADJUSTMENTS = "Adjustments"
    TRANSFERS = "Transfers"
    OTHER = "Other"


def normalize_identifier(v):
    """Normalize identifiers to strings (eBay sometimes sends numbers)."""
    if v is None:
        return None
    return str(v)


def normalize_text(v):
    """Null text fields become empty strings; numbers become strings."""
    if v is None:
        return ""
    return str(v)


def normalize_amount(v):
    """Treat a null amount object as an empty amount."""
    if v is None:
        return {}
    return v


def normalize_references(v):
    """Treat a null references field as an empty list and drop null items."""
    if v is None:
        return []
    if isinstance(v, list):
        return [ref for ref in v if ref is not None]
    return v


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Amount(_CamelModel):
    """Monetary amount as reported by eBay; value is kept unparsed."""
    value: Annotated[Optional[str], BeforeValidator(normalize_identifier)] = None
    currency_code: Optional[str] = None


class Reference(_CamelModel):
    """Typed external identifier attached to a transaction."""
    reference_type: Annotated[str, BeforeValidator(normalize_text)] = ""
    reference_id: Annotated[str, BeforeValidator(normalize_text)] = ""


class RawTransaction(_CamelModel):
    """
    A transaction as returned by the eBay Finances API.

    Enumerated fields stay plain strings so values outside the known
    enums survive to the description (unknown types pass through as-is).
    """
    transaction_id: Annotated[Optional[str], BeforeValidator(normalize_identifier)] = None
    transaction_date: Annotated[str, BeforeValidator(normalize_text)] = ""
    transaction_type: Annotated[str, BeforeValidator(normalize_text)] = ""
    transaction_memo: Optional[str] = None
    amount: Annotated[Amount, BeforeValidator(normalize_amount)] = Field(default_factory=Amount)
    booking_entry: Optional[str] = None
    references: Annotated[List[Reference], BeforeValidator(normalize_references)] = Field(
        default_factory=list
    )
    sales_record_reference: Annotated[Optional[str], BeforeValidator(normalize_identifier)] = None
    transaction_status: Optional[str] = None


class LedgerEntry(_CamelModel):
    """One normalized accounting line derived from a raw transaction."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        use_enum_values=True,
    )

    dated_on: str
    amount: float
    description: str = Field(..., max_length=255)
    reference: Optional[str] = Field(None, max_length=50)
    category: Category
    is_debit: bool
    original_amount: float

    @computed_field
    @property
    def display_amount(self) -> float:
        return abs(self.amount)

    @computed_field
    @property
    def transaction_kind(self) -> str:
        return "debit" if self.is_debit else "credit"

    def to_statement_line(self) -> "StatementLine":
        """Flatten to the payload shape FreeAgent's statement upload expects."""
        return StatementLine(
            dated_on=self.dated_on,
            amount=self.amount,
            description=self.description,
            reference=self.reference,
        )


class ProcessedBatch(_CamelModel):
    """Ledger entries plus aggregate statistics for one fetch."""
    entries: List[LedgerEntry] = Field(default_factory=list)
    credit_count: int = 0
    debit_count: int = 0
    total_amount: float = 0.0
    net_amount: float = 0.0

    def statement_lines(self) -> List["StatementLine"]:
        return [entry.to_statement_line() for entry in self.entries]


class StatementLine(BaseModel):
    """Bank statement line in FreeAgent's snake_case upload format."""
    dated_on: str
    amount: float
    description: str
    reference: Optional[str] = None


class DateRange(_CamelModel):
    """Inclusive date range for an eBay transactions query."""
    start_date: date
    end_date: date


class BankAccount(_CamelModel):
    """FreeAgent bank account as listed by the backend."""
    id: Annotated[str, BeforeValidator(normalize_identifier)]
    url: str
    name: str
    type: Optional[str] = None
    currency: Optional[str] = None
    api_url: Optional[str] = None


class SyncRequest(_CamelModel):
    """API request body for uploading transactions to FreeAgent."""
    transactions: List[RawTransaction] = Field(default_factory=list)
    bank_account_url: str = Field(..., min_length=1)


class SyncResult(_CamelModel):
    """Acknowledgment of a FreeAgent statement upload."""
    uploaded_count: int
    bank_account_id: str
    message: str


class NotificationPreferences(_CamelModel):
    email: bool = True
    sync_success: bool = False
    sync_failure: bool = True


class AutoSyncSettings(_CamelModel):
    """
    Auto-sync preferences stored by the backend scheduler.

    Passed explicitly to the auto-sync client; the ledger transform
    never reads it.
    """
    enabled: bool = False
    frequency: str = "daily"
    time: Optional[str] = "02:00"
    timezone: str = "Europe/London"
    lag_days: int = Field(default=2, ge=1, le=3)
    notifications: NotificationPreferences = Field(default_factory=NotificationPreferences)

    @field_validator("frequency")
    @classmethod
    def normalize_frequency(cls, v):
        return v.strip().lower()
