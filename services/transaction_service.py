"""
Transaction processing service.
Orchestrates fetching from eBay, building ledger entries, export and upload.
"""
from datetime import date
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from clients.ebay import EbayClient
from clients.freeagent import FreeAgentClient, bank_account_id_from_url
from core.config import get_settings
from core.exceptions import (
    ApiError,
    AuthenticationError,
    DataNotFoundError,
    SyncError,
    ValidationError,
)
from core.exporters import create_output_filename, export_to_csv, export_to_excel
from core.ledger import TransactionLike, build_batch
from core.logger import setup_logger
from core.schema import DateRange, ProcessedBatch, RawTransaction, SyncResult
from core.validation import validate_date_range

logger = setup_logger(__name__)

EXPORT_EXTENSIONS = (".csv", ".xlsx")


def describe_sync_failure(message: str) -> str:
    """Turn a backend upload error into a message the user can act on."""
    lowered = (message or "").lower()
    if "authentication" in lowered:
        return "FreeAgent authentication failed. Please reconnect your FreeAgent account."
    if "validation" in lowered:
        return "Invalid transaction data. Please check your transactions and try again."
    return message or "Unknown sync error occurred"


class TransactionService:
    """Service for moving eBay transactions into FreeAgent."""

    def __init__(
        self,
        ebay_client: Optional[EbayClient] = None,
        freeagent_client: Optional[FreeAgentClient] = None,
    ):
        """
        Initialize transaction service.

        Clients are created lazily so the pure processing paths work
        without backend credentials.
        """
        self.settings = get_settings()
        self._ebay_client = ebay_client
        self._freeagent_client = freeagent_client

    @property
    def ebay_client(self) -> EbayClient:
        if self._ebay_client is None:
            self._ebay_client = EbayClient()
        return self._ebay_client

    @property
    def freeagent_client(self) -> FreeAgentClient:
        if self._freeagent_client is None:
            self._freeagent_client = FreeAgentClient()
        return self._freeagent_client

    def process_transactions(self, transactions: Iterable[TransactionLike]) -> ProcessedBatch:
        return build_batch(transactions)

    def fetch_and_process(
        self,
        start_date,
        end_date,
        today: Optional[date] = None,
    ) -> Tuple[List[RawTransaction], ProcessedBatch]:
        """
        Fetch a date range from eBay and build ledger entries.

        Args:
            start_date: First day (date or YYYY-MM-DD)
            end_date: Last day (date or YYYY-MM-DD)
            today: Reference date for range validation

        Returns:
            Tuple of (raw transactions, processed batch)

        Raises:
            ValidationError: If the date range is invalid
            ApiError: If the eBay fetch fails
        """
        date_range: DateRange = validate_date_range(
            start_date,
            end_date,
            today=today,
            max_days=self.settings.max_date_range_days,
        )
        transactions = self.ebay_client.fetch_transactions(date_range)
        batch = self.process_transactions(transactions)

        logger.info(
            f"Processed data: total={len(batch.entries)}, credits={batch.credit_count}, "
            f"debits={batch.debit_count}, total_amount={batch.total_amount:.2f}, "
            f"net_amount={batch.net_amount:.2f}"
        )
        return transactions, batch

    def sync_to_freeagent(self, batch: ProcessedBatch, bank_account_url: str) -> SyncResult:
        """
        Upload a processed batch to a FreeAgent bank account as a statement.

        Args:
            batch: Processed ledger entries
            bank_account_url: FreeAgent bank account URL (or bare id)

        Returns:
            SyncResult with the uploaded count

        Raises:
            ValidationError: If there is nothing to upload or no account
            SyncError: If the upload fails
        """
        if not batch.entries:
            raise ValidationError("No transactions to sync")
        if not bank_account_url:
            raise ValidationError("Please set up your eBay bank account in FreeAgent first")

        bank_account_id = bank_account_id_from_url(bank_account_url)

        try:
            uploaded_count = self.freeagent_client.upload_statement(
                batch.statement_lines(), bank_account_id
            )
        except AuthenticationError as e:
            raise SyncError(
                describe_sync_failure("authentication"),
                details={"bank_account_id": bank_account_id, "error": e.message}
            )
        except ApiError as e:
            raise SyncError(
                describe_sync_failure(e.message),
                details={
                    "bank_account_id": bank_account_id,
                    "status_code": e.status_code,
                    "error": e.message,
                }
            )

        logger.info(f"Statement upload successful: {uploaded_count} transactions uploaded")
        return SyncResult(
            uploaded_count=uploaded_count,
            bank_account_id=bank_account_id,
            message=f"Statement upload successful! {uploaded_count} transactions uploaded.",
        )

    def export_csv(
        self,
        batch: ProcessedBatch,
        statement_format: bool = False,
        today: Optional[date] = None,
    ) -> str:
        """Write the batch to the export directory and return the file path."""
        return export_to_csv(
            batch,
            base_path=self.settings.export_path,
            today=today,
            statement_format=statement_format,
        )

    def export_excel(self, batch: ProcessedBatch, today: Optional[date] = None) -> str:
        """Write the batch to an Excel workbook in the export directory."""
        filename = create_output_filename(today, extension="xlsx")
        return export_to_excel(batch, str(Path(self.settings.export_path) / filename))

    def get_export_file(self, filename: str) -> Path:
        """
        Resolve an exported file by name.

        Args:
            filename: Bare file name inside the export directory

        Returns:
            Absolute path to the file

        Raises:
            ValidationError: If the name escapes the export directory or has
                an unsupported extension
            DataNotFoundError: If the file does not exist
        """
        if ".." in filename or "/" in filename or "\\" in filename:
            raise ValidationError("Invalid filename", details={"filename": filename})

        if not filename.endswith(EXPORT_EXTENSIONS):
            raise ValidationError("Invalid file type", details={"filename": filename})

        export_root = Path(self.settings.export_path).resolve()
        file_path = (export_root / filename).resolve()
        if export_root not in file_path.parents:
            raise ValidationError("Invalid file path", details={"filename": filename})

        if not file_path.exists():
            raise DataNotFoundError("File not found", details={"filename": filename})

        return file_path
