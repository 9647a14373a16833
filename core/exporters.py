"""
Exporters for processed ledger entries.

CSV output is unquoted: commas in descriptions become semicolons and
double quotes are dropped.
"""
from datetime import date
from pathlib import Path
from typing import List, Optional

import pandas as pd

from core.config import get_settings
from core.exceptions import ExportError
from core.logger import setup_logger
from core.schema import LedgerEntry, ProcessedBatch

logger = setup_logger(__name__)
settings = get_settings()

CSV_HEADER = "Date,Amount,Description,Category,Reference"
CSV_FILENAME_PREFIX = "ebay-transactions"
STATEMENT_FILENAME_PREFIX = "ebay-freeagent-statement"
EXCEL_SHEET_NAME = "Transactions"
SUMMARY_SHEET_NAME = "Summary"


def format_uk_date(value: str) -> str:
    """
    Reformat an ISO date (YYYY-MM-DD, optionally with a time part) as DD/MM/YYYY.

    Values that are not ISO dates are returned unchanged.
    """
    try:
        parsed = date.fromisoformat((value or "")[:10])
    except ValueError:
        return value
    return parsed.strftime("%d/%m/%Y")


def clean_description(description: str) -> str:
    """Strip quotes and swap commas for semicolons so the unquoted CSV stays aligned."""
    return description.replace('"', "").replace(",", ";").strip()


def format_csv_row(entry: LedgerEntry) -> str:
    return ",".join([
        format_uk_date(entry.dated_on),
        f"{entry.amount:.2f}",
        clean_description(entry.description),
        entry.category,
        entry.reference or "",
    ])


def format_statement_row(entry: LedgerEntry) -> str:
    return ",".join([
        format_uk_date(entry.dated_on),
        f"{entry.amount:.2f}",
        clean_description(entry.description),
    ])


def to_csv_string(batch: ProcessedBatch) -> str:
    """
    Serialize a batch as CSV with a header row.

    Columns: Date,Amount,Description,Category,Reference
    """
    rows = [CSV_HEADER]
    rows.extend(format_csv_row(entry) for entry in batch.entries)
    return "\n".join(rows)


def to_statement_csv_string(batch: ProcessedBatch) -> str:
    """
    Serialize a batch in FreeAgent's bank statement upload format.

    Three columns (Date,Amount,Description), no header row. Positive
    amounts are money in, negative amounts money out.
    """
    return "\n".join(format_statement_row(entry) for entry in batch.entries)


def preview_csv_rows(batch: ProcessedBatch, limit: int = 5) -> List[str]:
    """First statement rows, for checking the format before an upload."""
    return [format_statement_row(entry) for entry in batch.entries[:limit]]


def create_output_filename(
    today: Optional[date] = None,
    prefix: str = CSV_FILENAME_PREFIX,
    extension: str = "csv",
) -> str:
    """
    Create a dated export filename, e.g. ebay-transactions-2024-01-31.csv.

    Args:
        today: Date to stamp (defaults to today)
        prefix: Filename prefix
        extension: File extension without the dot

    Returns:
        Filename (no directory)
    """
    today = today or date.today()
    return f"{prefix}-{today.isoformat()}.{extension}"


def _write_text(content: str, output_path: Path) -> str:
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(content, encoding="utf-8")
    except OSError as e:
        logger.error(f"Failed to write {output_path}: {e}")
        raise ExportError(
            "Failed to write CSV export",
            details={"output_path": str(output_path), "error": str(e)}
        )
    return str(output_path)


def export_to_csv(
    batch: ProcessedBatch,
    base_path: Optional[str] = None,
    today: Optional[date] = None,
    statement_format: bool = False,
) -> str:
    """
    Write a batch to a CSV file in the export directory.

    Args:
        batch: Processed ledger entries
        base_path: Output directory (defaults to configured export path)
        today: Date used in the filename
        statement_format: Write FreeAgent's headerless three-column format instead

    Returns:
        Path to created file

    Raises:
        ExportError: If the file cannot be written
    """
    if base_path is None:
        base_path = settings.export_path

    if statement_format:
        filename = create_output_filename(today, prefix=STATEMENT_FILENAME_PREFIX)
        content = to_statement_csv_string(batch)
    else:
        filename = create_output_filename(today)
        content = to_csv_string(batch)

    output_path = Path(base_path) / filename
    logger.info(f"Exporting {len(batch.entries)} transactions to {output_path}")
    return _write_text(content, output_path)


def entries_to_dataframe(batch: ProcessedBatch) -> pd.DataFrame:
    """Tabular view of the entries, one row per ledger entry."""
    return pd.DataFrame(
        [
            {
                "Date": format_uk_date(entry.dated_on),
                "Amount": entry.amount,
                "Description": entry.description,
                "Category": entry.category,
                "Reference": entry.reference or "",
                "Type": entry.transaction_kind,
            }
            for entry in batch.entries
        ],
        columns=["Date", "Amount", "Description", "Category", "Reference", "Type"],
    )


def export_to_excel(batch: ProcessedBatch, output_path: str) -> str:
    """
    Export a batch to an Excel workbook with a summary sheet.

    Args:
        batch: Processed ledger entries
        output_path: Output file path

    Returns:
        Path to created file

    Raises:
        ExportError: If export fails
    """
    logger.info(f"Exporting {len(batch.entries)} transactions to {output_path}")

    entries_df = entries_to_dataframe(batch)
    summary_df = pd.DataFrame(
        [
            ("Credits", batch.credit_count),
            ("Debits", batch.debit_count),
            ("Total amount", round(batch.total_amount, 2)),
            ("Net amount", round(batch.net_amount, 2)),
        ],
        columns=["Metric", "Value"],
    )

    Path(output_path).parent.mkdir(parents=True, exist_ok=True)

    try:
        with pd.ExcelWriter(output_path, engine="xlsxwriter") as writer:
            entries_df.to_excel(writer, sheet_name=EXCEL_SHEET_NAME, index=False)
            summary_df.to_excel(writer, sheet_name=SUMMARY_SHEET_NAME, index=False)

            workbook = writer.book
            worksheet = writer.sheets[EXCEL_SHEET_NAME]
            money_format = workbook.add_format({"num_format": "#,##0.00"})

            # Approximate auto-fit, Amount column gets a money format
            for idx, col in enumerate(entries_df.columns):
                if len(entries_df):
                    max_len = max(entries_df[col].astype(str).map(len).max(), len(col))
                else:
                    max_len = len(col)
                cell_format = money_format if col == "Amount" else None
                worksheet.set_column(idx, idx, min(max_len + 2, 60), cell_format)

        logger.info(f"Successfully exported to {output_path}")
        return output_path

    except Exception as e:
        logger.error(f"Failed to export Excel: {e}")
        raise ExportError(
            "Failed to export to Excel",
            details={"output_path": output_path, "error": str(e)}
        )
