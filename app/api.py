"""
FastAPI routes for processing, exporting and syncing eBay transactions.
"""
import uuid
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Literal

from fastapi import BackgroundTasks, FastAPI, HTTPException, Query
from fastapi.responses import FileResponse, Response

from core.descriptions import display_description
from core.exceptions import (
    ApiError,
    AuthenticationError,
    DataNotFoundError,
    LedgerSyncException,
    SyncError,
    ValidationError,
)
from core.exporters import (
    STATEMENT_FILENAME_PREFIX,
    create_output_filename,
    to_csv_string,
    to_statement_csv_string,
)
from core.logger import setup_logger
from core.schema import ProcessedBatch, RawTransaction, SyncRequest
from services.transaction_service import TransactionService

logger = setup_logger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="eBay FreeAgent Sync",
    description="Map eBay Finances transactions to FreeAgent bank statement entries",
    version="1.0.0"
)

# In-memory job storage for statement uploads
jobs: Dict[str, Dict[str, Any]] = {}

# Service instance
transaction_service = TransactionService()


def to_http_exception(e: LedgerSyncException) -> HTTPException:
    """Map service exceptions to HTTP errors."""
    if isinstance(e, ValidationError):
        return HTTPException(status_code=400, detail=e.message)
    if isinstance(e, AuthenticationError):
        return HTTPException(status_code=401, detail=e.message)
    if isinstance(e, DataNotFoundError):
        return HTTPException(status_code=404, detail=e.message)
    if isinstance(e, (ApiError, SyncError)):
        return HTTPException(status_code=502, detail=e.message)
    return HTTPException(status_code=500, detail=e.message)


def batch_response(transactions: List[RawTransaction], batch: ProcessedBatch) -> Dict[str, Any]:
    return {
        "batch": batch.model_dump(by_alias=True),
        "transactions": [
            {
                "transactionId": txn.transaction_id,
                "transactionType": txn.transaction_type,
                "displayDescription": display_description(txn),
            }
            for txn in transactions
        ],
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "ebay_freeagent_sync",
        "version": "1.0.0"
    }


@app.get("/connections")
def connection_status():
    """Report whether the eBay and FreeAgent accounts are linked."""
    try:
        return {
            "ebay": transaction_service.ebay_client.check_connection_status(),
            "freeagent": transaction_service.freeagent_client.check_connection_status(),
        }
    except LedgerSyncException as e:
        raise to_http_exception(e)


@app.post("/transactions/process")
async def process_transactions(transactions: List[RawTransaction]):
    """
    Build ledger entries from raw eBay transactions.

    Returns the processed batch plus a short preview description per
    input transaction.
    """
    batch = transaction_service.process_transactions(transactions)
    return batch_response(transactions, batch)


@app.get("/transactions")
def fetch_transactions(
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
):
    """Fetch a date range from eBay and return the processed batch."""
    try:
        transactions, batch = transaction_service.fetch_and_process(start_date, end_date)
    except LedgerSyncException as e:
        logger.error(f"Transaction fetch failed: {e.message}")
        raise to_http_exception(e)
    return batch_response(transactions, batch)


@app.post("/export/csv")
async def export_csv(
    transactions: List[RawTransaction],
    export_format: Literal["standard", "statement"] = Query("standard", alias="format"),
):
    """
    Export transactions as a CSV download.

    format=standard gives Date,Amount,Description,Category,Reference with a
    header; format=statement gives FreeAgent's headerless three-column file.
    """
    batch = transaction_service.process_transactions(transactions)

    if export_format == "statement":
        content = to_statement_csv_string(batch)
        filename = create_output_filename(prefix=STATEMENT_FILENAME_PREFIX)
    else:
        content = to_csv_string(batch)
        filename = create_output_filename()

    logger.info(f"Exported {len(batch.entries)} transactions as {filename}")
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@app.post("/export/xlsx")
def export_xlsx(transactions: List[RawTransaction]):
    """Export transactions to an Excel workbook and return its download name."""
    batch = transaction_service.process_transactions(transactions)
    try:
        output_path = transaction_service.export_excel(batch)
    except LedgerSyncException as e:
        raise to_http_exception(e)
    return {"filename": Path(output_path).name, "count": len(batch.entries)}


def sync_background(job_id: str, batch: ProcessedBatch, bank_account_url: str) -> None:
    """
    Background task uploading a batch to FreeAgent.

    Args:
        job_id: Unique job identifier
        batch: Processed ledger entries
        bank_account_url: FreeAgent bank account URL
    """
    try:
        jobs[job_id]["status"] = "processing"
        jobs[job_id]["message"] = "Syncing transactions to FreeAgent..."

        result = transaction_service.sync_to_freeagent(batch, bank_account_url)

        jobs[job_id]["status"] = "completed"
        jobs[job_id]["message"] = result.message
        jobs[job_id]["result"] = result.model_dump(by_alias=True)
        logger.info(f"Job {job_id} completed successfully")

    except LedgerSyncException as e:
        logger.error(f"Job {job_id} failed: {e.message}")
        jobs[job_id]["status"] = "failed"
        jobs[job_id]["message"] = f"Sync failed: {e.message}"
        jobs[job_id]["error"] = e.message
        jobs[job_id]["error_details"] = e.details

    except Exception as e:
        logger.error(f"Job {job_id} failed with unexpected error: {e}", exc_info=True)
        jobs[job_id]["status"] = "failed"
        jobs[job_id]["message"] = f"Sync failed: {str(e)}"
        jobs[job_id]["error"] = str(e)


@app.post("/sync", status_code=202)
async def sync_transactions(request: SyncRequest, background_tasks: BackgroundTasks):
    """
    Start uploading transactions to FreeAgent.
    Returns immediately with a job ID for status polling.
    """
    batch = transaction_service.process_transactions(request.transactions)
    if not batch.entries:
        raise HTTPException(status_code=400, detail="No transactions to sync")

    job_id = str(uuid.uuid4())
    jobs[job_id] = {
        "job_id": job_id,
        "status": "queued",
        "message": f"Queued {len(batch.entries)} transactions for upload",
        "created_at": datetime.now(timezone.utc).isoformat(),
    }

    background_tasks.add_task(sync_background, job_id, batch, request.bank_account_url)
    logger.info(f"Job {job_id} queued for sync")

    return {
        "job_id": job_id,
        "status": "accepted",
        "message": "Sync started. Use job_id to check status."
    }


@app.get("/status/{job_id}")
async def get_job_status(job_id: str):
    """Get status of a sync job."""
    if job_id not in jobs:
        raise HTTPException(status_code=404, detail="Job not found")

    job = jobs[job_id]

    response = {
        "job_id": job_id,
        "status": job["status"],
        "message": job["message"],
        "created_at": job.get("created_at")
    }

    if job["status"] == "completed" and "result" in job:
        response["result"] = job["result"]

    if job["status"] == "failed":
        response["error"] = job.get("error")
        if "error_details" in job:
            response["error_details"] = job["error_details"]

    return response


@app.get("/download/{filename}")
async def download_file(filename: str):
    """Download an exported file."""
    try:
        file_path = transaction_service.get_export_file(filename)
    except LedgerSyncException as e:
        raise to_http_exception(e)

    media_type = (
        "text/csv"
        if filename.endswith(".csv")
        else "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    return FileResponse(path=str(file_path), filename=filename, media_type=media_type)
