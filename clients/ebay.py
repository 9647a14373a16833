"""
eBay transaction source.
"""
from typing import Any, Dict, List

from clients.base import BackendClient
from core.exceptions import LedgerSyncException
from core.logger import setup_logger
from core.schema import DateRange, RawTransaction

logger = setup_logger(__name__)


class EbayClient(BackendClient):
    """Fetches eBay Finances transactions through the backend."""

    def check_connection_status(self) -> Dict[str, Any]:
        """
        Report whether the user's eBay account is linked.

        Never raises: any failure is reported as not connected.
        """
        try:
            data = self.get("/ebay/connection-status") or {}
        except LedgerSyncException as e:
            logger.warning(f"Error checking eBay connection status: {e.message}")
            return {"is_connected": False, "environment": "production"}

        return {
            "is_connected": bool(data.get("isConnected", False)),
            "environment": data.get("environment") or "production",
        }

    def fetch_transactions(self, date_range: DateRange) -> List[RawTransaction]:
        """
        Fetch transactions for an inclusive date range.

        Args:
            date_range: Validated query window

        Returns:
            Raw transactions in the order eBay returned them
        """
        start = date_range.start_date.isoformat()
        end = date_range.end_date.isoformat()
        logger.info(f"Fetching transactions from {start} to {end}")

        data = self.get("/ebay/transactions", params={"startDate": start, "endDate": end}) or {}
        transactions = data.get("transactions") or []

        logger.info(
            f"Fetched {len(transactions)} transactions from eBay "
            f"{data.get('environment', 'production')}"
        )
        return [
            self.parse_model(RawTransaction, txn, "/ebay/transactions") for txn in transactions
        ]
