"""
FreeAgent sync sink: bank accounts and bank statement upload.
"""
from typing import Any, Dict, List

from clients.base import BackendClient
from core.exceptions import LedgerSyncException
from core.logger import setup_logger
from core.schema import BankAccount, StatementLine

logger = setup_logger(__name__)


def bank_account_id_from_url(url: str) -> str:
    """Last path segment of a FreeAgent bank account URL."""
    return url.rstrip("/").split("/")[-1]


class FreeAgentClient(BackendClient):
    """FreeAgent operations exposed by the backend."""

    def check_connection_status(self) -> Dict[str, Any]:
        try:
            data = self.get("/freeagent/connection-status") or {}
        except LedgerSyncException as e:
            logger.warning(f"Error checking FreeAgent connection status: {e.message}")
            return {"is_connected": False}
        return {"is_connected": bool(data.get("isConnected", False))}

    def get_bank_accounts(self) -> List[BankAccount]:
        data = self.get("/freeagent/bank-accounts") or {}
        return [
            self.parse_model(BankAccount, acc, "/freeagent/bank-accounts")
            for acc in data.get("bankAccounts") or []
        ]

    def get_ebay_account_status(self) -> Dict[str, Any]:
        """
        Status of the FreeAgent bank account that receives eBay statements.

        Returns:
            Dictionary with has_ebay_account, auto_created, needs_setup,
            bank_account and available_ebay_accounts
        """
        endpoint = "/freeagent/ebay-account-status"
        data = self.get(endpoint) or {}
        bank_account = data.get("bankAccount")
        if bank_account:
            bank_account = self.parse_model(BankAccount, bank_account, endpoint)
        return {
            "has_ebay_account": bool(data.get("hasEbayAccount", False)),
            "auto_created": bool(data.get("autoCreated", False)),
            "needs_setup": bool(data.get("needsSetup", True)),
            "bank_account": bank_account or None,
            "available_ebay_accounts": [
                self.parse_model(BankAccount, acc, endpoint)
                for acc in data.get("availableEbayAccounts") or []
            ],
        }

    def upload_statement(self, lines: List[StatementLine], bank_account_id: str) -> int:
        """
        Upload statement lines to a FreeAgent bank account.

        Args:
            lines: Statement lines (dated_on, amount, description, reference)
            bank_account_id: Target FreeAgent bank account id

        Returns:
            Number of lines FreeAgent accepted
        """
        payload = {
            "transactions": [line.model_dump() for line in lines],
            "bankAccountId": bank_account_id,
        }
        logger.info(f"Uploading {len(lines)} statement lines to bank account {bank_account_id}")

        data = self.post("/freeagent/upload-ebay-statement", json_body=payload)
        uploaded = data.get("uploadedCount") if isinstance(data, dict) else None
        return int(uploaded) if uploaded else len(lines)
