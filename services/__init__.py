"""
Service layer for business logic.

This package contains the service that orchestrates the sync flow:
fetching eBay transactions, building ledger entries, exporting them
and uploading them to FreeAgent as a bank statement.
"""
