"""
Core modules for the eBay to FreeAgent sync service.

This package contains:
- classifier: Debit/credit and category classification
- config: Application configuration and settings
- descriptions: Line-item description synthesis
- exceptions: Custom exception classes
- exporters: CSV and Excel export
- ledger: Ledger entry builder and batch statistics
- logger: Logging configuration
- schema: Pydantic models and enums
- validation: Date range validation
"""
