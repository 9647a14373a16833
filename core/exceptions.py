"""
Custom exceptions for the sync service.

The ledger transform itself never raises; these cover configuration,
collaborator calls, exports and request validation.
"""
from typing import Any, Dict, Optional


class LedgerSyncException(Exception):
    """Base exception for all sync service errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize exception.

        Args:
            message: Error message
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(LedgerSyncException):
    """Raised when configuration is invalid."""
    pass


class ValidationError(LedgerSyncException):
    """Raised when request data (date ranges, sync payloads) is invalid."""
    pass


class ApiError(LedgerSyncException):
    """Raised when a backend collaborator call fails."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.status_code = status_code


class AuthenticationError(ApiError):
    """Raised when the backend rejects our credentials (HTTP 401)."""
    pass


class SyncError(LedgerSyncException):
    """Raised when uploading a statement to FreeAgent fails."""
    pass


class ExportError(LedgerSyncException):
    """Raised when CSV or Excel export fails."""
    pass


class DataNotFoundError(LedgerSyncException):
    """Raised when required data is not found."""
    pass
