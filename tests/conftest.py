"""
Shared fixtures for the test suite.
"""
import pytest

from core.config import Settings, reset_settings


@pytest.fixture
def make_txn():
    """Factory for raw eBay transaction dictionaries in the wire format."""

    def _make(**overrides):
        txn = {
            "transactionId": "TXN001",
            "transactionDate": "2024-01-15T10:30:00.000Z",
            "transactionType": "SALE",
            "transactionMemo": "No description",
            "amount": {"value": "25.99", "currencyCode": "GBP"},
            "references": [],
        }
        txn.update(overrides)
        return txn

    return _make


@pytest.fixture
def tmp_settings(tmp_path):
    """Settings pointing exports at a per-test directory."""
    return Settings(
        export_path=str(tmp_path / "exports"),
        api_base_url="http://backend.test/api",
        api_token="test-token",
    )


@pytest.fixture
def clean_settings():
    """Reset the settings singleton around a test."""
    reset_settings()
    yield
    reset_settings()
