"""
Route tests for the FastAPI app using TestClient.
"""
from datetime import date
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from app import api
from core.exceptions import ApiError, AuthenticationError
from core.schema import RawTransaction
from services.transaction_service import TransactionService

BANK_ACCOUNT_URL = "https://api.freeagent.com/v2/bank_accounts/42"


@pytest.fixture
def service(tmp_settings, monkeypatch):
    svc = TransactionService(ebay_client=Mock(), freeagent_client=Mock())
    svc.settings = tmp_settings
    monkeypatch.setattr(api, "transaction_service", svc)
    monkeypatch.setattr(api, "jobs", {})
    return svc


@pytest.fixture
def client(service):
    return TestClient(api.app)


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_connections(client, service):
    service.ebay_client.check_connection_status.return_value = {
        "is_connected": True, "environment": "production"
    }
    service.freeagent_client.check_connection_status.return_value = {"is_connected": False}

    body = client.get("/connections").json()
    assert body["ebay"]["is_connected"] is True
    assert body["freeagent"]["is_connected"] is False


def test_connections_without_token(client, service, clean_settings, monkeypatch, tmp_path):
    monkeypatch.delenv("API_TOKEN", raising=False)
    monkeypatch.setenv("EXPORT_PATH", str(tmp_path))
    service._ebay_client = None

    response = client.get("/connections")
    assert response.status_code == 500
    assert "API_TOKEN" in response.json()["detail"]


def test_process_transactions(client, make_txn):
    response = client.post("/transactions/process", json=[
        make_txn(references=[{"referenceType": "ORDER_ID", "referenceId": "123"}]),
        make_txn(transactionId="FEE1", transactionType="NON_SALE_CHARGE", amount={"value": "2.49"}),
        make_txn(transactionId="ZERO", amount={"value": "0"}),
    ])
    assert response.status_code == 200

    body = response.json()
    batch = body["batch"]
    assert batch["creditCount"] == 1
    assert batch["debitCount"] == 1
    assert batch["netAmount"] == pytest.approx(23.5)
    assert batch["entries"][0]["description"] == "eBay Sale - Order #123"
    assert batch["entries"][1]["amount"] == pytest.approx(-2.49)
    assert [t["displayDescription"] for t in body["transactions"]] == [
        "Sale - TXN001", "Fee/Charge - FEE1", "Sale - ZERO",
    ]


def test_fetch_transactions(client, service, make_txn):
    service.ebay_client.fetch_transactions.return_value = [
        RawTransaction.model_validate(make_txn())
    ]
    response = client.get("/transactions", params={"startDate": "2024-01-01", "endDate": "2024-01-31"})
    assert response.status_code == 200
    assert response.json()["batch"]["entries"][0]["reference"] == "TXN001"


def test_fetch_transactions_invalid_range(client, service):
    response = client.get("/transactions", params={"startDate": "2024-02-01", "endDate": "2024-01-01"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Start date cannot be after end date"


def test_fetch_transactions_auth_failure(client, service):
    service.ebay_client.fetch_transactions.side_effect = AuthenticationError(
        "Authentication failed. Please log in again.", status_code=401
    )
    response = client.get("/transactions", params={"startDate": "2024-01-01", "endDate": "2024-01-02"})
    assert response.status_code == 401


def test_fetch_transactions_backend_failure(client, service):
    service.ebay_client.fetch_transactions.side_effect = ApiError("eBay unavailable", status_code=503)
    response = client.get("/transactions", params={"startDate": "2024-01-01", "endDate": "2024-01-02"})
    assert response.status_code == 502


def test_export_csv(client, make_txn):
    response = client.post("/export/csv", json=[make_txn()])
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert f"ebay-transactions-{date.today().isoformat()}.csv" in response.headers["content-disposition"]
    assert response.text == (
        "Date,Amount,Description,Category,Reference\n"
        "15/01/2024,25.99,eBay Sale,Sales,TXN001"
    )


def test_export_statement_csv(client, make_txn):
    response = client.post("/export/csv", params={"format": "statement"}, json=[make_txn()])
    assert response.status_code == 200
    assert "ebay-freeagent-statement-" in response.headers["content-disposition"]
    assert response.text == "15/01/2024,25.99,eBay Sale"


def test_export_csv_unknown_format(client, make_txn):
    response = client.post("/export/csv", params={"format": "tsv"}, json=[make_txn()])
    assert response.status_code == 422


def test_export_xlsx_then_download(client, make_txn):
    response = client.post("/export/xlsx", json=[make_txn()])
    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 1
    assert body["filename"].endswith(".xlsx")

    download = client.get(f"/download/{body['filename']}")
    assert download.status_code == 200
    assert download.content[:2] == b"PK"


def test_download_missing_file(client):
    assert client.get("/download/nothing.csv").status_code == 404


def test_download_rejects_other_types(client):
    assert client.get("/download/notes.txt").status_code == 400


def test_sync_runs_in_background(client, service, make_txn):
    service.freeagent_client.upload_statement.return_value = 1

    response = client.post("/sync", json={
        "transactions": [make_txn()],
        "bankAccountUrl": BANK_ACCOUNT_URL,
    })
    assert response.status_code == 202
    job_id = response.json()["job_id"]

    status = client.get(f"/status/{job_id}").json()
    assert status["status"] == "completed"
    assert status["result"]["uploadedCount"] == 1
    assert status["result"]["bankAccountId"] == "42"


def test_sync_failure_is_reported(client, service, make_txn):
    service.freeagent_client.upload_statement.side_effect = ApiError(
        "Validation failed", status_code=422
    )
    job_id = client.post("/sync", json={
        "transactions": [make_txn()],
        "bankAccountUrl": BANK_ACCOUNT_URL,
    }).json()["job_id"]

    status = client.get(f"/status/{job_id}").json()
    assert status["status"] == "failed"
    assert status["error"].startswith("Invalid transaction data")


def test_sync_with_nothing_to_upload(client, make_txn):
    response = client.post("/sync", json={
        "transactions": [make_txn(amount={"value": "0"})],
        "bankAccountUrl": BANK_ACCOUNT_URL,
    })
    assert response.status_code == 400


def test_sync_requires_bank_account(client, make_txn):
    response = client.post("/sync", json={"transactions": [make_txn()]})
    assert response.status_code == 422


def test_unknown_job(client):
    assert client.get("/status/does-not-exist").status_code == 404


def test_process_tolerates_null_fields(client, make_txn):
    response = client.post("/transactions/process", json=[
        make_txn(amount=None),
        make_txn(transactionId="OK", transactionType=None,
                 references=[{"referenceType": None, "referenceId": None}]),
    ])
    assert response.status_code == 200
    entries = response.json()["batch"]["entries"]
    assert [e["reference"] for e in entries] == ["OK"]
    assert entries[0]["category"] == "Other"


def test_fetch_transactions_invalid_backend_data(client, service):
    service.ebay_client.fetch_transactions.side_effect = ApiError(
        "Backend returned invalid RawTransaction data", details={"errors": ["bad"]}
    )
    response = client.get("/transactions", params={"startDate": "2024-01-01", "endDate": "2024-01-02"})
    assert response.status_code == 502
