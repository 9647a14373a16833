"""
Unit tests for the ledger entry builder.
"""
import pytest

from core.ledger import build_batch, build_ledger_entry, parse_amount, to_dated_on
from core.schema import ProcessedBatch, RawTransaction


class TestParseAmount:

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("25.99", 25.99),
            ("-15.00", -15.0),
            (12, 12.0),
            ("  3.5 ", 3.5),
            ("12.50 GBP", 12.5),
            ("1e2", 100.0),
            ("1_000", 1.0),
            ("12,50", 12.0),
        ],
    )
    def test_valid_values(self, value, expected):
        assert parse_amount(value) == pytest.approx(expected)

    @pytest.mark.parametrize("value", [None, "", "abc", "nan", "inf", "-Infinity"])
    def test_invalid_values_default_to_zero(self, value):
        assert parse_amount(value) == 0.0


class TestDatedOn:

    def test_utc_timestamp(self):
        assert to_dated_on("2024-01-15T10:30:00.000Z") == "2024-01-15"

    def test_offset_timestamp_is_converted_to_utc(self):
        assert to_dated_on("2024-01-15T00:30:00+02:00") == "2024-01-14"

    def test_compact_offset_is_converted_to_utc(self):
        assert to_dated_on("2024-01-15T23:30:00-0100") == "2024-01-16"

    def test_short_fraction_with_offset(self):
        assert to_dated_on("2024-01-15T00:30:00.5+02:00") == "2024-01-14"

    def test_long_fraction(self):
        assert to_dated_on("2024-01-15T10:30:00.1234567Z") == "2024-01-15"

    def test_plain_date(self):
        assert to_dated_on("2024-03-01") == "2024-03-01"

    def test_unparseable_falls_back_to_prefix(self):
        assert to_dated_on("2024-03-01 sometime") == "2024-03-01"


class TestBuildLedgerEntry:

    def test_sale_scenario(self, make_txn):
        entry = build_ledger_entry(make_txn(
            references=[{"referenceType": "ORDER_ID", "referenceId": "12345678901"}],
        ))
        assert entry.amount == pytest.approx(25.99)
        assert entry.is_debit is False
        assert entry.category == "Sales"
        assert entry.description == "eBay Sale - Order #12345678901"
        assert entry.dated_on == "2024-01-15"
        assert entry.reference == "TXN001"
        assert entry.transaction_kind == "credit"

    def test_refund_already_negative(self, make_txn):
        entry = build_ledger_entry(make_txn(
            transactionType="REFUND", amount={"value": "-15.00", "currencyCode": "GBP"},
        ))
        assert entry.amount == pytest.approx(-15.0)
        assert entry.display_amount == pytest.approx(15.0)
        assert entry.original_amount == pytest.approx(-15.0)
        assert entry.is_debit is True
        assert entry.category == "Refunds"

    def test_positive_fee_becomes_negative(self, make_txn):
        entry = build_ledger_entry(make_txn(
            transactionType="NON_SALE_CHARGE", amount={"value": "2.49"},
        ))
        assert entry.amount == pytest.approx(-2.49)
        assert entry.original_amount == pytest.approx(2.49)

    def test_booking_entry_debit_on_sale(self, make_txn):
        entry = build_ledger_entry(make_txn(bookingEntry="DEBIT"))
        assert entry.amount == pytest.approx(-25.99)
        assert entry.is_debit is True

    def test_zero_amount_returns_none(self, make_txn):
        assert build_ledger_entry(make_txn(amount={"value": "0.00"})) is None

    def test_missing_amount_returns_none(self, make_txn):
        txn = make_txn()
        del txn["amount"]
        assert build_ledger_entry(txn) is None

    def test_reference_truncated_to_50(self, make_txn):
        entry = build_ledger_entry(make_txn(transactionId="T" * 80))
        assert entry.reference == "T" * 50

    def test_missing_transaction_id_has_no_reference(self, make_txn):
        entry = build_ledger_entry(make_txn(transactionId=None))
        assert entry.reference is None

    def test_accepts_model_input(self, make_txn):
        entry = build_ledger_entry(RawTransaction.model_validate(make_txn()))
        assert entry.amount == pytest.approx(25.99)

    def test_entries_are_immutable(self, make_txn):
        entry = build_ledger_entry(make_txn())
        with pytest.raises(Exception):
            entry.amount = 1.0


class TestBuildBatch:

    def test_empty_input(self):
        batch = build_batch([])
        assert batch == ProcessedBatch()
        assert batch.entries == []
        assert batch.credit_count == 0
        assert batch.debit_count == 0
        assert batch.total_amount == 0
        assert batch.net_amount == 0

    def test_none_input(self):
        assert build_batch(None).entries == []

    @pytest.mark.parametrize(
        "override",
        [
            {"amount": None},
            {"amount": {"value": None, "currencyCode": None}},
            {"transactionType": None},
            {"transactionDate": None},
            {"transactionMemo": None},
            {"references": None},
            {"references": [None]},
            {"references": [{"referenceType": None, "referenceId": "123"}]},
            {"references": [{"referenceType": "ORDER_ID", "referenceId": None}]},
        ],
    )
    def test_null_fields_do_not_raise(self, make_txn, override):
        batch = build_batch([make_txn(**override), make_txn(transactionId="OK")])
        assert batch.entries[-1].reference == "OK"

    def test_null_amount_is_dropped(self, make_txn):
        assert build_batch([make_txn(amount=None)]).entries == []

    def test_null_type_falls_back_to_other(self, make_txn):
        entry = build_batch([make_txn(transactionType=None)]).entries[0]
        assert entry.category == "Other"
        assert entry.is_debit is False

    def test_null_date_gives_empty_dated_on(self, make_txn):
        assert build_batch([make_txn(transactionDate=None)]).entries[0].dated_on == ""

    def test_unreadable_record_is_skipped(self, make_txn):
        batch = build_batch([make_txn(amount="oops"), make_txn(transactionId="OK")])
        assert [e.reference for e in batch.entries] == ["OK"]

    def test_zero_amount_entries_dropped_and_order_kept(self, make_txn):
        batch = build_batch([
            make_txn(transactionId="A", amount={"value": "10.00"}),
            make_txn(transactionId="B", amount={"value": "0"}),
            make_txn(transactionId="C", transactionType="NON_SALE_CHARGE", amount={"value": "-1.50"}),
            make_txn(transactionId="D", amount={"value": "not-a-number"}),
            make_txn(transactionId="E", transactionType="WITHDRAWAL", amount={"value": "5.00"}),
        ])
        assert [e.reference for e in batch.entries] == ["A", "C", "E"]
        assert all(e.amount != 0 for e in batch.entries)

    def test_statistics(self, make_txn):
        batch = build_batch([
            make_txn(amount={"value": "10.00"}),
            make_txn(amount={"value": "20.00"}),
            make_txn(transactionType="NON_SALE_CHARGE", amount={"value": "2.50"}),
            make_txn(transactionType="REFUND", amount={"value": "-7.50"}),
        ])
        assert batch.credit_count == 2
        assert batch.debit_count == 2
        assert batch.total_amount == pytest.approx(40.0)
        assert batch.net_amount == pytest.approx(20.0)
        assert batch.total_amount == pytest.approx(sum(abs(e.amount) for e in batch.entries))
        assert batch.net_amount == pytest.approx(sum(e.amount for e in batch.entries))

    def test_descriptions_never_exceed_255(self, make_txn):
        batch = build_batch([
            make_txn(
                transactionMemo="m" * 1000,
                references=[{"referenceType": "ORDER_ID", "referenceId": "9" * 500}],
            )
        ])
        assert len(batch.entries[0].description) <= 255

    def test_building_twice_gives_same_result(self, make_txn):
        txns = [make_txn(amount={"value": "1.00"}), make_txn(amount={"value": "0"})]
        assert build_batch(txns) == build_batch(txns)

    def test_statement_lines_flatten_entries(self, make_txn):
        batch = build_batch([make_txn(transactionType="NON_SALE_CHARGE", amount={"value": "2.49"})])
        line = batch.statement_lines()[0]
        assert line.model_dump() == {
            "dated_on": "2024-01-15",
            "amount": pytest.approx(-2.49),
            "description": "eBay Fee/Charge",
            "reference": "TXN001",
        }

    def test_camel_case_serialization(self, make_txn):
        data = build_batch([make_txn()]).model_dump(by_alias=True)
        assert set(data) == {"entries", "creditCount", "debitCount", "totalAmount", "netAmount"}
        entry = data["entries"][0]
        assert entry["datedOn"] == "2024-01-15"
        assert entry["isDebit"] is False
        assert entry["category"] == "Sales"
