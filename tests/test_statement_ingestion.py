"""Tests for bank statement ingestion and deduplication."""

from datetime import date
from decimal import Decimal

import pytest

from condoledger.domain.entities import StatementRow, TransactionStatus
from condoledger.domain.errors import ValidationError
from condoledger.domain.statement_ingestion import read_statement_csv


def _row(day, time="10:00:00", concept="DEPOSIT", amount="800.50", deposit=True):
    return StatementRow(
        date=f"2025-03-{day:02d}",
        time=time,
        concept=concept,
        amount=amount,
        currency="MXN",
        is_deposit=deposit,
    )


def _march_rows():
    return [
        _row(3, concept="SPEI HOUSE 1"),
        _row(4, time="09:15:00", concept="SPEI HOUSE 2", amount="1600.25"),
        _row(5, time="11:00:00", concept="SPEI HOUSE 3"),
    ]


def test_first_ingestion(temp_db, ingestion_service):
    result = ingestion_service.ingest_statement(_march_rows(), "Santander")

    assert result.total_rows == 3
    assert result.accepted == 3
    assert result.previously_processed == 0
    assert result.errors == ()
    assert result.date_range == (date(2025, 3, 3), date(2025, 3, 5))
    assert all(t.status is TransactionStatus.PENDING for t in result.transactions)

    reference = ingestion_service.find_reference_transaction("Santander")
    assert reference.concept == "SPEI HOUSE 3"


def test_reingesting_same_file_is_idempotent(temp_db, ingestion_service):
    ingestion_service.ingest_statement(_march_rows(), "Santander")

    result = ingestion_service.ingest_statement(_march_rows(), "Santander")

    assert result.accepted == 0
    assert result.previously_processed == 3
    assert len(temp_db.list_bank_transactions()) == 3


def test_overlapping_file_only_adds_new_rows(temp_db, ingestion_service):
    ingestion_service.ingest_statement(_march_rows(), "Santander")

    rows = _march_rows() + [_row(5, time="15:00:00", concept="SPEI HOUSE 4"), _row(6)]
    result = ingestion_service.ingest_statement(rows, "Santander")

    assert result.accepted == 2
    # Two rows predate the reference, one is already stored on the reference date
    assert result.previously_processed == 3
    assert {t.concept for t in result.transactions} == {"SPEI HOUSE 4", "DEPOSIT"}


def test_intra_file_duplicates(ingestion_service):
    rows = [_row(3), _row(3), _row(3, time="10:00:01")]

    result = ingestion_service.ingest_statement(rows, "Santander")

    assert result.accepted == 2
    assert result.previously_processed == 1


def test_latest_row_becomes_reference(ingestion_service):
    rows = [_row(7, time="08:00:00", concept="LATE"), _row(7, time="07:00:00", concept="EARLY")]

    ingestion_service.ingest_statement(rows, "Santander")

    assert ingestion_service.find_reference_transaction("Santander").concept == "LATE"


def test_other_bank_does_not_cut_off_rows(temp_db, ingestion_service):
    ingestion_service.ingest_statement([_row(10, concept="SANTANDER ROW")], "Santander")

    result = ingestion_service.ingest_statement(
        [_row(3, concept="BBVA OLD"), _row(11, concept="BBVA NEW")], "BBVA"
    )

    assert result.accepted == 2
    assert result.previously_processed == 0


def test_reference_falls_back_to_most_recent_pointer(ingestion_service):
    ingestion_service.ingest_statement([_row(10, concept="SANTANDER ROW")], "Santander")

    reference = ingestion_service.find_reference_transaction("BBVA")

    assert reference.bank_name == "Santander"


def test_reference_scans_recent_pointers_for_bank(ingestion_service):
    ingestion_service.ingest_statement([_row(2, concept="SANTANDER ROW")], "Santander")
    ingestion_service.ingest_statement([_row(3, concept="BBVA ROW")], "BBVA")

    reference = ingestion_service.find_reference_transaction("Santander")

    assert reference.concept == "SANTANDER ROW"


def test_same_row_in_two_banks_is_not_a_duplicate(temp_db, ingestion_service):
    ingestion_service.ingest_statement([_row(3)], "Santander")

    result = ingestion_service.ingest_statement([_row(3)], "BBVA")

    assert result.accepted == 1


def test_no_reference_without_pointers(ingestion_service):
    assert ingestion_service.find_reference_transaction("Santander") is None


def test_invalid_rows_are_reported(ingestion_service):
    rows = [_row(3), _row(4, amount="abc"), _row(5, concept="")]

    result = ingestion_service.ingest_statement(rows, "Santander")

    assert result.accepted == 1
    assert result.total_rows == 3
    assert any(e.startswith("Row 2:") for e in result.errors)
    assert any(e.startswith("Row 3:") for e in result.errors)


def test_nothing_accepted_leaves_no_pointer(temp_db, ingestion_service):
    result = ingestion_service.ingest_statement([_row(3, amount="abc")], "Santander")

    assert result.accepted == 0
    assert result.date_range is None
    assert temp_db.list_recent_ingestion_pointers() == []


def test_bank_name_required(ingestion_service):
    with pytest.raises(ValidationError):
        ingestion_service.ingest_statement(_march_rows(), "  ")


class TestQueries:
    def test_list_transactions_filters(self, ingestion_service):
        ingestion_service.ingest_statement(_march_rows(), "Santander")

        transactions = ingestion_service.list_transactions(
            start_date=date(2025, 3, 4), end_date=date(2025, 3, 5)
        )

        assert [t.date.day for t in transactions] == [5, 4]
        assert ingestion_service.list_transactions(status=TransactionStatus.PROCESSED) == []

    def test_list_transactions_inverted_range(self, ingestion_service):
        with pytest.raises(ValidationError):
            ingestion_service.list_transactions(
                start_date=date(2025, 3, 5), end_date=date(2025, 3, 1)
            )

    def test_summary(self, ingestion_service):
        ingestion_service.ingest_statement(_march_rows(), "Santander")
        ingestion_service.ingest_statement([_row(6, concept="USD ROW")], "BBVA")

        summary = ingestion_service.transaction_summary()

        assert summary["total"] == 4
        assert summary["pending"] == 4
        assert summary["processed"] == 0
        assert summary["total_amount"] == Decimal("4001.75")
        assert summary["currencies"] == ["MXN"]
        assert summary["banks"] == ["BBVA", "Santander"]

    def test_reconcile(self, ingestion_service):
        rows = [
            _row(3, concept="SAME"),
            _row(4, concept="SAME"),
            _row(5, concept="BIG", amount="150000.50"),
        ]
        ingestion_service.ingest_statement(rows, "Santander")

        report = ingestion_service.reconcile()

        assert report.total == 3
        assert report.matched == 0
        assert report.unmatched == 3
        assert not report.success
        assert "Duplicate concepts found: SAME" in report.discrepancies
        assert "1 high amount transaction(s)" in report.discrepancies

    def test_reconcile_clean(self, ingestion_service):
        ingestion_service.ingest_statement(_march_rows(), "Santander")

        assert ingestion_service.reconcile().success


class TestReadStatementCsv:
    def test_read(self, tmp_path):
        csv_file = tmp_path / "statement.csv"
        csv_file.write_text(
            "Date,Time,Concept,Amount,Currency,Deposit\n"
            "2025-03-03,10:00,SPEI HOUSE 1,800.50,MXN,yes\n"
            "2025-03-04,11:00,FEE,15.00,MXN,withdrawal\n"
            "2025-03-05,12:00,ODD,1.00,MXN,perhaps\n"
        )

        rows = read_statement_csv(str(csv_file))

        assert [r.is_deposit for r in rows] == [True, False, "perhaps"]
        assert rows[0].amount == "800.50"
        assert rows[0].concept == "SPEI HOUSE 1"

    def test_missing_columns(self, tmp_path):
        csv_file = tmp_path / "statement.csv"
        csv_file.write_text("date,concept,amount\n2025-03-03,X,1\n")

        with pytest.raises(ValidationError, match="time, currency, deposit"):
            read_statement_csv(str(csv_file))

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_statement_csv(str(tmp_path / "nope.csv"))
