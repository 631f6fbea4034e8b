"""Bank statement ingestion with deduplication."""

import csv
import logging
from collections import Counter
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Iterable, Optional

from condoledger.database.base import Database
from condoledger.domain.entities import (
    BankTransaction,
    IngestionResult,
    NewBankTransaction,
    ReconciliationReport,
    StatementRow,
    TransactionStatus,
)
from condoledger.domain.errors import NotFoundError, ValidationError
from condoledger.domain.statement_validation import StatementRowValidator

logger = logging.getLogger(__name__)

# How many recent ingestion pointers are scanned for one of the same bank
REFERENCE_SCAN_LIMIT = 7

# Transactions above this amount are flagged during reconciliation
RECONCILIATION_HIGH_AMOUNT = Decimal("100000")

STATEMENT_COLUMNS = ("date", "time", "concept", "amount", "currency", "deposit")

_TRUE_WORDS = {"true", "yes", "1", "deposit", "y"}
_FALSE_WORDS = {"false", "no", "0", "withdrawal", "n"}


def _parse_flag(value: Optional[str]) -> object:
    # Unknown words are passed through so the row validator reports them
    if value is None:
        return None
    lowered = value.strip().lower()
    if lowered in _TRUE_WORDS:
        return True
    if lowered in _FALSE_WORDS:
        return False
    return value


def read_statement_csv(csv_file_path: str) -> list[StatementRow]:
    """Read a statement CSV with columns date,time,concept,amount,currency,deposit.

    Values are passed through as text (the deposit flag excepted); field
    validation happens during ingestion.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValidationError: If required columns are missing
    """
    csv_path = Path(csv_file_path)
    if not csv_path.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_file_path}")

    rows = []
    with open(csv_path, "r", encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)
        columns = {c.strip().lower() for c in reader.fieldnames or []}
        missing = [c for c in STATEMENT_COLUMNS if c not in columns]
        if missing:
            raise ValidationError(f"CSV file missing required columns: {', '.join(missing)}")

        for raw in reader:
            values = {(k or "").strip().lower(): (v or "").strip() for k, v in raw.items()}
            rows.append(
                StatementRow(
                    date=values["date"],
                    time=values["time"],
                    concept=values["concept"],
                    amount=values["amount"],
                    currency=values["currency"],
                    is_deposit=_parse_flag(values["deposit"]),
                )
            )
    return rows


class StatementIngestionService:
    """Turns uploaded statement rows into stored, deduplicated transactions.

    A per-bank reference transaction (the last row stored by an earlier run)
    marks the boundary before which rows are assumed to be already ingested.
    Rows on or after it are compared field by field against the file itself
    and against what is stored for the same date and bank.
    """

    def __init__(self, db: Database, validator: Optional[StatementRowValidator] = None):
        """Initialize ingestion service.

        Args:
            db: Database instance
            validator: Row validator (defaults to one using today's date)
        """
        self.db = db
        self.validator = validator or StatementRowValidator()

    def find_reference_transaction(self, bank_name: str) -> Optional[BankTransaction]:
        """Most recent pointer transaction for the bank.

        Falls back to the most recent pointer of any bank when none of the last
        few pointers belongs to this bank.
        """
        pointers = [
            p
            for p in self.db.list_recent_ingestion_pointers(REFERENCE_SCAN_LIMIT)
            if p.transaction is not None
        ]
        if not pointers:
            return None
        for pointer in pointers:
            if pointer.transaction.bank_name == bank_name:
                return pointer.transaction
        return pointers[0].transaction

    def ingest_statement(self, rows: Iterable[StatementRow], bank_name: str) -> IngestionResult:
        """Validate, deduplicate and store statement rows.

        Args:
            rows: Parsed statement rows in file order
            bank_name: Bank the statement came from

        Returns:
            IngestionResult with counts, row messages and stored transactions

        Raises:
            ValidationError: If the bank name is empty
        """
        bank_name = (bank_name or "").strip()
        if not bank_name:
            raise ValidationError("Bank name is required")

        reference = self.find_reference_transaction(bank_name)
        cutoff = None
        if reference is not None and reference.bank_name == bank_name:
            cutoff = reference.date
            logger.debug("Reference transaction %s dated %s", reference.id, cutoff)

        errors: list[str] = []
        warnings: list[str] = []
        accepted: list[NewBankTransaction] = []
        accepted_keys: set = set()
        stored_keys: dict[date, set] = {}
        previously_processed = 0
        total_rows = 0

        for row_number, row in enumerate(rows, start=1):
            total_rows += 1
            validation = self.validator.validate(row, bank_name)
            warnings.extend(f"Row {row_number}: {w}" for w in validation.warnings)
            if not validation.is_valid:
                errors.extend(f"Row {row_number}: {e}" for e in validation.errors)
                continue

            txn = validation.transaction
            if cutoff is not None and txn.date < cutoff:
                logger.debug("Row %d predates reference %s", row_number, cutoff)
                previously_processed += 1
                continue

            key = txn.identity
            if key in accepted_keys:
                logger.debug("Row %d duplicates an earlier row of the file", row_number)
                previously_processed += 1
                continue

            if txn.date not in stored_keys:
                stored_keys[txn.date] = {
                    t.identity
                    for t in self.db.find_bank_transactions_by_date_and_bank(txn.date, bank_name)
                }
            if key in stored_keys[txn.date]:
                logger.debug("Row %d already stored", row_number)
                previously_processed += 1
                continue

            accepted_keys.add(key)
            accepted.append(txn)

        stored: list[BankTransaction] = []
        date_range = None
        if accepted:
            stored = self.db.create_bank_transactions(accepted)
            latest = max(stored, key=lambda t: (t.date, t.time))
            self.db.append_ingestion_pointer(latest.id)
            dates = [t.date for t in stored]
            date_range = (min(dates), max(dates))

        logger.info(
            "Ingested %s statement: %d rows, %d new, %d previously processed, %d errors",
            bank_name,
            total_rows,
            len(stored),
            previously_processed,
            len(errors),
        )
        return IngestionResult(
            bank_name=bank_name,
            total_rows=total_rows,
            accepted=len(stored),
            previously_processed=previously_processed,
            errors=tuple(errors),
            warnings=tuple(warnings),
            transactions=tuple(stored),
            date_range=date_range,
        )

    def list_transactions(
        self,
        status: Optional[TransactionStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[BankTransaction]:
        """List stored transactions, newest first."""
        if start_date is not None and end_date is not None and start_date > end_date:
            raise ValidationError(f"Start date {start_date} is after end date {end_date}")
        return self.db.list_bank_transactions(status, start_date, end_date)

    def update_transaction_status(
        self, transaction_id: int, status: TransactionStatus
    ) -> BankTransaction:
        """Move a stored transaction to another status, e.g. failed or reconciled.

        Raises:
            NotFoundError: If the transaction doesn't exist
        """
        transaction = self.db.get_bank_transaction(transaction_id)
        if transaction is None:
            raise NotFoundError(f"Bank transaction {transaction_id} not found")
        updated = self.db.update_bank_transaction_status(transaction_id, status)
        logger.info(
            "Transaction %s: %s -> %s", transaction_id, transaction.status.value, status.value
        )
        return updated

    def transaction_summary(self) -> dict[str, Any]:
        """Counts per status plus total amount, currencies and banks."""
        return self.db.get_bank_transaction_summary()

    def reconcile(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> ReconciliationReport:
        """Scan stored transactions for discrepancies.

        Discrepancies are reported, never raised.
        """
        transactions = self.list_transactions(start_date=start_date, end_date=end_date)
        matched = sum(
            1
            for t in transactions
            if t.status in (TransactionStatus.PROCESSED, TransactionStatus.RECONCILED)
        )

        discrepancies = []
        concept_counts = Counter(t.concept for t in transactions)
        duplicates = sorted(c for c, n in concept_counts.items() if n > 1)
        if duplicates:
            discrepancies.append(f"Duplicate concepts found: {', '.join(duplicates)}")
        high_amount = sum(1 for t in transactions if t.amount > RECONCILIATION_HIGH_AMOUNT)
        if high_amount:
            discrepancies.append(f"{high_amount} high amount transaction(s)")

        if discrepancies:
            logger.warning("Reconciliation found %d discrepancies", len(discrepancies))
        return ReconciliationReport(
            total=len(transactions),
            matched=matched,
            unmatched=len(transactions) - matched,
            discrepancies=tuple(discrepancies),
        )
