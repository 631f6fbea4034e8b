"""Tests for statement row validation."""

from datetime import date
from decimal import Decimal

import pytest

from condoledger.domain.entities import StatementRow
from condoledger.domain.statement_validation import StatementRowValidator

# A Monday
TODAY = date(2025, 3, 17)


def _row(**overrides):
    values = {
        "date": "2025-03-17",
        "time": "10:30",
        "concept": "SPEI DEPOSIT HOUSE 12",
        "amount": "1600.50",
        "currency": "MXN",
        "is_deposit": True,
    }
    values.update(overrides)
    return StatementRow(**values)


@pytest.fixture
def validator():
    return StatementRowValidator(today=TODAY)


def test_valid_row(validator):
    result = validator.validate(_row(), "Santander")

    assert result.is_valid
    assert result.errors == ()
    assert result.warnings == ()
    txn = result.transaction
    assert txn.date == date(2025, 3, 17)
    assert txn.time == "10:30:00"
    assert txn.amount == Decimal("1600.50")
    assert txn.currency == "MXN"
    assert txn.bank_name == "Santander"


@pytest.mark.parametrize(
    "overrides,message",
    [
        ({"date": ""}, "Date is required"),
        ({"date": "17/03/2025"}, "Invalid date format"),
        ({"date": "2025-02-30"}, "Invalid date"),
        ({"date": "2025-05-01"}, "days in the future"),
        ({"date": "2014-01-01"}, "years in the past"),
        ({"time": ""}, "Time is required"),
        ({"time": "25:00"}, "Invalid time format"),
        ({"concept": "  "}, "Concept is required"),
        ({"concept": "x" * 501}, "cannot exceed 500"),
        ({"concept": "pay <script>alert(1)</script>"}, "not allowed"),
        ({"amount": "abc"}, "valid number"),
        ({"amount": "0"}, "Minimum amount"),
        ({"amount": "10000000.01"}, "Maximum amount"),
        ({"currency": ""}, "Currency is required"),
        ({"currency": "GBP"}, "Unsupported currency"),
        ({"currency": "MX"}, "Invalid currency format"),
        ({"is_deposit": "maybe"}, "boolean"),
    ],
)
def test_invalid_rows(validator, overrides, message):
    result = validator.validate(_row(**overrides), "Santander")

    assert not result.is_valid
    assert result.transaction is None
    assert any(message in e for e in result.errors)


@pytest.mark.parametrize(
    "overrides,message",
    [
        ({"concept": "ab"}, "very short"),
        ({"amount": "1600"}, "no decimals"),
        ({"amount": "1"}, "Suspicious amount"),
        ({"amount": "150000.50"}, "High deposit"),
        ({"amount": "60000.50", "is_deposit": False}, "High withdrawal"),
        ({"time": "23:15"}, "outside business hours"),
        ({"date": "2025-03-16"}, "weekend"),
        ({"concept": "prueba de deposito"}, "Suspicious concept"),
        ({"amount": "20000"}, "High round amount"),
    ],
)
def test_warnings_do_not_reject(validator, overrides, message):
    result = validator.validate(_row(**overrides), "Santander")

    assert result.is_valid
    assert any(message in w for w in result.warnings)


def test_currency_is_uppercased(validator):
    assert validator.validate(_row(currency="usd"), "BBVA").transaction.currency == "USD"


def test_numeric_amount(validator):
    assert validator.validate(_row(amount=250.255), "BBVA").transaction.amount == Decimal("250.26")


def test_formatted_amount(validator):
    assert validator.validate(_row(amount="$1,250.00"), "BBVA").transaction.amount == Decimal(
        "1250.00"
    )
