"""Field rules for bank statement rows."""

import re
from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from typing import Optional

from dateutil.relativedelta import relativedelta

from condoledger.domain.entities import NewBankTransaction, RowValidation, StatementRow
from condoledger.utils.amount_parser import parse_amount
from condoledger.utils.date_parser import normalize_time
from condoledger.utils.money import round2

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
CURRENCY_PATTERN = re.compile(r"^[A-Za-z]{3}$")

MIN_AMOUNT = Decimal("0.01")
MAX_AMOUNT = Decimal("10000000")
MAX_CONCEPT_LENGTH = 500
MIN_CONCEPT_LENGTH = 3
MAX_FUTURE_DAYS = 30
MAX_PAST_YEARS = 10
SUPPORTED_CURRENCIES = ("MXN", "USD", "EUR", "CAD")
SUSPICIOUS_AMOUNTS = tuple(
    Decimal(v) for v in ("0", "1", "999999", "1000000", "9999999", "10000000")
)
HIGH_DEPOSIT_THRESHOLD = Decimal("100000")
HIGH_WITHDRAWAL_THRESHOLD = Decimal("50000")
HIGH_ROUND_AMOUNT_THRESHOLD = Decimal("10000")
BUSINESS_HOURS = (6, 22)
SUSPICIOUS_KEYWORDS = (
    "test",
    "prueba",
    "demo",
    "temporal",
    "temp",
    "xxxxx",
    "aaaaa",
    "zzzzz",
    "unknown",
    "desconocido",
)
INJECTION_PATTERNS = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (r"<script", r"javascript:", r"on\w+\s*=", r"data:text/html")
)


class StatementRowValidator:
    """Validates raw statement rows and builds transactions from good ones."""

    def __init__(self, today: Optional[date] = None):
        self.today = today

    def validate(self, row: StatementRow, bank_name: str) -> RowValidation:
        """Check every field of a row.

        Returns:
            RowValidation whose transaction is set only when there are no errors
        """
        errors: list[str] = []
        warnings: list[str] = []

        row_date = self._validate_date(row.date, errors)
        row_time = self._validate_time(row.time, errors)
        concept = self._validate_concept(row.concept, errors, warnings)
        amount = self._validate_amount(row.amount, errors, warnings)
        currency = self._validate_currency(row.currency, errors)
        is_deposit = self._validate_is_deposit(row.is_deposit, errors)

        if errors:
            return RowValidation(errors=tuple(errors), warnings=tuple(warnings))

        self._check_business_rules(row_date, row_time, concept, amount, is_deposit, warnings)
        transaction = NewBankTransaction(
            date=row_date,
            time=row_time,
            concept=concept,
            amount=round2(amount),
            currency=currency,
            is_deposit=is_deposit,
            bank_name=bank_name,
        )
        return RowValidation(warnings=tuple(warnings), transaction=transaction)

    def _validate_date(self, value: object, errors: list[str]) -> Optional[date]:
        text = str(value).strip() if value is not None else ""
        if not text:
            errors.append("Date is required")
            return None
        if not DATE_PATTERN.match(text):
            errors.append("Invalid date format. Use YYYY-MM-DD")
            return None
        try:
            parsed = date.fromisoformat(text)
        except ValueError:
            errors.append("Invalid date")
            return None

        today = self.today or date.today()
        if parsed > today + timedelta(days=MAX_FUTURE_DAYS):
            errors.append(f"Date cannot be more than {MAX_FUTURE_DAYS} days in the future")
        if parsed < today - relativedelta(years=MAX_PAST_YEARS):
            errors.append(f"Date cannot be more than {MAX_PAST_YEARS} years in the past")
        return parsed

    def _validate_time(self, value: object, errors: list[str]) -> Optional[str]:
        text = str(value).strip() if value is not None else ""
        if not text:
            errors.append("Time is required")
            return None
        try:
            return normalize_time(text)
        except ValueError:
            errors.append("Invalid time format. Use HH:MM:SS")
            return None

    def _validate_concept(self, value: object, errors: list[str], warnings: list[str]) -> str:
        concept = str(value).strip() if value is not None else ""
        if not concept:
            errors.append("Concept is required")
            return concept
        if len(concept) > MAX_CONCEPT_LENGTH:
            errors.append(f"Concept cannot exceed {MAX_CONCEPT_LENGTH} characters")
        if len(concept) < MIN_CONCEPT_LENGTH:
            warnings.append("Concept is very short")
        if any(pattern.search(concept) for pattern in INJECTION_PATTERNS):
            errors.append("Concept contains characters that are not allowed")
        return concept

    def _validate_amount(
        self, value: object, errors: list[str], warnings: list[str]
    ) -> Optional[Decimal]:
        amount: Optional[Decimal] = None
        if isinstance(value, bool) or value is None:
            amount = None
        elif isinstance(value, str):
            try:
                amount = parse_amount(value)
            except ValueError:
                amount = None
        else:
            try:
                amount = Decimal(str(value))
            except InvalidOperation:
                amount = None
        if amount is None or not amount.is_finite():
            errors.append("Amount must be a valid number")
            return None

        if amount < MIN_AMOUNT:
            errors.append(f"Minimum amount is {MIN_AMOUNT}")
        if amount > MAX_AMOUNT:
            errors.append(f"Maximum amount is {MAX_AMOUNT}")
        if amount % 1 == 0:
            warnings.append("Amount has no decimals")
        if amount in SUSPICIOUS_AMOUNTS:
            warnings.append("Suspicious amount detected")
        return amount

    def _validate_currency(self, value: object, errors: list[str]) -> Optional[str]:
        currency = str(value).strip() if value is not None else ""
        if not currency:
            errors.append("Currency is required")
            return None
        if not CURRENCY_PATTERN.match(currency):
            errors.append("Invalid currency format. Use a 3-letter code (e.g. MXN, USD)")
        if currency.upper() not in SUPPORTED_CURRENCIES:
            errors.append(
                f"Unsupported currency: {currency}. "
                f"Supported currencies: {', '.join(SUPPORTED_CURRENCIES)}"
            )
        return currency.upper()

    def _validate_is_deposit(self, value: object, errors: list[str]) -> bool:
        if not isinstance(value, bool):
            errors.append("Deposit flag must be a boolean")
            return False
        return value

    def _check_business_rules(
        self,
        row_date: date,
        row_time: str,
        concept: str,
        amount: Decimal,
        is_deposit: bool,
        warnings: list[str],
    ) -> None:
        if is_deposit and amount > HIGH_DEPOSIT_THRESHOLD:
            warnings.append("High deposit amount detected")
        if not is_deposit and amount > HIGH_WITHDRAWAL_THRESHOLD:
            warnings.append("High withdrawal amount detected")

        hour = int(row_time.split(":")[0])
        if hour < BUSINESS_HOURS[0] or hour > BUSINESS_HOURS[1]:
            warnings.append("Transaction outside business hours")
        if row_date.weekday() >= 5:
            warnings.append("Transaction on a weekend")

        lowered = concept.lower()
        if any(keyword in lowered for keyword in SUSPICIOUS_KEYWORDS):
            warnings.append("Suspicious concept detected")
        if amount % 1000 == 0 and amount > HIGH_ROUND_AMOUNT_THRESHOLD:
            warnings.append("High round amount detected")
