"""Domain model entities for condoledger.

These are pure data classes representing business concepts, independent of
database schema. Services and the database port exchange these objects, so
the ORM layer can change without touching the business rules.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional

from condoledger.utils.date_parser import period_display_name


class ConceptType(str, Enum):
    """What a charge or allocation is for."""

    MAINTENANCE = "maintenance"
    WATER = "water"
    EXTRAORDINARY_FEE = "extraordinary_fee"
    PENALTIES = "penalties"
    OTHER = "other"


# Concepts that can carry a per-house custom amount
OVERRIDABLE_CONCEPTS = (
    ConceptType.MAINTENANCE,
    ConceptType.WATER,
    ConceptType.EXTRAORDINARY_FEE,
)


class ChargeSource(str, Enum):
    """Where the expected amount of a charge came from."""

    CONFIG = "config"
    OVERRIDE = "override"
    MANUAL = "manual"


class PaymentStatus(str, Enum):
    """Status of an allocation relative to its charge."""

    COMPLETE = "complete"
    PARTIAL = "partial"
    OVERPAID = "overpaid"


class TransactionStatus(str, Enum):
    """Lifecycle of a bank statement row."""

    PENDING = "pending"
    PROCESSED = "processed"
    FAILED = "failed"
    RECONCILED = "reconciled"


class Confidence(str, Enum):
    """Trust level attached to a distribution plan."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"


CONFIDENCE_LEVELS = {
    Confidence.HIGH: 3,
    Confidence.MEDIUM: 2,
    Confidence.LOW: 1,
    Confidence.NONE: 0,
}


class DistributionMethod(str, Enum):
    """How a distribution plan was produced."""

    DETERMINISTIC = "deterministic"
    AI = "ai"
    MANUAL_REVIEW = "manual_review"


@dataclass(frozen=True)
class House:
    """A unit of the property."""

    id: int
    number: int
    created_at: datetime


@dataclass(frozen=True)
class PeriodConfig:
    """Versioned default amounts and payment rules."""

    id: int
    default_maintenance_amount: Decimal
    default_water_amount: Decimal
    default_extraordinary_fee_amount: Decimal
    payment_due_day: int
    late_payment_penalty_amount: Decimal
    effective_from: date
    effective_until: Optional[date]
    is_active: bool

    def covers(self, on: date) -> bool:
        """Whether this config is in force on the given date."""
        if not self.is_active or self.effective_from > on:
            return False
        return self.effective_until is None or self.effective_until >= on

    def default_amount(self, concept_type: ConceptType) -> Decimal:
        """Configured default for a concept (zero for concepts without one)."""
        defaults = {
            ConceptType.MAINTENANCE: self.default_maintenance_amount,
            ConceptType.WATER: self.default_water_amount,
            ConceptType.EXTRAORDINARY_FEE: self.default_extraordinary_fee_amount,
            ConceptType.PENALTIES: self.late_payment_penalty_amount,
        }
        return defaults.get(concept_type, Decimal("0"))


@dataclass(frozen=True)
class Period:
    """A calendar-month billing period."""

    id: int
    year: int
    month: int
    start_date: date
    end_date: date
    config_id: Optional[int] = None
    water_active: bool = False
    extraordinary_fee_active: bool = False

    @property
    def display_name(self) -> str:
        return period_display_name(self.year, self.month)

    @property
    def sort_key(self) -> tuple[int, int]:
        return (self.year, self.month)


@dataclass(frozen=True)
class HousePeriodCharge:
    """What a house legitimately owes for one concept in one period."""

    id: int
    house_id: int
    period_id: int
    concept_type: ConceptType
    expected_amount: Decimal
    source: ChargeSource


@dataclass(frozen=True)
class HousePeriodOverride:
    """Per-house exception to the configured default amount."""

    id: int
    house_id: int
    period_id: int
    concept_type: ConceptType
    custom_amount: Decimal


@dataclass(frozen=True)
class RecordAllocation:
    """Money from a payment record applied to a house/period/concept."""

    id: int
    record_id: int
    house_id: int
    period_id: int
    concept_type: ConceptType
    allocated_amount: Decimal
    expected_amount: Decimal
    payment_status: PaymentStatus


@dataclass(frozen=True)
class HouseBalance:
    """Running account of a house."""

    house_id: int
    credit_balance: Decimal
    debit_balance: Decimal
    accumulated_cents: Decimal


@dataclass(frozen=True)
class BankTransaction:
    """A row from an uploaded bank statement."""

    id: int
    date: date
    time: str
    concept: str
    amount: Decimal
    currency: str
    is_deposit: bool
    bank_name: str
    status: TransactionStatus
    created_at: datetime

    @property
    def identity(self) -> tuple[date, str, str, Decimal, str]:
        """Composite key used to recognize the same statement row twice."""
        return (self.date, self.time, self.concept, self.amount, self.bank_name)


@dataclass(frozen=True)
class IngestionPointer:
    """Append-only marker of the last transaction of an ingestion run."""

    id: int
    transaction_id: int
    created_at: datetime
    transaction: Optional[BankTransaction] = None


@dataclass(frozen=True)
class ConceptBalance:
    """Expected versus paid for one concept of a house/period."""

    concept_type: ConceptType
    expected_amount: Decimal
    paid_amount: Decimal
    balance: Decimal
    is_paid: bool


@dataclass(frozen=True)
class ChargeBalance:
    """Expected versus paid for a house in a period."""

    house_id: int
    period_id: int
    total_expected: Decimal
    total_paid: Decimal
    balance: Decimal
    is_paid: bool
    details: tuple[ConceptBalance, ...] = ()


@dataclass(frozen=True)
class UnpaidPeriod:
    """A period where expected maintenance exceeds paid maintenance."""

    period_id: int
    year: int
    month: int
    display_name: str
    expected_maintenance: Decimal
    paid_maintenance: Decimal
    pending_maintenance: Decimal


@dataclass(frozen=True)
class SuggestedAllocation:
    """One line of a distribution plan."""

    period_id: int
    concept_type: ConceptType
    amount: Decimal
    reasoning: str = ""


@dataclass(frozen=True)
class DistributionPlan:
    """How a payment should be split across pending periods."""

    method: DistributionMethod
    confidence: Confidence
    allocations: tuple[SuggestedAllocation, ...]
    total_allocated: Decimal
    remaining_as_credit: Decimal
    reasoning: str
    requires_manual_review: bool = False
    auto_applied: bool = False


@dataclass(frozen=True)
class AIDistributionRequest:
    """Context handed to a reasoning service."""

    amount: Decimal
    house_id: int
    house_number: int
    credit_balance: Decimal
    total_debt: Decimal
    unpaid_periods: tuple[UnpaidPeriod, ...]


@dataclass(frozen=True)
class AIDistributionResponse:
    """Sanitized answer of a reasoning service."""

    allocations: tuple[SuggestedAllocation, ...]
    confidence: Confidence
    reasoning: str
    total_allocated: Decimal
    remaining_as_credit: Decimal


@dataclass(frozen=True)
class StatementRow:
    """A raw statement row as produced by a file parser."""

    date: str
    time: str
    concept: str
    amount: object
    currency: str
    is_deposit: object


@dataclass(frozen=True)
class NewBankTransaction:
    """A validated statement row waiting to be persisted."""

    date: date
    time: str
    concept: str
    amount: Decimal
    currency: str
    is_deposit: bool
    bank_name: str

    @property
    def identity(self) -> tuple[date, str, str, Decimal, str]:
        return (self.date, self.time, self.concept, self.amount, self.bank_name)


@dataclass(frozen=True)
class RowValidation:
    """Outcome of validating one statement row."""

    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    transaction: Optional[NewBankTransaction] = None

    @property
    def is_valid(self) -> bool:
        return not self.errors and self.transaction is not None


@dataclass(frozen=True)
class IngestionResult:
    """Counts and rows of one statement upload."""

    bank_name: str
    total_rows: int
    accepted: int
    previously_processed: int
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    transactions: tuple[BankTransaction, ...] = ()
    date_range: Optional[tuple[date, date]] = None


@dataclass(frozen=True)
class ReconciliationReport:
    """Non-fatal reconciliation findings over stored transactions."""

    total: int
    matched: int
    unmatched: int
    discrepancies: tuple[str, ...] = field(default_factory=tuple)

    @property
    def success(self) -> bool:
        return not self.discrepancies


@dataclass(frozen=True)
class ChargeAdjustment:
    """Outcome of changing the expected amount of a charge."""

    charge_id: int
    house_id: int
    period_id: int
    concept_type: ConceptType
    previous_amount: Decimal
    new_amount: Decimal
    difference: Decimal
    paid_amount: Decimal
    is_paid: bool


@dataclass(frozen=True)
class ChargeReversal:
    """Outcome of deleting an unpaid charge."""

    charge_id: int
    house_id: int
    period_id: int
    concept_type: ConceptType
    removed_amount: Decimal


@dataclass(frozen=True)
class CondonationDetail:
    """Per-house line of a bulk condonation."""

    house_id: int
    condoned_amount: Decimal
    success: bool
    reason: Optional[str] = None


@dataclass(frozen=True)
class CondonationResult:
    """Outcome of forgiving penalty charges in a period."""

    period_id: int
    total_condoned: Decimal
    condoned_count: int
    failure_count: int
    details: tuple[CondonationDetail, ...] = ()


@dataclass(frozen=True)
class CreditApplication:
    """Outcome of spending a house's credit on its pending charges."""

    house_id: int
    credit_before: Decimal
    credit_after: Decimal
    total_applied: Decimal
    allocations: tuple[RecordAllocation, ...] = ()

    @property
    def periods_covered(self) -> int:
        return sum(1 for a in self.allocations if a.payment_status is PaymentStatus.COMPLETE)


@dataclass(frozen=True)
class PenaltyGeneration:
    """Outcome of charging late-payment penalties in a period."""

    period_id: int
    due_date: date
    penalty_amount: Decimal
    penalized_house_ids: tuple[int, ...] = ()
    already_penalized: int = 0

    @property
    def total_amount(self) -> Decimal:
        return self.penalty_amount * len(self.penalized_house_ids)
