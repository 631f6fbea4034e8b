"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional, Any
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from condoledger.domain.entities import (
    House,
    Period,
    PeriodConfig,
    HousePeriodCharge,
    HousePeriodOverride,
    RecordAllocation,
    HouseBalance,
    BankTransaction,
    NewBankTransaction,
    IngestionPointer,
    ConceptType,
    PaymentStatus,
    TransactionStatus,
)


class Database(ABC):
    """Abstract database interface for condoledger."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # House operations
    @abstractmethod
    def create_house(self, number: int) -> int:
        """Create a house. Returns house ID."""
        pass

    @abstractmethod
    def get_house(self, house_id: int) -> Optional[House]:
        """Get house by ID."""
        pass

    @abstractmethod
    def get_house_by_number(self, number: int) -> Optional[House]:
        """Get house by its number."""
        pass

    @abstractmethod
    def list_houses(self) -> list[House]:
        """List all houses ordered by number."""
        pass

    # Period config operations
    @abstractmethod
    def create_period_config(
        self,
        default_maintenance_amount: Decimal,
        default_water_amount: Decimal,
        default_extraordinary_fee_amount: Decimal,
        payment_due_day: int,
        late_payment_penalty_amount: Decimal,
        effective_from: date,
        effective_until: Optional[date] = None,
        is_active: bool = True,
    ) -> int:
        """Create a period config. Returns config ID."""
        pass

    @abstractmethod
    def get_period_config(self, config_id: int) -> Optional[PeriodConfig]:
        """Get period config by ID."""
        pass

    @abstractmethod
    def find_active_config_for_date(self, on: date) -> Optional[PeriodConfig]:
        """Get the active config whose effective window contains the date.

        When several windows overlap, the one with the latest effective_from wins.
        """
        pass

    @abstractmethod
    def list_period_configs(self) -> list[PeriodConfig]:
        """List configs, most recent effective_from first."""
        pass

    @abstractmethod
    def close_period_config(self, config_id: int, effective_until: date) -> None:
        """Set the end of a config's effective window."""
        pass

    # Period operations
    @abstractmethod
    def create_period(
        self,
        year: int,
        month: int,
        start_date: date,
        end_date: date,
        config_id: Optional[int] = None,
    ) -> int:
        """Create a period. Returns period ID."""
        pass

    @abstractmethod
    def get_period(self, period_id: int) -> Optional[Period]:
        """Get period by ID."""
        pass

    @abstractmethod
    def get_period_by_year_month(self, year: int, month: int) -> Optional[Period]:
        """Get period by calendar year and month."""
        pass

    @abstractmethod
    def list_periods(self) -> list[Period]:
        """List all periods (no ordering guarantee)."""
        pass

    @abstractmethod
    def update_period_concepts(
        self,
        period_id: int,
        water_active: Optional[bool] = None,
        extraordinary_fee_active: Optional[bool] = None,
    ) -> None:
        """Toggle the optional concepts of a period. None leaves a flag unchanged."""
        pass

    # House period charge operations
    @abstractmethod
    def create_charges(self, charges: list[dict[str, Any]]) -> list[int]:
        """Batch-create charges.

        Each dict holds house_id, period_id, concept_type, expected_amount and
        source. Returns the new charge IDs in input order.
        """
        pass

    @abstractmethod
    def get_charge(self, charge_id: int) -> Optional[HousePeriodCharge]:
        """Get charge by ID."""
        pass

    @abstractmethod
    def find_charges_by_house_and_period(
        self, house_id: int, period_id: int
    ) -> list[HousePeriodCharge]:
        """Get all charges of a house in a period."""
        pass

    @abstractmethod
    def find_charges_by_period(self, period_id: int) -> list[HousePeriodCharge]:
        """Get all charges of a period."""
        pass

    @abstractmethod
    def update_charge_amount(self, charge_id: int, expected_amount: Decimal) -> HousePeriodCharge:
        """Update the expected amount of a charge in place."""
        pass

    @abstractmethod
    def delete_charge(self, charge_id: int) -> bool:
        """Delete a charge. Returns False if it did not exist."""
        pass

    @abstractmethod
    def sum_expected_by_house_and_period(self, house_id: int, period_id: int) -> Decimal:
        """Total expected amount of a house in a period."""
        pass

    # House period override operations
    @abstractmethod
    def set_override(
        self, house_id: int, period_id: int, concept_type: ConceptType, custom_amount: Decimal
    ) -> int:
        """Create or replace a house override. Returns override ID."""
        pass

    @abstractmethod
    def find_overrides_by_period(self, period_id: int) -> list[HousePeriodOverride]:
        """Get all overrides of a period."""
        pass

    @abstractmethod
    def get_applicable_amount(
        self, house_id: int, period_id: int, concept_type: ConceptType, default_amount: Decimal
    ) -> Decimal:
        """Override amount for the house/period/concept, or default_amount if none."""
        pass

    # Record allocation operations
    @abstractmethod
    def create_allocation(
        self,
        record_id: int,
        house_id: int,
        period_id: int,
        concept_type: ConceptType,
        allocated_amount: Decimal,
        expected_amount: Decimal,
        payment_status: PaymentStatus,
    ) -> int:
        """Create an allocation. Returns allocation ID."""
        pass

    @abstractmethod
    def find_allocations_by_house_and_period(
        self, house_id: int, period_id: int
    ) -> list[RecordAllocation]:
        """Get all allocations of a house in a period."""
        pass

    @abstractmethod
    def record_allocations(
        self,
        house_id: int,
        allocations: list[dict[str, Any]],
        credit_delta: Decimal = Decimal("0"),
        debit_delta: Decimal = Decimal("0"),
        cents_delta: Decimal = Decimal("0"),
        processed_transaction_id: Optional[int] = None,
    ) -> list[int]:
        """Write allocations and balance changes of a house in one transaction.

        Each allocation dict holds record_id, period_id, concept_type,
        allocated_amount, expected_amount and payment_status. Balance deltas
        follow the same rules as the single-field operations. When
        processed_transaction_id is given, that bank transaction is marked
        processed in the same commit. Returns allocation IDs in input order.
        """
        pass

    @abstractmethod
    def sum_allocated_by_house_and_period(
        self, house_id: int, period_id: int, concept_type: Optional[ConceptType] = None
    ) -> Decimal:
        """Total allocated to a house in a period, optionally for one concept."""
        pass

    # House balance operations
    @abstractmethod
    def get_or_create_house_balance(self, house_id: int) -> HouseBalance:
        """Get the balance row of a house, creating a zeroed one if missing."""
        pass

    @abstractmethod
    def add_credit_balance(self, house_id: int, amount: Decimal) -> HouseBalance:
        """Add to credit balance (never below zero)."""
        pass

    @abstractmethod
    def subtract_credit_balance(self, house_id: int, amount: Decimal) -> HouseBalance:
        """Subtract from credit balance (never below zero)."""
        pass

    @abstractmethod
    def add_debit_balance(self, house_id: int, amount: Decimal) -> HouseBalance:
        """Add to debit balance (never below zero)."""
        pass

    @abstractmethod
    def subtract_debit_balance(self, house_id: int, amount: Decimal) -> HouseBalance:
        """Subtract from debit balance (never below zero)."""
        pass

    @abstractmethod
    def add_accumulated_cents(self, house_id: int, amount: Decimal) -> HouseBalance:
        """Add to the sub-unit carry, keeping it within [0, 1).

        Whole units that overflow the carry move to the credit balance.
        """
        pass

    # Bank transaction operations
    @abstractmethod
    def create_bank_transactions(
        self, transactions: list[NewBankTransaction]
    ) -> list[BankTransaction]:
        """Persist validated statement rows as pending transactions."""
        pass

    @abstractmethod
    def find_bank_transactions_by_date_and_bank(
        self, on: date, bank_name: str
    ) -> list[BankTransaction]:
        """Get stored transactions of one bank on one calendar date."""
        pass

    @abstractmethod
    def get_bank_transaction(self, transaction_id: int) -> Optional[BankTransaction]:
        """Get bank transaction by ID."""
        pass

    @abstractmethod
    def update_bank_transaction_status(
        self, transaction_id: int, status: TransactionStatus
    ) -> BankTransaction:
        """Move a bank transaction to another status."""
        pass

    @abstractmethod
    def list_bank_transactions(
        self,
        status: Optional[TransactionStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[BankTransaction]:
        """List transactions with optional filters, newest first."""
        pass

    @abstractmethod
    def get_bank_transaction_summary(self) -> dict[str, Any]:
        """Aggregate stored transactions.

        Returns a dict with total, one count per status, total_amount,
        currencies and banks. Kept as dict for aggregation results.
        """
        pass

    # Ingestion pointer operations
    @abstractmethod
    def append_ingestion_pointer(self, transaction_id: int) -> int:
        """Append a new last-processed pointer. Returns pointer ID."""
        pass

    @abstractmethod
    def list_recent_ingestion_pointers(self, limit: int = 7) -> list[IngestionPointer]:
        """Most recent pointers first, each with its referenced transaction."""
        pass
