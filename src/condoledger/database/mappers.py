"""Mapper functions to convert between domain models and SQLAlchemy models.

Enum-typed columns are stored as plain strings; the mappers turn them back
into the domain enums so services never see raw column values.
"""

from decimal import Decimal

from condoledger.domain import entities as domain
from condoledger.database.models import (
    House as ORMHouse,
    Period as ORMPeriod,
    PeriodConfig as ORMPeriodConfig,
    HousePeriodCharge as ORMHousePeriodCharge,
    HousePeriodOverride as ORMHousePeriodOverride,
    RecordAllocation as ORMRecordAllocation,
    HouseBalance as ORMHouseBalance,
    BankTransaction as ORMBankTransaction,
    IngestionPointer as ORMIngestionPointer,
)


def _money(value) -> Decimal:
    # SQLite hands Numeric columns back as Decimal already; None means unset
    return Decimal("0.00") if value is None else Decimal(value)


def house_to_domain(orm_house: ORMHouse) -> domain.House:
    """Convert SQLAlchemy House model to domain House entity."""
    return domain.House(
        id=orm_house.id,
        number=orm_house.number,
        created_at=orm_house.created_at,
    )


def period_config_to_domain(orm_config: ORMPeriodConfig) -> domain.PeriodConfig:
    """Convert SQLAlchemy PeriodConfig model to domain PeriodConfig entity."""
    return domain.PeriodConfig(
        id=orm_config.id,
        default_maintenance_amount=_money(orm_config.default_maintenance_amount),
        default_water_amount=_money(orm_config.default_water_amount),
        default_extraordinary_fee_amount=_money(orm_config.default_extraordinary_fee_amount),
        payment_due_day=orm_config.payment_due_day,
        late_payment_penalty_amount=_money(orm_config.late_payment_penalty_amount),
        effective_from=orm_config.effective_from,
        effective_until=orm_config.effective_until,
        is_active=orm_config.is_active,
    )


def period_to_domain(orm_period: ORMPeriod) -> domain.Period:
    """Convert SQLAlchemy Period model to domain Period entity."""
    return domain.Period(
        id=orm_period.id,
        year=orm_period.year,
        month=orm_period.month,
        start_date=orm_period.start_date,
        end_date=orm_period.end_date,
        config_id=orm_period.config_id,
        water_active=orm_period.water_active,
        extraordinary_fee_active=orm_period.extraordinary_fee_active,
    )


def charge_to_domain(orm_charge: ORMHousePeriodCharge) -> domain.HousePeriodCharge:
    """Convert SQLAlchemy HousePeriodCharge model to domain entity."""
    return domain.HousePeriodCharge(
        id=orm_charge.id,
        house_id=orm_charge.house_id,
        period_id=orm_charge.period_id,
        concept_type=domain.ConceptType(orm_charge.concept_type),
        expected_amount=_money(orm_charge.expected_amount),
        source=domain.ChargeSource(orm_charge.source),
    )


def override_to_domain(orm_override: ORMHousePeriodOverride) -> domain.HousePeriodOverride:
    """Convert SQLAlchemy HousePeriodOverride model to domain entity."""
    return domain.HousePeriodOverride(
        id=orm_override.id,
        house_id=orm_override.house_id,
        period_id=orm_override.period_id,
        concept_type=domain.ConceptType(orm_override.concept_type),
        custom_amount=_money(orm_override.custom_amount),
    )


def allocation_to_domain(orm_allocation: ORMRecordAllocation) -> domain.RecordAllocation:
    """Convert SQLAlchemy RecordAllocation model to domain entity."""
    return domain.RecordAllocation(
        id=orm_allocation.id,
        record_id=orm_allocation.record_id,
        house_id=orm_allocation.house_id,
        period_id=orm_allocation.period_id,
        concept_type=domain.ConceptType(orm_allocation.concept_type),
        allocated_amount=_money(orm_allocation.allocated_amount),
        expected_amount=_money(orm_allocation.expected_amount),
        payment_status=domain.PaymentStatus(orm_allocation.payment_status),
    )


def house_balance_to_domain(orm_balance: ORMHouseBalance) -> domain.HouseBalance:
    """Convert SQLAlchemy HouseBalance model to domain entity."""
    return domain.HouseBalance(
        house_id=orm_balance.house_id,
        credit_balance=_money(orm_balance.credit_balance),
        debit_balance=_money(orm_balance.debit_balance),
        accumulated_cents=_money(orm_balance.accumulated_cents),
    )


def bank_transaction_to_domain(orm_transaction: ORMBankTransaction) -> domain.BankTransaction:
    """Convert SQLAlchemy BankTransaction model to domain entity."""
    return domain.BankTransaction(
        id=orm_transaction.id,
        date=orm_transaction.date,
        time=orm_transaction.time,
        concept=orm_transaction.concept,
        amount=_money(orm_transaction.amount),
        currency=orm_transaction.currency,
        is_deposit=orm_transaction.is_deposit,
        bank_name=orm_transaction.bank_name,
        status=domain.TransactionStatus(orm_transaction.status),
        created_at=orm_transaction.created_at,
    )


def ingestion_pointer_to_domain(orm_pointer: ORMIngestionPointer) -> domain.IngestionPointer:
    """Convert SQLAlchemy IngestionPointer model to domain entity."""
    transaction = None
    if orm_pointer.transaction is not None:
        transaction = bank_transaction_to_domain(orm_pointer.transaction)
    return domain.IngestionPointer(
        id=orm_pointer.id,
        transaction_id=orm_pointer.transaction_id,
        created_at=orm_pointer.created_at,
        transaction=transaction,
    )
