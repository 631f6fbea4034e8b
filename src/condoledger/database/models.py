"""SQLAlchemy models for condoledger database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class House(Base):
    """House model."""

    __tablename__ = "houses"

    id = Column(Integer, primary_key=True)
    number = Column(Integer, unique=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    balance = relationship("HouseBalance", back_populates="house", uselist=False, cascade="all, delete-orphan")


class PeriodConfig(Base):
    """Versioned default amounts and payment rules."""

    __tablename__ = "period_configs"

    id = Column(Integer, primary_key=True)
    default_maintenance_amount = Column(Numeric(12, 2), nullable=False)
    default_water_amount = Column(Numeric(12, 2), nullable=False, default=0)
    default_extraordinary_fee_amount = Column(Numeric(12, 2), nullable=False, default=0)
    payment_due_day = Column(Integer, nullable=False, default=10)
    late_payment_penalty_amount = Column(Numeric(12, 2), nullable=False, default=0)
    effective_from = Column(Date, nullable=False)
    effective_until = Column(Date, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class Period(Base):
    """Calendar-month period model."""

    __tablename__ = "periods"

    id = Column(Integer, primary_key=True)
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    config_id = Column(Integer, ForeignKey("period_configs.id"), nullable=True)
    water_active = Column(Boolean, default=False, nullable=False)
    extraordinary_fee_active = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (UniqueConstraint("year", "month", name="uq_period_year_month"),)

    # Relationships
    config = relationship("PeriodConfig")
    charges = relationship("HousePeriodCharge", back_populates="period", cascade="all, delete-orphan")


class HousePeriodCharge(Base):
    """Expected amount per house, period and concept."""

    __tablename__ = "house_period_charges"

    id = Column(Integer, primary_key=True)
    house_id = Column(Integer, ForeignKey("houses.id"), nullable=False)
    period_id = Column(Integer, ForeignKey("periods.id"), nullable=False)
    concept_type = Column(String, nullable=False)
    expected_amount = Column(Numeric(12, 2), nullable=False)
    source = Column(String, nullable=False, default="config")
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # One charge per house, period and concept
    __table_args__ = (
        UniqueConstraint("house_id", "period_id", "concept_type", name="uq_charge_house_period_concept"),
    )

    # Relationships
    period = relationship("Period", back_populates="charges")


class HousePeriodOverride(Base):
    """Per-house custom amount for a period concept."""

    __tablename__ = "house_period_overrides"

    id = Column(Integer, primary_key=True)
    house_id = Column(Integer, ForeignKey("houses.id"), nullable=False)
    period_id = Column(Integer, ForeignKey("periods.id"), nullable=False)
    concept_type = Column(String, nullable=False)
    custom_amount = Column(Numeric(12, 2), nullable=False)

    __table_args__ = (
        UniqueConstraint("house_id", "period_id", "concept_type", name="uq_override_house_period_concept"),
    )


class RecordAllocation(Base):
    """Payment money applied to a house, period and concept."""

    __tablename__ = "record_allocations"

    id = Column(Integer, primary_key=True)
    record_id = Column(Integer, nullable=False)
    house_id = Column(Integer, ForeignKey("houses.id"), nullable=False)
    period_id = Column(Integer, ForeignKey("periods.id"), nullable=False)
    concept_type = Column(String, nullable=False)
    allocated_amount = Column(Numeric(12, 2), nullable=False)
    expected_amount = Column(Numeric(12, 2), nullable=False)
    payment_status = Column(String, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class HouseBalance(Base):
    """Running credit/debit account of a house."""

    __tablename__ = "house_balances"

    id = Column(Integer, primary_key=True)
    house_id = Column(Integer, ForeignKey("houses.id"), unique=True, nullable=False)
    credit_balance = Column(Numeric(12, 2), nullable=False, default=0)
    debit_balance = Column(Numeric(12, 2), nullable=False, default=0)
    accumulated_cents = Column(Numeric(12, 2), nullable=False, default=0)
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    # Relationships
    house = relationship("House", back_populates="balance")


class BankTransaction(Base):
    """Bank statement row model."""

    __tablename__ = "bank_transactions"

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False, index=True)
    time = Column(String, nullable=False)
    concept = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False)
    is_deposit = Column(Boolean, nullable=False)
    bank_name = Column(String, nullable=False, index=True)
    status = Column(String, nullable=False, default="pending")
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class IngestionPointer(Base):
    """Append-only last-processed transaction marker."""

    __tablename__ = "ingestion_pointers"

    id = Column(Integer, primary_key=True)
    transaction_id = Column(Integer, ForeignKey("bank_transactions.id"), nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    transaction = relationship("BankTransaction")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
