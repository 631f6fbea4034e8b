"""Shared pytest fixtures for condoledger tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest
from click.testing import CliRunner

from condoledger.config import Settings
from condoledger.database.factories import create_sqlite_database
from condoledger.domain.charges import ChargeMutationService
from condoledger.domain.distribution import DistributionService
from condoledger.domain.errors import ProviderError
from condoledger.domain.houses import HouseService
from condoledger.domain.ledger import ChargeLedgerService
from condoledger.domain.periods import PeriodService
from condoledger.domain.statement_ingestion import StatementIngestionService
from condoledger.domain.statement_validation import StatementRowValidator
from condoledger.reasoning.base import ReasoningService

# Fixed reference date so mutation windows and statement dates stay stable
TODAY = date(2025, 3, 15)


class FakeReasoningService(ReasoningService):
    """Reasoning provider returning canned answers in order."""

    def __init__(self, *answers, name="fake"):
        self.answers = list(answers)
        self.name = name
        self.prompts = []

    def analyze(self, prompt):
        self.prompts.append(prompt)
        if not self.answers:
            raise ProviderError(f"{self.name} has no answer")
        answer = self.answers.pop(0)
        if isinstance(answer, Exception):
            raise answer
        return answer


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def cli_runner():
    """Create a CLI runner for testing."""
    return CliRunner()


@pytest.fixture
def settings():
    """Default settings with AI distribution enabled."""
    return Settings()


@pytest.fixture
def house_service(temp_db):
    return HouseService(temp_db)


@pytest.fixture
def period_service(temp_db):
    return PeriodService(temp_db)


@pytest.fixture
def ledger_service(temp_db):
    return ChargeLedgerService(temp_db)


@pytest.fixture
def charge_service(temp_db):
    """Charge mutation service pinned to TODAY."""
    return ChargeMutationService(temp_db, today=TODAY)


@pytest.fixture
def distribution_service(temp_db, settings):
    """Distribution service without an AI analyzer."""
    return DistributionService(temp_db, settings)


@pytest.fixture
def ingestion_service(temp_db):
    """Ingestion service whose validator is pinned to TODAY."""
    return StatementIngestionService(temp_db, StatementRowValidator(today=TODAY))


@pytest.fixture
def sample_config(period_service):
    """Config of $800 maintenance and $100 penalty effective since 2024."""
    return period_service.create_config(
        default_maintenance_amount=Decimal("800"),
        effective_from=date(2024, 1, 1),
        late_payment_penalty_amount=Decimal("100"),
    )


@pytest.fixture
def sample_houses(house_service):
    """Houses 1, 2 and 3."""
    return [house_service.create_house(n) for n in (1, 2, 3)]


@pytest.fixture
def sample_periods(period_service, sample_config, sample_houses):
    """January to March 2025, seeded for every sample house."""
    periods = []
    for month in (1, 2, 3):
        period = period_service.create_period(2025, month)
        period_service.seed_charges_for_period(period.id)
        periods.append(period)
    return periods
