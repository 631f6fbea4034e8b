"""Tests for the charge ledger."""

from decimal import Decimal

import pytest

from condoledger.domain.entities import ConceptType, PaymentStatus
from condoledger.domain.errors import NotFoundError


def _allocate(db, house_id, period_id, amount, concept=ConceptType.MAINTENANCE):
    db.create_allocation(
        record_id=10,
        house_id=house_id,
        period_id=period_id,
        concept_type=concept,
        allocated_amount=Decimal(amount),
        expected_amount=Decimal("800"),
        payment_status=PaymentStatus.COMPLETE,
    )


def test_unpaid_balance(ledger_service, sample_houses, sample_periods):
    house, period = sample_houses[0], sample_periods[0]

    balance = ledger_service.charge_balance(house.id, period.id)

    assert balance.total_expected == Decimal("800.00")
    assert balance.total_paid == Decimal("0.00")
    assert balance.balance == Decimal("800.00")
    assert not balance.is_paid
    assert [d.concept_type for d in balance.details] == [ConceptType.MAINTENANCE]


def test_partially_paid(temp_db, ledger_service, sample_houses, sample_periods):
    house, period = sample_houses[0], sample_periods[0]
    _allocate(temp_db, house.id, period.id, "500")

    assert ledger_service.total_paid(house.id, period.id) == Decimal("500.00")
    assert ledger_service.balance(house.id, period.id) == Decimal("300.00")


def test_overpayment_is_representable(temp_db, ledger_service, sample_houses, sample_periods):
    house, period = sample_houses[0], sample_periods[0]
    _allocate(temp_db, house.id, period.id, "950")

    balance = ledger_service.charge_balance(house.id, period.id)

    assert balance.balance == Decimal("-150.00")
    assert balance.is_paid
    assert balance.details[0].is_paid


def test_details_per_concept(temp_db, period_service, ledger_service, sample_houses, sample_config):
    period = period_service.create_period(2025, 4)
    period_service.update_period_concepts(period.id, water_active=True)
    period_service.seed_charges_for_period(period.id)
    house = sample_houses[0]
    # The config has no water amount, so the water charge is added by hand
    temp_db.create_charges(
        [
            {
                "house_id": house.id,
                "period_id": period.id,
                "concept_type": ConceptType.WATER,
                "expected_amount": Decimal("120"),
                "source": "manual",
            }
        ]
    )
    _allocate(temp_db, house.id, period.id, "120", ConceptType.WATER)

    details = {d.concept_type: d for d in ledger_service.payment_details(house.id, period.id)}

    assert details[ConceptType.WATER].is_paid
    assert details[ConceptType.WATER].balance == Decimal("0.00")
    assert not details[ConceptType.MAINTENANCE].is_paid
    assert ledger_service.total_expected(house.id, period.id) == Decimal("920.00")


def test_unknown_period(ledger_service, sample_houses):
    with pytest.raises(NotFoundError, match="not found"):
        ledger_service.charge_balance(sample_houses[0].id, 999)


def test_unseeded_period(period_service, ledger_service, sample_config, sample_houses):
    period = period_service.create_period(2025, 5)

    assert not ledger_service.is_period_fully_charged(period.id)
    with pytest.raises(NotFoundError, match="Run seed first"):
        ledger_service.charge_balance(sample_houses[0].id, period.id)
