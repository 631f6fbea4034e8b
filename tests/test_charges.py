"""Tests for charge adjustments, reversals and condonations."""

from decimal import Decimal

import pytest

from condoledger.domain.entities import ChargeSource, ConceptType, PaymentStatus
from condoledger.domain.errors import ConflictError, NotFoundError, ValidationError
from conftest import TODAY


def _maintenance_charge(db, house, period):
    return next(
        c
        for c in db.find_charges_by_house_and_period(house.id, period.id)
        if c.concept_type is ConceptType.MAINTENANCE
    )


def _add_penalty(db, house, period, amount="100"):
    return db.create_charges(
        [
            {
                "house_id": house.id,
                "period_id": period.id,
                "concept_type": ConceptType.PENALTIES,
                "expected_amount": Decimal(amount),
                "source": ChargeSource.MANUAL,
            }
        ]
    )[0]


def _pay(db, house, period, amount, concept=ConceptType.MAINTENANCE):
    db.create_allocation(
        record_id=5,
        house_id=house.id,
        period_id=period.id,
        concept_type=concept,
        allocated_amount=Decimal(amount),
        expected_amount=Decimal("800"),
        payment_status=PaymentStatus.PARTIAL,
    )


class TestAdjustCharge:
    def test_adjust_in_place(self, temp_db, charge_service, sample_houses, sample_periods):
        house, period = sample_houses[0], sample_periods[2]
        charge = _maintenance_charge(temp_db, house, period)

        result = charge_service.adjust_charge(charge.id, Decimal("750"))

        assert result.previous_amount == Decimal("800.00")
        assert result.new_amount == Decimal("750.00")
        assert result.difference == Decimal("-50.00")
        assert not result.is_paid
        stored = temp_db.get_charge(charge.id)
        assert stored.id == charge.id
        assert stored.expected_amount == Decimal("750.00")

    def test_cannot_go_below_paid(self, temp_db, charge_service, sample_houses, sample_periods):
        house, period = sample_houses[0], sample_periods[2]
        charge = _maintenance_charge(temp_db, house, period)
        _pay(temp_db, house, period, "500")

        with pytest.raises(ConflictError, match="below what was already paid"):
            charge_service.adjust_charge(charge.id, Decimal("400"))

    def test_adjust_to_paid_amount(self, temp_db, charge_service, sample_houses, sample_periods):
        house, period = sample_houses[0], sample_periods[2]
        charge = _maintenance_charge(temp_db, house, period)
        _pay(temp_db, house, period, "500")

        result = charge_service.adjust_charge(charge.id, Decimal("500"))

        assert result.paid_amount == Decimal("500.00")
        assert result.is_paid

    def test_unchanged_amount(self, temp_db, charge_service, sample_houses, sample_periods):
        charge = _maintenance_charge(temp_db, sample_houses[0], sample_periods[2])

        with pytest.raises(ValidationError):
            charge_service.adjust_charge(charge.id, Decimal("800"))

    def test_frozen_period(self, temp_db, period_service, charge_service, sample_houses, sample_periods):
        old = period_service.create_period(2024, 10)
        period_service.seed_charges_for_period(old.id)
        charge = _maintenance_charge(temp_db, sample_houses[0], old)

        with pytest.raises(ConflictError, match="months ago"):
            charge_service.adjust_charge(charge.id, Decimal("700"))
        assert temp_db.get_charge(charge.id).expected_amount == Decimal("800.00")

    def test_unknown_charge(self, charge_service):
        with pytest.raises(NotFoundError):
            charge_service.adjust_charge(999, Decimal("100"))


class TestReverseCharge:
    def test_reverse_unpaid(self, temp_db, charge_service, sample_houses, sample_periods):
        house, period = sample_houses[0], sample_periods[1]
        charge = _maintenance_charge(temp_db, house, period)

        result = charge_service.reverse_charge(charge.id)

        assert result.removed_amount == Decimal("800.00")
        assert temp_db.get_charge(charge.id) is None

    def test_reverse_paid_is_refused(self, temp_db, charge_service, sample_houses, sample_periods):
        house, period = sample_houses[0], sample_periods[1]
        charge = _maintenance_charge(temp_db, house, period)
        _pay(temp_db, house, period, "100")

        with pytest.raises(ConflictError, match="already has payments"):
            charge_service.reverse_charge(charge.id)
        assert temp_db.get_charge(charge.id) is not None

    def test_other_houses_payments_do_not_block(
        self, temp_db, charge_service, sample_houses, sample_periods
    ):
        period = sample_periods[1]
        _pay(temp_db, sample_houses[1], period, "800")
        charge = _maintenance_charge(temp_db, sample_houses[0], period)

        charge_service.reverse_charge(charge.id)

        assert temp_db.get_charge(charge.id) is None

    def test_unknown_charge(self, charge_service):
        with pytest.raises(NotFoundError):
            charge_service.reverse_charge(999)


class TestCondonation:
    def test_condone_penalty(self, temp_db, charge_service, sample_houses, sample_periods):
        house, period = sample_houses[0], sample_periods[0]
        penalty_id = _add_penalty(temp_db, house, period)

        assert charge_service.condone_penalty(house.id, period.id) == Decimal("100.00")
        assert temp_db.get_charge(penalty_id) is None

    def test_paid_penalty(self, temp_db, charge_service, sample_houses, sample_periods):
        house, period = sample_houses[0], sample_periods[0]
        _add_penalty(temp_db, house, period)
        _pay(temp_db, house, period, "100", ConceptType.PENALTIES)

        with pytest.raises(ConflictError):
            charge_service.condone_penalty(house.id, period.id)

    def test_no_penalty(self, charge_service, sample_houses, sample_periods):
        with pytest.raises(NotFoundError, match="No penalty charge"):
            charge_service.condone_penalty(sample_houses[0].id, sample_periods[0].id)

    def test_bulk_collects_failures(self, temp_db, charge_service, sample_houses, sample_periods):
        period = sample_periods[0]
        _add_penalty(temp_db, sample_houses[0], period, "100")
        _add_penalty(temp_db, sample_houses[1], period, "150")
        _pay(temp_db, sample_houses[1], period, "150", ConceptType.PENALTIES)

        result = charge_service.condone_penalties_for_period(
            period.id, [h.id for h in sample_houses]
        )

        assert result.total_condoned == Decimal("100.00")
        assert result.condoned_count == 1
        assert result.failure_count == 2
        assert [d.success for d in result.details] == [True, False, False]
        assert "already has payments" in result.details[1].reason

    def test_bulk_defaults_to_houses_with_penalties(
        self, temp_db, charge_service, sample_houses, sample_periods
    ):
        period = sample_periods[0]
        _add_penalty(temp_db, sample_houses[0], period, "100")
        _add_penalty(temp_db, sample_houses[2], period, "100")

        result = charge_service.condone_penalties_for_period(period.id)

        assert [d.house_id for d in result.details] == [sample_houses[0].id, sample_houses[2].id]
        assert result.total_condoned == Decimal("200.00")
        assert result.failure_count == 0

    def test_condone_generated_penalties(
        self, temp_db, period_service, charge_service, sample_houses, sample_periods
    ):
        january = sample_periods[0]
        period_service.generate_penalties_for_period(january.id, TODAY)

        result = charge_service.condone_penalties_for_period(january.id)

        assert result.condoned_count == 3
        assert result.total_condoned == Decimal("300.00")
        assert all(
            c.concept_type is ConceptType.MAINTENANCE
            for c in temp_db.find_charges_by_period(january.id)
        )

    def test_bulk_unknown_period(self, charge_service):
        with pytest.raises(NotFoundError):
            charge_service.condone_penalties_for_period(999)
