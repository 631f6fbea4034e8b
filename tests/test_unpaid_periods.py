"""Tests for unpaid period resolution."""

from decimal import Decimal

from condoledger.config import Settings
from condoledger.domain.entities import ConceptType, PaymentStatus
from condoledger.domain.unpaid_periods import UnpaidPeriodResolver


def _pay(db, house_id, period_id, amount, concept=ConceptType.MAINTENANCE):
    db.create_allocation(
        record_id=1,
        house_id=house_id,
        period_id=period_id,
        concept_type=concept,
        allocated_amount=Decimal(amount),
        expected_amount=Decimal("800"),
        payment_status=PaymentStatus.PARTIAL,
    )


def test_all_periods_pending_oldest_first(temp_db, sample_houses, sample_periods):
    unpaid = UnpaidPeriodResolver(temp_db).resolve_unpaid_periods(sample_houses[0].id)

    assert [p.period_id for p in unpaid] == [p.id for p in sample_periods]
    assert [p.display_name for p in unpaid] == ["January 2025", "February 2025", "March 2025"]
    assert all(p.pending_maintenance == Decimal("800.00") for p in unpaid)


def test_periods_sorted_by_year_and_month(temp_db, period_service, sample_config, sample_houses):
    # Created out of order on purpose
    for year, month in ((2025, 2), (2024, 12), (2025, 1)):
        period_service.create_period(year, month)

    unpaid = UnpaidPeriodResolver(temp_db).resolve_unpaid_periods(sample_houses[0].id)

    assert [(p.year, p.month) for p in unpaid] == [(2024, 12), (2025, 1), (2025, 2)]


def test_partially_and_fully_paid_periods(temp_db, sample_houses, sample_periods):
    house = sample_houses[0]
    _pay(temp_db, house.id, sample_periods[0].id, "800")
    _pay(temp_db, house.id, sample_periods[1].id, "300")

    unpaid = UnpaidPeriodResolver(temp_db).resolve_unpaid_periods(house.id)

    assert [(p.period_id, p.paid_maintenance, p.pending_maintenance) for p in unpaid] == [
        (sample_periods[1].id, Decimal("300.00"), Decimal("500.00")),
        (sample_periods[2].id, Decimal("0.00"), Decimal("800.00")),
    ]


def test_only_maintenance_allocations_count(temp_db, sample_houses, sample_periods):
    house = sample_houses[0]
    _pay(temp_db, house.id, sample_periods[0].id, "800", ConceptType.WATER)

    unpaid = UnpaidPeriodResolver(temp_db).resolve_unpaid_periods(house.id)

    assert unpaid[0].period_id == sample_periods[0].id
    assert unpaid[0].pending_maintenance == Decimal("800.00")


def test_overpaid_period_is_not_pending(temp_db, sample_houses, sample_periods):
    house = sample_houses[0]
    _pay(temp_db, house.id, sample_periods[0].id, "900")

    unpaid = UnpaidPeriodResolver(temp_db).resolve_unpaid_periods(house.id)

    assert sample_periods[0].id not in [p.period_id for p in unpaid]


def test_override_sets_expected_amount(temp_db, house_service, sample_houses, sample_periods):
    house = sample_houses[0]
    house_service.set_override(house.id, sample_periods[0].id, ConceptType.MAINTENANCE, Decimal("650"))

    unpaid = UnpaidPeriodResolver(temp_db).resolve_unpaid_periods(house.id)

    assert unpaid[0].expected_maintenance == Decimal("650.00")
    assert unpaid[0].pending_maintenance == Decimal("650.00")
    assert unpaid[1].expected_maintenance == Decimal("800.00")


def test_zero_override_means_nothing_pending(temp_db, house_service, sample_houses, sample_periods):
    house = sample_houses[0]
    house_service.set_override(house.id, sample_periods[0].id, ConceptType.MAINTENANCE, Decimal("0"))

    unpaid = UnpaidPeriodResolver(temp_db).resolve_unpaid_periods(house.id)

    assert sample_periods[0].id not in [p.period_id for p in unpaid]


def test_periods_without_active_config_are_skipped(
    temp_db, period_service, sample_config, sample_houses
):
    period_service.create_period(2023, 12)
    period_service.create_period(2024, 1)

    unpaid = UnpaidPeriodResolver(temp_db).resolve_unpaid_periods(sample_houses[0].id)

    assert [(p.year, p.month) for p in unpaid] == [(2024, 1)]


def test_no_periods(temp_db, sample_houses):
    assert UnpaidPeriodResolver(temp_db).resolve_unpaid_periods(sample_houses[0].id) == []


def test_result_is_capped(temp_db, period_service, sample_config, sample_houses):
    for month in range(1, 7):
        period_service.create_period(2024, month)

    resolver = UnpaidPeriodResolver(temp_db, Settings(max_periods_for_distribution=4))
    unpaid = resolver.resolve_unpaid_periods(sample_houses[0].id)

    assert [p.month for p in unpaid] == [1, 2, 3, 4]
