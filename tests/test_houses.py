"""Tests for the house registry."""

from decimal import Decimal

import pytest

from condoledger.domain.entities import ConceptType
from condoledger.domain.errors import ConflictError, NotFoundError, ValidationError


def test_create_house(house_service):
    house = house_service.create_house(12)

    assert house.number == 12
    assert house_service.get_house(house.id) == house
    assert house_service.get_house_by_number(12) == house


@pytest.mark.parametrize("number", [0, 67, -3])
def test_house_number_out_of_range(house_service, number):
    with pytest.raises(ValidationError, match="between 1 and 66"):
        house_service.create_house(number)


def test_duplicate_house(house_service):
    house_service.create_house(5)

    with pytest.raises(ConflictError):
        house_service.create_house(5)


def test_list_houses_ordered(house_service):
    for number in (30, 2, 14):
        house_service.create_house(number)

    assert [h.number for h in house_service.list_houses()] == [2, 14, 30]


def test_require_house_by_number(house_service):
    with pytest.raises(NotFoundError, match="House 9 not found"):
        house_service.require_house_by_number(9)


def test_new_house_has_empty_balance(house_service):
    house = house_service.create_house(1)

    balance = house_service.get_balance(house.id)

    assert balance.credit_balance == Decimal("0")
    assert balance.debit_balance == Decimal("0")


class TestOverrides:
    def test_set_and_replace_override(self, temp_db, house_service, sample_houses, sample_periods):
        house, period = sample_houses[0], sample_periods[0]

        first = house_service.set_override(house.id, period.id, "maintenance", Decimal("650"))
        second = house_service.set_override(house.id, period.id, ConceptType.MAINTENANCE, Decimal("700"))

        assert first.id == second.id
        assert second.custom_amount == Decimal("700.00")
        assert temp_db.get_applicable_amount(
            house.id, period.id, ConceptType.MAINTENANCE, Decimal("800")
        ) == Decimal("700.00")

    def test_penalties_cannot_be_overridden(self, house_service, sample_houses, sample_periods):
        with pytest.raises(ValidationError, match="Cannot override penalties"):
            house_service.set_override(
                sample_houses[0].id, sample_periods[0].id, ConceptType.PENALTIES, Decimal("0")
            )

    def test_unknown_concept(self, house_service, sample_houses, sample_periods):
        with pytest.raises(ValidationError, match="Unknown concept"):
            house_service.set_override(sample_houses[0].id, sample_periods[0].id, "parking", Decimal("1"))

    def test_negative_amount(self, house_service, sample_houses, sample_periods):
        with pytest.raises(ValidationError):
            house_service.set_override(
                sample_houses[0].id, sample_periods[0].id, ConceptType.WATER, Decimal("-1")
            )

    def test_unknown_period(self, house_service, sample_houses):
        with pytest.raises(NotFoundError):
            house_service.set_override(sample_houses[0].id, 99, ConceptType.WATER, Decimal("1"))
